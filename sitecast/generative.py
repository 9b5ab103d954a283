"""Generative model access backed by a local MLX chat model."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

logger = logging.getLogger("sitecast")

Message = Dict[str, str]

# Files needed to load an MLX text model; skips other weight formats in the repo.
SNAPSHOT_FILES = (
    "*.json",
    "*.jsonl",
    "*.jinja",
    "*.py",
    "*.txt",
    "*.tiktoken",
    "model*.safetensors",
    "tokenizer.model",
    "tiktoken.model",
)


class GenerativeModel(Protocol):
    """Anything that can answer a chat transcript with text."""

    def chat(self, system: str, messages: Sequence[Message], max_tokens: int) -> str:
        ...


def complete(model: GenerativeModel, system: str, prompt: str, max_tokens: int) -> str:
    """Single-turn convenience wrapper around ``model.chat``."""
    return model.chat(system, [{"role": "user", "content": prompt}], max_tokens)


def resolve_model_path(model_id: str) -> str:
    """Locate model weights on disk, downloading the snapshot as a last resort.

    Lookup order: the ``MODEL_DIR`` environment variable, ``model_id`` as a
    local directory, the Hugging Face cache, then a fresh download.
    """
    model_dir = os.getenv("MODEL_DIR")
    if model_dir:
        path = Path(model_dir).expanduser()
        if path.exists():
            return str(path)
        logger.warning("MODEL_DIR=%s does not exist; resolving %s instead", path, model_id)

    local = Path(model_id).expanduser()
    if local.exists():
        return str(local)

    from huggingface_hub import snapshot_download
    from huggingface_hub.utils import LocalEntryNotFoundError

    try:
        return snapshot_download(model_id, local_files_only=True, allow_patterns=list(SNAPSHOT_FILES))
    except LocalEntryNotFoundError:
        logger.info("%s is not cached yet; downloading snapshot", model_id)
    return snapshot_download(model_id, allow_patterns=list(SNAPSHOT_FILES))


class MLXGenerativeModel:
    """Chat model loaded lazily through ``mlx_lm`` on first use."""

    def __init__(self, model_id: str, temperature: float = 0.2) -> None:
        self.model_id = model_id
        self.temperature = temperature
        self._loaded: Optional[tuple] = None

    def _load(self) -> tuple:
        if self._loaded is None:
            from mlx_lm import load

            path = resolve_model_path(self.model_id)
            started = time.perf_counter()
            self._loaded = load(path)
            logger.info("Loaded %s in %.2fs", path, time.perf_counter() - started)
        return self._loaded

    def chat(self, system: str, messages: Sequence[Message], max_tokens: int) -> str:
        """Render the transcript with the model's chat template and generate a reply."""
        from mlx_lm import generate
        from mlx_lm.sample_utils import make_sampler

        model, tokenizer = self._load()
        transcript: List[Message] = [{"role": "system", "content": system}, *messages]
        prompt: Any = tokenizer.apply_chat_template(
            transcript, tokenize=True, add_generation_prompt=True
        )
        logger.debug("Generating up to %d tokens from a %d-token prompt", max_tokens, len(prompt))
        reply = generate(
            model,
            tokenizer,
            prompt=prompt,
            max_tokens=max_tokens,
            sampler=make_sampler(temp=self.temperature),
            verbose=False,
        )
        return reply.strip()


def load_model(model_id: Optional[str]) -> Optional[GenerativeModel]:
    """Return a model for ``model_id``, or ``None`` when generation is disabled."""
    if not model_id:
        logger.info("No generative model configured; using deterministic fallbacks")
        return None
    return MLXGenerativeModel(model_id)
