"""Command-line entry point for sitecast."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence

from .config import PipelineConfig
from .errors import SitecastError
from .generative import load_model
from .models import SiteCategory
from .pipeline import build_pipeline
from .sitegen import SiteGenerator, load_artifact, write_site

logger = logging.getLogger("sitecast.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("submit", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        default=None,
        type=Path,
        help="Directory for jobs, artifacts and local issues (default: $SITECAST_OUTPUT or ./output)",
    )
    parser.add_argument(
        "--model",
        default=None,
        help="MLX model identifier or path used for refinement and classification",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crawl websites into blueprints and design tokens and hand them to a site generator.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    submit = subparsers.add_parser("submit", help="Run a rebuild job for a site")
    submit.add_argument("url", help="Site whose content and structure should be kept")
    submit.add_argument("--design", default=None, help="Site whose visual design should be copied")
    submit.add_argument("--limit", type=int, default=None, help="Maximum number of pages to crawl")
    _add_common_arguments(submit)

    status = subparsers.add_parser("status", help="Show a job, polling its issue for a pull request")
    status.add_argument("job_id")
    _add_common_arguments(status)

    restyle = subparsers.add_parser("restyle", help="Request a styling-only update for a job")
    restyle.add_argument("job_id")
    restyle.add_argument("prompt", help="Requested styling changes")
    _add_common_arguments(restyle)

    blueprint = subparsers.add_parser(
        "blueprint", help="Crawl a site and print its blueprint, category and design tokens"
    )
    blueprint.add_argument("url")
    blueprint.add_argument("--limit", type=int, default=None)
    _add_common_arguments(blueprint)

    generate = subparsers.add_parser("generate-site", help="Generate site files from artifacts")
    generate.add_argument("--blueprint", required=True, help="Blueprint JSON path or URL")
    generate.add_argument("--tokens", required=True, help="Theme tokens JSON path or URL")
    generate.add_argument(
        "--category",
        default=SiteCategory.PORTFOLIO.value,
        choices=[category.value for category in SiteCategory],
    )
    generate.add_argument("--site-dir", default="generated-site", type=Path)
    _add_common_arguments(generate)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _build_config(args: argparse.Namespace) -> PipelineConfig:
    try:
        config = PipelineConfig.from_env(args.output)
    except ValueError as exc:
        raise SitecastError(str(exc)) from exc
    if args.model:
        config.model_id = args.model
    return config


def _print_json(data: Dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(data, indent=2) + "\n")
    sys.stdout.flush()


def _run_submit(args: argparse.Namespace) -> None:
    pipeline = build_pipeline(_build_config(args))
    start = time.perf_counter()
    job = asyncio.run(pipeline.submit(args.url, design_url=args.design, limit=args.limit))
    logger.info("Job %s issued in %.2fs (issue #%s)", job.id, time.perf_counter() - start, job.issue_number)
    _print_json(job.to_dict())


def _run_status(args: argparse.Namespace) -> None:
    pipeline = build_pipeline(_build_config(args))
    job = asyncio.run(pipeline.refresh(args.job_id))
    _print_json(job.to_dict())


def _run_restyle(args: argparse.Namespace) -> None:
    pipeline = build_pipeline(_build_config(args))
    issue_number = asyncio.run(pipeline.restyle(args.job_id, args.prompt))
    _print_json({"jobId": args.job_id, "issueNumber": issue_number})


def _run_blueprint(args: argparse.Namespace) -> None:
    pipeline = build_pipeline(_build_config(args))
    analysis = asyncio.run(pipeline.analyze(args.url, limit=args.limit))
    _print_json(
        {
            "category": analysis.category.value,
            "blueprint": analysis.blueprint.to_dict(),
            "tokens": analysis.design.tokens.to_dict(),
            "designLanguage": analysis.design.design_language,
            "components": [component.to_dict() for component in analysis.design.components],
        }
    )


def _run_generate_site(args: argparse.Namespace) -> None:
    config = _build_config(args)
    model = load_model(config.model_id)
    if model is None:
        raise SitecastError("Site generation needs a model (--model or $SITECAST_MODEL)")
    generator = SiteGenerator(model)
    site = generator.generate(
        SiteCategory(args.category),
        load_artifact(args.blueprint, timeout=config.http_timeout),
        load_artifact(args.tokens, timeout=config.http_timeout),
    )
    written = write_site(site, args.site_dir)
    logger.info("Site generation complete: %d files in %s", len(written), args.site_dir)


COMMANDS = {
    "submit": _run_submit,
    "status": _run_status,
    "restyle": _run_restyle,
    "blueprint": _run_blueprint,
    "generate-site": _run_generate_site,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        COMMANDS[args.command](args)
    except SitecastError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
