"""MCP server exposing sitecast blueprint and design-system tools."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import PipelineConfig
from .pipeline import SiteAnalysis, build_pipeline

logger = logging.getLogger("sitecast.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="sitecast")


async def _analyze_once(url: str) -> SiteAnalysis:
    with tempfile.TemporaryDirectory(prefix="sitecast-mcp-") as tmp_dir:
        config = PipelineConfig.from_env(Path(tmp_dir))
        pipeline = build_pipeline(config)
        return await pipeline.analyze(url)


@mcp.tool()
async def blueprint(url: str) -> str:
    """Crawl a site and return its structural blueprint and category as JSON."""
    analysis = await _analyze_once(url)
    return json.dumps(
        {"category": analysis.category.value, "blueprint": analysis.blueprint.to_dict()},
        indent=2,
    )


@mcp.tool()
async def design_system(url: str) -> str:
    """Crawl a site and return its design tokens and component guidance as JSON."""
    analysis = await _analyze_once(url)
    return json.dumps(
        {
            "tokens": analysis.design.tokens.to_dict(),
            "designLanguage": analysis.design.design_language,
            "components": [component.to_dict() for component in analysis.design.components],
        },
        indent=2,
    )


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
