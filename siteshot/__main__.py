"""
Run one generation job from the command line.

Usage:
    python -m siteshot https://example.com --assets screenshot collage video --output-dir out
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

from loguru import logger

from .config import configure_logging, get_settings
from .pipeline import AssetKind, get_orchestrator


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate marketing assets (screenshot, collage, video) from a URL."
    )
    parser.add_argument("url", help="Absolute http(s) URL of the page to capture.")
    parser.add_argument(
        "--assets",
        nargs="+",
        choices=[kind.value for kind in AssetKind],
        default=[AssetKind.SCREENSHOT.value],
        help="Asset kinds to generate.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("outputs"),
        help="Folder where generated files and metadata.json are written.",
    )
    return parser.parse_args()


async def run(url: str, assets: list, output_dir: Path) -> int:
    result = await get_orchestrator().generate(url, assets)
    if not result.ok:
        logger.error(f"{result.error.kind.value}: {result.error.message}")
        return 1

    output_dir.mkdir(parents=True, exist_ok=True)
    for kind in sorted(result.assets.kinds(), key=lambda k: k.value):
        asset = result.assets.get(kind)
        (output_dir / asset.filename).write_bytes(asset.data)
        logger.info(f"Wrote {output_dir / asset.filename}")

    metadata = result.to_dict(embed_base64=False)
    (output_dir / "metadata.json").write_text(json.dumps(metadata, indent=2))
    return 0


def main() -> None:
    args = parse_args()
    configure_logging(get_settings().log_level)
    sys.exit(asyncio.run(run(args.url, args.assets, args.output_dir)))


if __name__ == "__main__":
    main()
