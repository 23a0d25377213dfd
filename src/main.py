"""Main application entry point for reelsmith."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from api.dependencies import build_media_resolver
from models.project import VideoSegment
from services.media_resolver import StockMediaResolver
from services.media_sources import FallbackMediaSource
from services.script_segmenter import ScriptSegmenter
from services.timeline_assembler import TimelineAssembler
from utils.config import load_config, setup_logging, validate_config

logger = logging.getLogger(__name__)


def read_script(source: str) -> str:
    """Read a script from a file path, or from stdin when source is '-'."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


async def preview_timeline(script: str, resolver: StockMediaResolver) -> list[VideoSegment]:
    """Segment, resolve and assemble a script without touching the database."""
    segments = ScriptSegmenter().segment(script)
    clips = await resolver.resolve_all(segments)
    return TimelineAssembler().assemble(clips, segments, video_id="preview")


def render_timeline(timeline: list[VideoSegment], console: Console) -> None:
    """Print a timeline as a table."""
    table = Table(title="Timeline preview")
    table.add_column("#", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Type")
    table.add_column("Title")
    table.add_column("Keywords")
    table.add_column("URL", overflow="fold")

    for segment in timeline:
        table.add_row(
            str(segment.position + 1),
            f"{segment.start_time:.1f}s",
            f"{segment.end_time:.1f}s",
            segment.type,
            segment.title,
            ", ".join(segment.keywords),
            segment.url,
        )

    console.print(table)
    total = timeline[-1].end_time if timeline else 0.0
    console.print(f"[bold]{len(timeline)}[/bold] segments, [bold]{total:.1f}s[/bold] total")


def run_preview(args: argparse.Namespace) -> int:
    config = load_config()
    if args.offline:
        resolver = StockMediaResolver(FallbackMediaSource())
    else:
        resolver = build_media_resolver(config)

    try:
        script = read_script(args.script)
    except OSError as e:
        logger.error(f"Cannot read script: {e}")
        return 1

    timeline = asyncio.run(preview_timeline(script, resolver))

    if args.json:
        print(json.dumps([segment.to_dict() for segment in timeline], indent=2))
    else:
        render_timeline(timeline, Console())
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    errors = validate_config(load_config())
    for error in errors:
        logger.warning(f"Configuration: {error}")

    uvicorn.run("api.server:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reelsmith",
        description="Script-to-timeline video assembly and captioning service",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    preview = subparsers.add_parser("preview", help="Build a timeline for a script and print it")
    preview.add_argument("script", help="Path to a script file, or '-' for stdin")
    preview.add_argument("--json", action="store_true", help="Print the timeline as JSON")
    preview.add_argument("--offline", action="store_true", help="Use sample media only, no provider calls")
    preview.set_defaults(handler=run_preview)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    serve.set_defaults(handler=run_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "INFO")
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
