from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, TextIO

import structlog

from luffy.application.use_cases.resolve_stream import ResolveStreamUseCase
from luffy.domain.entities.media import MediaKind, SearchResult, StreamVariant
from luffy.domain.errors import LuffyError
from luffy.infrastructure.config import AppConfig, default_config_path, load_config
from luffy.infrastructure.logging.setup import configure_logging
from luffy.interfaces.composition import build_pipeline

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class SelectionError(Exception):
    """A 1-based selection index is out of range."""


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="luffy",
        description=(
            "Resolve a media query to a playable stream URL. Each stage without "
            "a selection prints its numbered options and stops."
        ),
    )
    parser.add_argument("query", nargs="+", help="Free-text search query.")

    # Pipeline selections (1-based)
    parser.add_argument("--result", type=int, default=None, help="Search result to use.")
    parser.add_argument("--season", type=int, default=None, help="Season to use (series).")
    parser.add_argument("--episode", type=int, default=None, help="Episode to use (series).")
    parser.add_argument("--server", type=int, default=None, help="Server to stream from.")
    parser.add_argument(
        "--qualities",
        action="store_true",
        help="List the stream variants instead of picking the best one.",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON output.")

    # Configuration
    parser.add_argument("--provider", default=None, help="Override content provider.")
    parser.add_argument("--config", default=None, help="Path to YAML config file.")
    parser.add_argument("--dotenv", default=None, help="Path to .env file.")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    return parser.parse_args(argv)


def _pick(items: Sequence[Any], index: int, what: str) -> Any:
    if not 1 <= index <= len(items):
        raise SelectionError(f"{what} {index} out of range (1-{len(items)})")
    return items[index - 1]


def _result_label(result: SearchResult) -> str:
    kind = "TV" if result.kind is MediaKind.SERIES else "Movie"
    year = f" ({result.year})" if result.year else ""
    return f"[{kind}] {result.title}{year}"


def _print_options(out: TextIO, heading: str, labels: Sequence[str], as_json: bool) -> None:
    if as_json:
        out.write(json.dumps({"select": heading, "options": list(labels)}) + "\n")
        return
    out.write(f"{heading}:\n")
    for i, label in enumerate(labels, start=1):
        out.write(f"{i:>3}. {label}\n")


def _print_variants(out: TextIO, variants: Sequence[StreamVariant], as_json: bool) -> None:
    if as_json:
        payload = [
            {
                "url": v.url,
                "resolution": v.resolution,
                "bandwidth": v.bandwidth,
                "height": v.height,
            }
            for v in variants
        ]
        out.write(json.dumps(payload) + "\n")
        return
    for v in variants:
        out.write(f"{v.resolution:>10}  {v.bandwidth:>9}  {v.url}\n")


async def run(args: argparse.Namespace, config: AppConfig, out: TextIO) -> int:
    """Drive the pipeline as far as the given selections allow."""
    query = " ".join(args.query)

    async with build_pipeline(config) as pipeline:
        results = await pipeline.search(query)
        if args.result is None:
            _print_options(out, "results", [_result_label(r) for r in results], args.json)
            return EXIT_OK
        result: SearchResult = _pick(results, args.result, "result")

        media_ref = await pipeline.resolve_media(result.url)

        if result.kind is MediaKind.SERIES:
            seasons = await pipeline.list_seasons(media_ref)
            if args.season is None:
                _print_options(out, "seasons", [s.name for s in seasons], args.json)
                return EXIT_OK
            season = _pick(seasons, args.season, "season")

            episodes = await pipeline.list_episodes(season.id, is_season=True)
            if args.episode is None:
                _print_options(out, "episodes", [e.name for e in episodes], args.json)
                return EXIT_OK
            episode = _pick(episodes, args.episode, "episode")
            servers = await pipeline.list_servers(episode.id)
        else:
            # A movie's "episodes" are its server entries.
            servers = await pipeline.list_episodes(media_ref, is_season=False)

        if args.server is None:
            _print_options(out, "servers", [s.name for s in servers], args.json)
            return EXIT_OK
        server = _pick(servers, args.server, "server")

        return await _emit_stream(pipeline, server.id, args, out)


async def _emit_stream(
    pipeline: ResolveStreamUseCase,
    server_id: str,
    args: argparse.Namespace,
    out: TextIO,
) -> int:
    stream = await pipeline.resolve_stream(server_id)
    if args.qualities:
        variants = await pipeline.list_qualities(stream)
        _print_variants(out, variants, args.json)
        return EXIT_OK

    handoff = await pipeline.select_stream(stream)
    if args.json:
        out.write(json.dumps(handoff.to_dict()) + "\n")
        return EXIT_OK

    out.write(f"url: {handoff.url}\n")
    if handoff.referer:
        out.write(f"referer: {handoff.referer}\n")
    if handoff.user_agent:
        out.write(f"user-agent: {handoff.user_agent}\n")
    for sub in handoff.subtitles:
        out.write(f"subtitle: {sub}\n")
    return EXIT_OK


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, configures logging, then runs the pipeline.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else default_config_path()
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.provider:
        cli_overrides["provider_name"] = args.provider
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )
    configure_logging(config)

    try:
        return asyncio.run(run(args, config, sys.stdout))
    except SelectionError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_USAGE
    except LuffyError as exc:
        stage = exc.stage or "pipeline"
        log.error("resolution_failed", stage=stage, error=str(exc))
        sys.stderr.write(f"error in {stage}: {exc}\n")
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(start())
