from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from wcoresolver.application.use_cases import ResolutionStrategy
from wcoresolver.domain.entities.resolution import EpisodeRef, ResolutionFailure
from wcoresolver.domain.exceptions import RenderSuperseded
from wcoresolver.infrastructure.config import AppConfig, load_config
from wcoresolver.infrastructure.logging.setup import configure_logging
from wcoresolver.interfaces.composition import build_components
from wcoresolver.interfaces.main import build_app

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_SUPERSEDED = 3


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
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


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="wcoresolver")
    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser(
        "resolve", help="Resolve an episode page and print the qualities as JSON."
    )
    resolve.add_argument("url", help="Episode page URL (absolute or relative).")
    resolve.add_argument(
        "--base-domain",
        default=None,
        help="Mirror for relative URLs (overrides site.base_domain).",
    )
    resolve.add_argument(
        "--strategy",
        default=None,
        choices=[s.value for s in ResolutionStrategy],
        help="Resolution strategy (overrides resolution.strategy).",
    )
    resolve.add_argument(
        "--no-browser",
        action="store_true",
        help="Never launch the browser, even as a fallback.",
    )
    _add_config_flags(resolve)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=None, help="Bind host (overrides HOST env).")
    serve.add_argument(
        "--port", default=None, type=int, help="Bind port (overrides PORT env)."
    )
    _add_config_flags(serve)

    return parser.parse_args(argv)


def _load(args: argparse.Namespace, extra: dict[str, Any] | None = None) -> AppConfig:
    cli_overrides: dict[str, Any] = {
        "log_level": args.log_level,
        "log_format": args.log_format,
        **(extra or {}),
    }
    return load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=cli_overrides,
    )


async def _resolve(config: AppConfig, url: str) -> tuple[int, dict[str, Any]]:
    components = await build_components(config, with_playback=False)
    try:
        ref = EpisodeRef(page_url=url, base_domain=config.base_domain)
        try:
            outcome = await components.resolve_episode.execute(ref)
        except RenderSuperseded:
            return EXIT_SUPERSEDED, {"status": "superseded"}
    finally:
        await components.aclose()

    code = EXIT_FAILED if isinstance(outcome, ResolutionFailure) else EXIT_OK
    return code, outcome.to_dict()


def _run_resolve(args: argparse.Namespace) -> int:
    extra: dict[str, Any] = {
        "base_domain": args.base_domain,
        "resolution_strategy": args.strategy,
    }
    if args.no_browser:
        extra["browser_enabled"] = False
    config = _load(args, extra)
    # stdout carries the JSON result only.
    configure_logging(config, stream=sys.stderr)

    code, payload = asyncio.run(_resolve(config, args.url))
    json.dump(payload, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return code


def _run_serve(args: argparse.Namespace) -> int:
    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "8080"))

    config = _load(args)
    log_config = configure_logging(config)

    uvicorn.run(build_app(config), host=host, port=port, log_config=log_config)
    return EXIT_OK


def start(argv: Iterable[str] | None = None) -> int:
    """Process entrypoint: load config once, then dispatch the subcommand."""
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    if args.command == "resolve":
        return _run_resolve(args)
    return _run_serve(args)


if __name__ == "__main__":
    raise SystemExit(start())
