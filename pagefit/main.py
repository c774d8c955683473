"""
pagefit entrypoint.

Settings come from the environment; the command-line flags below override
the server-facing ones for a single run.
"""

import argparse
from collections.abc import Sequence

import uvicorn

from pagefit.app import build_app
from pagefit.config import Settings, get_settings, init_settings
from pagefit.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)

# Time allowed for in-flight renders before uvicorn forces shutdown.
GRACEFUL_SHUTDOWN_SECONDS = 30


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pagefit",
        description="Render HTML to PDF or PNG, fitted to paper",
    )
    parser.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (default: PORT or 3000)")
    parser.add_argument("--output-dir", default=None, help="Root for saved artifacts (default: OUTPUT_DIR)")
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Environment settings with any flags given on the command line applied."""
    overrides = {
        "host": args.host,
        "port": args.port,
        "output_dir": args.output_dir,
        "log_level": args.log_level,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    settings = get_settings()
    if overrides:
        settings = init_settings(Settings(**{**settings.model_dump(), **overrides}))
    return settings


def main(argv: Sequence[str] | None = None) -> None:
    settings = resolve_settings(parse_args(argv))
    setup_logging(settings.log_level)
    logger.info(f"Listening on http://{settings.host}:{settings.port} (docs at /docs)")

    # uvicorn owns SIGINT/SIGTERM; the lifespan shutdown closes the browser.
    uvicorn.run(
        build_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=GRACEFUL_SHUTDOWN_SECONDS,
    )


if __name__ == "__main__":
    main()
