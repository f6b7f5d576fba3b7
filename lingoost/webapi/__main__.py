"""Run the dubbing and playback API under uvicorn.

``lingoost-api --port 8080 --with-poller`` serves the API and polls the remote
dubbing service in the background. ``--config`` and ``--with-poller`` are passed
to the application through the same environment variables the settings loader
reads, so they also reach reloader subprocesses.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Sequence

import uvicorn

from ..config_manager.constants import CONFIG_FILE_ENV

APP_FACTORY = "lingoost.webapi.application:create_app"
START_POLLER_ENV = "LINGOOST_START_POLLER"
UVICORN_LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lingoost-api",
        description="Serve the dubbing job and playback session API.",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: %(default)s)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: %(default)s)")
    parser.add_argument(
        "--config",
        metavar="PATH",
        help=f"JSON settings file; overrides ${CONFIG_FILE_ENV}",
    )
    parser.add_argument(
        "--with-poller",
        action="store_true",
        help="Poll active dubbing jobs in the background",
    )
    parser.add_argument("--reload", action="store_true", help="Restart on source changes")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=UVICORN_LOG_LEVELS,
        help="uvicorn log level (default: %(default)s)",
    )
    return parser


def apply_cli_environment(args: argparse.Namespace) -> None:
    """Export CLI choices as the environment variables read by the settings loader."""

    if args.config:
        os.environ[CONFIG_FILE_ENV] = os.path.abspath(os.path.expanduser(args.config))
    if args.with_poller:
        os.environ[START_POLLER_ENV] = "true"


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    apply_cli_environment(args)
    uvicorn.run(
        APP_FACTORY,
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":  # pragma: no cover - CLI integration
    try:
        main()
    except KeyboardInterrupt:  # pragma: no cover - user initiated shutdown
        logging.getLogger("lingoost.webapi").info("API server interrupted")
