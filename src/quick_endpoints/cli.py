"""CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from quick_endpoints.config import load_config
from quick_endpoints.dependency_graph import detect_circular_dependencies
from quick_endpoints.errors import ConfigError
from quick_endpoints.logging_setup import configure_logging
from quick_endpoints.server import create_app


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve declaratively configured REST endpoints.")
    parser.add_argument("--config", type=str, default="endpoints.yaml", help="Path to the endpoint config file")
    parser.add_argument("--host", type=str, default=None, help="Bind host (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (overrides config)")
    parser.add_argument("--log-level", type=str, default=None, help="debug, info, warn or error")
    parser.add_argument("--check", action="store_true", help="Validate the config and chain graph, then exit")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or "info")

    try:
        config = load_config(Path(args.config))
        if args.log_level is None:
            configure_logging(config.log_level)
        if args.check:
            detect_circular_dependencies(config)
            print(f"OK: {len(config.endpoints)} endpoint(s)")
            return
        app = create_app(config)
    except (ConfigError, ValueError, FileNotFoundError, PermissionError) as exc:
        logger.error("Startup failed: %s", exc)
        sys.exit(1)

    host = args.host or config.host
    port = args.port if args.port is not None else config.port
    logger.info("Serving %d endpoint(s) on http://%s:%s", len(config.endpoints), host, port)
    uvicorn.run(app, host=host, port=port, log_level=logging.getLevelName(logging.getLogger().level).lower())
