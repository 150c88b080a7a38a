#!/usr/bin/env python
"""
Run the TrustCircle API server.

Usage:
    uv run python run_api.py
    uv run python run_api.py --reload  # Development mode
"""

import argparse
import logging

import uvicorn

from api.config import get_settings
from shared.config import get_settings as get_core_settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    parser = argparse.ArgumentParser(description="Run TrustCircle API server")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--host", type=str, help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument("--log-level", type=str, help="Root log level (default: LOG_LEVEL)")
    args = parser.parse_args()

    settings = get_settings()
    log_level = args.log_level or get_core_settings().log_level
    configure_logging(log_level)

    uvicorn.run(
        "api:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload or settings.reload,
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    main()
