#!/usr/bin/env python3
"""
Site Risk Engine - API Server

Run this script to start the risk scoring API.

Usage:
    python serve.py [--port PORT] [--host HOST] [--reload]

Example:
    python serve.py --port 8080
"""

import argparse

import uvicorn

from site_engine.config import get_settings
from site_engine.log import configure_logging, get_logger


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Site Risk Engine - API Server"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: {settings.port})"
    )
    parser.add_argument(
        "--host", "-H",
        type=str,
        default=settings.host,
        help=f"Host to bind to (default: {settings.host})"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        default=settings.debug,
        help="Reload on code changes"
    )

    args = parser.parse_args()

    configure_logging()
    get_logger("serve").info("starting_server", host=args.host, port=args.port)

    uvicorn.run(
        "web.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
