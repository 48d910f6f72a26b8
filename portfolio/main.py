#!/usr/bin/env python3
"""
Portfolio Admin - Entry Point

This module is the command line entry point. ``serve`` runs the web
application under uvicorn; ``hash-password`` prints a bcrypt hash for the
admin password setting.
"""
import argparse
import getpass
import logging
import sys
from typing import List, Optional

import structlog
import uvicorn
from prometheus_client import start_http_server

from portfolio.auth import hash_password
from portfolio.config import LogLevel, Settings, load_settings

# Set up structured logger
logger = structlog.get_logger()


def setup_logging(settings: Settings) -> None:
    """Set up structured logging based on configuration."""
    log_level = settings.metrics.log_level.value

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.metrics.structured_logging
            else structlog.dev.ConsoleRenderer()
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Set log level on the standard library root logger so that
    # libraries using logging propagate correctly.
    numeric_level = getattr(logging, log_level, logging.INFO)
    logging.basicConfig(level=numeric_level, format="%(message)s")
    logging.getLogger().setLevel(numeric_level)

    logger.info("Logging initialized", level=log_level)


def serve(settings: Settings, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the web application."""
    from portfolio.web import create_app

    if settings.metrics.prometheus_enabled:
        start_http_server(settings.metrics.prometheus_port)
        logger.info("Prometheus metrics server started", port=settings.metrics.prometheus_port)

    app = create_app(settings)
    uvicorn.run(
        app,
        host=host or settings.web.host,
        port=port or settings.web.port,
        log_level=settings.metrics.log_level.value.lower(),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Portfolio Admin - content, videos and chat analytics"
    )
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Set the log level"
    )

    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the web application")
    serve_parser.add_argument("--host", default=None, help="Interface to bind")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to listen on")

    hash_parser = subparsers.add_parser(
        "hash-password", help="Print a bcrypt hash for AUTH__ADMIN_PASSWORD_HASH"
    )
    hash_parser.add_argument(
        "password", nargs="?", default=None, help="Password to hash (prompted when omitted)"
    )

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "serve"
        args.host = None
        args.port = None
    return args


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    try:
        args = parse_args(argv)

        if args.command == "hash-password":
            password = args.password or getpass.getpass("Admin password: ")
            if not password:
                print("Password must not be empty", file=sys.stderr)
                return 1
            print(hash_password(password))
            return 0

        settings = load_settings()
        if args.log_level:
            settings.metrics.log_level = LogLevel(args.log_level)

        setup_logging(settings)

        logger.info(
            "Portfolio Admin starting up",
            version=settings.version,
            environment=settings.environment.value,
            python_version=sys.version,
        )

        serve(settings, args.host, args.port)
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Unhandled exception", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
