#!/usr/bin/env python3
"""Run the admin application on an available port."""
import socket
import sys

import uvicorn

from portfolio.config import load_settings
from portfolio.main import setup_logging
from portfolio.web import create_app


def find_available_port(start_port=3000, max_attempts=10):
    """Find an available port starting from start_port."""
    for port in range(start_port, start_port + max_attempts):
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.bind(('127.0.0.1', port))
            sock.close()
            return port
        except OSError:
            continue
    return None


def main():
    """Run the admin application."""
    print("Starting Portfolio Admin...")

    try:
        settings = load_settings()
        setup_logging(settings)

        app = create_app(settings)

        port = find_available_port(settings.web.port)
        if not port:
            print(f"No available ports found (tried {settings.web.port}-{settings.web.port + 9})")
            return 1

        print(f"\nAdmin available at http://localhost:{port}/admin/login")
        print("Press Ctrl+C to stop\n")

        uvicorn.run(
            app,
            host="127.0.0.1",
            port=port,
            log_level="info",
            access_log=True
        )

    except KeyboardInterrupt:
        print("\nStopped")

    return 0


if __name__ == "__main__":
    sys.exit(main())
