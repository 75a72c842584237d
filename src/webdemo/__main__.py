"""
=============================================================================
WEBDEMO CLI ENTRY POINT
=============================================================================

    # Defaults: all interfaces, port 8080, ./home.html
    python -m webdemo

    # Somewhere else
    python -m webdemo --host 127.0.0.1 --port 8097

    # Different page, chattier logs
    python -m webdemo --home-file ./site/home.html --log-level DEBUG

Then visit:

    http://localhost:8080/home
    http://localhost:8080/generic/page?color=purple
    http://localhost:8080/item/yellow

If the port cannot be bound the process logs the error and exits with
status 1.

=============================================================================
"""

import argparse
import logging
import sys

from . import __version__
from .app import create_server
from .config import DEFAULT_PORT, ServerConfig


logger = logging.getLogger("webdemo")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="webdemo",
        description="Small HTTP server showing a static page, a request dump and a JSON endpoint",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webdemo                          # 0.0.0.0:8080
  python -m webdemo --port 8097              # custom port
  python -m webdemo --home-file site/home.html
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port to listen on (default: {DEFAULT_PORT})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # APPLICATION
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--home-file",
        default="home.html",
        help="Page served at /home (default: home.html in the working directory)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=4,
        help="Worker threads at startup (default: 4, grows to 2x under load)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webdemo {__version__}"
    )

    args = parser.parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        home_file=args.home_file,
        min_workers=args.workers,
        max_workers=args.workers * 2,
        log_level=args.log_level,
    )

    try:
        server = create_server(config)
    except ValueError as e:
        parser.error(str(e))

    try:
        server.run()
    except OSError as e:
        logger.critical(f"ListenAndServe error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
