"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m mediaserver --root /srv/media
    mediaserver --root /srv/media --port 3000 --log-format json

Defaults come from MEDIA_* environment variables (see
ServerConfig.from_env), flags override them.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig
from .server import MediaServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mediaserver",
        description="Serve media files with caching headers and byte-range support",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mediaserver --root ./media                       # Serve ./media on 127.0.0.1:8080
  mediaserver --root /srv/media --host 0.0.0.0     # Listen on all interfaces
  mediaserver --root ./media --dev-prefix cdn.example.com
                                                   # Strip /cdn.example.com/ on localhost
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help=f"Maximum worker threads (default: {defaults.max_workers})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # MEDIA
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.media_root,
        help=f"Media root directory (default: {defaults.media_root})"
    )

    parser.add_argument(
        "--dev-prefix",
        default=defaults.dev_path_prefix,
        help="Leading path segment to strip for localhost requests"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help="Logging level (default: %(default)s)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=defaults.log_format,
        help="Access log format (default: %(default)s)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"mediaserver {__version__}"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, build the configuration and run the server."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    defaults.host = args.host
    defaults.port = args.port
    defaults.max_workers = args.workers
    defaults.min_workers = min(defaults.min_workers, args.workers)
    defaults.media_root = args.root
    defaults.dev_path_prefix = args.dev_prefix or None
    defaults.log_level = args.log_level
    defaults.log_format = args.log_format

    try:
        server = MediaServer(defaults)
    except ValueError as e:
        print(f"mediaserver: {e}", file=sys.stderr)
        return 2

    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
