"""
=============================================================================
COMMAND LINE
=============================================================================

    python -m staticserver [dir] [options]
    staticserver ./public --port 3000 --gzip --default-ext

Serves ``dir`` (default: the current directory; ``--root`` wins over the
positional) until Ctrl+C.

    --port/-p PORT      listen port (default 8000)
    --host/-H HOST      bind address (default 127.0.0.1)
    --workers/-w N      worker threads (max is 4x this)
    --cache SECONDS     Cache-Control max-age (default 3600)
    --gzip              gzip for clients that accept it
    --default-ext [EXT] retry extension-less misses with .EXT (html)
    --base-dir PATH     URL prefix the directory is mounted at
    --show-dir          list directories that have no index.html
    --no-autoindex      do not serve index.html for directories

Unset flags fall back to HTTP_* / STATIC_* environment variables, then to
the built-in defaults.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence, Tuple

from . import __version__
from .config import ServerConfig, StaticOptions
from .handlers import StaticFileHandler
from .middleware import LoggingMiddleware
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staticserver",
        description="Serve a directory over HTTP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "dir",
        nargs="?",
        default=None,
        help="Directory to serve (default: current directory)",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Directory to serve; overrides the positional argument",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", default=None, help="Host to bind to")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port (default: 8000)")
    parser.add_argument("--workers", "-w", type=int, default=None, help="Worker threads")

    # ─────────────────────────────────────────────────────────────────────
    # STATIC OPTIONS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--cache",
        type=int,
        default=None,
        help="Cache-Control max-age in seconds (default: 3600)",
    )
    parser.add_argument(
        "--no-autoindex",
        action="store_true",
        help="Do not serve index.html for directory requests",
    )
    parser.add_argument(
        "--show-dir",
        action="store_true",
        help="Render listings for directories without an index",
    )
    parser.add_argument(
        "--gzip",
        action="store_true",
        help="Compress responses for clients that accept gzip",
    )
    parser.add_argument(
        "--default-ext",
        nargs="?",
        const="html",
        default=None,
        metavar="EXT",
        help="Extension tried for extension-less paths (default when given: html)",
    )
    parser.add_argument(
        "--base-dir",
        default=None,
        help="URL prefix the directory is served under (default: /)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"staticserver {__version__}",
    )

    return parser


def build_configs(args: argparse.Namespace) -> Tuple[ServerConfig, StaticOptions]:
    """
    Merge flags over the environment.

    Raises:
        ValueError: invalid option values or a missing directory.
    """
    config = ServerConfig.from_env()
    if args.host:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.min_workers = args.workers
        config.max_workers = args.workers * 4
    if args.log_level:
        config.log_level = args.log_level
    if args.log_format:
        config.log_format = args.log_format

    overrides = {}
    root = args.root or args.dir
    if root:
        overrides["root"] = root
    if args.cache is not None:
        overrides["cache"] = args.cache
    if args.no_autoindex:
        overrides["auto_index"] = False
    if args.show_dir:
        overrides["show_dir"] = True
    if args.gzip:
        overrides["gzip"] = True
    if args.default_ext is not None:
        overrides["default_ext"] = args.default_ext
    if args.base_dir is not None:
        overrides["base_dir"] = args.base_dir

    options = StaticOptions.from_env(**overrides)
    config.validate()
    return config, options


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config, options = build_configs(args)
    except ValueError as e:
        parser.error(str(e))

    server = HTTPServer(config, handler=StaticFileHandler(options))
    server.use(LoggingMiddleware(log_format=config.log_format))

    print(f"serving {options.root} on port {config.port}")

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
