"""
=============================================================================
CONFIGURATION
=============================================================================

Two dataclasses, one per layer:

    ServerConfig   → how the process listens (host, port, workers, logging)
    StaticOptions  → what the static handler serves and how

Both are built once at startup and never mutated afterwards. The handler
shares its StaticOptions read-only between all worker threads.

=============================================================================
OPTION NORMALIZATION
=============================================================================

Users hand options over in whatever shape is convenient: a dict from a
config file, keyword arguments, CLI flags, environment variables. The
handler only ever sees the canonical form:

    {"root": "./public",                      StaticOptions(
     "autoIndex": False,          ───────►        root="/srv/app/public",
     "defaultExt": True,                          auto_index=False,
     "cache": "600"}                              default_ext="html",
                                                  cache=600, ...)

    • camelCase and snake_case names are both accepted
    • defaultExt=True means "html"; a leading dot is dropped
    • numbers given as strings are converted
    • root is resolved to an absolute, symlink-free path

=============================================================================
SOURCES AND PRIORITY
=============================================================================

    1. command-line flags          (python -m staticserver --port 3000)
    2. environment variables       (HTTP_PORT=3000, STATIC_GZIP=1)
    3. defaults below

=============================================================================
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional


_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def parse_bool(value: Any) -> bool:
    """Interpret flags given as bools, ints or strings ("yes", "0", ...)."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"Not a boolean: {value!r}")
    return bool(value)


@dataclass
class ServerConfig:
    """
    Settings for the listening server.

    =========================================================================
    GROUPS
    =========================================================================

    NETWORK     host, port, backlog, buffer_size, timeout
    HTTP        keep_alive, keep_alive_timeout, max_request_size
    THREADS     min_workers, max_workers, queue_size
    LOGGING     log_level, log_format
    IDENTITY    server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Interface to bind; "0.0.0.0" inside containers."""

    port: int = 8000
    """TCP port. 0 lets the OS pick one (tests)."""

    backlog: int = 128
    """Pending connections the kernel queues before refusing."""

    buffer_size: int = 8192
    """Bytes per recv() call."""

    timeout: Optional[float] = 30.0
    """Seconds to wait for the first request on a connection."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    keep_alive_timeout: float = 5.0
    max_request_size: int = 1024 * 1024
    """A file server only takes GET/HEAD; 1 MB of headers is plenty."""

    # ─────────────────────────────────────────────────────────────────────
    # THREADS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16
    queue_size: int = 100
    """Connections waiting for a worker before new ones get 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: "text" (Apache style) or "json"."""

    server_name: str = "staticserver"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build from HTTP_* environment variables.

            HTTP_HOST, HTTP_PORT, HTTP_WORKERS, HTTP_TIMEOUT,
            HTTP_LOG_LEVEL, HTTP_LOG_FORMAT
        """
        workers = int(os.getenv("HTTP_WORKERS", "4"))
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8000")),
            min_workers=workers,
            max_workers=workers * 4,
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """Fail fast at startup rather than on the first request."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")
        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")
        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")
        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")
        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', not {self.log_format!r}")


@dataclass(frozen=True)
class StaticOptions:
    """
    Canonical settings for the static file handler.

    Build it with ``StaticOptions.normalize(...)`` rather than directly so
    that aliases, string values and the root path are handled.
    """

    root: str
    """Absolute, canonical directory being served."""

    cache: int = 3600
    """Seconds for ``Cache-Control: max-age=``."""

    auto_index: bool = True
    """Serve ``index.html`` for directory requests."""

    base_dir: str = "/"
    """Virtual mount point stripped from request paths."""

    default_ext: Optional[str] = None
    """Extension (without dot) tried for extension-less misses."""

    gzip: bool = False
    """Compress when the client sends ``Accept-Encoding: gzip``."""

    show_dir: bool = False
    """Render a listing for directories with no index."""

    file_cache_entries: int = 256
    """Most buffers the in-memory response cache keeps."""

    file_cache_bytes: int = 64 * 1024 * 1024
    """Most bytes the in-memory response cache keeps."""

    coalesce_reads: bool = True
    """Let concurrent misses for one file share a single read."""

    # camelCase spellings → field names
    ALIASES = {
        "autoIndex": "auto_index",
        "autoindex": "auto_index",
        "baseDir": "base_dir",
        "defaultExt": "default_ext",
        "showDir": "show_dir",
        "showdir": "show_dir",
    }

    @classmethod
    def normalize(
        cls,
        options: Optional[Mapping[str, Any]] = None,
        **overrides: Any,
    ) -> "StaticOptions":
        """
        Turn user-supplied options into a validated StaticOptions.

        Unknown keys are rejected so that typos do not pass silently.

            >>> StaticOptions.normalize({"root": ".", "defaultExt": True}).default_ext
            'html'

        Raises:
            ValueError: missing/invalid root or an invalid value.
        """
        merged: dict[str, Any] = {}
        known = {f.name for f in fields(cls)}

        for source in (options or {}, overrides):
            for key, value in source.items():
                name = cls.ALIASES.get(key, key)
                if name not in known:
                    raise ValueError(f"Unknown static option: {key!r}")
                merged[name] = value

        if merged.get("root") in (None, ""):
            raise ValueError("A root directory is required")

        root = Path(str(merged["root"])).expanduser().resolve()
        if not root.is_dir():
            raise ValueError(f"Static root directory does not exist: {merged['root']}")
        merged["root"] = str(root)

        for name in ("cache", "file_cache_entries", "file_cache_bytes"):
            if name in merged:
                merged[name] = int(merged[name])
                if merged[name] < 0:
                    raise ValueError(f"{name} must be >= 0")

        for name in ("auto_index", "gzip", "show_dir", "coalesce_reads"):
            if name in merged:
                merged[name] = parse_bool(merged[name])

        if "base_dir" in merged:
            merged["base_dir"] = "/" + str(merged["base_dir"] or "").strip("/")

        if "default_ext" in merged:
            merged["default_ext"] = _normalize_ext(merged["default_ext"])

        return cls(**merged)

    @classmethod
    def from_env(cls, **overrides: Any) -> "StaticOptions":
        """
        Build from STATIC_* environment variables, then apply overrides.

            STATIC_ROOT, STATIC_CACHE, STATIC_AUTOINDEX, STATIC_BASE_DIR,
            STATIC_DEFAULT_EXT, STATIC_GZIP, STATIC_SHOW_DIR
        """
        env_names = {
            "STATIC_ROOT": "root",
            "STATIC_CACHE": "cache",
            "STATIC_AUTOINDEX": "auto_index",
            "STATIC_BASE_DIR": "base_dir",
            "STATIC_DEFAULT_EXT": "default_ext",
            "STATIC_GZIP": "gzip",
            "STATIC_SHOW_DIR": "show_dir",
        }
        options = {
            name: os.environ[var]
            for var, name in env_names.items()
            if var in os.environ
        }
        options.setdefault("root", os.getcwd())
        return cls.normalize(options, **overrides)


def _normalize_ext(value: Any) -> Optional[str]:
    # Flag values (True, "true", "1", ...) mean "html"; false ones disable it.
    # Any other string is the extension itself.
    if value is None or isinstance(value, bool):
        return "html" if value else None
    text = str(value).strip()
    if text.lower() in _TRUE_STRINGS:
        return "html"
    if text.lower() in _FALSE_STRINGS:
        return None
    return text.lstrip(".") or None
