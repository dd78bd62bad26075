"""
=============================================================================
IN-MEMORY RESPONSE CACHE
=============================================================================

Keeps the bytes last sent for each file so that repeated requests skip the
disk read and the gzip pass.

    key    (absolute file path, gzipped)
    value  CacheEntry(etag, body, gzipped)

The gzip and identity bodies of one file are separate entries, so clients
that differ in Accept-Encoding do not evict each other. An entry is only
reused while its etag equals the etag computed from a fresh stat; anything
else is a miss, the file is read again and the entry replaced.

=============================================================================
BOUNDS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  most recently used ◄──────────────────────── least recently used   │
    │  [ /site/index.html ][ /site/app.js ][ /site/logo.png ] ...  ──► out │
    └─────────────────────────────────────────────────────────────────────┘

Eviction is LRU, driven by two budgets: an entry count and a total byte
size. A single body larger than the byte budget is served but never stored.
A budget of 0 disables caching.

=============================================================================
SINGLE-FLIGHT READS
=============================================================================

Without coordination, N concurrent misses for the same file mean N reads
and N gzip passes. With ``coalesce=True`` the first miss for a key becomes
the leader and runs the loader; the others block on its Future:

    worker 1 ── miss ── leader ── read + gzip ──── store ── result ──►
    worker 2 ── miss ── wait on Future ─────────────────── result ──►
    worker 3 ── miss ── wait on Future ─────────────────── result ──►

If the loader raises, every waiter sees the same exception and nothing is
stored.

=============================================================================
"""
import logging
import threading
from collections import OrderedDict
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Optional


logger = logging.getLogger(__name__)

CacheKey = tuple[str, bool]


@dataclass(frozen=True)
class CacheEntry:
    etag: str
    body: bytes
    gzipped: bool = False


class ResponseCache:
    """
    Thread-safe LRU cache of served file bodies.

        cache = ResponseCache(max_entries=256, max_bytes=64 * 1024 * 1024)

        body = cache.load(path, etag, gzipped, loader=lambda: read(path))

    All state is guarded by one lock; the loader itself runs outside it.
    """

    def __init__(
        self,
        max_entries: int = 256,
        max_bytes: int = 64 * 1024 * 1024,
        coalesce: bool = True,
    ):
        self.max_entries = max_entries
        self.max_bytes = max_bytes
        self.coalesce = coalesce

        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self._size = 0
        self._lock = threading.Lock()
        self._inflight: dict[tuple[str, str, bool], Future] = {}

        self.hits = 0
        self.misses = 0

    def lookup(self, path: str, gzipped: bool = False) -> Optional[CacheEntry]:
        """Entry stored for ``path`` in one encoding (marked as recently used), or None."""
        with self._lock:
            return self._lookup_locked((path, gzipped))

    # =========================================================================
    # LOAD-THROUGH WITH SINGLE FLIGHT
    # =========================================================================

    def load(
        self,
        path: str,
        etag: str,
        gzipped: bool,
        loader: Callable[[], bytes],
    ) -> bytes:
        """
        Cached body for ``path`` or the result of ``loader()``, stored.

        Exceptions raised by ``loader`` propagate to the caller and to
        every request that was waiting on the same read.
        """
        key = (path, gzipped)
        flight_key = (path, etag, gzipped)

        with self._lock:
            entry = self._lookup_locked(key)
            if entry is not None and entry.etag == etag:
                self.hits += 1
                logger.debug(f"Cache hit: {path} (gzip={gzipped})")
                return entry.body

            self.misses += 1
            pending = future = None
            if self.coalesce:
                pending = self._inflight.get(flight_key)
                if pending is None:
                    future = Future()
                    self._inflight[flight_key] = future

        if pending is not None:
            logger.debug(f"Waiting on in-flight read: {path}")
            return pending.result()

        logger.debug(f"Cache miss: {path} (gzip={gzipped})")
        try:
            body = loader()
        except BaseException as exc:
            if future is not None:
                with self._lock:
                    self._inflight.pop(flight_key, None)
                future.set_exception(exc)
            raise

        with self._lock:
            self._store_locked(key, CacheEntry(etag, body, gzipped))
            if future is not None:
                self._inflight.pop(flight_key, None)

        if future is not None:
            future.set_result(body)
        return body

    # =========================================================================
    # INTERNALS (caller holds the lock)
    # =========================================================================

    def _lookup_locked(self, key: CacheKey) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
        return entry

    def _store_locked(self, key: CacheKey, entry: CacheEntry) -> None:
        previous = self._entries.pop(key, None)
        if previous is not None:
            self._size -= len(previous.body)

        if self.max_entries <= 0 or len(entry.body) > self.max_bytes:
            return

        self._entries[key] = entry
        self._size += len(entry.body)

        while len(self._entries) > self.max_entries or self._size > self.max_bytes:
            (evicted_path, evicted_gzip), evicted = self._entries.popitem(last=False)
            self._size -= len(evicted.body)
            logger.debug(f"Evicted from cache: {evicted_path} (gzip={evicted_gzip})")

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, path: str) -> bool:
        """True when any encoding of ``path`` is cached."""
        with self._lock:
            return (path, False) in self._entries or (path, True) in self._entries

    @property
    def size_bytes(self) -> int:
        with self._lock:
            return self._size

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                "entries": len(self._entries),
                "bytes": self._size,
                "hits": self.hits,
                "misses": self.misses,
                "in_flight": len(self._inflight),
            }
