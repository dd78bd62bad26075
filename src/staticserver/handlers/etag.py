"""
ETag computation for files on disk.

A weak-by-nature but exact-match validator built from the stat fields that
change whenever the file does:

    "<inode>-<size>-<mtime in ns>"     (hex, quoted)

    >>> compute_etag(os.stat("index.html"))
    '"1573241-8f2-17c6b1e2a40c3b00"'

The value is stable for as long as size, mtime and inode are unchanged, so
it doubles as the freshness key of the response cache.
"""

import os


def compute_etag(stat: os.stat_result) -> str:
    mtime_ns = getattr(stat, "st_mtime_ns", None)
    if mtime_ns is None:
        mtime_ns = int(stat.st_mtime * 1_000_000_000)
    return f'"{stat.st_ino:x}-{stat.st_size:x}-{mtime_ns:x}"'
