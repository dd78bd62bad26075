"""
=============================================================================
CORE NETWORKING
=============================================================================

    socket_server.py   listening socket and accept loop
    connection.py      one client: buffered reads, writes, close
    thread_pool.py     workers that serve connections

    SocketServer ── accept() ──► Connection ── submit() ──► ThreadPool

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
