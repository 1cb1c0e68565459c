"""
Echo Module - Black Box Interface

Purpose: Provide a local TCP target for load runs and tests
Interface: EchoServer.start(), EchoServer.stop(), EchoServer.serve_forever()
Hidden: Per-connection handlers and their bookkeeping
"""

from .echo_server import EchoMode, EchoServer

__all__ = ["EchoMode", "EchoServer"]
