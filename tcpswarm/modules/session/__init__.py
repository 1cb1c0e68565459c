"""
Session Module - Black Box Interface

Purpose: Drive one TCP connection through its read/write duty cycle
Interface: SessionDriver.run_session(), parse_address(), format_address()
Hidden: Reader task, heartbeat cadence, stop signalling between reader and writer

A session that fails is abandoned; nothing here retries or reconnects.
"""

from .address import DEFAULT_HOST, AddressError, format_address, parse_address
from .session import Session, SessionDriver, SessionState, pause

__all__ = [
    "DEFAULT_HOST",
    "AddressError",
    "Session",
    "SessionDriver",
    "SessionState",
    "format_address",
    "parse_address",
    "pause",
]
