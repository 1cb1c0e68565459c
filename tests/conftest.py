"""
Shared pytest fixtures for tcpswarm tests.

This module provides common fixtures including:
- Local listeners in echo, close and silent modes
- A session driver with sub-second pacing
- Logging reset so CLI tests do not leak handlers into caplog tests
"""

import logging
import os
import socket
import sys

import pytest
import pytest_asyncio

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tcpswarm.modules.echo import EchoMode, EchoServer
from tcpswarm.modules.session import SessionDriver


# =============================================================================
# Listeners
# =============================================================================

@pytest_asyncio.fixture
async def echo_server():
    """Listener that echoes every received chunk once."""
    server = EchoServer(mode=EchoMode.ECHO, record=True)
    await server.start()
    yield server
    await server.stop()


@pytest_asyncio.fixture
async def close_server():
    """Listener that accepts and immediately closes."""
    server = EchoServer(mode=EchoMode.CLOSE, record=True)
    await server.start()
    yield server
    await server.stop()


@pytest_asyncio.fixture
async def silent_server():
    """Listener that reads and never answers."""
    server = EchoServer(mode=EchoMode.SILENT, record=True)
    await server.start()
    yield server
    await server.stop()


@pytest_asyncio.fixture
async def stall_server():
    """Listener that accepts and never reads."""
    server = EchoServer(mode=EchoMode.STALL)
    await server.start()
    yield server
    await server.stop()


@pytest.fixture
def unused_address():
    """An address nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"127.0.0.1:{port}"


# =============================================================================
# Drivers
# =============================================================================

@pytest.fixture
def fast_driver():
    """Driver with short warm-up and heartbeat for quick tests."""
    return SessionDriver(payload=b"hello", warmup_delay=0.05, heartbeat_interval=0.05)


# =============================================================================
# Logging
# =============================================================================

@pytest.fixture(autouse=True)
def reset_tcpswarm_logger():
    """Undo dictConfig changes made by CLI commands."""
    yield
    for name in ("tcpswarm", "asyncio"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
    root = logging.getLogger()
    root.setLevel(logging.WARNING)
    for handler in list(root.handlers):
        if isinstance(handler, logging.StreamHandler) and not type(handler).__module__.startswith("_pytest"):
            root.removeHandler(handler)
