"""
Local TCP listener for load targets and tests.

Stands in for a real server so sessions can be exercised without one:
- echo: every received chunk is sent back once
- close: connections are accepted and closed straight away
- silent: data is read and discarded, nothing is sent
- stall: nothing is read, so the peer's send buffer eventually fills
"""

import asyncio
import logging
from enum import Enum
from typing import List, Optional, Set, Tuple

from tcpswarm.modules.session import DEFAULT_HOST, format_address

logger = logging.getLogger(__name__)


class EchoMode(str, Enum):
    ECHO = "echo"
    CLOSE = "close"
    SILENT = "silent"
    STALL = "stall"


class EchoServer:
    """asyncio TCP server with a fixed per-connection behavior."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = 0,
        mode: EchoMode = EchoMode.ECHO,
        read_buffer_size: int = 1024,
        record: bool = False,
    ):
        """
        Initialize the server; port 0 binds a free port on start().

        With record=True every received chunk is kept in `received` as
        (loop time, data). Leave it off for long-running targets.
        """
        self.host = host
        self.port = port
        self.mode = EchoMode(mode)
        self.read_buffer_size = read_buffer_size
        self.record = record

        self.connections = 0
        self.received: List[Tuple[float, bytes]] = []

        self._server: Optional[asyncio.AbstractServer] = None
        self._writers: Set[asyncio.StreamWriter] = set()
        self._closing = asyncio.Event()

    @property
    def address(self) -> str:
        """Bound "host:port"; only valid after start()."""
        if self._server is None:
            raise RuntimeError("Server is not started")
        host, port = self._server.sockets[0].getsockname()[:2]
        return format_address(host, port)

    async def start(self) -> "EchoServer":
        self._server = await asyncio.start_server(self._handle, self.host, self.port)
        logger.info(f"Echo server listening on {self.address} (mode: {self.mode.value})")
        return self

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        await self._server.serve_forever()

    async def stop(self) -> None:
        if self._server is None:
            return
        self._closing.set()
        self._server.close()
        for writer in list(self._writers):
            writer.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("Echo server stopped")

    async def __aenter__(self) -> "EchoServer":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.connections += 1
        self._writers.add(writer)
        peer = writer.get_extra_info("peername")
        logger.debug(f"Accepted connection from {peer}")

        loop = asyncio.get_running_loop()
        try:
            if self.mode is EchoMode.CLOSE:
                return
            if self.mode is EchoMode.STALL:
                await self._closing.wait()
                return

            while True:
                data = await reader.read(self.read_buffer_size)
                if not data:
                    break
                if self.record:
                    self.received.append((loop.time(), data))

                if self.mode is EchoMode.ECHO:
                    writer.write(data)
                    await writer.drain()
        except OSError as e:
            logger.debug(f"Connection from {peer} failed: {e}")
        finally:
            self._writers.discard(writer)
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
