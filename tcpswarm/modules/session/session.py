import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .address import AddressError, parse_address

logger = logging.getLogger(__name__)

DEFAULT_PAYLOAD = b"hello"
DEFAULT_WARMUP_DELAY = 1.0
DEFAULT_HEARTBEAT_INTERVAL = 10.0
DEFAULT_READ_BUFFER_SIZE = 1024


class SessionState(Enum):
    """Lifecycle of a single session."""

    PENDING = "pending"
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass
class Session:
    """One TCP connection driven by a SessionDriver."""

    id: int
    address: str
    start_delay: float = 0.0
    state: SessionState = SessionState.PENDING
    bytes_sent: int = 0
    bytes_received: int = 0
    connected_at: Optional[float] = None
    first_write_at: Optional[float] = None
    stop_event: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def finished(self) -> bool:
        return self.state in (SessionState.CLOSED, SessionState.FAILED)

    def stop(self) -> None:
        """Ask the reader and writer of this session to end."""
        self.stop_event.set()


async def pause(stop_event: asyncio.Event, delay: float) -> bool:
    """
    Sleep for delay seconds unless stop_event fires first.

    Returns:
        True if the event is set, False if the full delay elapsed
    """
    if stop_event.is_set():
        return True
    if delay <= 0:
        await asyncio.sleep(0)
        return stop_event.is_set()
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True


class SessionDriver:
    def __init__(
        self,
        payload: bytes = DEFAULT_PAYLOAD,
        warmup_delay: float = DEFAULT_WARMUP_DELAY,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
        read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE,
    ):
        """
        Initialize session driver.

        Args:
            payload: Heartbeat bytes written on every cycle
            warmup_delay: Seconds between connect and the first write
            heartbeat_interval: Seconds between writes
            read_buffer_size: Max bytes per read
        """
        if not payload:
            raise ValueError("Heartbeat payload must not be empty")
        if warmup_delay < 0:
            raise ValueError("Warm-up delay must be >= 0")
        if heartbeat_interval < 0:
            raise ValueError("Heartbeat interval must be >= 0")
        if read_buffer_size <= 0:
            raise ValueError("Read buffer size must be > 0")

        self.payload = payload
        self.warmup_delay = warmup_delay
        self.heartbeat_interval = heartbeat_interval
        self.read_buffer_size = read_buffer_size

    @classmethod
    def from_config(cls, session_config, pacing_config) -> "SessionDriver":
        """Build a driver from SessionConfig and PacingConfig groups."""
        return cls(
            payload=session_config.payload,
            warmup_delay=pacing_config.warmup_delay,
            heartbeat_interval=pacing_config.heartbeat_interval,
            read_buffer_size=session_config.read_buffer_size,
        )

    async def run_session(
        self, address: str, session_id: int, session: Optional[Session] = None
    ) -> Session:
        """
        Drive one session until either direction fails.

        Args:
            address: Target "host:port"
            session_id: Numeric session identifier
            session: Pre-built record to drive (the launcher passes its own)

        Returns:
            The session record in its final state

        Logic:
        1. Connect once, no retry; on failure report and return
        2. Start the reader task
        3. Wait the warm-up delay, then write the payload every heartbeat
        4. When either side ends, signal the other and close the connection
        """
        if session is None:
            session = Session(id=session_id, address=address)

        session.state = SessionState.CONNECTING
        try:
            host, port = parse_address(address)
            reader, writer = await asyncio.open_connection(host, port)
        except (OSError, AddressError) as e:
            session.state = SessionState.FAILED
            logger.warning(f"Session {session_id} could not connect to {address}: {e}")
            return session

        loop = asyncio.get_running_loop()
        session.state = SessionState.ACTIVE
        session.connected_at = loop.time()
        logger.info(f"connect {session_id}")

        read_task = asyncio.create_task(
            self._read_loop(session, reader), name=f"session-{session_id}-reader"
        )
        cancelled = False
        try:
            await self._write_loop(session, writer)
        except asyncio.CancelledError:
            cancelled = True
            raise
        finally:
            session.stop()
            read_task.cancel()
            await asyncio.gather(read_task, return_exceptions=True)

            await self._close(writer, abort=cancelled)
            session.state = SessionState.CLOSED
            logger.debug(
                f"Session {session_id} closed "
                f"(sent {session.bytes_sent}B, received {session.bytes_received}B)"
            )

        return session

    @staticmethod
    async def _close(writer: asyncio.StreamWriter, abort: bool) -> None:
        """Close the connection; drop unsent bytes instead of waiting on a stalled peer."""
        if abort or writer.transport.get_write_buffer_size() > 0:
            writer.transport.abort()
            return

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass

    async def _read_loop(self, session: Session, reader: asyncio.StreamReader) -> None:
        """Report every chunk the server sends until EOF or a read error."""
        try:
            while True:
                try:
                    data = await reader.read(self.read_buffer_size)
                except OSError as e:
                    logger.debug(f"Session {session.id} read failed: {e}")
                    return

                if not data:
                    logger.debug(f"Session {session.id} closed by peer")
                    return

                session.bytes_received += len(data)
                logger.info(f"{session.id} read: {data.decode('utf-8', errors='replace')}")
        finally:
            session.stop()

    async def _write_loop(self, session: Session, writer: asyncio.StreamWriter) -> None:
        """Send the heartbeat payload until a write fails or the session stops."""
        if await pause(session.stop_event, self.warmup_delay):
            return

        loop = asyncio.get_running_loop()
        while True:
            try:
                writer.write(self.payload)
                await writer.drain()
            except OSError as e:
                logger.debug(f"Session {session.id} write failed: {e}")
                return

            if session.first_write_at is None:
                session.first_write_at = loop.time()
            session.bytes_sent += len(self.payload)

            if await pause(session.stop_event, self.heartbeat_interval):
                return
