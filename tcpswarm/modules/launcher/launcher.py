import asyncio
import logging
from functools import partial
from typing import List, Set

from tcpswarm.modules.session import (
    Session,
    SessionDriver,
    SessionState,
    parse_address,
    pause,
)

logger = logging.getLogger(__name__)


class CompletionCounter:
    """
    Count of outstanding sessions.

    add() is called once per spawned session and done() exactly once when
    that session ends; wait() returns when the count is back to zero.
    """

    def __init__(self):
        self._count = 0
        self._zero = asyncio.Event()
        self._zero.set()

    @property
    def count(self) -> int:
        return self._count

    def add(self, delta: int = 1) -> None:
        if self._count + delta < 0:
            raise ValueError("Completion counter cannot go negative")
        self._count += delta
        if self._count == 0:
            self._zero.set()
        else:
            self._zero.clear()

    def done(self) -> None:
        self.add(-1)

    async def wait(self) -> None:
        await self._zero.wait()


class Launcher:
    def __init__(self, driver: SessionDriver):
        """
        Initialize launcher.

        Args:
            driver: SessionDriver shared by every spawned session
        """
        self.driver = driver
        self.sessions: List[Session] = []
        self._counter = CompletionCounter()
        self._tasks: Set[asyncio.Task] = set()
        self._stop_requested = asyncio.Event()

    @property
    def active(self) -> int:
        """Number of sessions that have not ended yet."""
        return self._counter.count

    async def launch(self, address: str, count: int, interval: float) -> List[Session]:
        """
        Spawn count sessions against address and wait for all of them.

        Args:
            address: Target "host:port"
            count: Number of sessions (>= 0)
            interval: Seconds between successive spawns (>= 0)

        Returns:
            Spawned sessions in index order, all finished

        Logic:
        1. Spawn session i as an independent task, counting it
        2. Sleep interval before spawning the next (not after the last)
        3. Wait until every session has reported completion
        """
        if count < 0:
            raise ValueError("Session count must be >= 0")
        if interval < 0:
            raise ValueError("Launch interval must be >= 0")
        parse_address(address)

        logger.info(f"Launching {count} sessions against {address} (interval {interval}s)")

        loop = asyncio.get_running_loop()
        started = loop.time()

        for index in range(count):
            if self._stop_requested.is_set():
                logger.info(f"Launch stopped after {index} of {count} sessions")
                break

            session = Session(id=index, address=address, start_delay=loop.time() - started)
            self.sessions.append(session)
            self._counter.add()

            task = asyncio.create_task(self._run(session), name=f"session-{index}")
            self._tasks.add(task)
            # Counted from the callback: a task cancelled before its first step never runs _run
            task.add_done_callback(partial(self._session_done, session))

            if interval > 0 and index < count - 1:
                await pause(self._stop_requested, interval)

        await self._counter.wait()
        logger.info(f"All {len(self.sessions)} sessions finished")
        return self.sessions

    def stop(self) -> None:
        """
        Stop spawning and end every running session.

        Sessions are cancelled wherever they are suspended, including a
        pending connect or a write that the peer is not draining.
        """
        logger.info("Stopping all sessions")
        self._stop_requested.set()
        for session in self.sessions:
            session.stop()
        for task in list(self._tasks):
            task.cancel()

    async def _run(self, session: Session) -> None:
        try:
            await self.driver.run_session(session.address, session.id, session=session)
        except Exception:
            session.state = SessionState.FAILED
            logger.exception(f"Session {session.id} crashed")

    def _session_done(self, session: Session, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug(f"Session {session.id} cancelled")
            if not session.finished:
                session.state = SessionState.CLOSED
        self._counter.done()
