"""
Bounded discovery session.

Runs the browse command as a child process, consumes its output line by
line and stops at the first of:

- the end-of-batch heuristic firing
- the session timeout elapsing
- the child closing its stdout

Whatever stopped the session, the child is terminated exactly once before
the result is returned, including when the surrounding task is cancelled.

使用方法:
    result = await DiscoverySession(SessionConfig(timeout=2.0)).run()
    for record in result.records:
        print(record.instance_name)
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from .config import SessionConfig
from .errors import CleanupFailure, SpawnError
from .heuristic import TerminationHeuristic
from .records import DiscoveryRecord, LineKind, parse_line

logger = logging.getLogger(__name__)

Spawner = Callable[[Sequence[str]], Awaitable[Any]]


class SessionState(str, Enum):
    STARTING = "starting"
    STREAMING = "streaming"
    DRAINING = "draining"
    DONE = "done"


class TerminationReason(str, Enum):
    HEURISTIC = "heuristic-satisfied"
    STREAM_CLOSED = "stream-closed"
    TIMEOUT = "timeout"
    PROCESS_ERROR = "process-error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SessionResult:
    """Outcome of one session. Records keep discovery order."""

    records: Tuple[DiscoveryRecord, ...]
    termination_reason: TerminationReason
    error: Optional[str] = None
    elapsed: float = 0.0
    spawn_failed: bool = False

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def found(self) -> bool:
        return bool(self.records)

    @property
    def partial(self) -> bool:
        """Records were collected but the batch never completed."""
        return self.found and self.termination_reason is TerminationReason.TIMEOUT


async def spawn_browse_process(argv: Sequence[str]):
    """Start the browse command in its own session so it is not hit by terminal signals."""
    return await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
        start_new_session=True,
    )


def _signal(proc, action: str) -> None:
    try:
        getattr(proc, action)()
    except ProcessLookupError as e:
        raise CleanupFailure(f"{action} failed for pid {proc.pid}: {e}") from e


class DiscoverySession:
    """
    One bounded browse run.

    A session is single use: ``run()`` returns exactly one
    :class:`SessionResult` and may not be called again.
    """

    def __init__(self, config: Optional[SessionConfig] = None,
                 spawner: Optional[Spawner] = None):
        self.config = config or SessionConfig()
        self._spawner = spawner or spawn_browse_process
        self._heuristic = TerminationHeuristic()
        self.state = SessionState.STARTING
        self.records: List[DiscoveryRecord] = []
        self.malformed_lines = 0
        self.cleanup_calls = 0
        self._error: Optional[str] = None
        self._result: Optional[SessionResult] = None

    @property
    def result(self) -> Optional[SessionResult]:
        return self._result

    async def run(self) -> SessionResult:
        """
        Run the session and return its result.

        The timeout counts from the start of the session, so time spent
        spawning the browse process comes out of the streaming window.
        On cancellation the result is still recorded (``CANCELLED``, with
        the records seen so far) before ``CancelledError`` propagates.
        """
        if self.state is not SessionState.STARTING:
            raise RuntimeError("a discovery session can only run once")

        started = time.monotonic()
        argv = self.config.argv()
        logger.debug(f"Starting browse: {' '.join(argv)} (timeout={self.config.timeout}s)")

        try:
            async with self._browse_process(argv) as proc:
                self.state = SessionState.STREAMING
                reason = await self._stream(proc, deadline=started + self.config.timeout)
        except SpawnError as e:
            logger.error(f"Discovery could not start: {e}")
            return self._finish(
                TerminationReason.PROCESS_ERROR, started, error=str(e), spawn_failed=True
            )
        except asyncio.CancelledError:
            self._finish(TerminationReason.CANCELLED, started)
            raise

        return self._finish(reason, started, error=self._error)

    @asynccontextmanager
    async def _browse_process(self, argv: Sequence[str]):
        """Own the child process; drain it on every way out of the block."""
        proc = None
        try:
            try:
                proc = await self._spawner(argv)
            except OSError as e:
                raise SpawnError(argv, e) from e
            logger.debug(f"Browse process started (pid={proc.pid})")
            yield proc
        finally:
            await self._drain(proc)

    async def _stream(self, proc, deadline: float) -> TerminationReason:
        remaining = max(0.0, deadline - time.monotonic())
        try:
            return await asyncio.wait_for(self._consume(proc.stdout), timeout=remaining)
        except asyncio.TimeoutError:
            logger.info(
                f"Browse timed out after {self.config.timeout}s "
                f"with {len(self.records)} record(s)"
            )
            return TerminationReason.TIMEOUT

    async def _consume(self, stdout) -> TerminationReason:
        index = 0
        while True:
            try:
                line = await stdout.readline()
            except ValueError as e:
                # StreamReader limit overrun; the output is unusable from here on
                self._error = f"unreadable browse output: {e}"
                logger.warning(self._error)
                return TerminationReason.PROCESS_ERROR
            if not line:
                logger.debug("Browse output closed")
                return TerminationReason.STREAM_CLOSED

            parsed = parse_line(line.decode("utf-8", errors="replace"), index, self.config)
            index += 1

            if parsed.kind is LineKind.SKIP:
                continue
            if parsed.kind is LineKind.MALFORMED:
                self.malformed_lines += 1
                logger.debug(f"Skipping malformed line {index}: {parsed.reason}")
                continue

            record = parsed.record
            self.records.append(record)
            logger.debug(
                f"Record #{len(self.records)}: {record.change_type.value} "
                f"{record.instance_name} (flags={record.flags:#x})"
            )
            if self._heuristic.observe(record):
                return TerminationReason.HEURISTIC

    async def _drain(self, proc) -> None:
        self.state = SessionState.DRAINING
        self.cleanup_calls += 1
        if proc is None:
            return

        try:
            if proc.returncode is None:
                _signal(proc, "terminate")
            try:
                await asyncio.wait_for(proc.wait(), timeout=self.config.kill_grace)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Browse process {proc.pid} ignored terminate; killing it"
                )
                _signal(proc, "kill")
                await proc.wait()
        except CleanupFailure as e:
            logger.debug(f"Cleanup: {e}")

    def _finish(self, reason: TerminationReason, started: float,
                error: Optional[str] = None, spawn_failed: bool = False) -> SessionResult:
        self.state = SessionState.DONE
        self._result = SessionResult(
            records=tuple(self.records),
            termination_reason=reason,
            error=error,
            elapsed=time.monotonic() - started,
            spawn_failed=spawn_failed,
        )
        logger.info(
            f"Discovery finished: {reason.value}, {self._result.count} record(s) "
            f"in {self._result.elapsed:.2f}s"
        )
        return self._result


async def discover(config: Optional[SessionConfig] = None,
                   spawner: Optional[Spawner] = None) -> SessionResult:
    """Run one bounded discovery session."""
    return await DiscoverySession(config, spawner=spawner).run()


def discover_sync(config: Optional[SessionConfig] = None) -> SessionResult:
    """Blocking wrapper around :func:`discover` for non-async callers."""
    return asyncio.run(discover(config))
