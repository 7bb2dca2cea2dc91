"""Shared fixtures: a scripted stand-in for the dns-sd child process."""

import asyncio
from typing import Iterable, List

import pytest

HEADER = [
    "Browsing for _rfb._tcp",
    "DATE: ---Sun 18 Oct 2026---",
    "12:00:00.000  ...STARTING...",
    "Timestamp     A/R    Flags  if Domain               Service Type         Instance Name",
]


class FakeProcess:
    """Looks enough like asyncio.subprocess.Process for a DiscoverySession."""

    def __init__(self, lines: Iterable[str] = (), close: bool = False,
                 ignore_terminate: bool = False, pid: int = 4242):
        self.pid = pid
        self.stdout = asyncio.StreamReader()
        self.returncode = None
        self.ignore_terminate = ignore_terminate
        self.terminate_calls = 0
        self.kill_calls = 0
        self._exited = asyncio.Event()
        for line in lines:
            self.feed(line)
        if close:
            self.close()

    def feed(self, line: str) -> None:
        self.stdout.feed_data((line + "\n").encode("utf-8"))

    def close(self) -> None:
        self.stdout.feed_eof()

    def exit(self, code: int) -> None:
        self.returncode = code
        self._exited.set()

    def terminate(self) -> None:
        self.terminate_calls += 1
        if self.returncode is not None:
            raise ProcessLookupError()
        if not self.ignore_terminate:
            self.exit(-15)

    def kill(self) -> None:
        self.kill_calls += 1
        self.exit(-9)

    async def wait(self) -> int:
        await self._exited.wait()
        return self.returncode


class ScriptedSpawner:
    """Spawner that hands out a prepared FakeProcess (or raises)."""

    def __init__(self, proc: FakeProcess = None, error: Exception = None,
                 delay: float = 0.0):
        self.proc = proc
        self.error = error
        self.delay = delay
        self.calls: List[List[str]] = []

    async def __call__(self, argv):
        self.calls.append(list(argv))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.proc


@pytest.fixture
def header_lines():
    return list(HEADER)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep VNC_DISCOVER_* from the developer's shell out of the tests."""
    for name in ("SERVICE_TYPE", "DOMAIN", "TIMEOUT", "HEADER_LINES", "COMMAND"):
        monkeypatch.delenv(f"VNC_DISCOVER_{name}", raising=False)
