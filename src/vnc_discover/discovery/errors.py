"""Discovery error taxonomy."""


class DiscoveryError(Exception):
    """Base class for discovery failures."""


class SpawnError(DiscoveryError):
    """The browse command could not be started (missing binary, permission)."""

    def __init__(self, argv, cause: Exception):
        self.argv = list(argv)
        self.cause = cause
        super().__init__(f"failed to start {' '.join(self.argv)!r}: {cause}")


class MalformedRecord(DiscoveryError):
    """A data line did not have the expected layout."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"{reason}: {line!r}")


class CleanupFailure(DiscoveryError):
    """The browse process could not be signalled (usually already gone)."""
