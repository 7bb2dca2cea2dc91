"""
Bounded mDNS service discovery (dns-sd browse).

Drives the system browse tool for a fixed window and collects the service
instances it reports.
"""

from .config import SessionConfig, parse_duration
from .errors import CleanupFailure, DiscoveryError, MalformedRecord, SpawnError
from .heuristic import TerminationHeuristic, batch_complete
from .records import ChangeType, DiscoveryRecord, LineKind, ParsedLine, parse_line, parse_record
from .session import (
    DiscoverySession,
    SessionResult,
    SessionState,
    TerminationReason,
    discover,
    discover_sync,
)

__all__ = [
    "SessionConfig",
    "parse_duration",
    "DiscoveryError",
    "SpawnError",
    "MalformedRecord",
    "CleanupFailure",
    "TerminationHeuristic",
    "batch_complete",
    "ChangeType",
    "DiscoveryRecord",
    "LineKind",
    "ParsedLine",
    "parse_line",
    "parse_record",
    "DiscoverySession",
    "SessionResult",
    "SessionState",
    "TerminationReason",
    "discover",
    "discover_sync",
]
