"""
Browse output parsing.

``dns-sd -B`` prints a short banner followed by one row per observed
service instance::

    Browsing for _rfb._tcp
    DATE: ---Sun 18 Oct 2026---
    12:00:00.000  ...STARTING...
    Timestamp     A/R    Flags  if Domain               Service Type         Instance Name
    12:00:00.123  Add        3   4 local.               _rfb._tcp.           Brainbug
    12:00:00.124  Add        2   4 local.               _rfb._tcp.           Tesla

The flags column is the DNSServiceFlags value in hex; bit 0x1 (MoreComing)
is set on every row of a batch except the last one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import SessionConfig
from .errors import MalformedRecord

FIELD_COUNT = 7
MORE_COMING_FLAG = 0x1


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"

    @classmethod
    def from_column(cls, value: str) -> "ChangeType":
        try:
            return _CHANGE_COLUMNS[value.lower()]
        except KeyError:
            raise ValueError(f"unknown change type {value!r}") from None


_CHANGE_COLUMNS = {
    "add": ChangeType.ADDED,
    "rmv": ChangeType.REMOVED,
}


@dataclass(frozen=True)
class DiscoveryRecord:
    """One service instance reported by the browse tool."""

    timestamp: str
    change_type: ChangeType
    flags: int
    interface_index: int
    domain: str
    service_type: str
    instance_name: str
    raw: str

    @property
    def more_coming(self) -> bool:
        """True while the tool is still enumerating the current batch.

        Bit test, so ``Rmv 1`` counts as more coming (a literal ``!= 3`` would not).
        """
        return bool(self.flags & MORE_COMING_FLAG)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "change_type": self.change_type.value,
            "flags": self.flags,
            "interface_index": self.interface_index,
            "domain": self.domain,
            "service_type": self.service_type,
            "instance_name": self.instance_name,
        }


class LineKind(str, Enum):
    SKIP = "skip"
    RECORD = "record"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParsedLine:
    kind: LineKind
    record: Optional[DiscoveryRecord] = None
    reason: Optional[str] = None


def parse_record(line: str) -> DiscoveryRecord:
    """Parse one data row, raising MalformedRecord when it does not fit."""
    raw = line.rstrip("\r\n")
    # Instance names may contain spaces; the last field takes the remainder.
    fields = raw.split(None, FIELD_COUNT - 1)
    if len(fields) < FIELD_COUNT:
        raise MalformedRecord(raw, f"expected {FIELD_COUNT} fields, got {len(fields)}")

    timestamp, change, flags, if_index, domain, service_type, instance_name = fields
    try:
        change_type = ChangeType.from_column(change)
        flag_value = int(flags, 16)
        interface_index = int(if_index)
    except ValueError as e:
        raise MalformedRecord(raw, str(e)) from e

    return DiscoveryRecord(
        timestamp=timestamp,
        change_type=change_type,
        flags=flag_value,
        interface_index=interface_index,
        domain=domain,
        service_type=service_type,
        instance_name=instance_name.strip(),
        raw=raw.strip(),
    )


def parse_line(line: str, index: int, config: SessionConfig) -> ParsedLine:
    """Classify the line at ``index`` (0-based) of the browse output."""
    if index < config.header_line_count:
        return ParsedLine(LineKind.SKIP)
    try:
        return ParsedLine(LineKind.RECORD, record=parse_record(line))
    except MalformedRecord as e:
        return ParsedLine(LineKind.MALFORMED, reason=e.reason)
