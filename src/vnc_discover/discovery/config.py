"""
Session configuration.

Defaults browse for VNC hosts in the link-local domain. Every value can be
overridden from the environment (or a ``.env`` file) and from CLI options.
"""

import os
from dataclasses import dataclass, replace
from typing import List, Optional

DEFAULT_SERVICE_TYPE = "_rfb._tcp"
DEFAULT_DOMAIN = "local."
DEFAULT_TIMEOUT = 0.5
DEFAULT_HEADER_LINES = 4
DEFAULT_COMMAND = "dns-sd"
DEFAULT_KILL_GRACE = 1.0

ENV_PREFIX = "VNC_DISCOVER_"


def parse_duration(value) -> float:
    """'500ms', '2s', '1m', '0.5' のような値を秒に変換"""
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        s = str(value).strip().lower()
        if s.endswith("ms"):
            seconds = float(s[:-2]) / 1000
        elif s.endswith("s"):
            seconds = float(s[:-1])
        elif s.endswith("m"):
            seconds = float(s[:-1]) * 60
        else:
            seconds = float(s)
    if seconds <= 0:
        raise ValueError(f"duration must be positive: {value!r}")
    return seconds


@dataclass(frozen=True)
class SessionConfig:
    """Query parameters for one bounded discovery session."""

    service_type: str = DEFAULT_SERVICE_TYPE
    domain: str = DEFAULT_DOMAIN
    timeout: float = DEFAULT_TIMEOUT
    header_line_count: int = DEFAULT_HEADER_LINES
    command: str = DEFAULT_COMMAND
    kill_grace: float = DEFAULT_KILL_GRACE

    def __post_init__(self):
        if not self.service_type:
            raise ValueError("service_type must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive: {self.timeout!r}")
        if self.header_line_count < 0:
            raise ValueError(
                f"header_line_count must not be negative: {self.header_line_count!r}"
            )

    def argv(self) -> List[str]:
        """Command line for the browse process."""
        return [self.command, "-B", self.service_type, self.domain]

    def with_overrides(self, **overrides) -> "SessionConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "timeout" in changes:
            changes["timeout"] = parse_duration(changes["timeout"])
        return replace(self, **changes) if changes else self

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "SessionConfig":
        env = os.environ if environ is None else environ
        kwargs = {}

        def _get(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            if value is None or not value.strip():
                return None
            return value.strip()

        service_type = _get("SERVICE_TYPE")
        if service_type:
            kwargs["service_type"] = service_type
        domain = _get("DOMAIN")
        if domain:
            kwargs["domain"] = domain
        command = _get("COMMAND")
        if command:
            kwargs["command"] = command

        timeout = _get("TIMEOUT")
        if timeout:
            try:
                kwargs["timeout"] = parse_duration(timeout)
            except ValueError as e:
                raise ValueError(f"{ENV_PREFIX}TIMEOUT: {e}") from e

        header_lines = _get("HEADER_LINES")
        if header_lines:
            try:
                kwargs["header_line_count"] = int(header_lines)
            except ValueError as e:
                raise ValueError(f"{ENV_PREFIX}HEADER_LINES: {e}") from e

        return cls(**kwargs)
