"""Result reporting for discovery sessions."""

import json
from enum import Enum
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from ..discovery.session import SessionResult, TerminationReason


class OutputFormat(str, Enum):
    PLAIN = "plain"
    TABLE = "table"
    JSON = "json"


def summary_line(count: int) -> str:
    return f"{count} host(s) found."


def empty_message(result: SessionResult, service_type: str, timeout: float) -> str:
    """Explanation printed instead of records when nothing was found."""
    if result.termination_reason is TerminationReason.PROCESS_ERROR:
        return f"Discovery could not run: {result.error or 'unknown error'}"
    if result.termination_reason is TerminationReason.TIMEOUT:
        return f"No hosts advertising {service_type} found within {timeout:g}s."
    if result.termination_reason is TerminationReason.CANCELLED:
        return f"No hosts advertising {service_type} found before the scan was cancelled."
    return f"No hosts advertising {service_type} found."


def render_lines(result: SessionResult, service_type: str, timeout: float) -> List[str]:
    """
    Plain text report.

    One verbatim browse row per record followed by the count line, or a
    single explanatory line when there is nothing to list.
    """
    if not result.found:
        return [empty_message(result, service_type, timeout)]
    lines = [record.raw for record in result.records]
    lines.append(summary_line(result.count))
    return lines


def render_json(result: SessionResult) -> str:
    return json.dumps(
        {
            "termination_reason": result.termination_reason.value,
            "error": result.error,
            "count": result.count,
            "records": [record.to_dict() for record in result.records],
        },
        indent=2,
        ensure_ascii=False,
    )


class ResultReporter:
    """Writes a SessionResult to a rich console."""

    def __init__(self, service_type: str, timeout: float,
                 console: Optional[Console] = None,
                 output_format: OutputFormat = OutputFormat.PLAIN):
        self.service_type = service_type
        self.timeout = timeout
        self.console = console or Console()
        self.output_format = OutputFormat(output_format)

    def report(self, result: SessionResult) -> None:
        if self.output_format is OutputFormat.JSON:
            self._print(render_json(result))
        elif self.output_format is OutputFormat.TABLE and result.found:
            self._print_table(result)
        else:
            for line in render_lines(result, self.service_type, self.timeout):
                self._print(line)

    def _print(self, text: str) -> None:
        # Relayed rows may contain '[' in instance names; never treat them as markup
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def _print_table(self, result: SessionResult) -> None:
        table = Table(
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Instance", style="cyan", no_wrap=True)
        table.add_column("Event", style="green")
        table.add_column("Service", style="blue")
        table.add_column("Domain")
        table.add_column("if", justify="right")

        for record in result.records:
            table.add_row(
                record.instance_name,
                record.change_type.value,
                record.service_type,
                record.domain,
                str(record.interface_index),
            )

        self.console.print(table)
        self._print(summary_line(result.count))
