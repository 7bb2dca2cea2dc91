"""CLI tests (typer CliRunner with a stubbed session)"""

import asyncio
import importlib
import warnings
from dataclasses import replace

import pytest
from typer.testing import CliRunner

from vnc_discover import cli_main
from vnc_discover.commands import discover as discover_cmd
from vnc_discover.discovery import SessionResult, TerminationReason, parse_record

BRAINBUG = "t1 Add 3 4 local. _rfb._tcp. Brainbug"
TESLA = "t2 Add 2 4 local. _rfb._tcp. Tesla"

runner = CliRunner()


class StubSession:
    """Stands in for DiscoverySession; remembers the config it was given."""

    configs = []
    outcome = None
    interrupt = False

    def __init__(self, config):
        StubSession.configs.append(config)
        self.result = None

    async def run(self):
        if StubSession.interrupt:
            # what DiscoverySession leaves behind when Ctrl+C cancels it
            self.result = replace(StubSession.outcome, termination_reason=TerminationReason.CANCELLED)
            raise KeyboardInterrupt
        await asyncio.sleep(0)
        self.result = StubSession.outcome
        return self.result


@pytest.fixture(autouse=True)
def stub_session(monkeypatch):
    StubSession.configs = []
    StubSession.outcome = SessionResult(records=(), termination_reason=TerminationReason.TIMEOUT)
    StubSession.interrupt = False
    monkeypatch.setattr(discover_cmd, "DiscoverySession", StubSession)
    monkeypatch.setattr(discover_cmd, "configure_logging", lambda verbose=False: None)
    monkeypatch.setattr(cli_main, "configure_logging", lambda verbose=False: None)
    return StubSession


def set_result(lines, reason=TerminationReason.HEURISTIC, error=None, spawn_failed=False):
    StubSession.outcome = SessionResult(
        records=tuple(parse_record(line) for line in lines),
        termination_reason=reason,
        error=error,
        spawn_failed=spawn_failed,
    )


def test_no_arguments_runs_a_scan():
    set_result([BRAINBUG, TESLA])

    result = runner.invoke(cli_main.app, [])

    assert result.exit_code == 0
    assert result.stdout.splitlines() == [BRAINBUG, TESLA, "2 host(s) found."]
    assert StubSession.configs[0].argv() == ["dns-sd", "-B", "_rfb._tcp", "local."]


def test_no_hosts_exits_zero():
    result = runner.invoke(cli_main.app, ["scan"])

    assert result.exit_code == 0
    assert "No hosts advertising _rfb._tcp found within 0.5s." in result.stdout
    assert "host(s) found." not in result.stdout


def test_spawn_failure_has_its_own_exit_code():
    set_result([], TerminationReason.PROCESS_ERROR, error="failed to start 'dns-sd'", spawn_failed=True)

    result = runner.invoke(cli_main.app, ["scan"])

    assert result.exit_code == discover_cmd.EXIT_SPAWN_FAILURE
    assert "Discovery could not run" in result.stdout


def test_unreadable_output_still_exits_zero():
    """Only a failed spawn gets the special exit code"""
    set_result([], TerminationReason.PROCESS_ERROR, error="unreadable browse output: too long")

    result = runner.invoke(cli_main.app, ["scan"])

    assert result.exit_code == 0
    assert "unreadable browse output" in result.stdout


def test_options_override_config():
    result = runner.invoke(cli_main.app, [
        "scan", "-s", "_ssh._tcp", "-d", "example.com.", "-t", "2s",
        "--header-lines", "3", "--command", "/opt/bin/dns-sd",
    ])

    assert result.exit_code == 0
    config = StubSession.configs[0]
    assert config.argv() == ["/opt/bin/dns-sd", "-B", "_ssh._tcp", "example.com."]
    assert config.timeout == 2.0
    assert config.header_line_count == 3


def test_environment_supplies_defaults(monkeypatch):
    monkeypatch.setenv("VNC_DISCOVER_TIMEOUT", "1500ms")

    runner.invoke(cli_main.app, ["scan"])

    assert StubSession.configs[0].timeout == 1.5


def test_bad_timeout_is_a_usage_error():
    result = runner.invoke(cli_main.app, ["scan", "--timeout", "soon"])

    assert result.exit_code == 1
    assert StubSession.configs == []


def test_json_format():
    set_result([TESLA])

    result = runner.invoke(cli_main.app, ["scan", "--format", "json"])

    assert result.exit_code == 0
    assert '"instance_name": "Tesla"' in result.stdout


def test_interrupt_exits_130():
    StubSession.interrupt = True

    result = runner.invoke(cli_main.app, ["scan"])

    assert result.exit_code == discover_cmd.EXIT_INTERRUPTED


def test_interrupt_still_lists_hosts_found_so_far():
    set_result([BRAINBUG])
    StubSession.interrupt = True

    result = runner.invoke(cli_main.app, ["scan"])

    assert result.exit_code == discover_cmd.EXIT_INTERRUPTED
    assert BRAINBUG in result.stdout
    assert "1 host(s) found." in result.stdout


def test_interrupt_without_hosts_says_so():
    StubSession.interrupt = True

    result = runner.invoke(cli_main.app, ["scan"])

    assert "found before the scan was cancelled" in result.stdout


def test_entry_point_leaves_resource_warnings_alone():
    from vnc_discover import cli

    with warnings.catch_warnings():
        warnings.resetwarnings()
        importlib.reload(cli)
        assert not any(f[2] is ResourceWarning for f in warnings.filters)


def test_version():
    result = runner.invoke(cli_main.app, ["version"])

    assert result.exit_code == 0
    assert result.stdout.startswith("vnc-discover v")


def test_version_detailed_lists_dependencies():
    result = runner.invoke(cli_main.app, ["version", "--detailed"])

    assert result.exit_code == 0
    assert "typer" in result.stdout
    assert "dns-sd" in result.stdout
