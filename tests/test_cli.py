from __future__ import annotations

from typer.testing import CliRunner

from linkcard.cli import app


runner = CliRunner()


def test_classify_command():
    result = runner.invoke(app, ["classify", "https://youtu.be/dQw4w9WgXcQ"])
    assert result.exit_code == 0
    assert "platform=youtube article=False" in result.output


def test_check_command_uses_structural_rules():
    result = runner.invoke(app, ["check", "https://twitter.com/user/status/1", "--no-log-file"])
    assert result.exit_code == 0
    assert "checked=1, broken=0" in result.output


def test_metadata_command_reports_blocked_url():
    result = runner.invoke(app, ["metadata", "http://127.0.0.1/admin", "--no-log-file"])
    assert result.exit_code == 1
    assert "BLOCKED_LOCALHOST" in result.output
