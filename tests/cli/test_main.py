"""Tests for the CLI entry point."""

import pytest

from pgload import __version__
from pgload.cli.main import app


@pytest.mark.unit
class TestCliHelp:
    def test_help_flag(self, runner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "pgload" in result.stdout
        assert "export" in result.stdout

    def test_export_help(self, runner):
        result = runner.invoke(app, ["export", "--help"])
        assert result.exit_code == 0
        assert "--execute" in result.stdout
        assert "--page-size" in result.stdout


@pytest.mark.unit
class TestCliVersion:
    @pytest.mark.parametrize("flag", ["--version", "-V"])
    def test_version_flag(self, runner, flag):
        result = runner.invoke(app, [flag])
        assert result.exit_code == 0
        assert f"pgload {__version__}" in result.stdout


@pytest.mark.unit
def test_unknown_command_fails(runner):
    result = runner.invoke(app, ["nonexistent-command"])
    assert result.exit_code != 0
