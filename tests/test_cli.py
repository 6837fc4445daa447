"""
Tests for the gitsplit command line.
"""

import json

import pytest
from click.testing import CliRunner
from unittest.mock import MagicMock, patch

from gitsplit import __version__
from gitsplit.cli import cli
from gitsplit.domain.operation import SplitDetail, SplitReport, SplitStatus
from gitsplit.errors import SplitError
from gitsplit.exit_codes import CONFIG_ERROR, SPLIT_ERROR, ConfigError


@pytest.fixture
def runner():
    return CliRunner()


def json_lines(output):
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


def sample_report():
    report = SplitReport()
    report.add_detail(SplitDetail("main", ["lib/"], SplitStatus.SPLIT, "a" * 40, "b" * 40, ["t"]))
    report.add_detail(SplitDetail("v1", ["lib/"], SplitStatus.CACHED, "c" * 40, "d" * 40, ["t"]))
    return report


class TestCli:
    """Tests for the command group."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_commands_registered(self):
        assert set(cli.commands) == {"split", "status"}

    def test_split_options(self):
        from gitsplit.commands.split import split_handler

        params = [p.name for p in split_handler.params]
        assert params == ["refs", "config_path", "verbose", "pretty"]


class TestSplitCommand:
    """Tests for `gitsplit split`."""

    @patch("gitsplit.commands.split.SplitService")
    @patch("gitsplit.commands.split.WorkingSpace")
    @patch("gitsplit.commands.split.load_config")
    def test_split_emits_details_and_summary(self, mock_load, mock_workspace, mock_service, runner):
        service = MagicMock()
        service.split.return_value = sample_report()
        mock_service.from_workspace.return_value = service

        result = runner.invoke(cli, ["split", "--ref", "main", "--ref", "v1", "-c", "conf.yml"])

        assert result.exit_code == 0
        mock_load.assert_called_once_with("conf.yml")
        mock_workspace.create.return_value.__enter__.return_value.init.assert_called_once()
        service.split.assert_called_once_with(whitelist=["main", "v1"])

        lines = json_lines(result.stdout)
        assert [line.get('reference') for line in lines[:2]] == ["main", "v1"]
        assert lines[-1] == {
            'type': 'summary', 'total': 2, 'split': 1, 'cached': 1, 'failed': 0, 'errors': [],
        }

    @patch("gitsplit.commands.split.load_config")
    def test_config_error_exit_code(self, mock_load, runner):
        mock_load.side_effect = ConfigError("Fail to read config file .gitsplit.yml")

        result = runner.invoke(cli, ["split"])

        assert result.exit_code == CONFIG_ERROR
        error = json_lines(result.stdout)[-1]
        assert error['type'] == 'ConfigError'
        assert error['exit_code'] == CONFIG_ERROR

    @patch("gitsplit.commands.split.SplitService")
    @patch("gitsplit.commands.split.WorkingSpace")
    @patch("gitsplit.commands.split.load_config")
    def test_split_error_reports_partial_details(self, mock_load, mock_workspace, mock_service, runner):
        report = sample_report()
        service = MagicMock()
        service.split.side_effect = SplitError("Unable to split v2 for lib/")
        service.last_report = report
        mock_service.from_workspace.return_value = service

        result = runner.invoke(cli, ["split"])

        assert result.exit_code == SPLIT_ERROR
        lines = json_lines(result.stdout)
        assert [line.get('reference') for line in lines[:2]] == ["main", "v1"]
        assert lines[-1]['type'] == 'SplitError'

    @patch("gitsplit.commands.split.SplitService")
    @patch("gitsplit.commands.split.WorkingSpace")
    @patch("gitsplit.commands.split.load_config")
    def test_pretty_output(self, mock_load, mock_workspace, mock_service, runner):
        service = MagicMock()
        service.split.return_value = sample_report()
        mock_service.from_workspace.return_value = service

        result = runner.invoke(cli, ["split", "--pretty"])

        assert result.exit_code == 0
        assert "main" in result.stdout
        assert "cached" in result.stdout


class TestStatusCommand:
    """Tests for `gitsplit status`."""

    @patch("gitsplit.commands.status.SplitService")
    @patch("gitsplit.commands.status.WorkingSpace")
    @patch("gitsplit.commands.status.load_config")
    def test_status(self, mock_load, mock_workspace, mock_service, runner):
        service = MagicMock()
        service.describe.return_value = iter([
            SplitDetail("main", ["lib/"], SplitStatus.STALE, "a" * 40),
        ])
        mock_service.from_workspace.return_value = service

        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0
        service.describe.assert_called_once_with(whitelist=[])
        assert json_lines(result.stdout)[0]['status'] == 'stale'
