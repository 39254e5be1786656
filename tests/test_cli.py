"""Tests for the CLI module."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from playtrack.cli import main_cli


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch("playtrack.cli.configure_logging"):
        yield


class TestCLI:
    """Test cases for CLI commands."""

    def test_cli_help(self):
        runner = CliRunner()
        result = runner.invoke(main_cli, ["--help"])
        assert result.exit_code == 0
        assert "simulate" in result.output
        assert "settings" in result.output

    def test_simulate_requires_enabled_analytics(self):
        runner = CliRunner()
        result = runner.invoke(main_cli, ["simulate", "--duration", "10"])
        assert result.exit_code != 0
        assert "Analytics is disabled" in result.output

    def test_simulate_vod_session(self):
        runner = CliRunner()
        result = runner.invoke(
            main_cli,
            ["simulate", "--enable", "--account-id", "123", "--duration", "20", "--interval", "5", "--sink", "log"],
        )
        assert result.exit_code == 0, result.output
        assert "Video Content Started" in result.output
        assert "Video Content Playing" in result.output
        assert "Video Content Completed" in result.output

    def test_simulate_live_session_stops_after_max_ticks(self):
        runner = CliRunner()
        result = runner.invoke(
            main_cli,
            ["simulate", "--enable", "--account-id", "123", "--live", "--max-ticks", "3", "--sink", "log"],
        )
        assert result.exit_code == 0, result.output
        assert "Video Content Completed" not in result.output
        assert result.output.count("Video Content Playing") == 3

    def test_simulate_with_env_settings(self):
        runner = CliRunner()
        env = {"PLAYTRACK_SEGMENT_ENABLED": "1", "PLAYTRACK_SEGMENT_ACCOUNT_ID": "123"}
        result = runner.invoke(main_cli, ["simulate", "--duration", "10", "--resume", "--interval", "5"], env=env)
        assert result.exit_code == 0, result.output
        assert "Video Content Completed" in result.output

    def test_segment_sink_requires_write_key(self):
        runner = CliRunner()
        result = runner.invoke(main_cli, ["simulate", "--enable", "--account-id", "123", "--sink", "segment"])
        assert result.exit_code != 0
        assert "PLAYTRACK_SEGMENT_WRITE_KEY" in result.output

    def test_settings_masks_write_key(self):
        runner = CliRunner()
        env = {"PLAYTRACK_SEGMENT_WRITE_KEY": "abcdef1234", "PLAYTRACK_SEGMENT_ACCOUNT_ID": "123"}
        result = runner.invoke(main_cli, ["settings"], env=env)
        assert result.exit_code == 0
        assert "******1234" in result.output
        assert "abcdef1234" not in result.output
