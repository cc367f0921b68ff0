"""Tests for the serve command."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from ibanctl.cli import cli
from ibanctl.errors import BindError
from ibanctl.web.lifecycle import ListenAddress
from ibanctl.web.wiring import wire_service
from tests.conftest import OENB_AT_CSV

LIFECYCLE = "ibanctl.commands.serve.ServiceLifecycle"


class TestServeCommand:
    """Tests for ibanctl serve."""

    def test_serve_registered(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])
        assert "serve" in result.output

    def test_help_shows_options(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["serve", "--help"])
        assert "--port" in result.output
        assert "--pid-file" in result.output
        assert "--data-path" in result.output

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["serve", "--examples"])
        assert result.exit_code == 0
        assert "ibanctl serve --port" in result.output

    def test_runs_lifecycle_with_defaults(self, cli_runner: CliRunner, data_dir: Path) -> None:
        with patch(LIFECYCLE) as lifecycle_cls:
            result = cli_runner.invoke(cli, ["serve", "--data-path", str(data_dir)])

        assert result.exit_code == 0, result.output
        lifecycle_cls.assert_called_once()
        args, kwargs = lifecycle_cls.call_args
        assert args[1] == ListenAddress("", 8080)
        assert kwargs["graceful_timeout"] == 30.0
        assert kwargs["access_log"] is False
        lifecycle_cls.return_value.run.assert_called_once_with()

    def test_port_option(self, cli_runner: CliRunner) -> None:
        with patch(LIFECYCLE) as lifecycle_cls:
            result = cli_runner.invoke(cli, ["serve", "-p", "127.0.0.1:9000"])

        assert result.exit_code == 0, result.output
        assert lifecycle_cls.call_args.args[1] == ListenAddress("127.0.0.1", 9000)

    def test_port_from_config_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "ibanctl.toml").write_text('[server]\nlisten = "127.0.0.1:7000"\n')
        with patch(LIFECYCLE) as lifecycle_cls:
            result = cli_runner.invoke(cli, ["serve"])

        assert result.exit_code == 0, result.output
        assert lifecycle_cls.call_args.args[1] == ListenAddress("127.0.0.1", 7000)

    def test_invalid_port(self, cli_runner: CliRunner) -> None:
        with patch(LIFECYCLE) as lifecycle_cls:
            result = cli_runner.invoke(cli, ["serve", "--port", "eighty"])

        assert result.exit_code == 2
        assert "Invalid port" in result.output
        lifecycle_cls.assert_not_called()

    def test_writes_pid_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        pid_file = tmp_path / "run" / "ibanctl.pid"
        with patch(LIFECYCLE):
            result = cli_runner.invoke(cli, ["serve", "--pid-file", str(pid_file)])

        assert result.exit_code == 0, result.output
        assert pid_file.read_text() == str(os.getpid())

    def test_live_pid_file_aborts_before_binding(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        pid_file = tmp_path / "ibanctl.pid"
        pid_file.write_text(str(os.getpid()))
        with patch(LIFECYCLE) as lifecycle_cls:
            result = cli_runner.invoke(cli, ["serve", "--pid-file", str(pid_file)])

        assert result.exit_code == 1
        lifecycle_cls.assert_not_called()

    def test_invalid_pid_file_aborts(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        pid_file = tmp_path / "ibanctl.pid"
        pid_file.write_text("garbage")
        with patch(LIFECYCLE) as lifecycle_cls:
            result = cli_runner.invoke(cli, ["serve", "--pid-file", str(pid_file)])

        assert result.exit_code == 1
        lifecycle_cls.assert_not_called()

    def test_unreadable_bank_data_is_skipped(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        data = tmp_path / "data"
        data.mkdir()
        (data / "nl.csv").write_text("code\n1\n", encoding="utf-8")
        (data / "banks-export.csv").write_text("a,b\n1,2\n", encoding="utf-8")
        with patch(LIFECYCLE) as lifecycle_cls:
            result = cli_runner.invoke(cli, ["serve", "--data-path", str(data)])

        assert result.exit_code == 0, result.output
        lifecycle_cls.return_value.run.assert_called_once_with()

    def test_loads_austrian_export(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        data = tmp_path / "data"
        data.mkdir()
        (data / "at.csv").write_text(OENB_AT_CSV, encoding="iso-8859-1")
        with (
            patch(LIFECYCLE) as lifecycle_cls,
            patch("ibanctl.commands.serve.wire_service", wraps=wire_service) as wire,
        ):
            result = cli_runner.invoke(cli, ["serve", "--data-path", str(data)])

        assert result.exit_code == 0, result.output
        lifecycle_cls.return_value.run.assert_called_once_with()
        store = wire.call_args.args[1]
        assert store.find("AT", "19043").bic == "BKAUATWW"

    def test_bind_failure_exits_nonzero(self, cli_runner: CliRunner) -> None:
        lifecycle = MagicMock()
        lifecycle.run.side_effect = BindError("Cannot listen on :8080: in use")
        with patch(LIFECYCLE, return_value=lifecycle):
            result = cli_runner.invoke(cli, ["serve"])

        assert result.exit_code == 1
