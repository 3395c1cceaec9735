"""Tests for npk_deploy.cli command wiring."""

from __future__ import annotations

from unittest.mock import patch

import pytest

pytest.importorskip("cli_core_yo")

from typer.testing import CliRunner  # noqa: E402

from npk_deploy import cli  # noqa: E402

runner = CliRunner()


class TestRunGuarded:
    def test_zero_passthrough(self):
        with patch("npk_deploy.cli.ui.help_banner") as banner:
            assert cli._run_guarded(lambda: 0) == 0
        banner.assert_not_called()

    def test_nonzero_shows_banner(self):
        with patch("npk_deploy.cli.ui.help_banner") as banner:
            assert cli._run_guarded(lambda: 2) == 2
        banner.assert_called_once()

    def test_unexpected_error(self):
        def boom():
            raise KeyError("surprise")

        with patch("npk_deploy.cli.ui.help_banner") as banner:
            assert cli._run_guarded(boom) == 1
        banner.assert_called_once()


class TestCommands:
    @patch("npk_deploy.workflow.deploy.run_preflight_only", return_value=0)
    def test_preflight(self, mock_run):
        result = runner.invoke(
            cli.app,
            ["preflight", "--settings", "s.json", "--profile", "npk", "--non-interactive"],
        )
        assert result.exit_code == 0
        args, kwargs = mock_run.call_args
        assert args == ("s.json",)
        assert kwargs["profile"] == "npk"
        assert kwargs["non_interactive"] is True
        assert "catalog_path" not in kwargs

    @patch("npk_deploy.workflow.deploy.run_deploy_workflow", return_value=3)
    def test_deploy_exit_code(self, mock_run):
        with patch("npk_deploy.cli.ui.help_banner"):
            result = runner.invoke(
                cli.app, ["deploy", "--template-dir", "tf", "--refresh"],
            )
        assert result.exit_code == 3
        kwargs = mock_run.call_args.kwargs
        assert kwargs["template_dir"] == "tf"
        assert kwargs["refresh"] is True
