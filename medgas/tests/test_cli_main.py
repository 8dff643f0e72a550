"""Tests for the top-level CLI assembly."""

from medgas.cli.main import app


def test_main_app_help(cli_runner):
    result = cli_runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Medical gas demand" in result.output


def test_version_output(cli_runner):
    result = cli_runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_gas_subcommands_registered(cli_runner):
    result = cli_runner.invoke(app, ["gas", "--help"])
    assert result.exit_code == 0
    for command in ("rooms", "calc", "pipe", "manual", "validate"):
        assert command in result.output


def test_unknown_command(cli_runner):
    result = cli_runner.invoke(app, ["nonexistent"])
    assert result.exit_code != 0
