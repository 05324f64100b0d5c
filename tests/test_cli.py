"""Tests for the command line interface."""

from typer.testing import CliRunner

from ticket_bridge.cli import app

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "Ticket Sync Bridge" in result.output


def test_demo_runs_in_memory():
    result = runner.invoke(
        app,
        ["demo", "--tickets", "2", "--duration", "0.2", "--max-delay", "0.02", "--seed", "3"],
    )

    assert result.exit_code == 0, result.output
    assert "Accepted" in result.output
    assert "Updates pushed to the hub" in result.output
