"""
Smoke tests for package structure and availability.

These tests only verify that the installed package imports cleanly and
that the `flashwords` entry point offers its practice command.
"""

from __future__ import annotations

import importlib

from typer.testing import CliRunner

from flashwords import __version__


def test_package_importable() -> None:
    """Ensure the top-level package can be imported."""
    mod = importlib.import_module("flashwords")
    assert mod is not None


def test_version_is_set() -> None:
    """Ensure the package exposes a valid version string."""
    assert isinstance(__version__, str)
    assert len(__version__) > 0


def test_cli_module_exposes_app() -> None:
    """
    Ensure the CLI module exposes the Typer 'app' object.

    The presence of 'app' is required for the entry point defined in
    pyproject.toml (`flashwords.cli:app`).
    """
    cli = importlib.import_module("flashwords.cli")
    assert hasattr(cli, "app"), "flashwords.cli must expose an 'app' Typer object."


def test_cli_lists_practice_command() -> None:
    """`flashwords --help` should advertise the practice loop."""
    cli = importlib.import_module("flashwords.cli")
    result = CliRunner().invoke(cli.app, ["--help"])
    assert result.exit_code == 0
    assert "practice" in result.output
