"""Unit tests for the main CLI application."""

import logging

from shadowvault import __version__
from shadowvault.cli.main import app, configure_logging
from typer.testing import CliRunner

runner = CliRunner()


class TestMainApp:
    """Tests for global options and command registration."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"shadowvault version {__version__}" in result.stdout

    def test_help_lists_commands(self) -> None:
        """The top-level help lists every command group."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("file", "dir", "backups", "history", "config"):
            assert command in result.stdout

    def test_no_args_shows_help(self) -> None:
        """Running without arguments prints usage."""
        result = runner.invoke(app, [])

        assert "Usage" in result.output


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_verbose_sets_debug(self) -> None:
        """Verbose mode logs at DEBUG."""
        configure_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_default_sets_warning(self) -> None:
        """Default mode logs at WARNING."""
        configure_logging(verbose=False)
        assert logging.getLogger().level == logging.WARNING
