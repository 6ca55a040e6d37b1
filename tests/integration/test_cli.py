"""Integration tests for the mantras CLI."""

import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from mantras import __version__
from mantras.cli.main import app


@pytest.fixture
def runner():
    """Provide a CLI runner and restore logging afterwards."""
    yield CliRunner()

    # The CLI binds loguru to the runner's captured stderr
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")


@pytest.mark.integration
class TestCLI:
    """Tests for CLI commands."""

    def test_version(self, runner: CliRunner) -> None:
        """Test --version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_plan(self, runner: CliRunner) -> None:
        """Test plan renders the task chain."""
        result = runner.invoke(app, ["plan", "调试JavaScript性能问题"])

        assert result.exit_code == 0
        assert "问题分析" in result.output
        assert "测试验证" in result.output
        assert "Start: 问题分析" in result.output

    def test_plan_json(self, runner: CliRunner) -> None:
        """Test plan --json prints the raw result."""
        result = runner.invoke(app, ["plan", "实现用户认证系统", "--json"])

        assert result.exit_code == 0
        assert '"template": "implementation"' in result.output
        assert '"next_actions"' in result.output

    def test_plan_without_decomposition(self, runner: CliRunner) -> None:
        """Test --no-decompose yields a single task."""
        result = runner.invoke(app, ["plan", "Rotate keys", "--no-decompose", "--json"])

        assert result.exit_code == 0
        assert '"user-request"' in result.output
        assert "任务分析" not in result.output

    def test_plan_blank_request(self, runner: CliRunner) -> None:
        """Test a blank request exits with an error."""
        result = runner.invoke(app, ["plan", "   "])

        assert result.exit_code == 1

    def test_decompose(self, runner: CliRunner) -> None:
        """Test decompose previews the generic breakdown."""
        result = runner.invoke(app, ["decompose", "Write quarterly report"])

        assert result.exit_code == 0
        assert "generic" in result.output
        assert "执行实施" in result.output
