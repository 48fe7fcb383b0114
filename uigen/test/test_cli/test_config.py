"""
Tests for configuration management commands.
"""

from pathlib import Path

from click.testing import CliRunner

from uigen.cli.config_cmd import config, mask_secret


def test_mask_secret() -> None:
    assert mask_secret("short") == "short"
    assert mask_secret("sk-1234567890abcdef") == "sk-1234567...cdef"


def test_config_set(tmp_path: Path) -> None:
    """Test config set command."""
    runner = CliRunner()
    env_file = tmp_path / ".env"

    result = runner.invoke(config, ["set", "LOG_LEVEL", "DEBUG", "--env-file", str(env_file)])
    assert result.exit_code == 0
    assert "Successfully set LOG_LEVEL" in result.output
    assert "LOG_LEVEL='DEBUG'" in env_file.read_text()

    result = runner.invoke(config, ["set", "INVALID_KEY", "value", "--env-file", str(env_file)])
    assert "Invalid configuration key" in result.output

    result = runner.invoke(config, ["set", "LOG_LEVEL", "INVALID", "--env-file", str(env_file)])
    assert "Invalid value for LOG_LEVEL" in result.output

    result = runner.invoke(config, ["set", "ALLOWLIST_MODE", "warn", "--env-file", str(env_file)])
    assert "Invalid value for ALLOWLIST_MODE" in result.output

    result = runner.invoke(config, ["set", "LOG_LEVEL", "--env-file", str(env_file)])
    assert "Usage: uigen config set KEY VALUE" in result.output


def test_config_get(test_env_file: Path) -> None:
    """Test config get command."""
    runner = CliRunner()

    result = runner.invoke(config, ["get", "--env-file", str(test_env_file)])
    assert result.exit_code == 0
    assert "LOG_LEVEL=INFO" in result.output
    assert "DATABASE_URL=sqlite:///test.db" in result.output
    assert "LLM_API_KEY=sk-1234567...cdef" in result.output

    result = runner.invoke(config, ["get", "LLM_PROVIDER", "--env-file", str(test_env_file)])
    assert "LLM_PROVIDER=vllm" in result.output

    result = runner.invoke(config, ["get", "NONEXISTENT", "--env-file", str(test_env_file)])
    assert "Key not found" in result.output


def test_config_get_missing_file(tmp_path: Path) -> None:
    result = CliRunner().invoke(config, ["get", "--env-file", str(tmp_path / "none.env")])
    assert "❌ Environment file not found" in result.output


def test_config_check_valid(test_env_file: Path) -> None:
    result = CliRunner().invoke(config, ["check", "--env-file", str(test_env_file)])
    assert result.exit_code == 0
    assert "✅ LLM_PROVIDER: Known LLM provider" in result.output
    assert "✅ Configuration is valid" in result.output


def test_config_check_errors(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("DATABASE_URL=mysql://db/uigen\nLLM_PROVIDER=gpt-neo\nFOO=bar\n")

    result = CliRunner().invoke(config, ["check", "--env-file", str(env_file)])

    assert "⚠️  Unknown configuration key: FOO" in result.output
    assert "❌ DATABASE_URL: Invalid database scheme" in result.output
    assert "❌ LLM_PROVIDER: Unknown LLM provider 'gpt-neo'" in result.output
    assert "❌ Configuration has errors" in result.output
