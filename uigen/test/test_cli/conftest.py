"""
Pytest configuration for CLI tests.
"""

from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from uigen.config import Settings


@pytest.fixture
def cli_settings(tmp_path: Path, clean_env) -> Generator[Settings, None, None]:
    """Settings pointing at a throwaway database and the mock backend."""
    settings = Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'cli.db'}",
        LLM_PROVIDER="mock",
        QUEUE_IDLE_INTERVAL_SECONDS=0.0,
        QUEUE_ERROR_BACKOFF_SECONDS=0.0,
    )
    with patch("uigen.cli.main.get_settings", return_value=settings), patch(
        "uigen.cli.main.configure_logging"
    ):
        yield settings


@pytest.fixture
def test_env_file(tmp_path: Path) -> Path:
    """Create a test environment file."""
    env_file = tmp_path / ".env"
    env_content = """
LOG_LEVEL=INFO
DATABASE_URL=sqlite:///test.db
LLM_PROVIDER=vllm
LLM_API_KEY=sk-1234567890abcdef
ALLOWLIST_MODE=strip
"""
    env_file.write_text(env_content.strip())
    return env_file
