import os
from typing import Dict, Generator

import pytest
from sqlalchemy.orm import Session

from uigen.config import get_settings
from uigen.infrastructure.repositories.setup import Repositories, setup_repositories
from uigen.infrastructure.validation.allowlist import Allowlist


@pytest.fixture
def db() -> Generator[tuple[Session, Repositories], None, None]:
    """An in-memory SQLite database with all tables created."""
    session, repositories = setup_repositories("sqlite:///:memory:")
    try:
        yield session, repositories
    finally:
        session.close()
        session.get_bind().dispose()


@pytest.fixture
def db_session(db: tuple[Session, Repositories]) -> Session:
    return db[0]


@pytest.fixture
def repositories(db: tuple[Session, Repositories]) -> Repositories:
    return db[1]


@pytest.fixture(scope="session")
def allowlist() -> Allowlist:
    return Allowlist.load()


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Provide a clean environment for tests."""
    original_env: Dict[str, str] = dict(os.environ)

    for var in list(os.environ):
        if var.startswith(("LLM_", "QUEUE_", "ALLOWLIST_")) or var in (
            "DATABASE_URL",
            "LOG_LEVEL",
            "LOG_FILE",
            "PROMPT_TOKEN_BUDGET",
        ):
            del os.environ[var]
    get_settings.cache_clear()

    yield

    os.environ.clear()
    os.environ.update(original_env)
    get_settings.cache_clear()
