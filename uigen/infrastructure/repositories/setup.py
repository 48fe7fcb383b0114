"""
Helper module for setting up repositories with minimal configuration.
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from uigen.infrastructure.db.engine import create_db_engine, init_db
from uigen.infrastructure.db.session import make_session_factory
from uigen.infrastructure.repositories.job_repository import JobRepository
from uigen.infrastructure.repositories.log_repository import LogRepository
from uigen.infrastructure.repositories.prompt_source_repository import (
    LLMConfigRepository,
    PromptSourceRepository,
)


@dataclass
class Repositories:
    job_repo: JobRepository
    log_repo: LogRepository
    prompt_source: PromptSourceRepository
    llm_config_source: LLMConfigRepository


def build_repositories(session: Session) -> Repositories:
    return Repositories(
        job_repo=JobRepository(session),
        log_repo=LogRepository(session),
        prompt_source=PromptSourceRepository(session),
        llm_config_source=LLMConfigRepository(session),
    )


def setup_repositories(
    db_url: str = "sqlite:///:memory:",
) -> tuple[Session, Repositories]:
    """
    Set up repositories, creating any missing tables.

    Args:
        db_url: Database URL. Defaults to in-memory SQLite.

    Returns:
        Tuple of (Session, Repositories)
    """
    engine = create_db_engine(db_url)
    init_db(engine)
    session = make_session_factory(engine)()
    return session, build_repositories(session)
