from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from uigen.infrastructure.entities import EntityBase


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for a PostgreSQL or SQLite URL.

    In-memory SQLite shares one connection so every session sees the same
    database. File SQLite waits up to 30 s for a write lock.
    """
    if database_url.startswith("sqlite"):
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            return create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
    """Create all tables that don't exist yet."""
    EntityBase.metadata.create_all(engine)
