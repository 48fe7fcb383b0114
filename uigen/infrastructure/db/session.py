from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session as SQLAlchemySession
from sqlalchemy.orm import sessionmaker


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine)


def get_session(engine: Engine) -> SQLAlchemySession:
    """Get a new database session."""
    return make_session_factory(engine)()
