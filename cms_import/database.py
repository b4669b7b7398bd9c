from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Load .env file (DATABASE_URL lives there)
load_dotenv()

Base = declarative_base()

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Build an engine for the given URL.

    In-memory SQLite gets a single shared connection so every session sees
    the same database.
    """
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            future=True,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        future=True,
        echo=echo,  # set True if you want to see SQL in terminal
        pool_pre_ping=True,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        future=True,
    )


def get_engine() -> Engine:
    """Engine for the configured DATABASE_URL, created on first use."""
    global _engine
    if _engine is None:
        from cms_import.config import get_settings

        _engine = create_db_engine(get_settings().DATABASE_URL)
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = make_session_factory(get_engine())
    return _session_factory


def init_db(engine: Engine | None = None) -> None:
    """
    Import models and create tables if they don't exist.
    Alembic is the real migration tool, but this keeps local dev and tests sane.
    """
    from cms_import import models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())
