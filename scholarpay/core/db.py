"""DB models, engine and session helpers for ScholarPay."""

from collections.abc import Iterator
from functools import lru_cache

from sqlalchemy import Column, Float, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

Base = declarative_base()


class ApplicationRecord(Base):
    """A scholarship application row; column names match the wire format."""

    __tablename__ = "applications"
    id = Column(String, primary_key=True)
    student_name = Column(String, nullable=False)
    student_email = Column(String, nullable=False, index=True)
    student_id = Column(String, nullable=False, default="N/A")
    scholarship_name = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    status = Column(String, nullable=False, default="pending")
    applied_date = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False)
    requirements = Column(Text, nullable=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)


class PayeeTaskRecord(Base):
    """A payee registration attempt and its outcome."""

    __tablename__ = "payee_tasks"
    id = Column(String, primary_key=True)
    application_id = Column(String, nullable=True, index=True)
    email = Column(String, nullable=False)
    name = Column(String, nullable=False)
    status = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
    completed_at = Column(String, nullable=True)
    error = Column(Text, nullable=True)


class ProviderTokenRecord(Base):
    """An OAuth access token for the payment provider."""

    __tablename__ = "provider_tokens"
    id = Column(String, primary_key=True)
    access_token = Column(Text, nullable=False)
    expires_at = Column(String, nullable=False)
    created_at = Column(String, nullable=False)


def build_engine(url: str) -> Engine:
    """Create a SQLAlchemy engine; SQLite connections may be shared across worker threads."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


@lru_cache
def get_engine() -> Engine:
    """Create a SQLAlchemy engine using the configured database URL."""
    from scholarpay.core.settings import get_settings

    return build_engine(get_settings().database_url)


def get_session_factory() -> sessionmaker:
    """Return the session factory bound to the configured engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def init_db(engine: Engine) -> None:
    """Create all tables if they do not exist."""
    Base.metadata.create_all(engine)


def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Yield a session from the factory and close it afterwards."""
    session = factory()
    try:
        yield session
    finally:
        session.close()
