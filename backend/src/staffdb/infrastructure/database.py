"""
Database mapping and session management with SQLAlchemy.

Design Decisions:
- Synchronous Session: every catalog query is a single blocking round trip
- PersonalInfo is a composite over plain columns of the users table
- Birthday is stored as a SQL DATE through a TypeDecorator
- Session-per-call pattern, the caller owns the session
"""

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from sqlalchemy import Date, ForeignKey, Integer, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    composite,
    mapped_column,
    relationship,
    sessionmaker,
)
from sqlalchemy.types import TypeDecorator

from staffdb.config import get_settings
from staffdb.domain.models import Birthday, PersonalInfo

logger = logging.getLogger(__name__)


class BirthdayType(TypeDecorator):
    """Persists a Birthday as a DATE column."""

    impl = Date
    cache_ok = True

    def process_bind_param(self, value: Birthday | date | None, dialect) -> date | None:
        if value is None:
            return None
        if isinstance(value, Birthday):
            return value.birth_date
        return value

    def process_result_value(self, value: date | None, dialect) -> Birthday | None:
        if value is None:
            return None
        return Birthday(value)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class Company(Base):
    """An organization employing zero or more users."""
    __tablename__ = "company"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), unique=True)

    users: Mapped[list["User"]] = relationship(back_populates="company")

    def __repr__(self) -> str:
        return f"Company(id={self.id!r}, name={self.name!r})"


class User(Base):
    """
    A person, optionally employed by a company, receiving payments.

    The personal_info composite is backed by the firstname, lastname and
    birth_date columns, which stay individually queryable.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(128), unique=True)

    # Embedded personal info
    firstname: Mapped[str | None] = mapped_column(String(128))
    lastname: Mapped[str | None] = mapped_column(String(128))
    birth_date: Mapped[Birthday | None] = mapped_column(BirthdayType, index=True)
    personal_info: Mapped[PersonalInfo] = composite(PersonalInfo, "firstname", "lastname", "birth_date")

    company_id: Mapped[int | None] = mapped_column(ForeignKey("company.id"))
    company: Mapped[Company | None] = relationship(back_populates="users")

    payments: Mapped[list["Payment"]] = relationship(back_populates="receiver")

    def full_name(self) -> str:
        return self.personal_info.full_name

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r})"


class Payment(Base):
    """A single payment received by a user."""
    __tablename__ = "payment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    amount: Mapped[int] = mapped_column(Integer)

    receiver_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    receiver: Mapped[User] = relationship(back_populates="payments")

    def __repr__(self) -> str:
        return f"Payment(id={self.id!r}, amount={self.amount!r}, receiver_id={self.receiver_id!r})"


# Engine and session factory (initialized lazily)
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(
            settings.database_url,
            echo=settings.echo_sql,
        )
        logger.info(f"Database engine created for {_engine.url.get_backend_name()}")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get the session factory for creating database sessions."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


@contextmanager
def get_session() -> Iterator[Session]:
    """
    Get a database session for one unit of work.

    Usage:
        with get_session() as session:
            users = user_queries.find_all(session)
    """
    factory = get_session_factory()
    session = factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """
    Initialize database tables.

    Call this on application startup to ensure tables exist.
    """
    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database tables initialized")


def close_db() -> None:
    """Close database connections on shutdown."""
    global _engine, _session_factory
    if _engine:
        _engine.dispose()
        _engine = None
        _session_factory = None
    logger.info("Database connections closed")
