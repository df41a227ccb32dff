"""Shared fixtures: an in-memory database seeded with a small reference dataset."""

from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from staffdb.domain.models import Birthday, PersonalInfo
from staffdb.infrastructure.database import Company, Payment, User, init_db

# (username, firstname, lastname, birth date, company, payment amounts)
REFERENCE_USERS = [
    ("bill@gates.com", "Bill", "Gates", Birthday.of(1955, 10, 28), "Microsoft", [100, 300, 500]),
    ("steve@jobs.com", "Steve", "Jobs", Birthday.of(1955, 2, 24), "Apple", [250, 600, 500]),
    ("tim@cook.com", "Tim", "Cook", Birthday.of(1960, 11, 1), "Apple", [400, 300]),
    ("sergey@brin.com", "Sergey", "Brin", Birthday.of(1973, 8, 21), "Google", [500, 500, 500]),
    ("diane@greene.com", "Diane", "Greene", Birthday.of(1955, 1, 2), "Google", [300, 300, 300]),
]


def seed(session: Session) -> None:
    companies = {name: Company(name=name) for name in ("Microsoft", "Apple", "Google")}
    session.add_all(companies.values())

    for username, firstname, lastname, birthday, company, amounts in REFERENCE_USERS:
        user = User(
            username=username,
            personal_info=PersonalInfo(firstname, lastname, birthday),
            company=companies[company],
        )
        user.payments = [Payment(amount=amount) for amount in amounts]
        session.add(user)

    session.commit()


@pytest.fixture(scope="session")
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    with Session(engine) as session:
        seed(session)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    factory = sessionmaker(engine, expire_on_commit=False)
    with factory() as session:
        yield session
        session.rollback()
