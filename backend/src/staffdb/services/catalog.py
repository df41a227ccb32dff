"""
Read-only query catalog over companies, users and payments.

Every operation takes the SQLAlchemy Session to run on as its first
argument; the catalog keeps no state of its own and never commits,
rolls back or closes the session. Database errors propagate unchanged.

The first group of queries is written as textual SQL mapped back onto
the ORM entities, the second group with the select() expression builder.
"""

import logging

from sqlalchemy import Float, String, cast, func, select, text
from sqlalchemy.orm import Session, aliased

from staffdb.domain.models import (
    BirthdayRangeFilter,
    CompanyAverage,
    CompanyHeadcount,
    CompanyShare,
    UserAverage,
)
from staffdb.infrastructure.database import Company, Payment, User
from staffdb.infrastructure.predicates import PredicateBuilder

logger = logging.getLogger(__name__)


# Column lists for textual queries, in the same order as the .columns() mapping below
_USER_COLUMNS = "u.id, u.username, u.firstname, u.lastname, u.birth_date, u.company_id"
_PAYMENT_COLUMNS = "p.id, p.amount, p.receiver_id"


def _users_from_sql(sql: str):
    textual = text(sql).columns(
        User.id, User.username, User.firstname, User.lastname, User.birth_date, User.company_id
    )
    return select(User).from_statement(textual)


def _payments_from_sql(sql: str):
    textual = text(sql).columns(Payment.id, Payment.amount, Payment.receiver_id)
    return select(Payment).from_statement(textual)


class UserQueries:
    """Canned read queries. Stateless, safe to share between threads."""

    # =========================================================================
    # Textual SQL
    # =========================================================================

    def find_all(self, session: Session) -> list[User]:
        """All users."""
        stmt = _users_from_sql(f"SELECT {_USER_COLUMNS} FROM users u ORDER BY u.id")
        users = list(session.scalars(stmt))
        logger.debug(f"find_all returned {len(users)} user(s)")
        return users

    def find_all_by_first_name(self, session: Session, first_name: str) -> list[User]:
        """All users with exactly this first name."""
        stmt = _users_from_sql(
            f"SELECT {_USER_COLUMNS} FROM users u WHERE u.firstname = :first_name"
        )
        users = list(session.scalars(stmt, {"first_name": first_name}))
        logger.debug(f"find_all_by_first_name({first_name!r}) returned {len(users)} user(s)")
        return users

    def find_limited_users_ordered_by_birthday(self, session: Session, limit: int) -> list[User]:
        """
        The first ``limit`` users ordered by birth date, oldest first.

        Raises ValueError for a negative limit, which SQLite would treat as
        no limit at all.
        """
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        stmt = _users_from_sql(
            f"SELECT {_USER_COLUMNS} FROM users u ORDER BY u.birth_date ASC LIMIT :limit"
        )
        users = list(session.scalars(stmt, {"limit": limit}))
        logger.debug(f"find_limited_users_ordered_by_birthday({limit}) returned {len(users)} user(s)")
        return users

    def find_all_by_company_name(self, session: Session, company_name: str) -> list[User]:
        """All users employed by the company with this name."""
        stmt = _users_from_sql(
            f"SELECT {_USER_COLUMNS} FROM users u "
            "JOIN company c ON u.company_id = c.id "
            "WHERE c.name = :company_name"
        )
        users = list(session.scalars(stmt, {"company_name": company_name}))
        logger.debug(f"find_all_by_company_name({company_name!r}) returned {len(users)} user(s)")
        return users

    def find_all_payments_by_company_name(self, session: Session, company_name: str) -> list[Payment]:
        """
        All payments received by users of the company with this name,
        ordered by the receiver's username and then by amount.
        """
        stmt = _payments_from_sql(
            f"SELECT {_PAYMENT_COLUMNS} FROM payment p "
            "JOIN users u ON p.receiver_id = u.id "
            "JOIN company c ON u.company_id = c.id "
            "WHERE c.name = :company_name "
            "ORDER BY u.username ASC, p.amount ASC"
        )
        payments = list(session.scalars(stmt, {"company_name": company_name}))
        logger.debug(f"find_all_payments_by_company_name({company_name!r}) returned {len(payments)} payment(s)")
        return payments

    def find_average_payment_amount_by_first_and_last_names(
        self, session: Session, first_name: str, last_name: str
    ) -> float:
        """
        Average payment amount of the user(s) with this first and last name.

        Returns 0.0 when there are no matching payments.
        """
        average = session.execute(
            text(
                "SELECT AVG(p.amount) FROM payment p "
                "JOIN users u ON p.receiver_id = u.id "
                "WHERE u.firstname = :first_name AND u.lastname = :last_name"
            ),
            {"first_name": first_name, "last_name": last_name},
        ).scalar()
        result = 0.0 if average is None else float(average)
        logger.debug(f"Average payment for {first_name} {last_name}: {result}")
        return result

    def find_company_names_with_avg_user_payments_ordered_by_company_name(
        self, session: Session
    ) -> list[CompanyAverage]:
        """Average payment of each company's users, ordered by company name."""
        stmt = text(
            "SELECT c.name AS company_name, AVG(p.amount) AS average_amount "
            "FROM company c "
            "JOIN users u ON u.company_id = c.id "
            "JOIN payment p ON p.receiver_id = u.id "
            "GROUP BY c.name "
            "ORDER BY c.name ASC"
        ).columns(company_name=String, average_amount=Float)
        rows = [
            CompanyAverage(company_name=name, average_amount=float(average))
            for name, average in session.execute(stmt)
        ]
        logger.debug(f"Company averages: {len(rows)} row(s)")
        return rows

    # =========================================================================
    # Expression builder
    # =========================================================================

    def find_users_with_avg_payment_above_global_average(self, session: Session) -> list[UserAverage]:
        """
        Users whose average payment is strictly greater than the average of
        all payments, ordered by username.
        """
        all_payments = aliased(Payment)
        global_average = select(func.avg(all_payments.amount)).scalar_subquery()
        average_amount = func.avg(Payment.amount)

        stmt = (
            select(User, cast(average_amount, Float))
            .join(User.payments)
            .group_by(User.id)
            .having(average_amount > global_average)
            .order_by(User.username.asc())
        )
        rows = [UserAverage(user=user, average_amount=average) for user, average in session.execute(stmt)]
        logger.debug(f"Users above global average: {len(rows)}")
        return rows

    def find_users_by_company_name_with_avg_payments_at_least(
        self, session: Session, company_name: str, amount: float
    ) -> list[UserAverage]:
        """
        Users of the named company whose average payment is at least
        ``amount``, ordered by username.
        """
        average_amount = func.avg(Payment.amount)

        stmt = (
            select(User, cast(average_amount, Float))
            .join(User.company)
            .join(User.payments)
            .where(Company.name == company_name)
            .group_by(User.id)
            .having(average_amount >= amount)
            .order_by(User.username.asc())
        )
        rows = [UserAverage(user=user, average_amount=average) for user, average in session.execute(stmt)]
        logger.debug(f"Users of {company_name!r} with average >= {amount}: {len(rows)}")
        return rows

    def find_users_by_birthday_range(self, session: Session, date_filter: BirthdayRangeFilter) -> list[User]:
        """
        Users born within the inclusive range of ``date_filter``.

        A missing bound leaves that side open; with both missing every
        user matches.
        """
        predicate = (
            PredicateBuilder()
            .add(date_filter.begin, lambda begin: User.birth_date >= begin)
            .add(date_filter.end, lambda end: User.birth_date <= end)
            .build_and()
        )

        users = list(session.scalars(select(User).where(predicate)))
        logger.debug(f"Users born between {date_filter.begin} and {date_filter.end}: {len(users)}")
        return users

    def find_users_matching(
        self,
        session: Session,
        first_name: str | None = None,
        company_name: str | None = None,
        date_filter: BirthdayRangeFilter | None = None,
    ) -> list[User]:
        """
        Users satisfying every given filter, ordered by id.

        Filters left as None are ignored; with none given every user matches.
        """
        date_filter = date_filter or BirthdayRangeFilter()
        predicate = (
            PredicateBuilder()
            .add(first_name, lambda name: User.firstname == name)
            .add(company_name, lambda name: Company.name == name)
            .add(date_filter.begin, lambda begin: User.birth_date >= begin)
            .add(date_filter.end, lambda end: User.birth_date <= end)
            .build_and()
        )

        stmt = select(User)
        if company_name is not None:
            stmt = stmt.join(User.company)
        users = list(session.scalars(stmt.where(predicate).order_by(User.id)))
        logger.debug(
            f"Users matching first_name={first_name!r} company={company_name!r} "
            f"born {date_filter.begin}..{date_filter.end}: {len(users)}"
        )
        return users

    def find_avg_payment_by_each_company_ordered_by_company_name_desc(
        self, session: Session
    ) -> list[CompanyAverage]:
        """Average payment of each company's users, company names descending."""
        stmt = (
            select(Company.name, cast(func.avg(Payment.amount), Float))
            .join(Company.users)
            .join(User.payments)
            .group_by(Company.id, Company.name)
            .order_by(Company.name.desc())
        )
        return [
            CompanyAverage(company_name=name, average_amount=average)
            for name, average in session.execute(stmt)
        ]

    def find_user_count_by_each_company(self, session: Session) -> list[CompanyHeadcount]:
        """Number of users per company, largest first, ties by company name."""
        user_count = func.count(User.id)

        stmt = (
            select(Company.name, user_count)
            .join(Company.users)
            .group_by(Company.id, Company.name)
            .order_by(user_count.desc(), Company.name.asc())
        )
        return [
            CompanyHeadcount(company_name=name, user_count=count)
            for name, count in session.execute(stmt)
        ]

    def find_companies_and_employee_count_ratio(self, session: Session) -> list[CompanyShare]:
        """
        Each company's share of all users, ordered by company name.

        The total is counted over every user, including those without a
        company, so the ratios only sum to 1 when everyone is employed.
        """
        all_users = aliased(User)
        total_users = select(func.count(all_users.id)).scalar_subquery()

        stmt = (
            select(Company.name, cast(func.count(User.id), Float) / total_users)
            .join(Company.users)
            .group_by(Company.id, Company.name)
            .order_by(Company.name.asc())
        )
        return [CompanyShare(company_name=name, ratio=ratio) for name, ratio in session.execute(stmt)]


# Default instance; holds no state, the session is always passed in
user_queries = UserQueries()
