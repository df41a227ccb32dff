"""Tests for staffdb.services.catalog against the reference dataset."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from staffdb.domain.models import Birthday, BirthdayRangeFilter, PersonalInfo
from staffdb.infrastructure.database import User
from staffdb.services.catalog import UserQueries

queries = UserQueries()


def full_names(users: list[User]) -> list[str]:
    return [user.full_name() for user in users]


class TestTextualQueries:
    """Tests for the queries written as textual SQL."""

    def test_find_all(self, session: Session) -> None:
        users = queries.find_all(session)
        assert sorted(full_names(users)) == sorted(
            ["Bill Gates", "Steve Jobs", "Sergey Brin", "Tim Cook", "Diane Greene"]
        )

    def test_find_all_maps_embedded_personal_info(self, session: Session) -> None:
        """Should load textual rows into full entities, composite included."""
        bill = next(user for user in queries.find_all(session) if user.username == "bill@gates.com")
        assert bill.personal_info == PersonalInfo("Bill", "Gates", Birthday.of(1955, 10, 28))
        assert isinstance(bill.birth_date, Birthday)
        assert bill.company.name == "Microsoft"

    def test_find_all_by_first_name(self, session: Session) -> None:
        users = queries.find_all_by_first_name(session, "Bill")
        assert full_names(users) == ["Bill Gates"]

    def test_find_all_by_unknown_first_name(self, session: Session) -> None:
        assert queries.find_all_by_first_name(session, "Nobody") == []

    def test_find_limited_users_ordered_by_birthday(self, session: Session) -> None:
        """Should return the oldest users first."""
        users = queries.find_limited_users_ordered_by_birthday(session, 3)
        assert full_names(users) == ["Diane Greene", "Steve Jobs", "Bill Gates"]

    @pytest.mark.parametrize("limit", [1, 5, 10])
    def test_limited_users_length_and_order(self, session: Session, limit: int) -> None:
        users = queries.find_limited_users_ordered_by_birthday(session, limit)
        assert len(users) == min(limit, 5)
        birthdays = [user.birth_date for user in users]
        assert birthdays == sorted(birthdays)

    def test_limited_users_rejects_negative_limit(self, session: Session) -> None:
        """Should refuse a negative limit instead of returning everyone."""
        with pytest.raises(ValueError):
            queries.find_limited_users_ordered_by_birthday(session, -1)

    def test_limited_users_zero_limit_is_empty(self, session: Session) -> None:
        assert queries.find_limited_users_ordered_by_birthday(session, 0) == []

    def test_find_all_by_company_name(self, session: Session) -> None:
        users = queries.find_all_by_company_name(session, "Google")
        assert sorted(full_names(users)) == ["Diane Greene", "Sergey Brin"]

    def test_find_all_payments_by_company_name(self, session: Session) -> None:
        """Should order by receiver username, then by amount."""
        payments = queries.find_all_payments_by_company_name(session, "Apple")
        assert [payment.amount for payment in payments] == [250, 500, 600, 300, 400]
        assert [payment.receiver.username for payment in payments] == ["steve@jobs.com"] * 3 + ["tim@cook.com"] * 2

    def test_find_average_payment_amount_by_first_and_last_names(self, session: Session) -> None:
        average = queries.find_average_payment_amount_by_first_and_last_names(session, "Bill", "Gates")
        assert average == 300.0

    def test_average_payment_without_payments_is_zero(self, session: Session) -> None:
        """Should return 0.0 rather than None when nothing matches."""
        average = queries.find_average_payment_amount_by_first_and_last_names(session, "Bill", "Brin")
        assert average == 0.0
        assert isinstance(average, float)

    def test_find_company_names_with_avg_user_payments(self, session: Session) -> None:
        rows = queries.find_company_names_with_avg_user_payments_ordered_by_company_name(session)
        assert [(row.company_name, row.average_amount) for row in rows] == [
            ("Apple", 410.0),
            ("Google", 400.0),
            ("Microsoft", 300.0),
        ]


class TestBuilderQueries:
    """Tests for the queries built with select()."""

    def test_users_above_global_average(self, session: Session) -> None:
        """Should keep only users strictly above the average of all payments."""
        rows = queries.find_users_with_avg_payment_above_global_average(session)
        assert [(row.user.full_name(), row.average_amount) for row in rows] == [
            ("Sergey Brin", 500.0),
            ("Steve Jobs", 450.0),
        ]

    def test_users_above_global_average_excludes_others(self, session: Session) -> None:
        global_average = (100 + 300 + 500 + 250 + 600 + 500 + 400 + 300 + 500 * 3 + 300 * 3) / 14
        rows = queries.find_users_with_avg_payment_above_global_average(session)
        assert all(row.average_amount > global_average for row in rows)
        assert "Tim Cook" not in [row.user.full_name() for row in rows]

    def test_users_by_company_with_average_at_least(self, session: Session) -> None:
        rows = queries.find_users_by_company_name_with_avg_payments_at_least(session, "Google", 300)
        assert [(row.user.full_name(), row.average_amount) for row in rows] == [
            ("Diane Greene", 300.0),
            ("Sergey Brin", 500.0),
        ]

    def test_users_by_company_with_average_at_least_is_inclusive(self, session: Session) -> None:
        rows = queries.find_users_by_company_name_with_avg_payments_at_least(session, "Apple", 450)
        assert [row.user.full_name() for row in rows] == ["Steve Jobs"]

    def test_users_by_birthday_range(self, session: Session) -> None:
        """Should include both bounds of the range."""
        date_filter = BirthdayRangeFilter(begin=Birthday.of(1955, 1, 1), end=Birthday.of(1955, 2, 24))
        users = queries.find_users_by_birthday_range(session, date_filter)
        assert sorted(full_names(users)) == ["Diane Greene", "Steve Jobs"]

    def test_users_by_birthday_range_open_end(self, session: Session) -> None:
        users = queries.find_users_by_birthday_range(session, BirthdayRangeFilter(begin=Birthday.of(1960, 1, 1)))
        assert sorted(full_names(users)) == ["Sergey Brin", "Tim Cook"]

    def test_users_by_birthday_range_open_begin(self, session: Session) -> None:
        users = queries.find_users_by_birthday_range(session, BirthdayRangeFilter(end=Birthday.of(1955, 1, 2)))
        assert full_names(users) == ["Diane Greene"]

    def test_users_by_birthday_range_without_bounds_matches_everyone(self, session: Session) -> None:
        assert len(queries.find_users_by_birthday_range(session, BirthdayRangeFilter())) == 5

    def test_users_by_inverted_birthday_range_matches_nobody(self, session: Session) -> None:
        date_filter = BirthdayRangeFilter(begin=Birthday.of(1960, 1, 1), end=Birthday.of(1955, 1, 1))
        assert queries.find_users_by_birthday_range(session, date_filter) == []

    def test_users_matching_combines_filters(self, session: Session) -> None:
        """Should require every given filter to hold."""
        assert queries.find_users_matching(session, first_name="Steve", company_name="Google") == []
        users = queries.find_users_matching(session, first_name="Steve", company_name="Apple")
        assert full_names(users) == ["Steve Jobs"]

    def test_users_matching_company_and_birthday_range(self, session: Session) -> None:
        date_filter = BirthdayRangeFilter(end=Birthday.of(1960, 1, 1))
        users = queries.find_users_matching(session, company_name="Google", date_filter=date_filter)
        assert full_names(users) == ["Diane Greene"]

    def test_users_matching_without_filters_matches_everyone(self, session: Session) -> None:
        assert len(queries.find_users_matching(session)) == 5

    def test_avg_payment_by_each_company_desc(self, session: Session) -> None:
        rows = queries.find_avg_payment_by_each_company_ordered_by_company_name_desc(session)
        assert [row.company_name for row in rows] == ["Microsoft", "Google", "Apple"]
        assert [row.average_amount for row in rows] == [300.0, 400.0, 410.0]

    def test_user_count_by_each_company(self, session: Session) -> None:
        """Should order by count descending, ties by name ascending."""
        rows = queries.find_user_count_by_each_company(session)
        assert [(row.company_name, row.user_count) for row in rows] == [
            ("Apple", 2),
            ("Google", 2),
            ("Microsoft", 1),
        ]

    def test_companies_and_employee_count_ratio(self, session: Session) -> None:
        rows = queries.find_companies_and_employee_count_ratio(session)
        assert [row.company_name for row in rows] == ["Apple", "Google", "Microsoft"]
        assert [row.ratio for row in rows] == pytest.approx([0.4, 0.4, 0.2])
        assert sum(row.ratio for row in rows) == pytest.approx(1.0)


    def test_employee_count_ratio_counts_users_without_company(self, session: Session) -> None:
        """Should divide by all users, so ratios sum below 1 when someone is unemployed."""
        linus = User(
            username="linus@example.com",
            personal_info=PersonalInfo("Linus", "Torvalds", Birthday.of(1969, 12, 28)),
        )
        session.add(linus)
        session.flush()

        rows = queries.find_companies_and_employee_count_ratio(session)
        assert [row.ratio for row in rows] == pytest.approx([2 / 6, 2 / 6, 1 / 6])
        assert sum(row.ratio for row in rows) == pytest.approx(5 / 6)


class TestStorageFailures:
    """Database errors reach the caller unchanged."""

    def test_missing_schema_raises(self) -> None:
        engine = create_engine("sqlite://")
        with Session(engine) as session:
            with pytest.raises(OperationalError):
                queries.find_all(session)
            session.rollback()
            with pytest.raises(OperationalError):
                queries.find_user_count_by_each_company(session)
        engine.dispose()
