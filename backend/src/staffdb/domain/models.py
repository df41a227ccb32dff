"""
Domain models for companies, their users and payments.

These are the value objects that cross the boundary between the query
catalog and its callers. Entities with identity (Company, User, Payment)
live in the persistence layer; everything here is immutable.

Design Decisions:
- Using frozen dataclasses for immutable, typed value objects
- Birthday wraps a date so it can carry age logic and a dedicated column type
- Result records are plain dataclasses instead of anonymous result rows
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from staffdb.infrastructure.database import User


@dataclass(frozen=True, order=True)
class Birthday:
    """
    A person's date of birth.

    Ordered by date, so ranges and sorting work the same way in Python
    as they do in SQL.
    """
    birth_date: date

    def __post_init__(self) -> None:
        """Reject anything that is not a plain calendar date."""
        if not isinstance(self.birth_date, date) or isinstance(self.birth_date, datetime):
            raise TypeError(f"Birthday requires a date, got {type(self.birth_date).__name__}")

    @classmethod
    def of(cls, year: int, month: int, day: int) -> Birthday:
        return cls(date(year, month, day))

    def age_on(self, day: date) -> int:
        """Number of complete years between the birth date and ``day``."""
        years = day.year - self.birth_date.year
        if (day.month, day.day) < (self.birth_date.month, self.birth_date.day):
            years -= 1
        return years

    @property
    def age(self) -> int:
        """Age in complete years as of today."""
        return self.age_on(date.today())

    def __str__(self) -> str:
        return self.birth_date.isoformat()


@dataclass(frozen=True)
class PersonalInfo:
    """
    Name and birth date of a user.

    Stored inline in the users table (firstname, lastname, birth_date
    columns) and exposed on User as a composite attribute.
    """
    firstname: str
    lastname: str
    birth_date: Birthday

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}"


@dataclass(frozen=True)
class BirthdayRangeFilter:
    """
    Inclusive birth date range.

    Either bound may be None, in which case that side of the range is open.
    No check is made that begin <= end; an inverted range matches nobody.
    """
    begin: Birthday | None = None
    end: Birthday | None = None


# =============================================================================
# Query results
# =============================================================================

@dataclass(frozen=True)
class CompanyAverage:
    """Average payment amount across all users of a company."""
    company_name: str
    average_amount: float


@dataclass(frozen=True)
class UserAverage:
    """A user together with the average amount of their payments."""
    user: User
    average_amount: float


@dataclass(frozen=True)
class CompanyHeadcount:
    """Number of users employed by a company."""
    company_name: str
    user_count: int


@dataclass(frozen=True)
class CompanyShare:
    """Fraction of all users that belong to a company (0-1)."""
    company_name: str
    ratio: float
