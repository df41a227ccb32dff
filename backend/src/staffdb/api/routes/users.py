"""
User endpoints.

Thin wrappers over the query catalog; each request gets its own session.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from staffdb.api.deps import get_db, get_queries
from staffdb.api.schemas import AveragePaymentResponse, UserAverageResponse, UserResponse
from staffdb.config import get_settings
from staffdb.domain.models import Birthday, BirthdayRangeFilter
from staffdb.services.catalog import UserQueries

router = APIRouter(prefix="/users", tags=["users"])

DbSession = Annotated[Session, Depends(get_db)]
Queries = Annotated[UserQueries, Depends(get_queries)]


@router.get("", response_model=list[UserResponse])
def list_users(
    session: DbSession,
    queries: Queries,
    first_name: Annotated[str | None, Query(description="Exact first name")] = None,
    company: Annotated[str | None, Query(description="Exact company name")] = None,
    born_after: Annotated[date | None, Query(description="Earliest birth date, inclusive")] = None,
    born_before: Annotated[date | None, Query(description="Latest birth date, inclusive")] = None,
) -> list[UserResponse]:
    """
    List users, optionally filtered.

    All given filters must hold at once; either birth date bound may be
    left out.
    """
    date_filter = BirthdayRangeFilter(
        begin=Birthday(born_after) if born_after else None,
        end=Birthday(born_before) if born_before else None,
    )
    users = queries.find_users_matching(
        session,
        first_name=first_name,
        company_name=company,
        date_filter=date_filter,
    )

    return [UserResponse.from_user(user) for user in users]


@router.get("/oldest", response_model=list[UserResponse])
def oldest_users(
    session: DbSession,
    queries: Queries,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[UserResponse]:
    """The oldest users first, at most ``limit`` of them."""
    if limit is None:
        limit = get_settings().default_top_limit
    users = queries.find_limited_users_ordered_by_birthday(session, limit)
    return [UserResponse.from_user(user) for user in users]


@router.get("/above-average", response_model=list[UserAverageResponse])
def users_above_average(session: DbSession, queries: Queries) -> list[UserAverageResponse]:
    """Users whose average payment exceeds the average over all payments."""
    return [
        UserAverageResponse(user=UserResponse.from_user(row.user), average_amount=row.average_amount)
        for row in queries.find_users_with_avg_payment_above_global_average(session)
    ]


@router.get("/average-payment", response_model=AveragePaymentResponse)
def average_payment(
    session: DbSession,
    queries: Queries,
    first_name: Annotated[str, Query(min_length=1)],
    last_name: Annotated[str, Query(min_length=1)],
) -> AveragePaymentResponse:
    """Average payment received by the user(s) with this name, 0 if none."""
    average = queries.find_average_payment_amount_by_first_and_last_names(session, first_name, last_name)
    return AveragePaymentResponse(first_name=first_name, last_name=last_name, average_amount=average)
