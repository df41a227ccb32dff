"""
Company endpoints.

Aggregates per company plus the users and payments of a single company.
Unknown company names produce empty lists rather than 404s.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from staffdb.api.deps import get_db, get_queries
from staffdb.api.schemas import (
    CompanyAverageResponse,
    CompanyHeadcountResponse,
    CompanyShareResponse,
    PaymentResponse,
    SortOrderEnum,
    UserAverageResponse,
    UserResponse,
)
from staffdb.services.catalog import UserQueries

router = APIRouter(prefix="/companies", tags=["companies"])

DbSession = Annotated[Session, Depends(get_db)]
Queries = Annotated[UserQueries, Depends(get_queries)]


@router.get("/average-payments", response_model=list[CompanyAverageResponse])
def average_payments(
    session: DbSession,
    queries: Queries,
    order: SortOrderEnum = SortOrderEnum.ASC,
) -> list[CompanyAverageResponse]:
    """Average payment of each company's users, ordered by company name."""
    if order == SortOrderEnum.DESC:
        rows = queries.find_avg_payment_by_each_company_ordered_by_company_name_desc(session)
    else:
        rows = queries.find_company_names_with_avg_user_payments_ordered_by_company_name(session)
    return [CompanyAverageResponse.model_validate(row) for row in rows]


@router.get("/headcount", response_model=list[CompanyHeadcountResponse])
def headcount(session: DbSession, queries: Queries) -> list[CompanyHeadcountResponse]:
    """Number of users per company, largest first."""
    return [
        CompanyHeadcountResponse.model_validate(row)
        for row in queries.find_user_count_by_each_company(session)
    ]


@router.get("/headcount-ratio", response_model=list[CompanyShareResponse])
def headcount_ratio(session: DbSession, queries: Queries) -> list[CompanyShareResponse]:
    """Each company's share of all users."""
    return [
        CompanyShareResponse.model_validate(row)
        for row in queries.find_companies_and_employee_count_ratio(session)
    ]


@router.get("/{name}/users", response_model=list[UserResponse])
def company_users(name: str, session: DbSession, queries: Queries) -> list[UserResponse]:
    """All users of the company."""
    return [UserResponse.from_user(user) for user in queries.find_all_by_company_name(session, name)]


@router.get("/{name}/payments", response_model=list[PaymentResponse])
def company_payments(name: str, session: DbSession, queries: Queries) -> list[PaymentResponse]:
    """Payments to the company's users, by username then amount."""
    return [
        PaymentResponse.model_validate(payment)
        for payment in queries.find_all_payments_by_company_name(session, name)
    ]


@router.get("/{name}/users/average-at-least", response_model=list[UserAverageResponse])
def company_users_with_average_at_least(
    name: str,
    session: DbSession,
    queries: Queries,
    amount: Annotated[float, Query(ge=0)],
) -> list[UserAverageResponse]:
    """Users of the company whose average payment is at least ``amount``."""
    return [
        UserAverageResponse(user=UserResponse.from_user(row.user), average_amount=row.average_amount)
        for row in queries.find_users_by_company_name_with_avg_payments_at_least(session, name, amount)
    ]
