"""
Pydantic schemas for API responses.

These schemas define the contract between clients and the backend.
ORM entities are converted with from_attributes, never returned directly.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict


class SortOrderEnum(str, Enum):
    """Sort direction for ordered listings."""
    ASC = "asc"
    DESC = "desc"


# =============================================================================
# Response Schemas
# =============================================================================

class UserResponse(BaseModel):
    """A user with their embedded personal info flattened."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    firstname: str | None = None
    lastname: str | None = None
    birth_date: date | None = None
    age: int | None = None
    company: str | None = None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        birthday = user.birth_date
        return cls(
            id=user.id,
            username=user.username,
            firstname=user.firstname,
            lastname=user.lastname,
            birth_date=birthday.birth_date if birthday else None,
            age=birthday.age if birthday else None,
            company=user.company.name if user.company else None,
        )


class PaymentResponse(BaseModel):
    """A payment and who received it."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: int
    receiver_id: int


class UserAverageResponse(BaseModel):
    """A user with the average amount of their payments."""
    user: UserResponse
    average_amount: float


class AveragePaymentResponse(BaseModel):
    """Average payment for a first and last name."""
    first_name: str
    last_name: str
    average_amount: float


class CompanyAverageResponse(BaseModel):
    """Average payment across a company's users."""
    model_config = ConfigDict(from_attributes=True)

    company_name: str
    average_amount: float


class CompanyHeadcountResponse(BaseModel):
    """Number of users in a company."""
    model_config = ConfigDict(from_attributes=True)

    company_name: str
    user_count: int


class CompanyShareResponse(BaseModel):
    """Company's share of all users."""
    model_config = ConfigDict(from_attributes=True)

    company_name: str
    ratio: float


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    database: str = "connected"


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: str | None = None
