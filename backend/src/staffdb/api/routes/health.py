"""
Health check endpoint.

Provides system health status for monitoring and load balancers.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from staffdb import __version__
from staffdb.api.deps import get_db
from staffdb.api.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(session: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """
    Check system health.
    
    Runs a trivial query so the response reflects whether the
    database is actually reachable.
    """
    try:
        session.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = "unavailable"
    
    return HealthResponse(
        status="healthy" if database == "connected" else "degraded",
        version=__version__,
        database=database,
    )
