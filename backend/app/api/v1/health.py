"""
Health endpoint: reports whether the database is reachable.
"""

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.schemas.account import ErrorResponse
from app.services.health_service import HealthService

router = APIRouter()


@router.get(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={503: {"model": ErrorResponse}},
)
def health(db: Session = Depends(get_db)):
    """Health check endpoint: 204 if the database answers, 503 otherwise."""
    if HealthService(db).check_database_connection():
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ErrorResponse(
            error="Database Unavailable",
            message="Database is currently unavailable. Please try again later.",
        ).model_dump(),
    )
