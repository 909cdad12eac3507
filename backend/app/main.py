"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from pydantic_settings import BaseSettings
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import account, health
from app.db.database import SessionLocal
from app.db.init_db import AdminSettings, init_db

logger = logging.getLogger(__name__)


class AppSettings(BaseSettings):
    """Process-level settings."""

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logging.basicConfig(
        level=AppSettings().log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    db = SessionLocal()
    try:
        init_db(db, AdminSettings())
    except Exception:
        logger.exception("[INIT] Database initialisation failed")
    finally:
        db.close()
    yield


app = FastAPI(
    title="Accounts API",
    description="User accounts with role-based access",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI at /docs
    redoc_url="/redoc",  # ReDoc at /redoc
    openapi_url="/openapi.json",  # OpenAPI JSON schema
    lifespan=lifespan,
)


def custom_openapi():
    """Custom OpenAPI schema with security schemes."""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "Bearer": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Enter your JWT token. Get it from /api/v1/account/login endpoint.",
        }
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    """Authentication and role failures are answered as problem details."""
    if exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        title = "Unauthorized" if exc.status_code == 401 else "Forbidden"
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "type": f"https://httpstatuses.io/{exc.status_code}",
                "title": title,
                "status": exc.status_code,
                "detail": exc.detail,
                "instance": request.url.path,
            },
            media_type="application/problem+json",
            headers=getattr(exc, "headers", None),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Malformed requests are plain bad requests."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


app.include_router(account.router, prefix="/api/v1/account", tags=["account"])
app.include_router(health.router, prefix="/health", tags=["health"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Accounts API"}
