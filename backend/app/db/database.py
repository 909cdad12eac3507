"""
Database engine, session factory and declarative base.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from pydantic_settings import BaseSettings


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    database_url: str = "sqlite:///./accounts.db"
    database_echo: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"


database_settings = DatabaseSettings()


def build_engine(database_url: str, echo: bool = False):
    """Create an engine, relaxing SQLite's same-thread check for FastAPI."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(
        database_url, connect_args=connect_args, echo=echo, pool_pre_ping=True
    )


engine = build_engine(database_settings.database_url, database_settings.database_echo)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
