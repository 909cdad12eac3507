"""
Database initialisation: table creation and the default administrator.
"""

import logging
from datetime import datetime, timezone
from pydantic_settings import BaseSettings
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.database import Base
from app.models.user import User
from app.services.user_store import UserStore
from app.utils.password import hash_password

logger = logging.getLogger(__name__)

BOOTSTRAP_ACTOR = "DbInitializer"


class AdminSettings(BaseSettings):
    """Credentials of the administrator created on first start."""

    login: str = "admin"
    name: str = "Admin"
    password: str = "admin"  # Should be in env
    gender: int = 2

    class Config:
        env_prefix = "ADMIN_"
        env_file = ".env"
        extra = "ignore"


def init_db(db: Session, settings: AdminSettings) -> bool:
    """
    Create missing tables and a default administrator if none exists.

    Safe to call on every start-up.

    Args:
        db: Database session
        settings: Default administrator credentials

    Returns:
        True if an administrator was created, False if one already existed
        or the configured login is held by a regular user

    Raises:
        RuntimeError: If the administrator could not be stored
    """
    Base.metadata.create_all(bind=db.get_bind())

    store = UserStore(db)
    if store.count_admins() > 0:
        logger.info("[INIT] Administrator already present")
        return False

    if store.exists_by_login(settings.login):
        logger.warning(
            f"[INIT] Login {settings.login} belongs to a non-admin user; "
            "default administrator not created"
        )
        return False

    admin = User(
        login=settings.login,
        password=hash_password(settings.password),
        name=settings.name,
        gender=settings.gender,
        birthday=None,
        admin=True,
        created_on=datetime.now(timezone.utc),
        created_by=BOOTSTRAP_ACTOR,
    )
    db.add(admin)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise RuntimeError("Administrator was not created") from e

    logger.info(f"[INIT] Created default administrator {settings.login}")
    return True
