from sqlalchemy import Column, String, Boolean, Date, DateTime, Integer
import uuid
from app.db.database import Base
from app.db.types import GUID


class User(Base):
    __tablename__ = "user"

    guid = Column(GUID(), primary_key=True, default=uuid.uuid4)
    login = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)
    name = Column(String, nullable=False)
    gender = Column(Integer, nullable=False, default=2)  # 0 female, 1 male, 2 unknown
    birthday = Column(Date, nullable=True)
    admin = Column(Boolean, default=False, nullable=False)
    created_on = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(String, nullable=False)
    # NULL means "never": not modified / not revoked
    modified_on = Column(DateTime(timezone=True), nullable=True)
    modified_by = Column(String, nullable=True)
    revoked_on = Column(DateTime(timezone=True), nullable=True)
    revoked_by = Column(String, nullable=True)

    @property
    def is_active(self) -> bool:
        return self.revoked_on is None
