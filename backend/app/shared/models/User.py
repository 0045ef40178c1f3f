# app/models/user.py
"""
Utilisateur back-office (admin, super admin, admin entreprise).
Seul le rôle est lu par le module de scoring (contrôle d'accès).
"""
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.sql import func

from app.core.database import Base
from app.shared.enums import UserRole


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id    = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String, unique=True, index=True, nullable=False)
    name  = Column(String, nullable=True)

    hashed_password = Column(String, nullable=False)
    role      = Column(SAEnum(UserRole), default=UserRole.USER, nullable=False, index=True)
    is_active = Column(Boolean, default=True)

    company_id = Column(String(36), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<User id={self.id} role={self.role}>"
