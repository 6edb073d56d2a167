"""User model: administrators and voters sharing one identity table."""

import enum
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from voting_portal.models.base import Base, UUIDMixin


class UserRole(enum.StrEnum):
    """Roles recognised by the portal."""

    ADMIN = "admin"
    VOTER = "voter"


class User(Base, UUIDMixin):
    """Authenticated account.

    ``voter_id`` is the roster-matching key, distinct from the login
    identity. It is globally unique and never reassigned once set; admins
    may have none.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.VOTER)
    voter_id: Mapped[str | None] = mapped_column(String(32), unique=True, nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (CheckConstraint("role IN ('admin', 'voter')", name="ck_users_role"),)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
