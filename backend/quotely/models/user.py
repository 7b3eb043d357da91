"""
Quotely Backend — User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table.
Who:   CredentialStore (register/verify); quotes and tags reference it.

Table Design Rationale:
    - UUID primary key: non-sequential, used as the token `sub` claim
    - email: unique, stored exactly as submitted (no case folding)
    - password_hash: bcrypt output, never the raw password
    - Users are never updated or deleted through the API
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quotely.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # The unique constraint, not application code, decides concurrent registrations
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
