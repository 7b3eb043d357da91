"""
Quotely Backend — Tag SQLAlchemy Model
========================================

What:  ORM model for the `tags` table. Tags belong to one user.

Case-insensitive uniqueness:
    `name` keeps the casing the user first typed. `normalized_name` holds the
    case-folded form and carries the (user_id, normalized_name) unique
    constraint, which is also the conflict target of the tag upsert in
    TagResolver. Tags are never renamed, and orphans are not removed.
"""

import uuid

from sqlalchemy import ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quotely.database import Base


def normalize_tag_key(name: str) -> str:
    """Comparison key for tag names: trimmed and case-folded."""
    return name.strip().casefold()


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)

    normalized_name: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "normalized_name", name="uq_tags_user_normalized_name"),
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
