"""
Quotely Backend — Quote SQLAlchemy Model and Quote↔Tag Association
====================================================================

What:  ORM model for the `quotes` table plus the `quote_tags` join table.
Who:   QuoteRepository owns every write; QuoteQueryService reads.

Table Design Rationale:
    - user_id is set at creation and never reassigned
    - text is required; source_* and note are optional free text
    - created_at is immutable, updated_at is rewritten on every mutation
    - Index on (user_id, created_at DESC) serves the "newest first" list

Association Design:
    `quote_tags` is a plain Core table keyed by (quote_id, tag_id) with no
    columns of its own. Edits replace the whole tag set with a DELETE then an
    INSERT, so the rows are written with Core statements and never live in the
    session identity map.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quotely.database import Base


quote_tags = Table(
    "quote_tags",
    Base.metadata,
    Column(
        "quote_id",
        Uuid(as_uuid=True),
        ForeignKey("quotes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Uuid(as_uuid=True),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Quote(Base):
    __tablename__ = "quotes"

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

    # No length limit: highlights from long articles are common
    text: Mapped[str] = mapped_column(Text, nullable=False)

    source_title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    source_author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    source_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    __table_args__ = (
        Index("idx_quotes_user_created_at", "user_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Quote(id={self.id}, user_id={self.user_id}, created_at='{self.created_at}')>"
