"""
Quotely Backend — Quote Repository (Write Path)
=================================================

What:  Create, update and delete quotes together with their tag associations.
Why:   The only place that writes `quotes` and `quote_tags`, so the
       "associations always match the current tag set" rule lives here.
Who:   POST/PUT/DELETE /api/quotes route handlers.

Write Flow (create / update):
    ┌──────────────┐    ┌────────────────┐    ┌──────────────────┐
    │ quote row    │───▶│ TagResolver    │───▶│ quote_tags rows  │
    │ insert/edit  │    │ (upsert tags)  │    │ delete + insert  │
    └──────────────┘    └────────────────┘    └──────────────────┘

    All three steps run in the request's transaction (see database.py).
    Any exception rolls every step back; nothing half-written is visible.

Ownership:
    update/delete look the quote up by (id, user_id). A foreign quote and a
    missing quote both raise NotFoundError, so ids cannot be probed.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from quotely.exceptions import DatabaseError, NotFoundError, QuotelyError, ValidationError
from quotely.models.quote import Quote, quote_tags
from quotely.models.tag import Tag
from quotely.schemas.quote import QuoteFields, QuoteResponse
from quotely.services.quote_query_service import build_quote_response
from quotely.services.tag_resolver import TagResolver, tag_resolver as default_tag_resolver

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuoteRepository:
    """
    Write operations on quotes.

    Error Handling Strategy:
        Domain errors (ValidationError, NotFoundError) propagate unchanged.
        Anything else is logged with its traceback and wrapped in
        DatabaseError so the client gets a generic 500.
    """

    def __init__(self, resolver: Optional[TagResolver] = None):
        self.tag_resolver = resolver or default_tag_resolver

    async def create(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        fields: QuoteFields,
        tag_names: Optional[Iterable[str]] = None,
    ) -> QuoteResponse:
        """
        Insert a quote and associate it with its (possibly new) tags.

        Raises:
            ValidationError: blank text
            DatabaseError: unexpected persistence failure
        """
        self._require_text(fields)
        try:
            now = _utcnow()
            quote = Quote(user_id=user_id, created_at=now, updated_at=now)
            self._apply_fields(quote, fields)
            db.add(quote)
            await db.flush()

            tags = await self.tag_resolver.resolve(db, user_id, tag_names)
            await self._associate(db, quote.id, tags)
        except QuotelyError:
            raise
        except Exception as e:
            self._raise_database_error("create", e)

        logger.info("Quote %s created with %d tag(s)", quote.id, len(tags))
        return build_quote_response(quote, [t.name for t in tags])

    async def update(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        quote_id: uuid.UUID,
        fields: QuoteFields,
        tag_names: Optional[Iterable[str]] = None,
    ) -> QuoteResponse:
        """
        Full replace of text, metadata and tag set.

        Old associations are deleted, not diffed. Tags that lose their last
        quote stay in storage.

        Raises:
            ValidationError: blank text
            NotFoundError: quote absent or owned by another user
            DatabaseError: unexpected persistence failure
        """
        self._require_text(fields)
        try:
            quote = await self._get_owned(db, user_id, quote_id)

            self._apply_fields(quote, fields)
            quote.updated_at = _utcnow()

            await db.execute(delete(quote_tags).where(quote_tags.c.quote_id == quote.id))
            tags = await self.tag_resolver.resolve(db, user_id, tag_names)
            await self._associate(db, quote.id, tags)
            await db.flush()
        except QuotelyError:
            raise
        except Exception as e:
            self._raise_database_error("update", e)

        logger.info("Quote %s updated with %d tag(s)", quote.id, len(tags))
        return build_quote_response(quote, [t.name for t in tags])

    async def delete(self, db: AsyncSession, user_id: uuid.UUID, quote_id: uuid.UUID) -> None:
        """
        Delete a quote and its associations.

        Raises:
            NotFoundError: quote absent or owned by another user
        """
        try:
            quote = await self._get_owned(db, user_id, quote_id)
            await db.execute(delete(quote_tags).where(quote_tags.c.quote_id == quote.id))
            await db.delete(quote)
            await db.flush()
        except QuotelyError:
            raise
        except Exception as e:
            self._raise_database_error("delete", e)

        logger.info("Quote %s deleted", quote_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _require_text(fields: QuoteFields) -> None:
        if not fields.text or not fields.text.strip():
            raise ValidationError(message="Quote text is required.", field="text")

    @staticmethod
    def _apply_fields(quote: Quote, fields: QuoteFields) -> None:
        quote.text = fields.text
        quote.source_title = fields.source_title
        quote.source_author = fields.source_author
        quote.source_url = fields.source_url
        quote.note = fields.note

    @staticmethod
    async def _get_owned(db: AsyncSession, user_id: uuid.UUID, quote_id: uuid.UUID) -> Quote:
        result = await db.execute(
            select(Quote).where(Quote.id == quote_id, Quote.user_id == user_id)
        )
        quote = result.scalar_one_or_none()
        if quote is None:
            raise NotFoundError(resource="quote", resource_id=str(quote_id))
        return quote

    @staticmethod
    async def _associate(db: AsyncSession, quote_id: uuid.UUID, tags: List[Tag]) -> None:
        if not tags:
            return
        await db.execute(
            insert(quote_tags),
            [{"quote_id": quote_id, "tag_id": tag.id} for tag in tags],
        )

    @staticmethod
    def _raise_database_error(operation: str, error: Exception) -> None:
        logger.error("Database error during quote %s: %s", operation, str(error), exc_info=True)
        raise DatabaseError(
            message="Could not save the quote. Please try again.",
            context={"operation": operation, "error_type": type(error).__name__},
        ) from error


quote_repository = QuoteRepository()
