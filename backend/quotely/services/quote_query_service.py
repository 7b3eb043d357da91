"""
Quotely Backend — Quote Query Service
=======================================

What:  Read side for quotes: list everything, fetch one, pick one at random.
Who:   GET /api/quotes, GET /api/quotes/{id}, GET /api/quotes/random.

Ownership scoping:
    Every query filters on user_id. A quote owned by someone else never
    appears in a list, is never picked, and reads as NotFound.

Tag filter on random pick:
    Matches Tag.name exactly (case-sensitive), unlike TagResolver which
    folds case. Existing clients rely on this; see DESIGN.md.
"""

import logging
import random
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quotely.exceptions import DatabaseError, NotFoundError
from quotely.models.quote import Quote, quote_tags
from quotely.models.tag import Tag
from quotely.schemas.quote import QuoteResponse

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def build_quote_response(quote: Quote, tag_names: Iterable[str]) -> QuoteResponse:
    return QuoteResponse(
        id=quote.id,
        text=quote.text,
        source_title=quote.source_title,
        source_author=quote.source_author,
        source_url=quote.source_url,
        note=quote.note,
        tags=sorted(tag_names),
        created_at=_as_utc(quote.created_at),
        updated_at=_as_utc(quote.updated_at),
    )


async def load_tag_names(
    db: AsyncSession, quote_ids: List[uuid.UUID]
) -> Dict[uuid.UUID, List[str]]:
    """Map each quote id to the names of its associated tags (one query)."""
    names: Dict[uuid.UUID, List[str]] = defaultdict(list)
    if not quote_ids:
        return names
    result = await db.execute(
        select(quote_tags.c.quote_id, Tag.name)
        .join(Tag, Tag.id == quote_tags.c.tag_id)
        .where(quote_tags.c.quote_id.in_(quote_ids))
    )
    for quote_id, name in result.all():
        names[quote_id].append(name)
    return names


class QuoteQueryService:
    """Stateless read operations over a user's quotes."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    async def list_all(self, db: AsyncSession, user_id: uuid.UUID) -> List[QuoteResponse]:
        """
        All of the user's quotes, newest first.

        Query plan:
            SELECT ... FROM quotes WHERE user_id = :uid
            ORDER BY created_at DESC, id
            → idx_quotes_user_created_at; `id` makes equal timestamps stable
        """
        try:
            result = await db.execute(
                select(Quote)
                .where(Quote.user_id == user_id)
                .order_by(Quote.created_at.desc(), Quote.id)
            )
            quotes = list(result.scalars().all())
            names = await load_tag_names(db, [q.id for q in quotes])
        except Exception as e:
            logger.error("Database error listing quotes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve quotes. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        return [build_quote_response(q, names.get(q.id, [])) for q in quotes]

    async def get_one(
        self, db: AsyncSession, user_id: uuid.UUID, quote_id: uuid.UUID
    ) -> QuoteResponse:
        """
        Raises:
            NotFoundError: no quote with that id belongs to the user
        """
        result = await db.execute(
            select(Quote).where(Quote.id == quote_id, Quote.user_id == user_id)
        )
        quote = result.scalar_one_or_none()
        if quote is None:
            raise NotFoundError(resource="quote", resource_id=str(quote_id))

        names = await load_tag_names(db, [quote.id])
        return build_quote_response(quote, names.get(quote.id, []))

    async def pick_random(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        tag: Optional[str] = None,
    ) -> Optional[QuoteResponse]:
        """
        Uniformly random quote of the user, optionally restricted to quotes
        tagged exactly `tag`.

        How:
            COUNT the eligible set, draw an offset in [0, count), and read the
            row at that offset in id order. Every eligible quote has
            probability 1/count.

        Returns:
            The picked quote, or None when nothing is eligible.
        """
        eligible = select(Quote.id).where(Quote.user_id == user_id)
        if tag is not None and tag.strip():
            tagged = (
                select(quote_tags.c.quote_id)
                .join(Tag, Tag.id == quote_tags.c.tag_id)
                .where(Tag.user_id == user_id, Tag.name == tag)
            )
            eligible = eligible.where(Quote.id.in_(tagged))

        count = (
            await db.execute(select(func.count()).select_from(eligible.subquery()))
        ).scalar_one()
        if count == 0:
            return None

        offset = self._rng.randrange(count)
        result = await db.execute(
            select(Quote)
            .where(Quote.id.in_(eligible))
            .order_by(Quote.id)
            .offset(offset)
            .limit(1)
        )
        quote = result.scalar_one_or_none()
        if quote is None:
            # Deleted between COUNT and SELECT by a concurrent request
            return None

        names = await load_tag_names(db, [quote.id])
        return build_quote_response(quote, names.get(quote.id, []))


quote_query_service = QuoteQueryService()
