"""
Quotely Backend — Tag Resolver
================================

What:  Turns a user's requested tag names into Tag rows, creating the missing
       ones, never creating duplicates.
Who:   QuoteRepository, on every create and update.
When:  Inside the request's transaction, right before the quote's
       associations are rewritten; both commit or roll back together.

Algorithm:
    1. Normalize input: trim, drop blanks, de-dup case-insensitively
       (first-seen casing wins).
    2. SELECT the user's tags whose normalized_name is requested.
    3. INSERT the unmatched names with ON CONFLICT DO NOTHING on
       (user_id, normalized_name).
    4. SELECT again, so a row inserted by a concurrent request counts as
       "already exists" instead of surfacing an IntegrityError.

    Step 3 is an upsert rather than check-then-insert: there is no window
    between the existence check and the insert for a racing request to use.
"""

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from quotely.exceptions import DatabaseError
from quotely.models.tag import Tag, normalize_tag_key

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO NOTHING support
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def normalize_tag_names(names: Optional[Iterable[str]]) -> List[str]:
    """
    Trim, drop empty entries, and de-duplicate case-insensitively.

    >>> normalize_tag_names(["Inbox", "inbox", " inbox ", ""])
    ['Inbox']
    """
    seen: Dict[str, str] = {}
    for raw in names or []:
        if raw is None:
            continue
        name = raw.strip()
        if not name:
            continue
        seen.setdefault(normalize_tag_key(name), name)
    return list(seen.values())


class TagResolver:
    """Stateless; receives the session for each call."""

    async def resolve(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        names: Optional[Iterable[str]],
    ) -> List[Tag]:
        """
        Return exactly one Tag per distinct requested name, in request order.

        Args:
            db: The request's session (its transaction also covers the
                association rewrite that follows)
            user_id: Owner; only this user's tags are read or created
            names: Raw names as sent by the client
        """
        wanted = normalize_tag_names(names)
        if not wanted:
            return []

        keys = [normalize_tag_key(name) for name in wanted]
        found = await self._fetch(db, user_id, keys)

        missing = [name for name in wanted if normalize_tag_key(name) not in found]
        if missing:
            await self._insert_missing(db, user_id, missing)
            found = await self._fetch(db, user_id, keys)

        tags = [found[key] for key in keys if key in found]
        if len(tags) != len(keys):
            # Only reachable if a tag vanished between insert and re-select
            logger.error("Tag resolution incomplete for user %s: %s", user_id, keys)
            raise DatabaseError(context={"requested": keys, "resolved": len(tags)})
        return tags

    async def _fetch(
        self, db: AsyncSession, user_id: uuid.UUID, keys: List[str]
    ) -> Dict[str, Tag]:
        result = await db.execute(
            select(Tag).where(Tag.user_id == user_id, Tag.normalized_name.in_(keys))
        )
        return {tag.normalized_name: tag for tag in result.scalars().all()}

    async def _insert_missing(
        self, db: AsyncSession, user_id: uuid.UUID, names: List[str]
    ) -> None:
        dialect = db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise DatabaseError(
                message="Tag storage is not supported on this database.",
                context={"dialect": dialect},
            )

        rows = [
            {
                "id": uuid.uuid4(),
                "user_id": user_id,
                "name": name,
                "normalized_name": normalize_tag_key(name),
            }
            for name in names
        ]
        stmt = insert(Tag).values(rows).on_conflict_do_nothing(
            index_elements=["user_id", "normalized_name"]
        )
        await db.execute(stmt)
        logger.debug("Upserted %d tag(s) for user %s", len(rows), user_id)


tag_resolver = TagResolver()
