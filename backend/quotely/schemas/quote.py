"""
Quotely Backend — Quote Request/Response Schemas
==================================================

What:  Pydantic models defining the quote API contract.
Why:   The browser extension and other clients speak camelCase JSON
       (`sourceTitle`, `createdAt`, ...). Aliases keep Python attributes in
       snake_case while the wire format stays camelCase; requests accept
       either spelling.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class QuoteWriteRequest(CamelModel):
    """
    What:  Body for POST /api/quotes and PUT /api/quotes/{id}.
    How:   Update is a full replace: omitted optional fields become null and
           an omitted `tags` list clears every tag of the quote.
    """
    text: Optional[str] = Field(default=None, description="The captured excerpt (required, non-blank)")
    source_title: Optional[str] = Field(default=None, description="Page or book title")
    source_author: Optional[str] = Field(default=None, description="Author of the source")
    source_url: Optional[str] = Field(default=None, description="Where the text was found")
    note: Optional[str] = Field(default=None, description="Free-form personal note")
    tags: Optional[List[str]] = Field(
        default=None,
        description="Tag names; trimmed and de-duplicated case-insensitively",
    )

    def quote_fields(self) -> "QuoteFields":
        return QuoteFields(
            text=self.text,
            source_title=self.source_title,
            source_author=self.source_author,
            source_url=self.source_url,
            note=self.note,
        )


class QuoteFields(BaseModel):
    """Text and metadata of a quote, without tags. Passed to QuoteRepository."""
    text: Optional[str] = None
    source_title: Optional[str] = None
    source_author: Optional[str] = None
    source_url: Optional[str] = None
    note: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class QuoteResponse(CamelModel):
    """
    What:  Full representation of a quote with its tag names attached.
    Who:   Returned by create, update, random and single-quote reads, and as
           the items of the list endpoint.
    """
    id: uuid.UUID = Field(description="Quote identifier")
    text: str
    source_title: Optional[str] = None
    source_author: Optional[str] = None
    source_url: Optional[str] = None
    note: Optional[str] = None
    tags: List[str] = Field(default_factory=list, description="Tag names, alphabetical")
    created_at: datetime = Field(description="Creation time (UTC)")
    updated_at: datetime = Field(description="Last modification time (UTC)")


class QuoteListResponse(BaseModel):
    """Wrapper for GET /api/quotes, newest first."""
    items: List[QuoteResponse]
