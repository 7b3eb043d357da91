"""
Quotely Backend — Quote Route Handlers
========================================

What:  CRUD and random-pick endpoints under /api/quotes. All require a
       bearer token; every operation is scoped to the token's user.
Who:   The web UI and the browser extension (which only ever POSTs).

Routing note:
    /quotes/random is declared before /quotes/{quote_id} so the literal
    path wins over the UUID parameter.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from quotely.database import get_db_session
from quotely.dependencies import get_current_user_id
from quotely.exceptions import NotFoundError
from quotely.schemas.common import ErrorResponse
from quotely.schemas.quote import QuoteListResponse, QuoteResponse, QuoteWriteRequest
from quotely.services.quote_query_service import quote_query_service
from quotely.services.quote_repository import quote_repository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Quotes"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.post(
    "/quotes",
    response_model=QuoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Quote text is blank", "model": ErrorResponse}},
    summary="Save a new quote",
)
async def create_quote(
    body: QuoteWriteRequest,
    response: Response,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> QuoteResponse:
    result = await quote_repository.create(db, user_id, body.quote_fields(), body.tags)
    response.headers["Location"] = f"/api/quotes/{result.id}"
    return result


@router.get(
    "/quotes",
    response_model=QuoteListResponse,
    summary="List all of your quotes, newest first",
)
async def list_quotes(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> QuoteListResponse:
    items = await quote_query_service.list_all(db, user_id)
    return QuoteListResponse(items=items)


@router.get(
    "/quotes/random",
    response_model=QuoteResponse,
    responses={404: {"description": "No quote matches", "model": ErrorResponse}},
    summary="Pick one of your quotes at random",
)
async def random_quote(
    tag: Optional[str] = Query(
        default=None,
        description="Only consider quotes with this exact tag name (case-sensitive)",
    ),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> QuoteResponse:
    result = await quote_query_service.pick_random(db, user_id, tag)
    if result is None:
        raise NotFoundError(resource="quote")
    return result


@router.get(
    "/quotes/{quote_id}",
    response_model=QuoteResponse,
    responses={404: {"description": "Quote not found", "model": ErrorResponse}},
    summary="Get one of your quotes",
)
async def get_quote(
    quote_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> QuoteResponse:
    return await quote_query_service.get_one(db, user_id, quote_id)


@router.put(
    "/quotes/{quote_id}",
    response_model=QuoteResponse,
    responses={
        400: {"description": "Quote text is blank", "model": ErrorResponse},
        404: {"description": "Quote not found", "model": ErrorResponse},
    },
    summary="Replace a quote's text, metadata and tags",
)
async def update_quote(
    quote_id: uuid.UUID,
    body: QuoteWriteRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> QuoteResponse:
    return await quote_repository.update(db, user_id, quote_id, body.quote_fields(), body.tags)


@router.delete(
    "/quotes/{quote_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Quote not found", "model": ErrorResponse}},
    summary="Delete a quote",
)
async def delete_quote(
    quote_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await quote_repository.delete(db, user_id, quote_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
