"""
Quotely Backend — Authentication Route Handlers
=================================================

What:  POST /api/auth/register and POST /api/auth/login.
How:   Both return `{token}`. Register answers 400 for blank fields or a
       taken email; login answers 401 for any credential mismatch.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quotely.database import get_db_session
from quotely.dependencies import get_credential_store, get_token_issuer
from quotely.schemas.auth import CredentialsRequest, TokenResponse
from quotely.schemas.common import ErrorResponse
from quotely.services.credential_store import CredentialStore
from quotely.services.token_issuer import TokenIssuer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=TokenResponse,
    responses={
        400: {"description": "Blank field or email already registered", "model": ErrorResponse},
    },
    summary="Create an account and receive a token",
)
async def register(
    body: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
    credential_store: CredentialStore = Depends(get_credential_store),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenResponse:
    user = await credential_store.register(db, body.email, body.password)
    return TokenResponse(token=token_issuer.issue(user))


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        401: {"description": "Invalid email or password", "model": ErrorResponse},
    },
    summary="Exchange email and password for a token",
)
async def login(
    body: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
    credential_store: CredentialStore = Depends(get_credential_store),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenResponse:
    """
    Logout has no endpoint: tokens are stateless, so the client just
    discards its copy. The token itself stays valid until it expires.
    """
    user = await credential_store.verify(db, body.email, body.password)
    return TokenResponse(token=token_issuer.issue(user))
