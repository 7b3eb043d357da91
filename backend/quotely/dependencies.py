"""
Quotely Backend — Request Dependencies
========================================

What:  FastAPI dependencies that pull per-app collaborators off `app.state`
       and authenticate the caller.
Why:   Route handlers declare what they need; nothing reads configuration
       from module globals.

Bearer authentication:
    `get_current_user_id` runs before the handler body. Missing header,
    wrong scheme, bad signature, wrong issuer/audience and expiry all end in
    UnauthenticatedError (401) without touching the database.
"""

import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quotely.services.credential_store import CredentialStore
from quotely.services.token_issuer import TokenIssuer

# auto_error=False: our handler produces the 401 body, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False, description="JWT from /api/auth/login")


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> uuid.UUID:
    """Validated user id from `Authorization: Bearer <token>`."""
    token = credentials.credentials if credentials else None
    return token_issuer.validate(token)
