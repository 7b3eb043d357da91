"""
Quotely Backend — Authentication Schemas
==========================================

What:  Request/response bodies for /api/auth/register and /api/auth/login.

Why optional `str` fields (not EmailStr / required fields):
    A missing, null or blank field must produce our 400 `validation_error`, not
    FastAPI's 422. The credential store checks blankness itself.
"""

from typing import Optional

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    """Body of both register and login."""
    email: Optional[str] = Field(default=None, description="Account email, stored exactly as given")
    password: Optional[str] = Field(default=None, description="Raw password (never logged or stored)")


class TokenResponse(BaseModel):
    """
    What:  Returned by register and login.
    The client echoes `token` back as `Authorization: Bearer <token>`.
    """
    token: str = Field(description="Signed JWT, valid for the configured lifetime")
