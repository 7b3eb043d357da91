"""
Quotely Backend — Token Issuer
================================

What:  Mints and validates the bearer tokens used by every protected route.
How:   HS256 JWTs (PyJWT) carrying `sub` (user id) and `email`, plus issuer,
       audience, issued-at and an absolute expiry.

Known Limitation:
    Tokens are stateless. There is no revocation list, so a leaked or
    "logged out" token stays valid until `exp`. Logout is client-side only.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from quotely.exceptions import UnauthenticatedError
from quotely.models.user import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "exp", "iat", "iss", "aud"]


class TokenIssuer:
    def __init__(
        self,
        secret: str,
        issuer: str,
        audience: str,
        lifetime: timedelta = timedelta(days=7),
    ):
        self._secret = secret
        self.issuer = issuer
        self.audience = audience
        self.lifetime = lifetime

    def issue(self, user: User, now: Optional[datetime] = None) -> str:
        """Sign a token for `user` that expires `lifetime` after `now`."""
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def validate(self, token: Optional[str]) -> uuid.UUID:
        """
        Return the user id carried by `token`.

        Raises:
            UnauthenticatedError: token missing, malformed, expired, badly
                signed, issued by/for someone else, or without a UUID subject
        """
        if not token:
            raise UnauthenticatedError()

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise UnauthenticatedError(message="Token has expired") from e
        except jwt.PyJWTError as e:
            logger.debug("Rejected bearer token: %s", type(e).__name__)
            raise UnauthenticatedError(
                message="Invalid authentication token",
                context={"reason": type(e).__name__},
            ) from e

        try:
            return uuid.UUID(claims["sub"])
        except (TypeError, ValueError) as e:
            raise UnauthenticatedError(message="Invalid authentication token") from e
