"""
Quotely Backend — Credential Store
====================================

What:  Registers users and verifies their passwords.
How:   bcrypt with a configurable cost factor. Hashing and checking are
       CPU-bound (~100ms+ at the default cost), so both run in Starlette's thread pool
       instead of on the event loop.
Who:   /api/auth/register and /api/auth/login route handlers.

Uniqueness:
    `register` checks for an existing email first (cheap, common case), but
    the unique index on users.email is what actually decides two concurrent
    registrations. The loser's IntegrityError is translated to ConflictError.
"""

import logging
import secrets
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from quotely.exceptions import AuthFailureError, ConflictError, ValidationError
from quotely.models.user import User

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes of the password
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


class CredentialStore:
    """
    Persists users and checks credentials.

    Args:
        bcrypt_rounds: log2 work factor passed to bcrypt.gensalt()
    """

    def __init__(self, bcrypt_rounds: int = 12):
        self.bcrypt_rounds = bcrypt_rounds
        self._dummy_hash: Optional[str] = None

    def _timing_hash(self) -> str:
        """Hash of a throwaway password at this store's cost factor, made once."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash_password(secrets.token_urlsafe(16))
        return self._dummy_hash

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("ascii")

    @staticmethod
    def check_password(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("ascii"))
        except ValueError:
            # Stored value is not a bcrypt hash
            logger.warning("Unreadable password hash encountered during login")
            return False

    async def register(
        self, db: AsyncSession, email: Optional[str], password: Optional[str]
    ) -> User:
        """
        Create a new user.

        Raises:
            ValidationError: email or password is blank
            ConflictError: email already registered (including a lost race)
        """
        if not email or not email.strip():
            raise ValidationError(message="Email and password required.", field="email")
        if not password or not password.strip():
            raise ValidationError(message="Email and password required.", field="password")

        existing = await db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(message="Email already registered.")

        password_hash = await run_in_threadpool(self.hash_password, password)
        user = User(email=email, password_hash=password_hash)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as e:
            logger.info("Concurrent registration lost the race on users.email")
            raise ConflictError(
                message="Email already registered.",
                context={"constraint_error": type(e.orig).__name__ if e.orig else None},
            ) from e

        logger.info("Registered user %s", user.id)
        return user

    async def verify(
        self, db: AsyncSession, email: Optional[str], password: Optional[str]
    ) -> User:
        """
        Return the user whose email and password match.

        Raises:
            AuthFailureError: unknown email or wrong password (indistinguishable)
        """
        if not email or not password:
            raise AuthFailureError()

        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        # Unknown emails cost one bcrypt check too; timing matches a wrong password
        if user is not None:
            password_hash = user.password_hash
        else:
            password_hash = await run_in_threadpool(self._timing_hash)
        matches = await run_in_threadpool(self.check_password, password, password_hash)
        if user is None or not matches:
            raise AuthFailureError()
        return user
