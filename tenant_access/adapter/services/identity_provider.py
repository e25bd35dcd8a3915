"""
Bundled identity provider.

Stands in for a hosted auth service. Each call runs in its own session and
commits on its own, so identities outlive any rollback of the caller's unit
of work, exactly as a remote provider's would.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Dict, Optional
from uuid import UUID

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from tenant_access.adapter.services.jwt import generate_jwt, verify_jwt
from tenant_access.app.services.identity_provider import (
    AuthSession,
    IdentityInfo,
    IIdentityProvider,
)
from tenant_access.domain.entities import Identity
from tenant_access.domain.errors import ErrorCode, error
from tenant_access.libs.result import Result, Return

logger = logging.getLogger(__name__)


def auth_error(reason: str, message: str):
    return error(ErrorCode.auth_error, message, reason=reason)


class SqlIdentityProvider(IIdentityProvider):
    """Identity provider backed by the auth_identities table"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        jwt_secret: str,
        access_token_expire_minutes: int = 15,
        bcrypt_rounds: int = 12,
        min_password_length: int = 8,
    ):
        self.session_factory = session_factory
        self.jwt_secret = jwt_secret
        self.access_token_ttl = timedelta(minutes=access_token_expire_minutes)
        self.bcrypt_rounds = bcrypt_rounds
        self.min_password_length = min_password_length

    async def sign_up(
        self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Result[IdentityInfo]:
        email = email.strip().lower()

        if len(password) < self.min_password_length:
            return Return.err(
                auth_error(
                    "weak_password",
                    f"Password must be at least {self.min_password_length} characters long",
                )
            )

        async with self.session_factory() as session:
            existing = await self._get_by_email(session, email)
            if existing is not None:
                return Return.err(auth_error("email_taken", "User already registered"))

            password_hash = bcrypt.hashpw(
                password.encode("utf-8"), bcrypt.gensalt(self.bcrypt_rounds)
            ).decode("utf-8")

            identity = Identity(email=email, password_hash=password_hash, profile=metadata)
            identity_id = identity.id
            session.add(identity)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return Return.err(auth_error("email_taken", "User already registered"))

        logger.info(f"Identity created: {identity_id}")
        return Return.ok(IdentityInfo(identity_id=identity_id, email=email))

    async def sign_in(self, email: str, password: str) -> Result[AuthSession]:
        email = email.strip().lower()

        async with self.session_factory() as session:
            identity = await self._get_by_email(session, email)
            if identity is None or not bcrypt.checkpw(
                password.encode("utf-8"), identity.password_hash.encode("utf-8")
            ):
                return Return.err(
                    auth_error("invalid_credentials", "Invalid email or password")
                )
            identity_id = identity.id

        expires_at = datetime.now(UTC) + self.access_token_ttl
        access_token = generate_jwt(
            identity_id, email, self.jwt_secret, self.access_token_ttl
        )
        return Return.ok(
            AuthSession(
                identity_id=identity_id,
                email=email,
                access_token=access_token,
                expires_at=expires_at,
            )
        )

    async def current_caller(self, access_token: str) -> Optional[IdentityInfo]:
        payload = verify_jwt(access_token, self.jwt_secret)
        if payload is None:
            return None
        try:
            return IdentityInfo(identity_id=UUID(payload["sub"]), email=payload["email"])
        except (KeyError, ValueError):
            return None

    @staticmethod
    async def _get_by_email(session: AsyncSession, email: str) -> Optional[Identity]:
        stmt = select(Identity).where(Identity.email == email)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
