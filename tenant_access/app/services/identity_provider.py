"""
Identity provider port.

The provider is an external service with its own failure modes. Expected
failures come back as Result errors with code AUTH_ERROR and a ``reason``
detail (email_taken, weak_password, invalid_credentials, rate_limited).
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel

from tenant_access.libs.result import Result


class IdentityInfo(BaseModel):
    """Caller identity as reported by the provider"""

    identity_id: UUID
    email: str


class AuthSession(BaseModel):
    """Signed-in session"""

    identity_id: UUID
    email: str
    access_token: str
    expires_at: datetime


class IIdentityProvider(ABC):
    """Identity provider interface - application layer"""

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Result[IdentityInfo]:
        """Register a new identity"""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Result[AuthSession]:
        """Authenticate and open a session"""
        pass

    @abstractmethod
    async def current_caller(self, access_token: str) -> Optional[IdentityInfo]:
        """Resolve the identity behind an access token, None if invalid"""
        pass
