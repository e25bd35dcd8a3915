"""
Identity Entity

Account record owned by the bundled identity provider adapter.
The access-provisioning core never reads or writes this table directly.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, JSON, SQLModel

from tenant_access.domain.base import utcnow


class Identity(SQLModel, table=True):
    """
    Identity entity - credentials known to the identity provider.

    Business Rules:
    - Email is unique and stored lower-cased
    - Password stored as bcrypt hash
    - profile carries sign-up metadata (first_name, last_name)
    """

    __tablename__ = "auth_identities"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    profile: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
