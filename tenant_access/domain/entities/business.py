"""
Business Entity

Represents a tenant: an isolated healthcare organization.
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, JSON, Relationship, SQLModel

from tenant_access.domain.base import utcnow

from .enums import SubscriptionTier

if TYPE_CHECKING:
    from .member import Member


class Business(SQLModel, table=True):
    """
    Business entity - isolated tenant owning members and invitations.

    Business Rules:
    - Created once at onboarding by its first owner
    - id is immutable, name and contact details are editable
    """

    __tablename__ = "businesses"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)

    # Contact info
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    subscription_tier: SubscriptionTier = Field(default=SubscriptionTier.free)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    # Relationships
    members: list["Member"] = Relationship(back_populates="business")
