"""
Member Entity

A user account bound to exactly one business with a role.
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from uuid import UUID

from sqlmodel import Column, DateTime, Field, Index, Relationship, SQLModel

from tenant_access.domain.base import utcnow

from .enums import MemberRole

if TYPE_CHECKING:
    from .business import Business


class Member(SQLModel, table=True):
    """
    Member entity - a user of exactly one business.

    Business Rules:
    - id is the identity provider subject id (no default, always supplied)
    - Email is unique across all members and stored lower-cased
    - business_id is null until onboarding or redemption, and never changes
      through the invitation path afterwards
    """

    __tablename__ = "users"

    id: UUID = Field(primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)

    business_id: Optional[UUID] = Field(
        default=None, foreign_key="businesses.id", index=True
    )
    role: MemberRole = Field(default=MemberRole.staff)

    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    # Relationships
    business: Optional["Business"] = Relationship(back_populates="members")

    __table_args__ = (Index("idx_users_business_role", "business_id", "role"),)

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.email
