"""
Business Use Cases

Onboarding and team management.
"""

from .create_business_use_case import CreateBusinessUseCase
from .dtos import BusinessResponse, CreateBusinessCommand, TeamMember, TeamResponse
from .list_team_use_case import ListTeamUseCase

__all__ = [
    "CreateBusinessUseCase",
    "ListTeamUseCase",
    "BusinessResponse",
    "CreateBusinessCommand",
    "TeamMember",
    "TeamResponse",
]
