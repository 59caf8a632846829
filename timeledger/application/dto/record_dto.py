"""
Record DTOs for the application layer.
Already fetched persistence records handed to the reporting core.
"""

from typing import Annotated, Dict, Optional
from datetime import datetime, timezone
from decimal import Decimal
from pydantic import AfterValidator, Field, model_validator

from timeledger.domain.models.base import EntityNotFoundError
from timeledger.domain.models.project import CostType, Project, ProjectCost, ProjectEmployee
from timeledger.domain.models.time_entry import TimeEntry
from timeledger.domain.models.user import User

from .base_dto import RequestDTO


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize timestamps to naive UTC, the convention of the domain layer."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


Timestamp = Annotated[datetime, AfterValidator(as_naive_utc)]


class UserRecordDTO(RequestDTO):
    """User as supplied by the persistence layer."""

    id: str = Field(min_length=1, description="User ID")
    email: str = Field(min_length=3, max_length=255, description="User email")
    name: Optional[str] = Field(default=None, max_length=255, description="Display name")
    default_hourly_rate: Optional[Decimal] = Field(default=None, ge=0, description="Organization-wide fallback rate")

    def to_domain(self) -> User:
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            default_hourly_rate=self.default_hourly_rate
        )


class ProjectRecordDTO(RequestDTO):
    """Project as supplied by the persistence layer."""

    id: str = Field(min_length=1, description="Project ID")
    organization_id: str = Field(min_length=1, description="Owning organization ID")
    name: str = Field(default="", max_length=255, description="Project name")
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0, description="Project-wide fallback rate")
    fixed_cost: Optional[Decimal] = Field(default=None, ge=0, description="One-time revenue contribution")
    estimated_hours: Optional[Decimal] = Field(default=None, ge=0, description="Hour budget")

    def to_domain(self) -> Project:
        return Project(
            id=self.id,
            organization_id=self.organization_id,
            name=self.name,
            hourly_rate=self.hourly_rate,
            fixed_cost=self.fixed_cost,
            estimated_hours=self.estimated_hours
        )


class ProjectEmployeeRecordDTO(RequestDTO):
    """Project membership as supplied by the persistence layer."""

    id: Optional[str] = Field(default=None, description="Membership ID")
    project_id: str = Field(min_length=1, description="Project ID")
    user_id: str = Field(min_length=1, description="User ID")
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0, description="Project-specific rate")
    is_active: bool = Field(default=True, description="False once the member was removed")
    joined_at: Optional[Timestamp] = Field(default=None, description="Join timestamp")
    left_at: Optional[Timestamp] = Field(default=None, description="Leave timestamp")

    def to_domain(self, users: Dict[str, User]) -> ProjectEmployee:
        user = users.get(self.user_id)
        if user is None:
            raise EntityNotFoundError("User", self.user_id)
        return ProjectEmployee(
            id=self.id,
            project_id=self.project_id,
            user=user,
            hourly_rate=self.hourly_rate,
            is_active=self.is_active,
            joined_at=self.joined_at,
            left_at=self.left_at
        )


class TimeEntryRecordDTO(RequestDTO):
    """Time entry as supplied by the persistence layer."""

    id: Optional[str] = Field(default=None, description="Time entry ID")
    user_id: str = Field(min_length=1, description="User ID")
    project_id: Optional[str] = Field(default=None, description="Project ID, if assigned")
    organization_id: Optional[str] = Field(default=None, description="Organization ID")
    clock_in: Timestamp = Field(description="Clock-in timestamp")
    clock_out: Optional[Timestamp] = Field(default=None, description="Clock-out timestamp, None while running")
    total_hours: Optional[Decimal] = Field(default=None, ge=0, description="Worked hours once clocked out")
    description: Optional[str] = Field(default=None, max_length=2000, description="Work description")

    @model_validator(mode="after")
    def validate_hours_presence(self):
        """Hours are only recorded for closed entries."""
        if self.clock_out is None and self.total_hours is not None:
            raise ValueError("total_hours requires clock_out")
        if self.clock_out is not None and self.clock_out < self.clock_in:
            raise ValueError("clock_out must be after clock_in")
        return self

    def to_domain(self) -> TimeEntry:
        return TimeEntry(
            id=self.id,
            user_id=self.user_id,
            project_id=self.project_id,
            organization_id=self.organization_id,
            clock_in=self.clock_in,
            clock_out=self.clock_out,
            total_hours=self.total_hours,
            description=self.description
        )


class ProjectCostRecordDTO(RequestDTO):
    """Manual cost record as supplied by the persistence layer."""

    id: Optional[str] = Field(default=None, description="Cost record ID")
    project_id: str = Field(min_length=1, description="Project ID")
    cost_type: CostType = Field(description="HOURLY_RATE, FIXED_COST or EXPENSE")
    amount: Decimal = Field(ge=0, description="Amount or rate")
    user_id: Optional[str] = Field(default=None, description="User the record applies to")
    description: Optional[str] = Field(default=None, max_length=2000, description="Description")
    created_by_id: Optional[str] = Field(default=None, description="User who entered the record")
    created_at: Timestamp = Field(description="Creation timestamp")

    def to_domain(self, users: Dict[str, User]) -> ProjectCost:
        user = self._lookup(users, self.user_id)
        creator = self._lookup(users, self.created_by_id)
        return ProjectCost(
            id=self.id,
            project_id=self.project_id,
            cost_type=CostType(self.cost_type),
            amount=self.amount,
            user=user,
            description=self.description,
            created_by=creator,
            created_at=self.created_at
        )

    @staticmethod
    def _lookup(users: Dict[str, User], user_id: Optional[str]) -> Optional[User]:
        if user_id is None:
            return None
        user = users.get(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user
