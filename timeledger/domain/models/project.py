"""
Project domain model.
Represents a billable project with its employee memberships and manual cost records.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from timeledger.domain.models.base import (
    BaseEntity,
    NumberLike,
    ValidationError,
    to_non_negative_decimal
)
from timeledger.domain.models.user import User


class CostType(str, Enum):
    """Kind of manual project cost record."""
    HOURLY_RATE = "HOURLY_RATE"
    FIXED_COST = "FIXED_COST"
    EXPENSE = "EXPENSE"

    @property
    def label(self) -> str:
        """Human readable label, e.g. ``Fixed Cost``."""
        return self.value.replace("_", " ").title()


class Project(BaseEntity):
    """
    Project entity.
    ``hourly_rate`` is the project-wide fallback rate and ``fixed_cost`` a
    one-time revenue contribution.
    """

    def __init__(
        self,
        organization_id: str,
        name: str = "",
        hourly_rate: Optional[NumberLike] = None,
        fixed_cost: Optional[NumberLike] = None,
        estimated_hours: Optional[NumberLike] = None,
        **kwargs
    ):
        super().__init__(**kwargs)

        self.organization_id = organization_id
        self.name = name
        self.hourly_rate: Optional[Decimal] = to_non_negative_decimal(hourly_rate, "hourly_rate")
        self.fixed_cost: Optional[Decimal] = to_non_negative_decimal(fixed_cost, "fixed_cost")
        self.estimated_hours: Optional[Decimal] = to_non_negative_decimal(
            estimated_hours, "estimated_hours"
        )

        self.validate()

    def validate(self) -> None:
        """Validate project state."""
        if not self.id:
            raise ValidationError("Project ID is required", "id")

        if not self.organization_id:
            raise ValidationError("Organization ID is required", "organization_id")

    @property
    def display_name(self) -> str:
        return self.name or str(self.id)

    def __repr__(self) -> str:
        return f"Project(id={self.id!r}, organization_id={self.organization_id!r})"


class ProjectEmployee(BaseEntity):
    """
    Membership of one user on one project, with an optional rate override.
    Rows are soft-deleted through ``is_active``.
    """

    def __init__(
        self,
        project_id: str,
        user: User,
        hourly_rate: Optional[NumberLike] = None,
        is_active: bool = True,
        joined_at: Optional[datetime] = None,
        left_at: Optional[datetime] = None,
        **kwargs
    ):
        super().__init__(**kwargs)

        self.project_id = project_id
        self.user = user
        self.hourly_rate: Optional[Decimal] = to_non_negative_decimal(hourly_rate, "hourly_rate")
        self.is_active = is_active
        self.joined_at = joined_at or self.created_at
        self.left_at = left_at

        self.validate()

    @property
    def user_id(self) -> str:
        return self.user.id

    def validate(self) -> None:
        """Validate membership state."""
        if not self.project_id:
            raise ValidationError("Project ID is required", "project_id")

        if self.user is None:
            raise ValidationError("User is required", "user")

        if self.left_at is not None and self.left_at < self.joined_at:
            raise ValidationError("Left date cannot be before joined date", "left_at")

    def __repr__(self) -> str:
        return (
            f"ProjectEmployee(project_id={self.project_id!r}, user_id={self.user_id!r}, "
            f"is_active={self.is_active!r})"
        )


class ProjectCost(BaseEntity):
    """
    Manually entered cost record.
    An ``HOURLY_RATE`` record assigned to a user is the legacy per-user rate
    override; it predates project memberships and is keyed by email.
    """

    def __init__(
        self,
        project_id: str,
        cost_type: CostType,
        amount: NumberLike,
        user: Optional[User] = None,
        description: Optional[str] = None,
        created_by: Optional[User] = None,
        **kwargs
    ):
        super().__init__(**kwargs)

        self.project_id = project_id
        self.cost_type = CostType(cost_type)
        self.amount: Decimal = to_non_negative_decimal(amount, "amount")
        self.user = user
        self.description = description
        self.created_by = created_by

        self.validate()

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user is not None else None

    @property
    def is_legacy_rate(self) -> bool:
        """Whether this record overrides the hourly rate of a single user."""
        return self.cost_type == CostType.HOURLY_RATE and self.user is not None

    def validate(self) -> None:
        """Validate cost record state."""
        if not self.project_id:
            raise ValidationError("Project ID is required", "project_id")

        if self.amount is None:
            raise ValidationError("Amount is required", "amount")

    def __repr__(self) -> str:
        return (
            f"ProjectCost(id={self.id!r}, project_id={self.project_id!r}, "
            f"cost_type={self.cost_type.value!r}, amount={self.amount!r})"
        )
