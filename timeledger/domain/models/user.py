"""
User domain model.
Represents an employee whose hours are tracked and billed.
"""

from decimal import Decimal
from typing import Optional

from timeledger.domain.models.base import (
    BaseEntity,
    Email,
    NumberLike,
    ValidationError,
    to_non_negative_decimal
)


class User(BaseEntity):
    """
    User entity.
    Carries the organization-wide fallback rate used when a project does not
    configure a rate for the user.
    """

    def __init__(
        self,
        email: str,
        name: Optional[str] = None,
        default_hourly_rate: Optional[NumberLike] = None,
        **kwargs
    ):
        super().__init__(**kwargs)

        self.email = email
        self.name = name
        self.default_hourly_rate: Optional[Decimal] = to_non_negative_decimal(
            default_hourly_rate, "default_hourly_rate"
        )

        self.validate()

    def validate(self) -> None:
        """Validate user state."""
        if not self.id:
            raise ValidationError("User ID is required", "id")

        Email(self.email)

    @property
    def display_name(self) -> str:
        """Name shown in reports, falling back to the email."""
        return self.name or self.email

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r})"
