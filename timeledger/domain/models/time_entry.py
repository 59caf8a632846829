"""
TimeEntry domain model.
Represents a clock-in / clock-out session of a user.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from timeledger.domain.models.base import (
    BaseEntity,
    NumberLike,
    ValidationError,
    BusinessRuleViolation,
    quantize,
    to_non_negative_decimal
)

SECONDS_PER_HOUR = Decimal("3600")
HOURS_TOLERANCE = Decimal("0.01")


def hours_between(clock_in: datetime, clock_out: datetime) -> Decimal:
    """Elapsed hours between two timestamps, rounded to 2 decimal places."""
    seconds = Decimal(str((clock_out - clock_in).total_seconds()))
    return quantize(seconds / SECONDS_PER_HOUR)


class TimeEntry(BaseEntity):
    """
    TimeEntry entity.
    ``total_hours`` is present exactly when ``clock_out`` is; an entry
    without a clock-out is still running and carries no hours.
    """

    def __init__(
        self,
        user_id: str,
        clock_in: datetime,
        clock_out: Optional[datetime] = None,
        total_hours: Optional[NumberLike] = None,
        project_id: Optional[str] = None,
        organization_id: Optional[str] = None,
        description: Optional[str] = None,
        **kwargs
    ):
        super().__init__(**kwargs)

        self.user_id = user_id
        self.project_id = project_id
        self.organization_id = organization_id
        self.description = description

        self.clock_in = clock_in
        self.clock_out = clock_out
        self.total_hours: Optional[Decimal] = to_non_negative_decimal(total_hours, "total_hours")

        # Closed entries loaded without hours get them derived from the timestamps
        if self.clock_out is not None and self.total_hours is None:
            self._check_clock_order(self.clock_out)
            self.total_hours = hours_between(self.clock_in, self.clock_out)

        self.validate()

    def validate(self) -> None:
        """Validate time entry state."""
        if not self.user_id:
            raise ValidationError("User ID is required", "user_id")

        if self.clock_in is None:
            raise ValidationError("Clock-in time is required", "clock_in")

        if self.clock_out is None and self.total_hours is not None:
            raise ValidationError("Open time entries cannot have total hours", "total_hours")

        if self.clock_out is not None:
            self._check_clock_order(self.clock_out)
            elapsed = hours_between(self.clock_in, self.clock_out)
            if self.total_hours is not None and abs(self.total_hours - elapsed) > HOURS_TOLERANCE:
                raise ValidationError(
                    f"total_hours {self.total_hours} does not match the {elapsed} hours between clock-in and clock-out",
                    "total_hours"
                )

    def _check_clock_order(self, clock_out: datetime) -> None:
        if clock_out < self.clock_in:
            raise ValidationError("Clock-out time cannot be before clock-in time", "clock_out")

    @property
    def is_open(self) -> bool:
        """Check if the user is still clocked in on this entry."""
        return self.clock_out is None

    @property
    def is_billable(self) -> bool:
        """Only closed entries with recorded hours contribute to revenue."""
        return self.total_hours is not None

    def close(self, clock_out: Optional[datetime] = None, description: Optional[str] = None) -> None:
        """Clock out, recording the elapsed hours."""
        if not self.is_open:
            raise BusinessRuleViolation("Time entry is already clocked out")

        if clock_out is None:
            tz = self.clock_in.tzinfo
            clock_out = datetime.now(tz) if tz is not None else datetime.utcnow()
        self._check_clock_order(clock_out)

        self.clock_out = clock_out
        self.total_hours = hours_between(self.clock_in, clock_out)
        if description:
            self.description = description
        self.mark_as_updated()

    def __repr__(self) -> str:
        return (
            f"TimeEntry(id={self.id!r}, user_id={self.user_id!r}, project_id={self.project_id!r}, "
            f"total_hours={self.total_hours!r})"
        )
