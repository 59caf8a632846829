"""
Base DTOs for the application layer.
Provides common patterns for request/response data transfer objects.
"""

from typing import Optional
from datetime import datetime, date
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict

from timeledger.domain.models.base import quantize


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Convert enum values to their values
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True,
        # Reject unknown fields
        extra="forbid",
    )


class RequestDTO(BaseDTO):
    """Base class for request DTOs."""
    pass


class ResponseDTO(BaseDTO):
    """Base class for response DTOs."""
    pass


class StatsResponseDTO(ResponseDTO):
    """Base class for report responses covering a period."""

    period_start: Optional[date] = Field(default=None, description="Report period start")
    period_end: Optional[date] = Field(default=None, description="Report period end")
    generated_at: datetime = Field(default_factory=datetime.utcnow, description="When the report was generated")


# Utility functions
def round_money(value: Decimal, places: int = 2) -> Decimal:
    """Round a currency amount for presentation."""
    return quantize(value, places)


def round_hours(value: Decimal) -> Decimal:
    """Round hours to 2 decimal places."""
    return quantize(value, 2)


def round_percentage(value: Optional[Decimal], places: int = 1) -> Optional[Decimal]:
    """Round a percentage, keeping None (undefined) as None."""
    if value is None:
        return None
    return quantize(value, places)
