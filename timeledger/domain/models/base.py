"""
Base entity and value objects for the domain layer.
This module contains the foundational classes for all domain entities.
"""

from datetime import datetime, date, time, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Any, Union
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


NumberLike = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Provides common attributes and behavior for all entities.
    """

    id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        """Initialize entity after creation."""
        if self.created_at is None:
            self.created_at = datetime.utcnow()
        if self.updated_at is None:
            self.updated_at = self.created_at

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        if self.id is None:
            return hash(id(self))
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.utcnow()

    def validate(self) -> None:
        """
        Validate the entity's state.
        Should be overridden by subclasses to implement specific validation rules.
        Raises ValidationError if the entity is in an invalid state.
        """
        pass


class DomainException(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(DomainException):
    """Exception raised when entity validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class BusinessRuleViolation(DomainException):
    """Exception raised when a business rule is violated."""

    def __init__(self, message: str):
        super().__init__(message, "BUSINESS_RULE_VIOLATION")


class EntityNotFoundError(DomainException):
    """Exception raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, "ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


def to_decimal(value: Optional[NumberLike], field_name: str) -> Optional[Decimal]:
    """
    Coerce an optional numeric input to Decimal.
    None stays None so "not set" remains distinguishable from zero.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", field_name)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number", field_name)
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a finite number", field_name)
    return result


def to_non_negative_decimal(value: Optional[NumberLike], field_name: str) -> Optional[Decimal]:
    """Coerce to Decimal and reject negative values."""
    result = to_decimal(value, field_name)
    if result is not None and result < ZERO:
        raise ValidationError(f"{field_name} cannot be negative", field_name)
    return result


def quantize(value: Decimal, places: int = 2) -> Decimal:
    """Round half-up to a fixed number of decimal places."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.
    Value objects are immutable and are compared by their values.
    """

    def __post_init__(self):
        """Validate value object after creation."""
        self.validate()

    @abstractmethod
    def validate(self) -> None:
        """Validate the value object's state."""
        pass


# Common value objects

@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation."""

    value: str

    def validate(self) -> None:
        """Validate email format."""
        if not self.value:
            raise ValidationError("Email cannot be empty", "email")

        # Basic email validation
        if '@' not in self.value or '.' not in self.value.split('@')[1]:
            raise ValidationError(f"Invalid email format: {self.value}", "email")

        if len(self.value) > 255:
            raise ValidationError("Email too long (max 255 characters)", "email")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Inclusive reporting period.
    The end date covers its whole day, so an entry clocked in at 23:59 on
    the end date is still inside the range.
    """

    start: date
    end: date

    def validate(self) -> None:
        """Validate date range."""
        if self.end < self.start:
            raise ValidationError("End date cannot be before start date", "end_date")

    @property
    def start_at(self) -> datetime:
        """First instant of the range."""
        return datetime.combine(self.start, time.min)

    @property
    def end_at(self) -> datetime:
        """Last instant of the range."""
        return datetime.combine(self.end, time.max)

    def contains(self, moment: datetime) -> bool:
        """Check if a timestamp falls inside the range."""
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
        return self.start_at <= moment <= self.end_at
