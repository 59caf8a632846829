"""
Domain models for the time tracking and payroll reporting core.
This module exports all domain entities and value objects.
"""

# Base classes
from .base import (
    BaseEntity,
    DomainException,
    ValidationError,
    BusinessRuleViolation,
    EntityNotFoundError,
    ValueObject,
    Email,
    DateRange
)

# Domain entities
from .user import User

from .project import (
    Project,
    ProjectEmployee,
    ProjectCost,
    CostType
)

from .time_entry import TimeEntry

__all__ = [
    "BaseEntity",
    "DomainException",
    "ValidationError",
    "BusinessRuleViolation",
    "EntityNotFoundError",
    "ValueObject",
    "Email",
    "DateRange",
    "User",
    "Project",
    "ProjectEmployee",
    "ProjectCost",
    "CostType",
    "TimeEntry",
]
