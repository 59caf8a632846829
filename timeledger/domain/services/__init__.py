"""
Domain services for the time tracking and payroll reporting core.
This module exports all domain services for rate and revenue calculations.
"""

from .rate_resolver import RateResolver, build_legacy_hourly_costs, sort_costs_oldest_first
from .revenue_aggregator import (
    RevenueAggregator,
    ProjectRevenueSummary,
    UserRevenueBreakdown,
    CostedEntry
)
from .reporting_service import ReportingService, OrganizationRecords
from .clock_service import ClockService

__all__ = [
    "RateResolver",
    "build_legacy_hourly_costs",
    "sort_costs_oldest_first",
    "RevenueAggregator",
    "ProjectRevenueSummary",
    "UserRevenueBreakdown",
    "CostedEntry",
    "ReportingService",
    "OrganizationRecords",
    "ClockService",
]
