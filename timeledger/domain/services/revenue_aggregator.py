"""Revenue aggregator for project revenue and cost summaries.
Combines time entries, cost records and memberships into a revenue summary.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from timeledger.domain.models.base import HUNDRED, ZERO
from timeledger.domain.models.project import CostType, Project, ProjectCost, ProjectEmployee
from timeledger.domain.models.time_entry import TimeEntry
from timeledger.domain.models.user import User
from timeledger.domain.services.rate_resolver import RateResolver, build_legacy_hourly_costs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostedEntry:
    """A closed time entry priced at its resolved rate."""

    entry: TimeEntry
    rate: Decimal
    cost: Decimal

    @property
    def hours(self) -> Decimal:
        return self.entry.total_hours


@dataclass(frozen=True)
class UserRevenueBreakdown:
    """Hours and revenue contributed by one user."""

    user_id: str
    hours: Decimal
    cost: Decimal
    entries: int


@dataclass(frozen=True)
class ProjectRevenueSummary:
    """Revenue totals of one project."""

    project_id: str
    total_revenue: Decimal
    fixed_revenue: Decimal
    variable_revenue: Decimal
    total_hours: Decimal
    unique_contributors: int
    completion_percentage: Optional[Decimal]
    per_user_breakdown: Tuple[UserRevenueBreakdown, ...]


def completion_percentage(total_hours: Decimal, estimated_hours: Optional[Decimal]) -> Optional[Decimal]:
    """
    Share of the estimate already worked, capped at 100.
    None when the project has no positive estimate, which is not the same
    as 0 % complete.
    """
    if estimated_hours is None or estimated_hours <= ZERO:
        return None
    return min(total_hours / estimated_hours * HUNDRED, HUNDRED)


def breakdown_by_user(lines: Iterable[CostedEntry]) -> List[UserRevenueBreakdown]:
    """
    Per-user hours and cost, most hours first.
    Users with equal hours keep the order in which they first appear.
    """
    totals: Dict[str, List] = {}
    for line in lines:
        bucket = totals.setdefault(line.entry.user_id, [ZERO, ZERO, 0])
        bucket[0] += line.hours
        bucket[1] += line.cost
        bucket[2] += 1

    rows = [
        UserRevenueBreakdown(user_id=user_id, hours=hours, cost=cost, entries=entries)
        for user_id, (hours, cost, entries) in totals.items()
    ]
    rows.sort(key=lambda row: row.hours, reverse=True)
    return rows


class RevenueAggregator:
    """
    Domain service computing project revenue from hours and cost records.
    Stateless: every call only reads its own arguments.
    """

    def __init__(self, rate_resolver: Optional[RateResolver] = None):
        self.rate_resolver = rate_resolver or RateResolver()

    def cost_entries(
        self,
        project: Project,
        time_entries: Iterable[TimeEntry],
        project_costs: Iterable[ProjectCost],
        project_employees: Iterable[ProjectEmployee],
        users: Optional[Mapping[str, User]] = None
    ) -> List[CostedEntry]:
        """
        Price every closed time entry of the project at its resolved rate.
        Records belonging to other projects and entries still clocked in are
        skipped.
        """
        costs = [cost for cost in project_costs if cost.project_id == project.id]
        employees = [employee for employee in project_employees if employee.project_id == project.id]
        legacy_hourly_costs = build_legacy_hourly_costs(costs)
        directory = self._user_directory(users, employees, costs)

        lines: List[CostedEntry] = []
        for entry in time_entries:
            if entry.project_id != project.id or not entry.is_billable:
                continue

            rate = self.rate_resolver.resolve_rate(
                entry.user_id,
                project,
                employees,
                legacy_hourly_costs,
                user=directory.get(entry.user_id)
            )
            lines.append(CostedEntry(entry=entry, rate=rate, cost=entry.total_hours * rate))

        return lines

    def aggregate(
        self,
        project: Project,
        time_entries: Iterable[TimeEntry],
        project_costs: Iterable[ProjectCost],
        project_employees: Iterable[ProjectEmployee],
        users: Optional[Mapping[str, User]] = None
    ) -> ProjectRevenueSummary:
        """
        Summarize the project's revenue.
        A project without matching records yields a zeroed summary; only its
        own fixed cost still counts.
        """
        project_costs = list(project_costs)
        lines = self.cost_entries(project, time_entries, project_costs, project_employees, users)

        fixed_revenue = self.fixed_revenue(project, project_costs)
        variable_revenue = sum((line.cost for line in lines), ZERO)
        total_hours = sum((line.hours for line in lines), ZERO)
        breakdown = breakdown_by_user(lines)

        logger.debug(
            "Aggregated project %s: %d entries, %s hours, %s revenue",
            project.id, len(lines), total_hours, fixed_revenue + variable_revenue
        )

        return ProjectRevenueSummary(
            project_id=project.id,
            total_revenue=fixed_revenue + variable_revenue,
            fixed_revenue=fixed_revenue,
            variable_revenue=variable_revenue,
            total_hours=total_hours,
            unique_contributors=len(breakdown),
            completion_percentage=completion_percentage(total_hours, project.estimated_hours),
            per_user_breakdown=tuple(breakdown)
        )

    @staticmethod
    def fixed_revenue(project: Project, project_costs: Iterable[ProjectCost]) -> Decimal:
        """Project fixed cost plus every ``FIXED_COST`` record of the project."""
        total = project.fixed_cost if project.fixed_cost is not None else ZERO
        for cost in project_costs:
            if cost.project_id == project.id and cost.cost_type == CostType.FIXED_COST:
                total += cost.amount
        return total

    @staticmethod
    def _user_directory(
        users: Optional[Mapping[str, User]],
        employees: Iterable[ProjectEmployee],
        costs: Iterable[ProjectCost]
    ) -> Dict[str, User]:
        directory: Dict[str, User] = {}
        for cost in costs:
            if cost.user is not None:
                directory[cost.user.id] = cost.user
        for employee in employees:
            directory[employee.user.id] = employee.user
        if users:
            directory.update(users)
        return directory
