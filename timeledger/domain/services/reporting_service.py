"""Reporting service for organization-level payroll and cost reports.
Rolls the per-project revenue calculation up across an organization.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from timeledger.domain.models.base import DateRange, HUNDRED, ValidationError, ZERO
from timeledger.domain.models.project import CostType, Project, ProjectCost, ProjectEmployee
from timeledger.domain.models.time_entry import TimeEntry
from timeledger.domain.models.user import User
from timeledger.domain.services.revenue_aggregator import (
    CostedEntry,
    ProjectRevenueSummary,
    RevenueAggregator,
    breakdown_by_user
)

logger = logging.getLogger(__name__)

NO_PROJECT_NAME = "No Project"
UNASSIGNED_COST_LABEL = "All team members"


@dataclass
class OrganizationRecords:
    """
    Already fetched records of one organization for one reporting period.
    Time entries and cost records must be filtered to the period before
    they are handed to the reporting service.
    """

    organization_id: str
    users: Mapping[str, User] = field(default_factory=dict)
    projects: Sequence[Project] = field(default_factory=list)
    time_entries: Sequence[TimeEntry] = field(default_factory=list)
    project_costs: Sequence[ProjectCost] = field(default_factory=list)
    project_employees: Sequence[ProjectEmployee] = field(default_factory=list)

    def project_by_id(self) -> Dict[str, Project]:
        return {project.id: project for project in self.projects}

    def restricted_to(self, date_range: DateRange, costs_too: bool = False) -> "OrganizationRecords":
        """
        Copy keeping only time entries clocked in inside the range.
        Cost records carry rates and fixed revenue regardless of when they
        were entered, so they are only filtered by creation date on request.
        """
        project_costs = self.project_costs
        if costs_too:
            project_costs = [cost for cost in project_costs if date_range.contains(cost.created_at)]
        return OrganizationRecords(
            organization_id=self.organization_id,
            users=self.users,
            projects=self.projects,
            time_entries=[entry for entry in self.time_entries if date_range.contains(entry.clock_in)],
            project_costs=project_costs,
            project_employees=self.project_employees
        )


@dataclass(frozen=True)
class EmployeeTimeRow:
    user_id: str
    name: str
    email: Optional[str]
    hours: Decimal
    cost: Decimal
    entries: int


@dataclass(frozen=True)
class ProjectTimeRow:
    project_id: Optional[str]
    project_name: str
    hours: Decimal
    cost: Decimal
    entries: int


@dataclass(frozen=True)
class TimeSummaryReport:
    total_hours: Decimal
    total_cost: Decimal
    employee_breakdown: Tuple[EmployeeTimeRow, ...]
    project_breakdown: Tuple[ProjectTimeRow, ...]
    entries: Tuple[CostedEntry, ...]


@dataclass(frozen=True)
class PayrollRow:
    user_id: str
    name: str
    email: Optional[str]
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    gross_pay: Decimal
    entries: int


@dataclass(frozen=True)
class PayrollReport:
    overtime_threshold_hours: Decimal
    rows: Tuple[PayrollRow, ...]
    total_hours: Decimal
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    total_gross_pay: Decimal


@dataclass(frozen=True)
class ProjectCostRow:
    project_id: str
    project_name: str
    summary: ProjectRevenueSummary
    expenses: Decimal
    profit: Decimal
    profit_margin: Optional[Decimal]
    roi: Optional[Decimal]


@dataclass(frozen=True)
class ProjectCostAnalysisReport:
    rows: Tuple[ProjectCostRow, ...]
    total_revenue: Decimal
    total_expenses: Decimal
    total_profit: Decimal
    total_hours: Decimal


@dataclass(frozen=True)
class UtilizationRow:
    user_id: str
    name: str
    email: Optional[str]
    hours: Decimal
    utilization_percentage: Decimal
    project_hours: Tuple[Tuple[str, Decimal], ...]


@dataclass(frozen=True)
class CostBreakdownRow:
    cost_id: Optional[str]
    project_id: str
    project_name: str
    cost_type: str
    amount: Decimal
    description: Optional[str]
    assigned_to: str
    created_by: Optional[str]
    created_at: datetime


def percentage(numerator: Decimal, denominator: Decimal) -> Optional[Decimal]:
    """numerator / denominator as a percentage, None when undefined."""
    if denominator <= ZERO:
        return None
    return numerator / denominator * HUNDRED


class ReportingService:
    """
    Domain service for organization reports.
    Every report resolves rates per time entry exactly like the project
    revenue summary does, then rolls the results up.
    """

    def __init__(
        self,
        aggregator: Optional[RevenueAggregator] = None,
        overtime_threshold_hours: Decimal = Decimal("40"),
        utilization_capacity_hours: Decimal = Decimal("160")
    ):
        if overtime_threshold_hours < ZERO:
            raise ValidationError("Overtime threshold cannot be negative", "overtime_threshold_hours")
        if utilization_capacity_hours <= ZERO:
            raise ValidationError("Utilization capacity must be positive", "utilization_capacity_hours")

        self.aggregator = aggregator or RevenueAggregator()
        self.overtime_threshold_hours = Decimal(str(overtime_threshold_hours))
        self.utilization_capacity_hours = Decimal(str(utilization_capacity_hours))

    # ---------- Per-entry pricing ----------

    def cost_entries(self, records: OrganizationRecords) -> List[CostedEntry]:
        """
        Price every closed entry of the organization, in input order.
        Entries without a known project only fall back to the user's
        default rate.
        """
        projects = records.project_by_id()
        by_project: Dict[Optional[str], List[TimeEntry]] = {}
        for entry in records.time_entries:
            if not entry.is_billable:
                continue
            key = entry.project_id if entry.project_id in projects else None
            by_project.setdefault(key, []).append(entry)

        priced: Dict[int, CostedEntry] = {}
        for project_id, entries in by_project.items():
            if project_id is None:
                for entry in entries:
                    rate = self.aggregator.rate_resolver.resolve_rate(
                        entry.user_id, None, [], {}, user=records.users.get(entry.user_id)
                    )
                    priced[id(entry)] = CostedEntry(entry=entry, rate=rate, cost=entry.total_hours * rate)
                continue

            lines = self.aggregator.cost_entries(
                projects[project_id],
                entries,
                records.project_costs,
                records.project_employees,
                records.users
            )
            for line in lines:
                priced[id(line.entry)] = line

        return [priced[id(entry)] for entry in records.time_entries if id(entry) in priced]

    # ---------- Reports ----------

    def project_summaries(self, records: OrganizationRecords) -> List[ProjectRevenueSummary]:
        """Revenue summary of every project of the organization."""
        return [
            self.aggregator.aggregate(
                project,
                records.time_entries,
                records.project_costs,
                records.project_employees,
                records.users
            )
            for project in records.projects
        ]

    def time_summary(self, records: OrganizationRecords) -> TimeSummaryReport:
        """Hours and labor cost by employee and by project."""
        lines = self.cost_entries(records)
        projects = records.project_by_id()

        employee_rows = [
            EmployeeTimeRow(
                user_id=row.user_id,
                name=self._user_name(records, row.user_id),
                email=self._user_email(records, row.user_id),
                hours=row.hours,
                cost=row.cost,
                entries=row.entries
            )
            for row in breakdown_by_user(lines)
        ]

        project_totals: Dict[Optional[str], List] = {}
        for line in lines:
            key = line.entry.project_id if line.entry.project_id in projects else None
            bucket = project_totals.setdefault(key, [ZERO, ZERO, 0])
            bucket[0] += line.hours
            bucket[1] += line.cost
            bucket[2] += 1

        project_rows = [
            ProjectTimeRow(
                project_id=project_id,
                project_name=projects[project_id].display_name if project_id else NO_PROJECT_NAME,
                hours=hours,
                cost=cost,
                entries=entries
            )
            for project_id, (hours, cost, entries) in project_totals.items()
        ]
        project_rows.sort(key=lambda row: row.hours, reverse=True)

        logger.debug("Time summary for %s: %d entries", records.organization_id, len(lines))

        return TimeSummaryReport(
            total_hours=sum((line.hours for line in lines), ZERO),
            total_cost=sum((line.cost for line in lines), ZERO),
            employee_breakdown=tuple(employee_rows),
            project_breakdown=tuple(project_rows),
            entries=tuple(lines)
        )

    def payroll(self, records: OrganizationRecords) -> PayrollReport:
        """
        Hours and gross pay per employee.
        Overtime is everything above the threshold within the whole report
        period; no per-week boundary is detected.
        """
        threshold = self.overtime_threshold_hours
        rows = []
        for row in breakdown_by_user(self.cost_entries(records)):
            rows.append(PayrollRow(
                user_id=row.user_id,
                name=self._user_name(records, row.user_id),
                email=self._user_email(records, row.user_id),
                total_hours=row.hours,
                regular_hours=min(row.hours, threshold),
                overtime_hours=max(row.hours - threshold, ZERO),
                gross_pay=row.cost,
                entries=row.entries
            ))

        return PayrollReport(
            overtime_threshold_hours=threshold,
            rows=tuple(rows),
            total_hours=sum((row.total_hours for row in rows), ZERO),
            total_regular_hours=sum((row.regular_hours for row in rows), ZERO),
            total_overtime_hours=sum((row.overtime_hours for row in rows), ZERO),
            total_gross_pay=sum((row.gross_pay for row in rows), ZERO)
        )

    def project_cost_analysis(self, records: OrganizationRecords) -> ProjectCostAnalysisReport:
        """Revenue against recorded expenses, per project and in total."""
        rows = []
        for project, summary in zip(records.projects, self.project_summaries(records)):
            expenses = sum(
                (
                    cost.amount for cost in records.project_costs
                    if cost.project_id == project.id and cost.cost_type == CostType.EXPENSE
                ),
                ZERO
            )
            profit = summary.total_revenue - expenses
            rows.append(ProjectCostRow(
                project_id=project.id,
                project_name=project.display_name,
                summary=summary,
                expenses=expenses,
                profit=profit,
                profit_margin=percentage(profit, summary.total_revenue),
                roi=percentage(profit, expenses)
            ))

        return ProjectCostAnalysisReport(
            rows=tuple(rows),
            total_revenue=sum((row.summary.total_revenue for row in rows), ZERO),
            total_expenses=sum((row.expenses for row in rows), ZERO),
            total_profit=sum((row.profit for row in rows), ZERO),
            total_hours=sum((row.summary.total_hours for row in rows), ZERO)
        )

    def team_utilization(self, records: OrganizationRecords) -> List[UtilizationRow]:
        """
        Worked hours of every member over the configured capacity, capped at 100.
        Members without entries are listed with zero hours.
        """
        projects = records.project_by_id()
        hours_by_user: Dict[str, Dict[str, Decimal]] = {}
        for entry in records.time_entries:
            if not entry.is_billable:
                continue
            project = projects.get(entry.project_id)
            project_name = project.display_name if project else NO_PROJECT_NAME
            per_project = hours_by_user.setdefault(entry.user_id, {})
            per_project[project_name] = per_project.get(project_name, ZERO) + entry.total_hours

        user_ids = list(records.users)
        user_ids.extend(user_id for user_id in hours_by_user if user_id not in records.users)

        rows = []
        for user_id in user_ids:
            per_project = hours_by_user.get(user_id, {})
            hours = sum(per_project.values(), ZERO)
            rows.append(UtilizationRow(
                user_id=user_id,
                name=self._user_name(records, user_id),
                email=self._user_email(records, user_id),
                hours=hours,
                utilization_percentage=min(hours / self.utilization_capacity_hours * HUNDRED, HUNDRED),
                project_hours=tuple(per_project.items())
            ))
        return rows

    def cost_breakdown(self, records: OrganizationRecords) -> List[CostBreakdownRow]:
        """Every cost record of the organization's projects, newest first."""
        projects = records.project_by_id()
        rows = []
        for cost in records.project_costs:
            project = projects.get(cost.project_id)
            if project is None:
                continue
            rows.append(CostBreakdownRow(
                cost_id=cost.id,
                project_id=project.id,
                project_name=project.display_name,
                cost_type=cost.cost_type.label,
                amount=cost.amount,
                description=cost.description,
                assigned_to=cost.user.display_name if cost.user else UNASSIGNED_COST_LABEL,
                created_by=cost.created_by.display_name if cost.created_by else None,
                created_at=cost.created_at
            ))
        rows.sort(key=lambda row: row.created_at, reverse=True)
        return rows

    # ---------- Helpers ----------

    @staticmethod
    def _user_name(records: OrganizationRecords, user_id: str) -> str:
        user = records.users.get(user_id)
        return user.display_name if user else user_id

    @staticmethod
    def _user_email(records: OrganizationRecords, user_id: str) -> Optional[str]:
        user = records.users.get(user_id)
        return user.email if user else None
