"""
Report DTOs for the application layer.
Data Transfer Objects for project revenue and organization reports.
"""

from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pydantic import Field, model_validator

from timeledger.domain.services.revenue_aggregator import ProjectRevenueSummary, UserRevenueBreakdown
from timeledger.domain.services.reporting_service import (
    CostBreakdownRow,
    PayrollReport,
    ProjectCostAnalysisReport,
    ProjectCostRow,
    TimeSummaryReport,
    UtilizationRow
)

from .base_dto import (
    RequestDTO,
    ResponseDTO,
    StatsResponseDTO,
    round_hours,
    round_money,
    round_percentage
)
from .record_dto import (
    ProjectCostRecordDTO,
    ProjectEmployeeRecordDTO,
    ProjectRecordDTO,
    TimeEntryRecordDTO,
    UserRecordDTO
)


class ReportType(str, Enum):
    """Organization report kinds."""
    TIME_SUMMARY = "time-summary"
    PAYROLL = "payroll"
    PROJECT_COST_ANALYSIS = "project-cost-analysis"
    TEAM_UTILIZATION = "team-utilization"
    COST_BREAKDOWN = "cost-breakdown"


# Request DTOs
class ProjectRevenueRequestDTO(RequestDTO):
    """DTO for computing the revenue summary of one project."""

    project: ProjectRecordDTO = Field(description="The project")
    users: List[UserRecordDTO] = Field(default_factory=list, description="Users referenced by the records")
    time_entries: List[TimeEntryRecordDTO] = Field(default_factory=list, description="Project time entries")
    project_costs: List[ProjectCostRecordDTO] = Field(default_factory=list, description="Project cost records")
    project_employees: List[ProjectEmployeeRecordDTO] = Field(
        default_factory=list, description="Project memberships"
    )


class OrganizationReportRequestDTO(RequestDTO):
    """DTO for organization reports over a date range."""

    organization_id: str = Field(min_length=1, description="Organization ID")
    start_date: date = Field(description="First day of the report period")
    end_date: date = Field(description="Last day of the report period, inclusive")
    employee_ids: Optional[List[str]] = Field(default=None, description="Restrict to these employees")
    project_ids: Optional[List[str]] = Field(default=None, description="Restrict to these projects")

    users: List[UserRecordDTO] = Field(default_factory=list, description="Organization members")
    projects: List[ProjectRecordDTO] = Field(default_factory=list, description="Organization projects")
    time_entries: List[TimeEntryRecordDTO] = Field(default_factory=list, description="Time entries")
    project_costs: List[ProjectCostRecordDTO] = Field(default_factory=list, description="Cost records")
    project_employees: List[ProjectEmployeeRecordDTO] = Field(
        default_factory=list, description="Project memberships"
    )

    @model_validator(mode="after")
    def validate_date_range(self):
        """Validate that end_date is not before start_date."""
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


# Response DTOs
class UserRevenueBreakdownDTO(ResponseDTO):
    """Hours and revenue of one user on a project."""

    user_id: str
    hours: Decimal
    cost: Decimal
    entries: int

    @classmethod
    def from_domain(cls, row: UserRevenueBreakdown, currency_places: int = 2) -> "UserRevenueBreakdownDTO":
        return cls(
            user_id=row.user_id,
            hours=round_hours(row.hours),
            cost=round_money(row.cost, currency_places),
            entries=row.entries
        )


class ProjectRevenueResponseDTO(ResponseDTO):
    """DTO for a project revenue summary."""

    project_id: str
    total_revenue: Decimal
    fixed_revenue: Decimal
    variable_revenue: Decimal
    total_hours: Decimal
    unique_contributors: int
    completion_percentage: Optional[Decimal] = Field(
        default=None, description="None when the project has no hour estimate"
    )
    per_user_breakdown: List[UserRevenueBreakdownDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(
        cls,
        summary: ProjectRevenueSummary,
        currency_places: int = 2,
        percentage_places: int = 1
    ) -> "ProjectRevenueResponseDTO":
        return cls(
            project_id=summary.project_id,
            total_revenue=round_money(summary.total_revenue, currency_places),
            fixed_revenue=round_money(summary.fixed_revenue, currency_places),
            variable_revenue=round_money(summary.variable_revenue, currency_places),
            total_hours=round_hours(summary.total_hours),
            unique_contributors=summary.unique_contributors,
            completion_percentage=round_percentage(summary.completion_percentage, percentage_places),
            per_user_breakdown=[
                UserRevenueBreakdownDTO.from_domain(row, currency_places)
                for row in summary.per_user_breakdown
            ]
        )


class EmployeeTimeDTO(ResponseDTO):
    user_id: str
    name: str
    email: Optional[str] = None
    hours: Decimal
    cost: Decimal
    entries: int


class ProjectTimeDTO(ResponseDTO):
    project_id: Optional[str] = None
    project_name: str
    hours: Decimal
    cost: Decimal
    entries: int


class TimeEntryLineDTO(ResponseDTO):
    id: Optional[str] = None
    user_id: str
    project_id: Optional[str] = None
    clock_in: datetime
    clock_out: Optional[datetime] = None
    total_hours: Decimal
    hourly_rate: Decimal
    calculated_cost: Decimal
    description: Optional[str] = None


class TimeSummaryResponseDTO(StatsResponseDTO):
    """DTO for the time tracking summary report."""

    total_hours: Decimal
    total_cost: Decimal
    employee_breakdown: List[EmployeeTimeDTO]
    project_breakdown: List[ProjectTimeDTO]
    time_entries: List[TimeEntryLineDTO]

    @classmethod
    def from_domain(
        cls,
        report: TimeSummaryReport,
        period_start: date,
        period_end: date,
        currency_places: int = 2
    ) -> "TimeSummaryResponseDTO":
        return cls(
            period_start=period_start,
            period_end=period_end,
            total_hours=round_hours(report.total_hours),
            total_cost=round_money(report.total_cost, currency_places),
            employee_breakdown=[
                EmployeeTimeDTO(
                    user_id=row.user_id,
                    name=row.name,
                    email=row.email,
                    hours=round_hours(row.hours),
                    cost=round_money(row.cost, currency_places),
                    entries=row.entries
                )
                for row in report.employee_breakdown
            ],
            project_breakdown=[
                ProjectTimeDTO(
                    project_id=row.project_id,
                    project_name=row.project_name,
                    hours=round_hours(row.hours),
                    cost=round_money(row.cost, currency_places),
                    entries=row.entries
                )
                for row in report.project_breakdown
            ],
            time_entries=[
                TimeEntryLineDTO(
                    id=line.entry.id,
                    user_id=line.entry.user_id,
                    project_id=line.entry.project_id,
                    clock_in=line.entry.clock_in,
                    clock_out=line.entry.clock_out,
                    total_hours=round_hours(line.hours),
                    hourly_rate=round_money(line.rate, currency_places),
                    calculated_cost=round_money(line.cost, currency_places),
                    description=line.entry.description
                )
                for line in report.entries
            ]
        )


class PayrollRowDTO(ResponseDTO):
    user_id: str
    name: str
    email: Optional[str] = None
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    gross_pay: Decimal
    entries: int


class PayrollResponseDTO(StatsResponseDTO):
    """DTO for the payroll report."""

    overtime_threshold_hours: Decimal
    rows: List[PayrollRowDTO]
    total_hours: Decimal
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    total_gross_pay: Decimal

    @classmethod
    def from_domain(
        cls,
        report: PayrollReport,
        period_start: date,
        period_end: date,
        currency_places: int = 2
    ) -> "PayrollResponseDTO":
        return cls(
            period_start=period_start,
            period_end=period_end,
            overtime_threshold_hours=report.overtime_threshold_hours,
            rows=[
                PayrollRowDTO(
                    user_id=row.user_id,
                    name=row.name,
                    email=row.email,
                    total_hours=round_hours(row.total_hours),
                    regular_hours=round_hours(row.regular_hours),
                    overtime_hours=round_hours(row.overtime_hours),
                    gross_pay=round_money(row.gross_pay, currency_places),
                    entries=row.entries
                )
                for row in report.rows
            ],
            total_hours=round_hours(report.total_hours),
            total_regular_hours=round_hours(report.total_regular_hours),
            total_overtime_hours=round_hours(report.total_overtime_hours),
            total_gross_pay=round_money(report.total_gross_pay, currency_places)
        )


class ProjectCostDTO(ResponseDTO):
    project_id: str
    project_name: str
    summary: ProjectRevenueResponseDTO
    expenses: Decimal
    profit: Decimal
    profit_margin: Optional[Decimal] = Field(default=None, description="None without revenue")
    roi: Optional[Decimal] = Field(default=None, description="None without expenses")

    @classmethod
    def from_domain(
        cls,
        row: ProjectCostRow,
        currency_places: int = 2,
        percentage_places: int = 1
    ) -> "ProjectCostDTO":
        return cls(
            project_id=row.project_id,
            project_name=row.project_name,
            summary=ProjectRevenueResponseDTO.from_domain(row.summary, currency_places, percentage_places),
            expenses=round_money(row.expenses, currency_places),
            profit=round_money(row.profit, currency_places),
            profit_margin=round_percentage(row.profit_margin, percentage_places),
            roi=round_percentage(row.roi, percentage_places)
        )


class ProjectCostAnalysisResponseDTO(StatsResponseDTO):
    """DTO for the project cost analysis report."""

    projects: List[ProjectCostDTO]
    total_revenue: Decimal
    total_expenses: Decimal
    total_profit: Decimal
    total_hours: Decimal

    @classmethod
    def from_domain(
        cls,
        report: ProjectCostAnalysisReport,
        period_start: date,
        period_end: date,
        currency_places: int = 2,
        percentage_places: int = 1
    ) -> "ProjectCostAnalysisResponseDTO":
        return cls(
            period_start=period_start,
            period_end=period_end,
            projects=[
                ProjectCostDTO.from_domain(row, currency_places, percentage_places)
                for row in report.rows
            ],
            total_revenue=round_money(report.total_revenue, currency_places),
            total_expenses=round_money(report.total_expenses, currency_places),
            total_profit=round_money(report.total_profit, currency_places),
            total_hours=round_hours(report.total_hours)
        )


class ProjectHoursDTO(ResponseDTO):
    project_name: str
    hours: Decimal


class UtilizationRowDTO(ResponseDTO):
    user_id: str
    name: str
    email: Optional[str] = None
    hours: Decimal
    utilization_percentage: Decimal
    project_breakdown: List[ProjectHoursDTO]

    @classmethod
    def from_domain(cls, row: UtilizationRow, percentage_places: int = 1) -> "UtilizationRowDTO":
        return cls(
            user_id=row.user_id,
            name=row.name,
            email=row.email,
            hours=round_hours(row.hours),
            utilization_percentage=round_percentage(row.utilization_percentage, percentage_places),
            project_breakdown=[
                ProjectHoursDTO(project_name=name, hours=round_hours(hours))
                for name, hours in row.project_hours
            ]
        )


class TeamUtilizationResponseDTO(StatsResponseDTO):
    """DTO for the team utilization report."""

    capacity_hours: Decimal
    rows: List[UtilizationRowDTO]


class CostBreakdownRowDTO(ResponseDTO):
    cost_id: Optional[str] = None
    project_id: str
    project_name: str
    cost_type: str
    amount: Decimal
    description: Optional[str] = None
    assigned_to: str
    created_by: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, row: CostBreakdownRow, currency_places: int = 2) -> "CostBreakdownRowDTO":
        return cls(
            cost_id=row.cost_id,
            project_id=row.project_id,
            project_name=row.project_name,
            cost_type=row.cost_type,
            amount=round_money(row.amount, currency_places),
            description=row.description,
            assigned_to=row.assigned_to,
            created_by=row.created_by,
            created_at=row.created_at
        )


class CostBreakdownResponseDTO(StatsResponseDTO):
    """DTO for the cost breakdown report."""

    rows: List[CostBreakdownRowDTO]
    total_amount: Decimal
