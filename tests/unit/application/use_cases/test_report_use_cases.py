"""
Unit tests for the report use cases.
"""

import pytest
from decimal import Decimal
from datetime import date, datetime, timezone
from pydantic import ValidationError as PydanticValidationError

from timeledger.config import Settings
from timeledger.application.dto.report_dto import OrganizationReportRequestDTO, ProjectRevenueRequestDTO
from timeledger.application.use_cases.base_use_case import UseCaseResult
from timeledger.application.use_cases.report_use_cases import (
    CalculateProjectRevenueUseCase,
    GenerateCostBreakdownUseCase,
    GeneratePayrollUseCase,
    GenerateProjectCostAnalysisUseCase,
    GenerateTeamUtilizationUseCase,
    GenerateTimeSummaryUseCase
)
from timeledger.domain.models.base import BusinessRuleViolation, ValidationError


USERS = [
    {"id": "alice", "email": "alice@example.com", "name": "Alice", "default_hourly_rate": "75"},
    {"id": "bob", "email": "bob@example.com", "default_hourly_rate": "30"},
]


def entry(user_id, project_id, clock_in, clock_out, hours):
    return {
        "user_id": user_id,
        "project_id": project_id,
        "organization_id": "org-1",
        "clock_in": clock_in,
        "clock_out": clock_out,
        "total_hours": hours,
    }


class TestUseCaseResult:
    """Test cases for UseCaseResult."""

    def test_success_result(self):
        """Test creating successful result."""
        result = UseCaseResult.success_result({"total": 1})

        assert result.success is True
        assert result.data == {"total": 1}
        assert result.error is None

    def test_from_validation_error_keeps_field(self):
        """Test validation errors carry their field in metadata."""
        result = UseCaseResult.from_exception(ValidationError("Amount is required", "amount"))

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"
        assert result.metadata == {"field": "amount"}

    def test_from_business_rule_violation(self):
        """Test business rule violations map to their error code."""
        result = UseCaseResult.from_exception(BusinessRuleViolation("Already clocked in"))

        assert result.error == "Already clocked in"
        assert result.error_code == "BUSINESS_RULE_VIOLATION"


class TestCalculateProjectRevenueUseCase:
    """Test cases for CalculateProjectRevenueUseCase."""

    def setup_method(self):
        """Set up test fixtures."""
        self.use_case = CalculateProjectRevenueUseCase(settings=Settings())
        self.payload = {
            "project": {
                "id": "project-1", "organization_id": "org-1", "name": "Website",
                "hourly_rate": "50", "fixed_cost": "1000", "estimated_hours": "40"
            },
            "users": USERS,
            "time_entries": [
                entry("alice", "project-1", "2024-03-04T09:00:00", "2024-03-04T19:00:00", "10"),
                entry("bob", "project-1", "2024-03-05T09:00:00", None, None),
            ],
            "project_employees": [{"project_id": "project-1", "user_id": "alice"}],
        }

    @pytest.mark.asyncio
    async def test_worked_example(self):
        """Test fixed cost plus hours at the user's default rate."""
        result = await self.use_case.execute(ProjectRevenueRequestDTO(**self.payload))

        assert result.success is True
        summary = result.data
        assert summary.total_revenue == Decimal("1750.00")
        assert summary.fixed_revenue == Decimal("1000.00")
        assert summary.variable_revenue == Decimal("750.00")
        assert summary.total_hours == Decimal("10.00")
        assert summary.unique_contributors == 1
        assert summary.completion_percentage == Decimal("25.0")
        assert summary.per_user_breakdown[0].user_id == "alice"
        assert "execution_time_seconds" in result.metadata

    @pytest.mark.asyncio
    async def test_newest_legacy_rate_wins(self):
        """Test legacy rate records are applied in creation order."""
        self.payload["project_costs"] = [
            {
                "project_id": "project-1", "cost_type": "HOURLY_RATE", "amount": "40",
                "user_id": "alice", "created_at": "2024-02-01T00:00:00Z"
            },
            {
                "project_id": "project-1", "cost_type": "HOURLY_RATE", "amount": "35",
                "user_id": "alice", "created_at": "2024-01-01T00:00:00Z"
            },
        ]
        result = await self.use_case.execute(ProjectRevenueRequestDTO(**self.payload))

        assert result.data.variable_revenue == Decimal("400.00")
        assert result.data.total_revenue == Decimal("1400.00")

    @pytest.mark.asyncio
    async def test_unknown_user_reference_is_an_error_result(self):
        """Test records referencing unknown users fail with a not found error."""
        self.payload["project_employees"] = [{"project_id": "project-1", "user_id": "ghost"}]
        result = await self.use_case.execute(ProjectRevenueRequestDTO(**self.payload))

        assert result.success is False
        assert result.error_code == "ENTITY_NOT_FOUND"
        assert result.error == "User with id ghost not found"
        assert result.metadata["exception_type"] == "EntityNotFoundError"

    def test_negative_values_are_rejected_at_the_boundary(self):
        """Test negative rates and hours never reach the domain."""
        self.payload["project"]["hourly_rate"] = "-50"
        with pytest.raises(PydanticValidationError):
            ProjectRevenueRequestDTO(**self.payload)

    def test_cost_records_require_creation_time(self):
        """Test cost records without a timestamp are rejected."""
        self.payload["project_costs"] = [
            {"project_id": "project-1", "cost_type": "HOURLY_RATE", "amount": "40", "user_id": "alice"}
        ]
        with pytest.raises(PydanticValidationError, match="created_at"):
            ProjectRevenueRequestDTO(**self.payload)

    @pytest.mark.asyncio
    async def test_hours_not_matching_timestamps_is_an_error_result(self):
        """Test entries whose hours disagree with their timestamps are reported as invalid."""
        self.payload["time_entries"][0]["total_hours"] = "12"
        result = await self.use_case.execute(ProjectRevenueRequestDTO(**self.payload))

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"
        assert result.metadata["field"] == "total_hours"

    def test_hours_on_open_entry_are_rejected(self):
        """Test hours require a clock-out."""
        self.payload["time_entries"][1]["total_hours"] = "3"
        with pytest.raises(PydanticValidationError, match="total_hours requires clock_out"):
            ProjectRevenueRequestDTO(**self.payload)


class TestOrganizationReportUseCases:
    """Test cases for the organization report use cases."""

    def setup_method(self):
        """Set up test fixtures."""
        self.settings = Settings()
        self.payload = {
            "organization_id": "org-1",
            "start_date": "2024-03-01",
            "end_date": "2024-03-31",
            "users": USERS,
            "projects": [
                {"id": "web", "organization_id": "org-1", "name": "Website", "fixed_cost": "500"},
                {"id": "app", "organization_id": "org-1", "name": "Mobile App", "hourly_rate": "80"},
                {"id": "other", "organization_id": "org-2", "name": "Elsewhere"},
            ],
            "time_entries": [
                entry("alice", "web", "2024-03-04T08:00:00", "2024-03-05T08:00:00", "24"),
                entry("alice", "app", "2024-03-11T08:00:00", "2024-03-12T06:00:00", "22"),
                entry("bob", "app", "2024-03-12T09:00:00", "2024-03-12T13:00:00", "4"),
                entry("bob", None, "2024-03-13T09:00:00", "2024-03-13T11:00:00", "2"),
                entry("alice", "web", "2024-04-01T09:00:00", "2024-04-01T17:00:00", "8"),
            ],
            "project_costs": [
                {
                    "id": "c1", "project_id": "web", "cost_type": "EXPENSE", "amount": "300",
                    "description": "Hosting", "created_at": "2024-03-02T10:00:00"
                },
                {
                    "id": "c2", "project_id": "app", "cost_type": "FIXED_COST", "amount": "1000",
                    "created_by_id": "alice", "created_at": "2024-02-15T10:00:00"
                },
            ],
        }

    def request(self, **overrides):
        return OrganizationReportRequestDTO(**{**self.payload, **overrides})

    def test_end_date_before_start_date_is_rejected(self):
        """Test the report period must be ordered."""
        with pytest.raises(PydanticValidationError, match="end_date must be on or after start_date"):
            self.request(start_date="2024-03-31", end_date="2024-03-01")

    @pytest.mark.asyncio
    async def test_payroll(self):
        """Test payroll over the period with overtime above 40 hours."""
        result = await GeneratePayrollUseCase(settings=self.settings).execute(self.request())

        assert result.success is True
        rows = {row.user_id: row for row in result.data.rows}
        assert rows["alice"].total_hours == Decimal("46.00")
        assert rows["alice"].regular_hours == Decimal("40.00")
        assert rows["alice"].overtime_hours == Decimal("6.00")
        assert rows["alice"].gross_pay == Decimal("3450.00")
        assert rows["bob"].gross_pay == Decimal("180.00")
        assert result.data.total_gross_pay == Decimal("3630.00")
        assert result.data.period_start == date(2024, 3, 1)

    @pytest.mark.asyncio
    async def test_payroll_threshold_from_settings(self):
        """Test the overtime threshold comes from configuration."""
        settings = Settings(overtime_threshold_hours=Decimal("20"))
        result = await GeneratePayrollUseCase(settings=settings).execute(self.request(employee_ids=["bob"]))

        assert [row.user_id for row in result.data.rows] == ["bob"]
        assert result.data.rows[0].regular_hours == Decimal("6.00")
        assert result.data.overtime_threshold_hours == Decimal("20")

    @pytest.mark.asyncio
    async def test_time_summary_with_project_filter(self):
        """Test project filtering drops other projects and unassigned entries."""
        result = await GenerateTimeSummaryUseCase(settings=self.settings).execute(
            self.request(project_ids=["app"])
        )

        report = result.data
        assert [row.project_name for row in report.project_breakdown] == ["Mobile App"]
        assert report.total_hours == Decimal("26.00")
        assert report.total_cost == Decimal("1770.00")
        assert len(report.time_entries) == 2

    @pytest.mark.asyncio
    async def test_project_cost_analysis(self):
        """Test revenue against expenses for the organization's projects."""
        result = await GenerateProjectCostAnalysisUseCase(settings=self.settings).execute(self.request())

        projects = {row.project_id: row for row in result.data.projects}
        assert set(projects) == {"web", "app"}
        assert projects["web"].summary.total_revenue == Decimal("2300.00")
        assert projects["web"].expenses == Decimal("300.00")
        assert projects["web"].profit == Decimal("2000.00")
        assert projects["web"].profit_margin == Decimal("87.0")
        assert projects["web"].roi == Decimal("666.7")
        assert projects["app"].roi is None

    @pytest.mark.asyncio
    async def test_team_utilization(self):
        """Test utilization percentages are rounded for presentation."""
        result = await GenerateTeamUtilizationUseCase(settings=self.settings).execute(self.request())

        rows = {row.user_id: row for row in result.data.rows}
        assert rows["alice"].utilization_percentage == Decimal("28.8")
        assert rows["bob"].utilization_percentage == Decimal("3.8")
        assert result.data.capacity_hours == Decimal("160")

    @pytest.mark.asyncio
    async def test_cost_breakdown_limited_to_period(self):
        """Test cost records are listed when created inside the period."""
        result = await GenerateCostBreakdownUseCase(settings=self.settings).execute(self.request())

        assert [row.cost_id for row in result.data.rows] == ["c1"]
        assert result.data.rows[0].cost_type == "Expense"
        assert result.data.rows[0].assigned_to == "All team members"
        assert result.data.total_amount == Decimal("300.00")

    @pytest.mark.asyncio
    async def test_aware_timestamps_are_normalized(self):
        """Test timestamps with offsets are compared in UTC."""
        late_entry = entry("bob", "app", "2024-04-01T01:00:00+02:00", "2024-04-01T03:00:00+02:00", "2")
        result = await GeneratePayrollUseCase(settings=self.settings).execute(
            self.request(time_entries=[late_entry])
        )

        assert result.data.rows[0].total_hours == Decimal("2.00")
        assert result.data.rows[0].gross_pay == Decimal("60.00")
