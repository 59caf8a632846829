"""
Report use cases for the application layer.
Turns fetched records into project revenue summaries and organization reports.
"""

import logging
from typing import Dict, List, Optional, TypeVar

from timeledger.application.use_cases.base_use_case import QueryUseCase
from timeledger.application.dto.report_dto import (
    CostBreakdownResponseDTO,
    CostBreakdownRowDTO,
    OrganizationReportRequestDTO,
    PayrollResponseDTO,
    ProjectCostAnalysisResponseDTO,
    ProjectRevenueRequestDTO,
    ProjectRevenueResponseDTO,
    TeamUtilizationResponseDTO,
    TimeSummaryResponseDTO,
    UtilizationRowDTO
)
from timeledger.application.dto.base_dto import round_money
from timeledger.application.dto.record_dto import UserRecordDTO
from timeledger.config import Settings, get_settings
from timeledger.domain.models.base import DateRange, ZERO
from timeledger.domain.models.user import User
from timeledger.domain.services.rate_resolver import sort_costs_oldest_first
from timeledger.domain.services.reporting_service import OrganizationRecords, ReportingService
from timeledger.domain.services.revenue_aggregator import RevenueAggregator

logger = logging.getLogger(__name__)

R = TypeVar('R')


def build_user_directory(users: List[UserRecordDTO]) -> Dict[str, User]:
    return {record.id: record.to_domain() for record in users}


class CalculateProjectRevenueUseCase(QueryUseCase[ProjectRevenueRequestDTO, ProjectRevenueResponseDTO]):
    """Use case for the revenue summary of a single project."""

    def __init__(
        self,
        revenue_aggregator: Optional[RevenueAggregator] = None,
        settings: Optional[Settings] = None
    ):
        super().__init__()
        self.revenue_aggregator = revenue_aggregator or RevenueAggregator()
        self.settings = settings or get_settings()

    async def _execute_business_logic(self, request: ProjectRevenueRequestDTO) -> ProjectRevenueResponseDTO:
        users = build_user_directory(request.users)
        project = request.project.to_domain()

        summary = self.revenue_aggregator.aggregate(
            project,
            [record.to_domain() for record in request.time_entries],
            sort_costs_oldest_first(record.to_domain(users) for record in request.project_costs),
            [record.to_domain(users) for record in request.project_employees],
            users
        )

        logger.info(
            "Project %s revenue: %s over %s hours",
            project.id, summary.total_revenue, summary.total_hours
        )

        return ProjectRevenueResponseDTO.from_domain(
            summary,
            self.settings.currency_decimal_places,
            self.settings.percentage_decimal_places
        )


class OrganizationReportUseCase(QueryUseCase[OrganizationReportRequestDTO, R]):
    """
    Base class for organization reports over a date range.
    Builds the organization's records, applies the period and the optional
    employee and project filters, then hands them to the reporting service.
    """

    # Whether cost records are filtered by creation date as well
    filter_costs_by_period = False

    def __init__(
        self,
        reporting_service: Optional[ReportingService] = None,
        settings: Optional[Settings] = None
    ):
        super().__init__()
        self.settings = settings or get_settings()
        self.reporting_service = reporting_service or ReportingService(
            overtime_threshold_hours=self.settings.overtime_threshold_hours,
            utilization_capacity_hours=self.settings.utilization_capacity_hours
        )

    def _build_records(self, request: OrganizationReportRequestDTO) -> OrganizationRecords:
        users = build_user_directory(request.users)
        projects = [
            record.to_domain() for record in request.projects
            if record.organization_id == request.organization_id
        ]
        time_entries = [
            record.to_domain() for record in request.time_entries
            if record.organization_id in (None, request.organization_id)
        ]

        if request.employee_ids is not None:
            employee_ids = set(request.employee_ids)
            users = {user_id: user for user_id, user in users.items() if user_id in employee_ids}
            time_entries = [entry for entry in time_entries if entry.user_id in employee_ids]

        if request.project_ids is not None:
            project_ids = set(request.project_ids)
            projects = [project for project in projects if project.id in project_ids]
            time_entries = [entry for entry in time_entries if entry.project_id in project_ids]

        # Costs and memberships may reference users outside the employee filter
        all_users = build_user_directory(request.users)
        records = OrganizationRecords(
            organization_id=request.organization_id,
            users=users,
            projects=projects,
            time_entries=time_entries,
            project_costs=sort_costs_oldest_first(
                record.to_domain(all_users) for record in request.project_costs
            ),
            project_employees=[record.to_domain(all_users) for record in request.project_employees]
        )

        period = DateRange(start=request.start_date, end=request.end_date)
        return records.restricted_to(period, costs_too=self.filter_costs_by_period)

    async def _execute_business_logic(self, request: OrganizationReportRequestDTO) -> R:
        records = self._build_records(request)
        logger.info(
            "Generating %s for organization %s (%s to %s, %d entries)",
            type(self).__name__, request.organization_id,
            request.start_date, request.end_date, len(records.time_entries)
        )
        return self._build_report(records, request)

    def _build_report(self, records: OrganizationRecords, request: OrganizationReportRequestDTO) -> R:
        raise NotImplementedError


class GenerateTimeSummaryUseCase(OrganizationReportUseCase[TimeSummaryResponseDTO]):
    """Use case for the time tracking summary report."""

    def _build_report(
        self, records: OrganizationRecords, request: OrganizationReportRequestDTO
    ) -> TimeSummaryResponseDTO:
        report = self.reporting_service.time_summary(records)
        return TimeSummaryResponseDTO.from_domain(
            report, request.start_date, request.end_date, self.settings.currency_decimal_places
        )


class GeneratePayrollUseCase(OrganizationReportUseCase[PayrollResponseDTO]):
    """Use case for the payroll report."""

    def _build_report(
        self, records: OrganizationRecords, request: OrganizationReportRequestDTO
    ) -> PayrollResponseDTO:
        report = self.reporting_service.payroll(records)
        return PayrollResponseDTO.from_domain(
            report, request.start_date, request.end_date, self.settings.currency_decimal_places
        )


class GenerateProjectCostAnalysisUseCase(OrganizationReportUseCase[ProjectCostAnalysisResponseDTO]):
    """Use case for the project cost analysis report."""

    def _build_report(
        self, records: OrganizationRecords, request: OrganizationReportRequestDTO
    ) -> ProjectCostAnalysisResponseDTO:
        report = self.reporting_service.project_cost_analysis(records)
        return ProjectCostAnalysisResponseDTO.from_domain(
            report,
            request.start_date,
            request.end_date,
            self.settings.currency_decimal_places,
            self.settings.percentage_decimal_places
        )


class GenerateTeamUtilizationUseCase(OrganizationReportUseCase[TeamUtilizationResponseDTO]):
    """Use case for the team utilization report."""

    def _build_report(
        self, records: OrganizationRecords, request: OrganizationReportRequestDTO
    ) -> TeamUtilizationResponseDTO:
        rows = self.reporting_service.team_utilization(records)
        return TeamUtilizationResponseDTO(
            period_start=request.start_date,
            period_end=request.end_date,
            capacity_hours=self.reporting_service.utilization_capacity_hours,
            rows=[
                UtilizationRowDTO.from_domain(row, self.settings.percentage_decimal_places)
                for row in rows
            ]
        )


class GenerateCostBreakdownUseCase(OrganizationReportUseCase[CostBreakdownResponseDTO]):
    """Use case for the cost breakdown report. Costs are listed by creation date."""

    filter_costs_by_period = True

    def _build_report(
        self, records: OrganizationRecords, request: OrganizationReportRequestDTO
    ) -> CostBreakdownResponseDTO:
        rows = self.reporting_service.cost_breakdown(records)
        places = self.settings.currency_decimal_places
        return CostBreakdownResponseDTO(
            period_start=request.start_date,
            period_end=request.end_date,
            rows=[CostBreakdownRowDTO.from_domain(row, places) for row in rows],
            total_amount=round_money(sum((row.amount for row in rows), ZERO), places)
        )
