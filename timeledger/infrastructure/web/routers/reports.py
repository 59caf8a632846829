"""
Reporting router.
Handles project revenue summaries and organization reports.
"""

import logging
from typing import Annotated, Dict, Type, Union
from fastapi import APIRouter, Depends, HTTPException, status

from timeledger.config import Settings, get_settings
from timeledger.application.use_cases.base_use_case import UseCaseResult
from timeledger.application.use_cases.report_use_cases import (
    CalculateProjectRevenueUseCase,
    OrganizationReportUseCase,
    GenerateTimeSummaryUseCase,
    GeneratePayrollUseCase,
    GenerateProjectCostAnalysisUseCase,
    GenerateTeamUtilizationUseCase,
    GenerateCostBreakdownUseCase
)
from timeledger.application.dto.report_dto import (
    CostBreakdownResponseDTO,
    OrganizationReportRequestDTO,
    PayrollResponseDTO,
    ProjectCostAnalysisResponseDTO,
    ProjectRevenueRequestDTO,
    ProjectRevenueResponseDTO,
    ReportType,
    TeamUtilizationResponseDTO,
    TimeSummaryResponseDTO
)
from timeledger.infrastructure.web.middleware.error_handler import status_for_error_code

logger = logging.getLogger(__name__)

router = APIRouter()

REPORT_USE_CASES: Dict[ReportType, Type[OrganizationReportUseCase]] = {
    ReportType.TIME_SUMMARY: GenerateTimeSummaryUseCase,
    ReportType.PAYROLL: GeneratePayrollUseCase,
    ReportType.PROJECT_COST_ANALYSIS: GenerateProjectCostAnalysisUseCase,
    ReportType.TEAM_UTILIZATION: GenerateTeamUtilizationUseCase,
    ReportType.COST_BREAKDOWN: GenerateCostBreakdownUseCase,
}

OrganizationReportResponse = Union[
    TimeSummaryResponseDTO,
    PayrollResponseDTO,
    ProjectCostAnalysisResponseDTO,
    TeamUtilizationResponseDTO,
    CostBreakdownResponseDTO
]


def unwrap(result: UseCaseResult):
    """Return the result data or raise the matching HTTP error."""
    if result.success:
        return result.data
    raise HTTPException(
        status_code=status_for_error_code(result.error_code),
        detail=result.error
    )


@router.post("/project-revenue", response_model=ProjectRevenueResponseDTO)
async def calculate_project_revenue(
    request: ProjectRevenueRequestDTO,
    settings: Annotated[Settings, Depends(get_settings)]
):
    """
    Compute the revenue summary of one project.

    - **project**: The project, with its hourly rate, fixed cost and estimate
    - **users**: Users referenced by entries, costs and memberships
    - **time_entries**: Time entries; running entries are ignored
    - **project_costs**: Manual cost records (legacy hourly rates, fixed costs, expenses)
    - **project_employees**: Memberships with project-specific rates
    """
    use_case = CalculateProjectRevenueUseCase(settings=settings)
    return unwrap(await use_case.execute(request))


@router.post("/organization/{report_type}", response_model=OrganizationReportResponse)
async def generate_organization_report(
    report_type: ReportType,
    request: OrganizationReportRequestDTO,
    settings: Annotated[Settings, Depends(get_settings)]
):
    """
    Generate an organization report for a date range.

    - **report_type**: time-summary, payroll, project-cost-analysis,
      team-utilization or cost-breakdown
    - **start_date** / **end_date**: Inclusive report period
    - **employee_ids**: Optional employee filter
    - **project_ids**: Optional project filter
    """
    use_case_class = REPORT_USE_CASES.get(report_type)
    if use_case_class is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported report type: {report_type}"
        )

    logger.debug("Report %s requested for organization %s", report_type.value, request.organization_id)
    use_case = use_case_class(settings=settings)
    return unwrap(await use_case.execute(request))
