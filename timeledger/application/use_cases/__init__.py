"""
Application layer use cases.
Revenue and payroll reporting for time tracked against projects.
"""

from .base_use_case import UseCaseResult, BaseUseCase, QueryUseCase
from .report_use_cases import (
    CalculateProjectRevenueUseCase,
    OrganizationReportUseCase,
    GenerateTimeSummaryUseCase,
    GeneratePayrollUseCase,
    GenerateProjectCostAnalysisUseCase,
    GenerateTeamUtilizationUseCase,
    GenerateCostBreakdownUseCase
)

__all__ = [
    "UseCaseResult",
    "BaseUseCase",
    "QueryUseCase",
    "CalculateProjectRevenueUseCase",
    "OrganizationReportUseCase",
    "GenerateTimeSummaryUseCase",
    "GeneratePayrollUseCase",
    "GenerateProjectCostAnalysisUseCase",
    "GenerateTeamUtilizationUseCase",
    "GenerateCostBreakdownUseCase",
]
