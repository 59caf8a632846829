"""
Application layer DTOs.
Data Transfer Objects for API requests and responses.
"""

from .base_dto import *
from .record_dto import *
from .report_dto import *

__all__ = [
    # Base DTOs
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "StatsResponseDTO",
    "round_money",
    "round_hours",
    "round_percentage",

    # Record DTOs
    "UserRecordDTO",
    "ProjectRecordDTO",
    "ProjectEmployeeRecordDTO",
    "TimeEntryRecordDTO",
    "ProjectCostRecordDTO",

    # Report DTOs
    "ReportType",
    "ProjectRevenueRequestDTO",
    "OrganizationReportRequestDTO",
    "UserRevenueBreakdownDTO",
    "ProjectRevenueResponseDTO",
    "EmployeeTimeDTO",
    "ProjectTimeDTO",
    "TimeEntryLineDTO",
    "TimeSummaryResponseDTO",
    "PayrollRowDTO",
    "PayrollResponseDTO",
    "ProjectCostDTO",
    "ProjectCostAnalysisResponseDTO",
    "ProjectHoursDTO",
    "UtilizationRowDTO",
    "TeamUtilizationResponseDTO",
    "CostBreakdownRowDTO",
    "CostBreakdownResponseDTO",
]
