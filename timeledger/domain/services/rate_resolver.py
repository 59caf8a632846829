"""Rate resolver for determining the effective hourly billing rate.
Resolves a user's rate on a project through the configured fallback chain.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from timeledger.domain.models.base import ZERO
from timeledger.domain.models.project import CostType, Project, ProjectCost, ProjectEmployee
from timeledger.domain.models.user import User

logger = logging.getLogger(__name__)


def build_legacy_hourly_costs(project_costs: Iterable[ProjectCost]) -> Dict[str, Decimal]:
    """
    Map user email to the manually entered hourly rate of legacy cost records.

    Only ``HOURLY_RATE`` records assigned to a user count. When several
    records share an email the last one in iteration order wins, so callers
    pass costs ordered oldest-first and the newest record takes effect.
    """
    rates: Dict[str, Decimal] = {}
    for cost in project_costs:
        if cost.cost_type == CostType.HOURLY_RATE and cost.user is not None:
            rates[cost.user.email] = cost.amount
    return rates


class RateResolver:
    """
    Domain service resolving the effective hourly rate for a (user, project) pair.

    Resolution order, first match wins:

    1. legacy ``HOURLY_RATE`` cost record for the user's email;
    2. the user's ProjectEmployee rate on this project;
    3. the user's default hourly rate;
    4. the project's hourly rate;
    5. zero.

    The legacy record outranks a newer membership rate. That asymmetry is
    kept for compatibility with cost records created before memberships
    carried rates.
    """

    def resolve_rate(
        self,
        user_id: str,
        project: Optional[Project],
        project_employees: Iterable[ProjectEmployee],
        legacy_hourly_costs: Mapping[str, Decimal],
        user: Optional[User] = None
    ) -> Decimal:
        """
        Return the effective hourly rate, never negative and never raising.
        ``user`` supplies the email and default rate. When omitted it is taken
        from the user's membership rows; a user with neither skips those two
        sources. ``project`` is None for entries not assigned to any project.
        """
        project_employees = list(project_employees)
        if user is None:
            user = self.member_user(user_id, project_employees)

        if user is not None and user.email in legacy_hourly_costs:
            return legacy_hourly_costs[user.email]

        if project is not None:
            employee_rate = self.project_employee_rate(user_id, project, project_employees)
            if employee_rate is not None:
                return employee_rate

        if user is not None and user.default_hourly_rate is not None:
            return user.default_hourly_rate

        if project is not None and project.hourly_rate is not None:
            return project.hourly_rate

        logger.debug("No rate configured for user %s on project %s", user_id, getattr(project, "id", None))
        return ZERO

    @staticmethod
    def member_user(user_id: str, project_employees: Iterable[ProjectEmployee]) -> Optional[User]:
        """User record carried by any membership row of ``user_id``."""
        for employee in project_employees:
            if employee.user_id == user_id:
                return employee.user
        return None

    @staticmethod
    def project_employee_rate(
        user_id: str,
        project: Project,
        project_employees: Iterable[ProjectEmployee]
    ) -> Optional[Decimal]:
        """
        Rate override of the user's membership on the project, if any.
        An active membership is preferred over soft-deleted ones.
        """
        fallback: Optional[Decimal] = None
        for employee in project_employees:
            if employee.user_id != user_id or employee.project_id != project.id:
                continue
            if employee.hourly_rate is None:
                continue
            if employee.is_active:
                return employee.hourly_rate
            if fallback is None:
                fallback = employee.hourly_rate
        return fallback


def sort_costs_oldest_first(project_costs: Iterable[ProjectCost]) -> List[ProjectCost]:
    """Order cost records by creation time so the newest legacy rate wins."""
    return sorted(project_costs, key=lambda cost: cost.created_at)
