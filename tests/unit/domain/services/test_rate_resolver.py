"""
Unit tests for RateResolver domain service.
"""

from decimal import Decimal
from datetime import datetime

from timeledger.domain.models.project import CostType, Project, ProjectCost, ProjectEmployee
from timeledger.domain.models.user import User
from timeledger.domain.services.rate_resolver import (
    RateResolver,
    build_legacy_hourly_costs,
    sort_costs_oldest_first
)


class TestRateResolver:
    """Test cases for RateResolver domain service."""

    def setup_method(self):
        """Set up test fixtures."""
        self.resolver = RateResolver()
        self.user = User(id="user-a", email="a@example.com", default_hourly_rate="75")
        self.project = Project(id="project-1", organization_id="org-1", hourly_rate="50")
        self.employee = ProjectEmployee(project_id="project-1", user=self.user, hourly_rate="60")
        self.legacy = {"a@example.com": Decimal("40")}

    def test_legacy_rate_wins_when_every_source_is_present(self):
        """Test the legacy hourly cost outranks all other rate sources."""
        rate = self.resolver.resolve_rate(
            "user-a", self.project, [self.employee], self.legacy, user=self.user
        )
        assert rate == Decimal("40")

    def test_fallback_chain(self):
        """Test each source is used once the higher ones are removed."""
        assert self.resolver.resolve_rate(
            "user-a", self.project, [self.employee], {}, user=self.user
        ) == Decimal("60")

        assert self.resolver.resolve_rate(
            "user-a", self.project, [], {}, user=self.user
        ) == Decimal("75")

        user_without_default = User(id="user-a", email="a@example.com")
        assert self.resolver.resolve_rate(
            "user-a", self.project, [], {}, user=user_without_default
        ) == Decimal("50")

        project_without_rate = Project(id="project-1", organization_id="org-1")
        assert self.resolver.resolve_rate(
            "user-a", project_without_rate, [], {}, user=user_without_default
        ) == Decimal("0")

    def test_user_without_record_or_membership_skips_email_and_default_sources(self):
        """Test that an unknown user falls back to the project rate."""
        assert self.resolver.resolve_rate("user-a", self.project, [], self.legacy) == Decimal("50")

        other = ProjectEmployee(
            project_id="project-1", user=User(id="user-b", email="b@example.com", default_hourly_rate="90")
        )
        assert self.resolver.resolve_rate("user-a", self.project, [other], self.legacy) == Decimal("50")

    def test_user_taken_from_membership_when_not_supplied(self):
        """Test the membership row supplies the email and default rate."""
        costs = [
            ProjectCost(project_id="project-1", cost_type=CostType.HOURLY_RATE, amount="40", user=self.user)
        ]
        legacy = build_legacy_hourly_costs(costs)

        assert self.resolver.resolve_rate("user-a", self.project, [self.employee], legacy) == Decimal("40")
        assert self.resolver.resolve_rate("user-a", self.project, [self.employee], {}) == Decimal("60")

        without_override = ProjectEmployee(project_id="project-1", user=self.user)
        assert self.resolver.resolve_rate("user-a", self.project, [without_override], {}) == Decimal("75")

    def test_zero_rate_is_a_configured_rate(self):
        """Test that an explicit zero is not treated as missing."""
        employee = ProjectEmployee(project_id="project-1", user=self.user, hourly_rate=0)
        rate = self.resolver.resolve_rate("user-a", self.project, [employee], {}, user=self.user)
        assert rate == Decimal("0")

    def test_membership_of_other_user_or_project_is_ignored(self):
        """Test memberships only apply to their own (user, project) pair."""
        other_user = User(id="user-b", email="b@example.com")
        others = [
            ProjectEmployee(project_id="project-1", user=other_user, hourly_rate="99"),
            ProjectEmployee(project_id="project-2", user=self.user, hourly_rate="99"),
        ]
        rate = self.resolver.resolve_rate("user-a", self.project, others, {}, user=self.user)
        assert rate == Decimal("75")

    def test_active_membership_preferred_over_inactive(self):
        """Test that a soft-deleted membership only applies when no active one has a rate."""
        inactive = ProjectEmployee(project_id="project-1", user=self.user, hourly_rate="30", is_active=False)
        active = ProjectEmployee(project_id="project-1", user=self.user, hourly_rate="65")

        assert self.resolver.project_employee_rate("user-a", self.project, [inactive, active]) == Decimal("65")
        assert self.resolver.project_employee_rate("user-a", self.project, [inactive]) == Decimal("30")

    def test_membership_without_rate_falls_through(self):
        """Test a membership with no override does not stop the fallback chain."""
        employee = ProjectEmployee(project_id="project-1", user=self.user)
        rate = self.resolver.resolve_rate("user-a", self.project, [employee], {}, user=self.user)
        assert rate == Decimal("75")

    def test_entry_without_project_uses_user_default(self):
        """Test that unassigned entries resolve to the user's default rate."""
        assert self.resolver.resolve_rate("user-a", None, [self.employee], {}, user=self.user) == Decimal("75")
        assert self.resolver.resolve_rate("user-a", None, [], {}) == Decimal("0")


class TestLegacyHourlyCosts:
    """Test cases for the legacy hourly cost map."""

    def setup_method(self):
        """Set up test fixtures."""
        self.user = User(id="user-a", email="a@example.com")

    def test_only_assigned_hourly_rate_records_count(self):
        """Test that fixed costs, expenses and unassigned rates are ignored."""
        costs = [
            ProjectCost(project_id="p", cost_type=CostType.HOURLY_RATE, amount="40", user=self.user),
            ProjectCost(project_id="p", cost_type=CostType.HOURLY_RATE, amount="90"),
            ProjectCost(project_id="p", cost_type=CostType.FIXED_COST, amount="500", user=self.user),
            ProjectCost(project_id="p", cost_type=CostType.EXPENSE, amount="20", user=self.user),
        ]
        assert build_legacy_hourly_costs(costs) == {"a@example.com": Decimal("40")}

    def test_last_record_for_an_email_wins(self):
        """Test that iteration order decides between duplicate records."""
        older = ProjectCost(
            project_id="p", cost_type=CostType.HOURLY_RATE, amount="40", user=self.user,
            created_at=datetime(2024, 1, 1)
        )
        newer = ProjectCost(
            project_id="p", cost_type=CostType.HOURLY_RATE, amount="45", user=self.user,
            created_at=datetime(2024, 2, 1)
        )

        assert build_legacy_hourly_costs([older, newer])["a@example.com"] == Decimal("45")
        assert build_legacy_hourly_costs([newer, older])["a@example.com"] == Decimal("40")
        assert build_legacy_hourly_costs(sort_costs_oldest_first([newer, older]))["a@example.com"] == Decimal("45")
