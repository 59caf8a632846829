"""Clock service for clock-in / clock-out rules.
Handles session start and stop validations for time entries.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from timeledger.domain.models.base import BusinessRuleViolation, ValidationError
from timeledger.domain.models.time_entry import TimeEntry

logger = logging.getLogger(__name__)


class ClockService:
    """
    Domain service for clocking users in and out.
    A user has at most one open time entry at a time.
    """

    def find_active_entry(self, user_id: str, entries: Iterable[TimeEntry]) -> Optional[TimeEntry]:
        """Return the user's open entry, if any."""
        for entry in entries:
            if entry.user_id == user_id and entry.is_open:
                return entry
        return None

    def clock_in(
        self,
        user_id: str,
        existing_entries: Iterable[TimeEntry],
        at: Optional[datetime] = None,
        project_id: Optional[str] = None,
        organization_id: Optional[str] = None,
        description: Optional[str] = None
    ) -> TimeEntry:
        """
        Open a new time entry for the user.
        """
        if not user_id:
            raise ValidationError("User ID is required", "user_id")

        if self.find_active_entry(user_id, existing_entries) is not None:
            raise BusinessRuleViolation("Already clocked in")

        entry = TimeEntry(
            user_id=user_id,
            clock_in=at or datetime.utcnow(),
            project_id=project_id,
            organization_id=organization_id,
            description=description
        )
        logger.info("User %s clocked in", user_id)
        return entry

    def clock_out(
        self,
        user_id: str,
        existing_entries: Iterable[TimeEntry],
        at: Optional[datetime] = None,
        description: Optional[str] = None
    ) -> TimeEntry:
        """
        Close the user's open time entry and record its hours.
        """
        entry = self.find_active_entry(user_id, existing_entries)
        if entry is None:
            raise BusinessRuleViolation("No active clock in found")

        entry.close(at, description)
        logger.info("User %s clocked out after %s hours", user_id, entry.total_hours)
        return entry
