"""View session state held between requests."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from clinic_calendar.models.events import CalendarEvent
from clinic_calendar.models.reference import Calendar, HealthProfessional, Motive, Patient, Site
from clinic_calendar.models.view import DateRange, ViewModelState
from clinic_calendar.services.entity_index import EntityIndex


@dataclass
class ReferenceData:
    """Reference lists as last loaded from the backend."""

    calendars: list[Calendar] = field(default_factory=list)
    sites: list[Site] = field(default_factory=list)
    hps: list[HealthProfessional] = field(default_factory=list)
    patients: list[Patient] = field(default_factory=list)
    motives: list[Motive] = field(default_factory=list)


@dataclass
class ViewSession:
    """One open calendar page: its view model state plus the data it renders."""

    session_id: str
    state: ViewModelState
    reference: ReferenceData = field(default_factory=ReferenceData)
    index: EntityIndex = field(default_factory=EntityIndex)
    events: list[CalendarEvent] = field(default_factory=list)
    events_range: DateRange | None = None
    events_task: asyncio.Task | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_activity: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def calendars_loaded(self) -> bool:
        return bool(self.reference.calendars)

    def as_dict(self) -> dict[str, Any]:
        """Return the session as a dictionary."""
        return {
            "session_id": self.session_id,
            "state": self.state.model_dump(mode="json"),
            "calendars": len(self.reference.calendars),
            "events": len(self.events),
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
        }

    def update_activity(self) -> None:
        """Update the last activity timestamp."""
        self.last_activity = datetime.now(UTC)
