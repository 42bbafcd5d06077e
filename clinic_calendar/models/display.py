"""Models for what the calendar page renders."""

from datetime import datetime

from pydantic import BaseModel

from clinic_calendar.models.events import CalendarEvent
from clinic_calendar.models.reference import Calendar, HealthProfessional, Motive, Patient, Site
from clinic_calendar.models.view import DateRange, ViewModelState


class DisplayEvent(BaseModel):
    """A read-only timed entry for the calendar grid."""

    id: str
    calendar_id: str
    title: str
    category: str = "time"
    start: datetime
    end: datetime
    is_read_only: bool = True
    background_color: str
    border_color: str


class EventDetail(BaseModel):
    """An event together with the entities it references."""

    event: CalendarEvent
    calendar: Calendar | None = None
    site: Site | None = None
    hp: HealthProfessional | None = None
    patient: Patient | None = None
    motive: Motive | None = None
    therapist_name: str = "Unknown"
    patient_name: str = "—"


class CalendarView(BaseModel):
    """Rendered calendar page: window, header label and visible events."""

    session_id: str
    state: ViewModelState
    range: DateRange
    label: str
    events: list[DisplayEvent]
    total_events: int
    calendars_loaded: bool
