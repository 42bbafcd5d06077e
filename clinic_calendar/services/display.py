"""Projection of filtered events into what the calendar widget renders."""

from clinic_calendar.models.display import DisplayEvent, EventDetail
from clinic_calendar.models.events import CalendarEvent
from clinic_calendar.models.reference import Calendar
from clinic_calendar.services.entity_index import EntityIndex

DEFAULT_EVENT_COLOR = "#8cb1d1"
UNTITLED = "Untitled"


def to_display_event(event: CalendarEvent, calendar: Calendar | None) -> DisplayEvent:
    """Colour an event after its calendar, falling back to the default blue."""
    color = calendar.color if calendar and calendar.color else DEFAULT_EVENT_COLOR
    return DisplayEvent(
        id=event.id,
        calendar_id=event.calendar_id,
        title=event.title or UNTITLED,
        start=event.start_at,
        end=event.end_at,
        background_color=color,
        border_color=color,
    )


def describe_event(event: CalendarEvent, index: EntityIndex) -> EventDetail:
    """Resolve everything the event detail panel shows."""
    calendar = index.calendar_by_id.get(event.calendar_id)
    hp = index.hp_for_calendar(event.calendar_id)
    patient = index.find_patient(event.patient_ex_id)
    return EventDetail(
        event=event,
        calendar=calendar,
        site=index.site_by_id.get(calendar.site_id) if calendar else None,
        hp=hp,
        patient=patient,
        motive=index.motive_by_id.get(event.motive_id) if event.motive_id else None,
        therapist_name=hp.full_name if hp else "Unknown",
        patient_name=patient.full_name if patient else "—",
    )
