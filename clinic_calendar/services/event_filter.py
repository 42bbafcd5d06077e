"""Event filtering against calendar visibility and filter criteria."""

from collections.abc import Iterable

from clinic_calendar.models.events import CalendarEvent
from clinic_calendar.models.view import FilterCriteria
from clinic_calendar.services.entity_index import EntityIndex


def filter_events(
    events: Iterable[CalendarEvent],
    index: EntityIndex,
    visible_calendar_ids: set[str],
    criteria: FilterCriteria,
) -> list[CalendarEvent]:
    """Return the events that should render, in input order.

    An event is dropped when its calendar cannot be resolved or is hidden, or
    when any non-empty criterion fails to match it. Empty criteria sets match
    everything.
    """
    patient_refs = selected_patient_references(criteria.patient_ids, index)
    return [
        event
        for event in events
        if _matches(event, index, visible_calendar_ids, criteria, patient_refs)
    ]


def selected_patient_references(patient_ids: set[str], index: EntityIndex) -> set[str]:
    """Every value an event's ``patient_ex_id`` may carry for the selected patients."""
    refs = set(patient_ids)
    for patient_id in patient_ids:
        patient = index.patient_by_id.get(patient_id)
        if patient and patient.external_id:
            refs.add(patient.external_id)
    return refs


def _matches(
    event: CalendarEvent,
    index: EntityIndex,
    visible_calendar_ids: set[str],
    criteria: FilterCriteria,
    patient_refs: set[str],
) -> bool:
    calendar = index.calendar_by_id.get(event.calendar_id)
    if calendar is None:
        return False
    if event.calendar_id not in visible_calendar_ids:
        return False
    if criteria.site_ids and calendar.site_id not in criteria.site_ids:
        return False
    if criteria.hp_ids and calendar.hp_id not in criteria.hp_ids:
        return False
    if criteria.patient_ids and event.patient_ex_id not in patient_refs:
        return False
    if criteria.statuses and event.status not in criteria.statuses:
        return False
    if criteria.types and event.type not in criteria.types:
        return False
    return True
