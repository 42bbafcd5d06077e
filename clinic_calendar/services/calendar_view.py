"""Calendar view orchestration: reference loading, event fetching and rendering."""

import asyncio
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from clinic_calendar.clients.clinic_api import ClinicApiClient, get_clinic_api_client
from clinic_calendar.models.display import CalendarView, EventDetail
from clinic_calendar.models.events import CalendarEvent
from clinic_calendar.models.session import ReferenceData, ViewSession
from clinic_calendar.models.view import DateRange, FilterCriteria, ViewMode
from clinic_calendar.services.date_range import resolve_range
from clinic_calendar.services.display import describe_event, to_display_event
from clinic_calendar.services.entity_index import build_index
from clinic_calendar.services.event_filter import filter_events
from clinic_calendar.services.labels import format_label
from clinic_calendar.services.navigation import NavigationController
from clinic_calendar.utils.logging import get_logger

logger = get_logger(__name__)


class CalendarViewService:
    """Drives a view session through load, navigate, filter and render.

    Every navigation that moves the window re-fetches events for it. Filter
    and visibility changes only re-filter what is already loaded.
    """

    def __init__(self, api_client: ClinicApiClient | None = None, clock: Callable[[], datetime] | None = None):
        """Initialize the service.

        Args:
            api_client: Backend client, the shared one by default
            clock: Current-time source for "today" navigation
        """
        self.api_client = api_client or get_clinic_api_client()
        self.clock = clock

    async def open_view(self, session: ViewSession) -> CalendarView:
        """Load reference data and the first window of events."""
        await self.load_reference_data(session)
        await self.refresh_events(session)
        return self.render(session)

    async def load_reference_data(self, session: ViewSession) -> ReferenceData:
        """Fetch every reference list concurrently and rebuild the index.

        A list that fails to load comes back empty; the others are kept.
        """
        names = ("sites", "hps", "patients", "calendars", "motives")
        results = await asyncio.gather(
            self.api_client.list_sites(),
            self.api_client.list_hps(),
            self.api_client.list_patients(),
            self.api_client.list_calendars(),
            self.api_client.list_motives(),
            return_exceptions=True,
        )
        lists = {name: _items_or_empty(name, result) for name, result in zip(names, results, strict=True)}

        reference = ReferenceData(**lists)
        known_calendar_ids = {calendar.id for calendar in session.reference.calendars}
        session.reference = reference
        session.index = build_index(
            reference.calendars, reference.patients, reference.sites, reference.hps, reference.motives
        )

        # Newly seen calendars start visible; hides of known ones are kept
        new_calendar_ids = {calendar.id for calendar in reference.calendars} - known_calendar_ids
        if new_calendar_ids:
            session.state.visible_calendar_ids = (session.state.visible_calendar_ids or set()) | new_calendar_ids

        logger.info(
            f"Reference data loaded for view {session.session_id}: "
            + ", ".join(f"{len(items)} {name}" for name, items in lists.items())
        )
        return reference

    async def refresh_events(self, session: ViewSession) -> list[CalendarEvent] | None:
        """Fetch events for the current window.

        Nothing is fetched until calendars are loaded. A newer refresh cancels
        an older one still in flight.

        Returns:
            The fetched events, or None if this refresh was superseded
        """
        if not session.calendars_loaded:
            logger.info(f"Calendars not loaded for view {session.session_id}, skipping event fetch")
            session.events = []
            session.events_range = None
            return session.events

        window = self.window(session)
        task = asyncio.create_task(self._fetch_events(window))
        previous, session.events_task = session.events_task, task
        if previous is not None and not previous.done():
            logger.debug(f"Cancelling superseded event fetch for view {session.session_id}")
            previous.cancel()

        try:
            events = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.info(f"Event fetch for view {session.session_id} superseded")
            return None
        except Exception as e:
            if session.events_task is not task:
                return None
            logger.error(f"Event fetch for view {session.session_id} failed: {e}", exc_info=True)
            session.events = []
            session.events_range = None
            return session.events

        if session.events_task is not task:
            return None

        session.events = events
        session.events_range = window
        return events

    async def navigate(self, session: ViewSession, action: str, target: date | None = None) -> CalendarView:
        """Apply today/prev/next/goto and re-fetch the new window."""
        controller = NavigationController(session.state, clock=self.clock)
        if action == "today":
            controller.today()
        elif action == "prev":
            controller.prev()
        elif action == "next":
            controller.next()
        elif action == "goto" and target is not None:
            controller.go_to(target)
        else:
            raise ValueError(f"Unsupported navigation action: {action}")

        await self.refresh_events(session)
        return self.render(session)

    async def set_view(self, session: ViewSession, view: ViewMode | str) -> CalendarView:
        NavigationController(session.state, clock=self.clock).set_view(view)
        await self.refresh_events(session)
        return self.render(session)

    def set_filters(self, session: ViewSession, criteria: FilterCriteria) -> CalendarView:
        NavigationController(session.state, clock=self.clock).set_criteria(criteria)
        return self.render(session)

    def toggle_calendar(self, session: ViewSession, calendar_id: str) -> CalendarView:
        NavigationController(session.state, clock=self.clock).toggle_calendar_visibility(calendar_id)
        return self.render(session)

    async def reload(self, session: ViewSession) -> CalendarView:
        return await self.open_view(session)

    def window(self, session: ViewSession) -> DateRange:
        return resolve_range(session.state.pivot_date, session.state.view, session.state.tzinfo)

    def visible_events(self, session: ViewSession) -> list[CalendarEvent]:
        state = session.state
        return filter_events(session.events, session.index, state.visible_calendar_ids or set(), state.criteria)

    def render(self, session: ViewSession) -> CalendarView:
        """Build the page model for the session's current state."""
        window = self.window(session)
        events = [
            to_display_event(event, session.index.calendar_by_id.get(event.calendar_id))
            for event in self.visible_events(session)
        ]
        return CalendarView(
            session_id=session.session_id,
            state=session.state,
            range=window,
            label=format_label(window, session.state.view),
            events=events,
            total_events=len(session.events),
            calendars_loaded=session.calendars_loaded,
        )

    def event_detail(self, session: ViewSession, event_id: str) -> EventDetail | None:
        event = next((event for event in session.events if event.id == event_id), None)
        return describe_event(event, session.index) if event else None

    async def _fetch_events(self, window: DateRange) -> list[CalendarEvent]:
        page = await self.api_client.list_events(from_=window.start, to=window.end)
        if page.total_pages > 1:
            logger.warning(
                f"Window {window.start.date()}..{window.end.date()} holds {page.total_count} events, "
                f"only the first {len(page.items)} are shown"
            )
        return page.items


def _items_or_empty(name: str, result: Any) -> list[Any]:
    if isinstance(result, BaseException):
        logger.error(f"Loading {name} failed: {result}", exc_info=result)
        return []
    return result.items


calendar_view_service = CalendarViewService()
