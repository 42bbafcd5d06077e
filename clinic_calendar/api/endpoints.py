"""API endpoints for the calendar view service."""

from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Response
from pydantic import ValidationError

from clinic_calendar import __version__
from clinic_calendar.clients.clinic_api import MutationResult
from clinic_calendar.models.api import CreateViewRequest, HealthResponse, NavigateRequest, ViewModeRequest
from clinic_calendar.models.display import CalendarView, EventDetail
from clinic_calendar.models.events import EventCreateRequest, EventUpdateRequest
from clinic_calendar.models.session import ViewSession
from clinic_calendar.models.view import FilterCriteria
from clinic_calendar.services.calendar_view import calendar_view_service
from clinic_calendar.services.view_sessions import view_session_manager
from clinic_calendar.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _get_view(session_id: str) -> ViewSession:
    session = view_session_manager.get_session(session_id)
    if not session:
        logger.warning(f"Unknown view ID requested: {session_id}")
        raise HTTPException(status_code=404, detail=f"Unknown view: {session_id}")
    return session


@router.post("/views", response_model=CalendarView, status_code=201, tags=["Views"])
async def create_view(request: CreateViewRequest) -> CalendarView:
    """Open a calendar view and load its reference data and first window of events."""
    try:
        session = view_session_manager.create_session(
            pivot_date=request.pivot_date, view=request.view, timezone=request.timezone
        )
    except ValidationError as e:
        logger.warning(f"Rejected view request: {e}")
        raise HTTPException(status_code=422, detail=f"Unknown timezone: {request.timezone}") from e

    logger.info(f"Opened view {session.session_id} ({session.state.view.value} on {session.state.pivot_date})")
    return await calendar_view_service.open_view(session)


@router.get("/views/{session_id}", response_model=CalendarView, tags=["Views"])
async def get_view(session_id: str) -> CalendarView:
    return calendar_view_service.render(_get_view(session_id))


@router.delete("/views/{session_id}", status_code=204, tags=["Views"])
async def close_view(session_id: str) -> Response:
    if not view_session_manager.delete_session(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown view: {session_id}")
    return Response(status_code=204)


@router.post("/views/{session_id}/navigate", response_model=CalendarView, tags=["Views"])
async def navigate_view(session_id: str, request: NavigateRequest) -> CalendarView:
    """Move the view to today, the previous or next period, or a given date."""
    session = _get_view(session_id)
    return await calendar_view_service.navigate(session, request.action, request.target)


@router.put("/views/{session_id}/mode", response_model=CalendarView, tags=["Views"])
async def set_view_mode(session_id: str, request: ViewModeRequest) -> CalendarView:
    session = _get_view(session_id)
    return await calendar_view_service.set_view(session, request.view)


@router.put("/views/{session_id}/filters", response_model=CalendarView, tags=["Views"])
async def set_view_filters(session_id: str, criteria: FilterCriteria) -> CalendarView:
    """Replace the filter selections. An empty list leaves its dimension unfiltered."""
    session = _get_view(session_id)
    return calendar_view_service.set_filters(session, criteria)


@router.post("/views/{session_id}/calendars/{calendar_id}/toggle", response_model=CalendarView, tags=["Views"])
async def toggle_calendar(session_id: str, calendar_id: str) -> CalendarView:
    session = _get_view(session_id)
    return calendar_view_service.toggle_calendar(session, calendar_id)


@router.post("/views/{session_id}/reload", response_model=CalendarView, tags=["Views"])
async def reload_view(session_id: str) -> CalendarView:
    session = _get_view(session_id)
    return await calendar_view_service.reload(session)


@router.get("/views/{session_id}/events/{event_id}", response_model=EventDetail, tags=["Views"])
async def get_event_detail(session_id: str, event_id: str) -> EventDetail:
    session = _get_view(session_id)
    detail = calendar_view_service.event_detail(session, event_id)
    if detail is None:
        raise HTTPException(status_code=404, detail=f"Event {event_id} is not loaded in this view")
    return detail


@router.post("/events", response_model=MutationResult, tags=["Events"])
async def create_events(events: list[EventCreateRequest]) -> MutationResult:
    """Create events in bulk on the backend."""
    result = await calendar_view_service.api_client.create_events(events)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.message)
    return result


@router.patch("/events", response_model=MutationResult, tags=["Events"])
async def update_events(events: list[EventUpdateRequest]) -> MutationResult:
    """Update events in bulk on the backend."""
    result = await calendar_view_service.api_client.update_events(events)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.message)
    return result


@router.delete("/events/{event_id}", response_model=MutationResult, tags=["Events"])
async def delete_event(event_id: str) -> MutationResult:
    result = await calendar_view_service.api_client.delete_event(event_id)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.message)
    return result


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
        active_views=view_session_manager.get_session_count(),
    )
