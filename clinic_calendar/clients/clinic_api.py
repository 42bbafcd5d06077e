"""REST client for the clinic scheduling backend, with rate limiting and error handling."""

import asyncio
import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

import httpx
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from pydantic import BaseModel, ValidationError

from clinic_calendar.clients.normalizer import normalize_page
from clinic_calendar.models.events import CalendarEvent, EventCreateRequest, EventUpdateRequest
from clinic_calendar.models.pagination import Page
from clinic_calendar.models.reference import Calendar, HealthProfessional, Motive, Patient, Site
from clinic_calendar.services.date_range import to_iso_instant
from clinic_calendar.utils.logging import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class ClinicApiConfig:
    """Configuration for the clinic backend client."""

    base_url: str = field(default_factory=lambda: os.getenv("CLINIC_API_BASE_URL", "http://localhost:3000/api"))
    token: str | None = field(default_factory=lambda: os.getenv("CLINIC_API_TOKEN"))
    page_size: int = field(default_factory=lambda: int(os.getenv("CLINIC_API_PAGE_SIZE", "200")))
    events_page_size: int = 500
    timeout: float = 30.0
    requests_per_minute: int = field(
        default_factory=lambda: int(os.getenv("CLINIC_API_REQUESTS_PER_MINUTE", "600"))
    )


class MutationResult(BaseModel):
    """Outcome of a write call against the backend."""

    success: bool
    message: str | None = None
    data: Any = None


class BackendRateLimiter:
    """Moving-window request limiter shared by every call of a client."""

    def __init__(self, requests_per_minute: int = 600):
        self.storage = MemoryStorage()
        self.limiter = MovingWindowRateLimiter(self.storage)
        self.request_limit = parse(f"{requests_per_minute}/minute")

    async def wait_for_slot(self, identifier: str = "clinic_api") -> None:
        """Sleep until the window has room for one more request."""
        while not self.limiter.hit(self.request_limit, identifier):
            window_stats = self.limiter.get_window_stats(self.request_limit, identifier)
            wait_time = max(0.0, window_stats.reset_time - time.time())
            logger.warning(f"Backend rate limit reached, waiting {wait_time:.2f}s")
            await asyncio.sleep(wait_time or 0.1)


class ClinicApiClient:
    """Async client for the paginated list and bulk write endpoints.

    List calls never raise: a missing token, a transport error, a non-2xx
    status or an undecodable body is logged and yields an empty page.
    """

    def __init__(self, config: ClinicApiConfig | None = None, http_client: httpx.AsyncClient | None = None):
        """Initialize the client.

        Args:
            config: Client configuration, read from the environment by default
            http_client: Shared httpx client; one is created and owned if omitted
        """
        self.config = config or ClinicApiConfig()
        self._client = http_client or httpx.AsyncClient(timeout=self.config.timeout)
        self._owns_client = http_client is None
        self.rate_limiter = BackendRateLimiter(self.config.requests_per_minute)

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.token}", "Content-Type": "application/json"}

    async def list_events(
        self,
        page: int = 1,
        limit: int | None = None,
        from_: datetime | str | None = None,
        to: datetime | str | None = None,
        calendar_id: str | None = None,
        patient_record_id: str | None = None,
    ) -> Page[CalendarEvent]:
        """List events, optionally bounded to a window and narrowed to a calendar or patient."""
        params: dict[str, Any] = {"page": page, "limit": limit or self.config.events_page_size}
        if from_:
            params["from"] = to_iso_instant(from_) if isinstance(from_, datetime) else from_
        if to:
            params["to"] = to_iso_instant(to) if isinstance(to, datetime) else to
        if calendar_id:
            params["calendarId"] = calendar_id
        if patient_record_id:
            params["patientRecordId"] = patient_record_id
        return await self._list("/events", CalendarEvent, params)

    async def list_calendars(
        self, page: int = 1, limit: int | None = None, sort_field: str = "label", sort_direction: int = 1
    ) -> Page[Calendar]:
        params = {
            "page": page,
            "limit": limit or self.config.page_size,
            "sortField": sort_field,
            "sortDirection": sort_direction,
        }
        return await self._list("/calendars", Calendar, params)

    async def list_sites(self, page: int = 1, limit: int | None = None) -> Page[Site]:
        return await self._list("/sites", Site, {"page": page, "limit": limit or self.config.page_size})

    async def list_hps(self, page: int = 1, limit: int | None = None) -> Page[HealthProfessional]:
        return await self._list("/hps", HealthProfessional, {"page": page, "limit": limit or self.config.page_size})

    async def list_patients(self, page: int = 1, limit: int | None = None) -> Page[Patient]:
        return await self._list("/patients", Patient, {"page": page, "limit": limit or self.config.page_size})

    async def list_motives(self, page: int = 1, limit: int | None = None) -> Page[Motive]:
        return await self._list("/motives", Motive, {"page": page, "limit": limit or self.config.page_size})

    async def get_event(self, event_id: str) -> CalendarEvent | None:
        """Fetch a single event, or None if it cannot be loaded."""
        if not event_id or not self._has_token():
            return None
        try:
            response = await self._request("GET", f"/events/{event_id}")
            if not response.is_success:
                logger.warning(f"Event {event_id} not loaded: {response.status_code}")
                return None
            return CalendarEvent.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"Error fetching event {event_id}: {e}", exc_info=True)
            return None

    async def create_events(self, events: list[EventCreateRequest]) -> MutationResult:
        payload = [event.model_dump(mode="json", by_alias=True, exclude_none=True) for event in events]
        return await self._mutate("POST", "/events/bulk", "Create event failed", json=payload)

    async def update_events(self, events: list[EventUpdateRequest]) -> MutationResult:
        payload = [event.model_dump(mode="json", by_alias=True, exclude_none=True) for event in events]
        return await self._mutate("PATCH", "/events/bulk", "Event update failed", json=payload)

    async def delete_event(self, event_id: str) -> MutationResult:
        if not event_id:
            return MutationResult(success=False, message="Invalid event ID")
        return await self._mutate("DELETE", "/events", "Event delete failed", params={"ids": event_id})

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
            logger.debug("Owned httpx.AsyncClient closed.")

    async def _list(self, path: str, model: type[ModelT], params: dict[str, Any]) -> Page[ModelT]:
        if not self._has_token():
            return Page[model].empty()

        try:
            response = await self._request("GET", path, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching {path}: {e}", exc_info=True)
            return Page[model].empty()

        if not response.is_success:
            logger.error(f"Backend error on {path}: {response.status_code} {response.text}")
            return Page[model].empty()

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Undecodable response from {path}: {e}")
            return Page[model].empty()

        return normalize_page(payload, model)

    async def _mutate(self, method: str, path: str, failure_message: str, **kwargs: Any) -> MutationResult:
        if not self._has_token():
            return MutationResult(success=False, message="No access token configured")

        try:
            response = await self._request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}", exc_info=True)
            return MutationResult(success=False, message=f"Network error: {failure_message.lower()}")

        body = _safe_json(response)
        if not response.is_success:
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning(f"{method} {path} rejected: {response.status_code} {message}")
            return MutationResult(success=False, message=message or failure_message, data=body)

        return MutationResult(success=True, data=body)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        await self.rate_limiter.wait_for_slot()
        url = f"{self.config.base_url.rstrip('/')}{path}"
        logger.debug(f"Making {method} request to {url} with params {kwargs.get('params')}")
        response = await self._client.request(method, url, headers=self.headers, **kwargs)
        logger.debug(f"Response from {url}: {response.status_code}")
        return response

    def _has_token(self) -> bool:
        if not self.config.token:
            logger.warning("No access token found for the clinic backend.")
            return False
        return True


def _safe_json(response: httpx.Response) -> Any:
    """Decode a body as JSON, falling back to its text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


_clinic_api_client: ClinicApiClient | None = None


def get_clinic_api_client() -> ClinicApiClient:
    """Get or create the shared backend client."""
    global _clinic_api_client
    if _clinic_api_client is None:
        _clinic_api_client = ClinicApiClient()
    return _clinic_api_client
