"""Shared fixtures: reference data and a fake scheduling backend."""

from datetime import date

import httpx
import pytest

from clinic_calendar.clients.clinic_api import ClinicApiClient, ClinicApiConfig
from clinic_calendar.models.session import ViewSession
from clinic_calendar.models.view import ViewModelState

BACKEND_URL = "http://backend.test/api"

CALENDARS = [
    {"id": "C1", "siteId": "S1", "hpId": "H1", "label": "Dr One", "color": "#ff0000", "timezone": "Europe/Brussels"},
    {"id": "C2", "siteId": "S2", "hpId": "H2", "label": "Dr Two", "color": "", "timezone": "Europe/Brussels"},
]
SITES = [{"id": "S1", "name": "Main Clinic"}, {"id": "S2", "name": "West Clinic"}]
HPS = [
    {"id": "H1", "firstName": "Ann", "lastName": "One"},
    {"id": "H2", "firstName": "Bob", "lastName": "Two"},
]
PATIENTS = [
    {"id": "1", "externalId": "EXT1", "firstName": "Paula", "lastName": "Patient"},
    {"id": "2", "firstName": "Ray", "lastName": "Roe"},
]
MOTIVES = [
    {
        "id": "M1",
        "calendarIds": ["C1"],
        "label": "Consultation",
        "newPatientDuration": 30,
        "existingPatientDuration": 20,
        "color": "#00ff00",
        "status": "ACTIVE",
    }
]
EVENTS = [
    {
        "id": "E1",
        "title": "Checkup",
        "status": "ACTIVE",
        "type": "APPOINTMENT",
        "calendarId": "C1",
        "motiveId": "M1",
        "patientExId": "EXT1",
        "startAt": "2025-11-10T09:00:00.000Z",
        "endAt": "2025-11-10T09:30:00.000Z",
    },
    {
        "id": "E2",
        "title": "",
        "status": "CONFIRMED",
        "type": "APPOINTMENT",
        "calendarId": "C2",
        "patientExId": "2",
        "startAt": "2025-11-11T10:00:00.000Z",
        "endAt": "2025-11-11T10:30:00.000Z",
    },
    {
        "id": "E3",
        "title": "Leave",
        "status": "ACTIVE",
        "type": "LEAVE",
        "calendarId": "C1",
        "startAt": "2025-11-12T08:00:00.000Z",
        "endAt": "2025-11-12T17:00:00.000Z",
    },
    {
        "id": "E4",
        "title": "Orphan",
        "status": "ACTIVE",
        "type": "PERSONAL",
        "calendarId": "C9",
        "startAt": "2025-11-13T08:00:00.000Z",
        "endAt": "2025-11-13T09:00:00.000Z",
    },
]


def page_of(items: list[dict], key: str = "elements") -> dict:
    return {key: items, "totalCount": len(items), "totalPages": 1, "page": 1}


class FakeBackend:
    """MockTransport handler serving canned responses by path.

    A route value may be a JSON payload, an HTTP status code, an exception to
    raise, or a callable (sync or async) taking the request. Routes keyed by
    ``(method, path)`` take precedence over plain paths.
    """

    def __init__(self):
        self.routes: dict = {
            "/api/calendars": page_of(CALENDARS),
            "/api/sites": page_of(SITES, key="data"),
            "/api/hps": page_of(HPS),
            "/api/patients": page_of(PATIENTS),
            "/api/motives": page_of(MOTIVES),
            ("GET", "/api/events"): page_of(EVENTS),
        }
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        path = request.url.path
        route = self.routes.get((request.method, path), self.routes.get(path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if isinstance(route, Exception):
            raise route
        if isinstance(route, int):
            return httpx.Response(route, text="backend exploded")
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def backend():
    """Fake backend with the default reference data and events."""
    return FakeBackend()


@pytest.fixture
def api_client(backend):
    """ClinicApiClient wired to the fake backend."""
    config = ClinicApiConfig(base_url=BACKEND_URL, token="test-token")
    return ClinicApiClient(config=config, http_client=httpx.AsyncClient(transport=httpx.MockTransport(backend)))


@pytest.fixture
def view_session():
    """A week view on Saturday 2025-11-15 in Brussels."""
    state = ViewModelState(pivot_date=date(2025, 11, 15), view="week", timezone="Europe/Brussels")
    return ViewSession(session_id="view-test", state=state)
