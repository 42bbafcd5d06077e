"""Tests for the backend client and response normalization."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from clinic_calendar.clients.clinic_api import ClinicApiClient, ClinicApiConfig
from clinic_calendar.clients.normalizer import normalize_page
from clinic_calendar.models.events import CalendarEvent, EventCreateRequest, EventType, EventUpdateRequest
from clinic_calendar.models.reference import Site


class TestNormalizePage:
    """Tests for list payload normalization."""

    def test_elements_key(self):
        """Test the usual elements envelope."""
        page = normalize_page({"elements": [{"id": "S1", "name": "Main"}], "totalCount": 7, "totalPages": 4, "page": 2}, Site)
        assert [site.id for site in page.items] == ["S1"]
        assert (page.total_count, page.total_pages, page.page) == (7, 4, 2)

    def test_data_key_and_total_page_spelling(self):
        """Test the data envelope with the singular totalPage."""
        page = normalize_page({"data": [{"id": "S1"}, {"id": "S2"}], "totalCount": 2, "totalPage": 1}, Site)
        assert len(page.items) == 2
        assert page.total_pages == 1
        assert page.page == 1

    def test_bare_list(self):
        """Test a body that is just the list."""
        page = normalize_page([{"id": "S1"}], Site)
        assert page.items[0].id == "S1"
        assert page.total_count == 1

    def test_missing_items(self):
        """Test an envelope without any list key."""
        page = normalize_page({"totalCount": 0}, Site)
        assert page.items == []

    def test_unexpected_payload(self):
        """Test a body that is neither a list nor an object."""
        assert normalize_page("oops", Site).items == []

    def test_naive_and_aware_timestamps_mixed(self):
        """Test that an event mixing naive and offset timestamps reads the naive one as UTC."""
        mixed = {
            "id": "E5",
            "status": "ACTIVE",
            "type": "LEAVE",
            "calendarId": "C1",
            "startAt": "2025-11-10T09:00:00.000Z",
            "endAt": "2025-11-10T10:00:00",
        }
        backwards = {**mixed, "id": "E6", "endAt": "2025-11-10T08:00:00"}

        page = normalize_page({"elements": [mixed, backwards]}, CalendarEvent)

        assert [event.id for event in page.items] == ["E5"]
        assert page.items[0].end_at == datetime(2025, 11, 10, 10, tzinfo=UTC)

    def test_invalid_items_dropped(self, caplog):
        """Test that items failing validation are logged and skipped."""
        payload = {
            "elements": [
                {"id": "E1", "status": "ACTIVE", "type": "LEAVE", "calendarId": "C1",
                 "startAt": "2025-11-10T09:00:00Z", "endAt": "2025-11-10T10:00:00Z"},
                {"id": "E2", "status": "DELETED", "type": "LEAVE", "calendarId": "C1",
                 "startAt": "2025-11-10T09:00:00Z", "endAt": "2025-11-10T10:00:00Z"},
                {"id": "E3", "status": "ACTIVE", "type": "LEAVE", "calendarId": "C1",
                 "startAt": "2025-11-10T09:00:00Z"},
            ]
        }
        page = normalize_page(payload, CalendarEvent)
        assert [event.id for event in page.items] == ["E1"]
        assert "Dropping invalid CalendarEvent E2" in caplog.text
        assert "Dropping invalid CalendarEvent E3" in caplog.text


class TestListEndpoints:
    """Tests for list calls against the fake backend."""

    @pytest.mark.asyncio
    async def test_list_events_sends_window(self, api_client, backend):
        """Test that the window and auth header reach the backend."""
        page = await api_client.list_events(
            from_=datetime(2025, 11, 9, tzinfo=UTC), to=datetime(2025, 11, 15, 23, 59, 59, 999000, tzinfo=UTC)
        )
        request = backend.requests[-1]
        assert request.url.path == "/api/events"
        assert request.url.params["from"] == "2025-11-09T00:00:00.000Z"
        assert request.url.params["to"] == "2025-11-15T23:59:59.999Z"
        assert request.url.params["limit"] == "500"
        assert request.headers["Authorization"] == "Bearer test-token"
        assert [event.id for event in page.items] == ["E1", "E2", "E3", "E4"]

    @pytest.mark.asyncio
    async def test_list_events_optional_filters(self, api_client, backend):
        """Test calendar and patient narrowing parameters."""
        await api_client.list_events(calendar_id="C1", patient_record_id="1", from_="2025-11-09T00:00:00.000Z")
        params = backend.requests[-1].url.params
        assert params["calendarId"] == "C1"
        assert params["patientRecordId"] == "1"
        assert params["from"] == "2025-11-09T00:00:00.000Z"
        assert "to" not in params

    @pytest.mark.asyncio
    async def test_sites_data_envelope(self, api_client):
        """Test that the data envelope of /sites is normalized."""
        page = await api_client.list_sites()
        assert [site.name for site in page.items] == ["Main Clinic", "West Clinic"]

    @pytest.mark.asyncio
    async def test_calendars_sorted_by_label(self, api_client, backend):
        """Test the calendar sort parameters."""
        await api_client.list_calendars()
        params = backend.requests[-1].url.params
        assert params["sortField"] == "label"
        assert params["sortDirection"] == "1"
        assert params["limit"] == "200"

    @pytest.mark.asyncio
    async def test_server_error_gives_empty_page(self, api_client, backend):
        """Test that a non-2xx response yields an empty page."""
        backend.routes["/api/patients"] = 500
        page = await api_client.list_patients()
        assert page.items == []
        assert page.total_count == 0

    @pytest.mark.asyncio
    async def test_transport_error_gives_empty_page(self, api_client, backend):
        """Test that a connection failure yields an empty page."""
        backend.routes["/api/hps"] = httpx.ConnectError("connection refused")
        page = await api_client.list_hps()
        assert page.items == []

    @pytest.mark.asyncio
    async def test_bad_json_gives_empty_page(self, api_client, backend):
        """Test that an undecodable body yields an empty page."""
        backend.routes["/api/motives"] = lambda request: httpx.Response(200, text="<html>")
        page = await api_client.list_motives()
        assert page.items == []

    @pytest.mark.asyncio
    async def test_missing_token_skips_request(self, backend):
        """Test that no request is made without a token."""
        client = ClinicApiClient(
            config=ClinicApiConfig(base_url="http://backend.test/api", token=None),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(backend)),
        )
        page = await client.list_calendars()
        assert page.items == []
        assert backend.requests == []


class TestEventWrites:
    """Tests for single-event reads and bulk writes."""

    @pytest.mark.asyncio
    async def test_get_event(self, api_client, backend):
        """Test fetching one event."""
        backend.routes["/api/events/E1"] = {
            "id": "E1", "status": "ACTIVE", "type": "LEAVE", "calendarId": "C1",
            "startAt": "2025-11-10T09:00:00Z", "endAt": "2025-11-10T10:00:00Z",
        }
        event = await api_client.get_event("E1")
        assert event.calendar_id == "C1"

    @pytest.mark.asyncio
    async def test_get_missing_event(self, api_client):
        """Test that a 404 yields None."""
        assert await api_client.get_event("nope") is None

    @pytest.mark.asyncio
    async def test_create_events_posts_camel_case(self, api_client, backend):
        """Test the bulk create payload."""
        backend.routes[("POST", "/api/events/bulk")] = lambda request: httpx.Response(201, json=[{"id": "E9"}])
        request = EventCreateRequest(
            title="Visit",
            type=EventType.APPOINTMENT,
            calendar_id="C1",
            motive_id="M1",
            start_at=datetime(2025, 11, 10, 9, tzinfo=UTC),
            end_at=datetime(2025, 11, 10, 9, 30, tzinfo=UTC),
        )
        result = await api_client.create_events([request])

        assert result.success is True
        assert result.data == [{"id": "E9"}]
        sent = json.loads(backend.requests[-1].content)
        assert sent[0]["calendarId"] == "C1"
        assert sent[0]["motiveId"] == "M1"
        assert sent[0]["status"] == "ACTIVE"
        assert "hpNote" not in sent[0]

    @pytest.mark.asyncio
    async def test_update_rejected_with_backend_message(self, api_client, backend):
        """Test that a backend rejection surfaces its message."""
        backend.routes[("PATCH", "/api/events/bulk")] = lambda request: httpx.Response(
            409, json={"message": "Slot already taken"}
        )
        result = await api_client.update_events([EventUpdateRequest(id="E1", title="Moved")])
        assert result.success is False
        assert result.message == "Slot already taken"

    @pytest.mark.asyncio
    async def test_update_rejected_without_message(self, api_client, backend):
        """Test the fallback failure message."""
        backend.routes[("PATCH", "/api/events/bulk")] = 500
        result = await api_client.update_events([EventUpdateRequest(id="E1")])
        assert result.message == "Event update failed"

    @pytest.mark.asyncio
    async def test_delete_event_sends_ids(self, api_client, backend):
        """Test the delete call."""
        backend.routes[("DELETE", "/api/events")] = lambda request: httpx.Response(204)
        result = await api_client.delete_event("E1")
        assert result.success is True
        assert backend.requests[-1].url.params["ids"] == "E1"

    @pytest.mark.asyncio
    async def test_delete_without_id(self, api_client, backend):
        """Test that an empty id is refused locally."""
        result = await api_client.delete_event("")
        assert result.success is False
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_network_error_on_write(self, api_client, backend):
        """Test that a transport failure is reported, not raised."""
        backend.routes[("DELETE", "/api/events")] = httpx.ConnectError("connection refused")
        result = await api_client.delete_event("E1")
        assert result.success is False
        assert result.message.startswith("Network error")
