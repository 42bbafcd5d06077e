"""Calendar event data models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from clinic_calendar.models.base import BackendModel


class EventStatus(str, Enum):
    """Lifecycle status of a calendar event."""

    ACTIVE = "ACTIVE"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    ARCHIVED = "ARCHIVED"


class EventType(str, Enum):
    """Kind of calendar event."""

    APPOINTMENT = "APPOINTMENT"
    LEAVE = "LEAVE"
    PERSONAL = "PERSONAL"
    EXTERNAL_EVENT = "EXTERNAL_EVENT"


def as_utc(value: datetime | None) -> datetime | None:
    """Read a naive timestamp as UTC, the backend's reference zone."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Attendee(BackendModel):
    """Participant attached to an event."""

    entity_id: str
    entity_type: Literal["Hp", "Patient", "PatientRecord", "Event", "BookableResource"]
    status: Literal["ACCEPTED", "DECLINED", "REFUSED", "NO_RESPONSE"] = "NO_RESPONSE"


class AppointmentBookingInformation(BackendModel):
    """Booking flags recorded when an appointment is taken."""

    declared_is_new_patient: bool = False
    is_new_patient_record: bool = False


class CalendarEvent(BackendModel):
    """A calendar event as returned by the events endpoint."""

    id: str
    title: str = ""
    status: EventStatus
    type: EventType
    calendar_id: str
    motive_id: str | None = None
    patient_ex_id: str | None = None
    start_at: datetime
    end_at: datetime
    description: str | None = None
    patient_note: str | None = None
    hp_note: str | None = None
    group_id: str | None = None
    recurrence_id: str | None = None
    attendees: list[Attendee] = Field(default_factory=list)
    appointment_booking_information: AppointmentBookingInformation | None = None
    external_metadata: dict[str, Any] | None = None
    is_cancelled: bool = False

    normalize_times = field_validator("start_at", "end_at")(as_utc)

    @model_validator(mode="after")
    def check_time_order(self) -> "CalendarEvent":
        if self.end_at <= self.start_at:
            raise ValueError(f"Event {self.id} ends before it starts")
        return self


class EventCreateRequest(BackendModel):
    """Payload item for a bulk event creation."""

    title: str
    status: EventStatus = EventStatus.ACTIVE
    type: EventType
    calendar_id: str
    motive_id: str | None = None
    attendees: list[Attendee] = Field(default_factory=list)
    appointment_booking_information: AppointmentBookingInformation | None = None
    description: str | None = None
    patient_note: str | None = None
    hp_note: str | None = None
    start_at: datetime
    end_at: datetime

    normalize_times = field_validator("start_at", "end_at")(as_utc)

    @model_validator(mode="after")
    def check_appointment(self) -> "EventCreateRequest":
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        if self.type == EventType.APPOINTMENT and not self.motive_id:
            raise ValueError("motive_id is required for appointments")
        return self


class EventUpdateRequest(BackendModel):
    """Payload item for a bulk event update. Only set fields are sent."""

    id: str
    title: str | None = None
    status: EventStatus | None = None
    calendar_id: str | None = None
    motive_id: str | None = None
    attendees: list[Attendee] | None = None
    description: str | None = None
    patient_note: str | None = None
    hp_note: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None

    normalize_times = field_validator("start_at", "end_at")(as_utc)

    @model_validator(mode="after")
    def check_time_order(self) -> "EventUpdateRequest":
        if self.start_at and self.end_at and self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        return self
