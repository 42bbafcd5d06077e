"""Reference entities the calendar joins events against."""

from enum import Enum
from typing import Literal

from pydantic import Field

from clinic_calendar.models.base import BackendModel


class ContactInfo(BackendModel):
    value: str
    type: Literal["EMAIL", "PHONE", "FAX", "OTHER"]
    description: str | None = None
    is_primary: bool = False
    is_emergency: bool = False
    is_verified: bool = False


class Address(BackendModel):
    street: str = ""
    number: str | None = None
    city: str = ""
    zip_code: str | None = None
    country: str = ""


class IndividualPermission(BackendModel):
    hp_id: str
    permissions: list[str] = Field(default_factory=list)


class CalendarPermissions(BackendModel):
    organization_permissions: list[str] = Field(default_factory=list)
    individual_permissions: list[IndividualPermission] = Field(default_factory=list)


class Calendar(BackendModel):
    """A bookable calendar, owned by one site and one health professional."""

    id: str
    site_id: str
    hp_id: str
    label: str = ""
    color: str | None = None
    timezone: str = "UTC"
    permissions: CalendarPermissions | None = None


class Site(BackendModel):
    """A clinic site (branch)."""

    id: str
    name: str = ""
    address: Address | None = None
    contact_infos: list[ContactInfo] = Field(default_factory=list)


class HealthProfessional(BackendModel):
    """A clinician holding one or more calendars."""

    id: str
    first_name: str = ""
    last_name: str = ""
    specialty: str | None = None
    contact_infos: list[ContactInfo] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Birthdate(BackendModel):
    year: int
    month: int
    day: int


class Patient(BackendModel):
    """Patient record.

    Events booked through an external system reference the patient by
    ``external_id`` rather than by ``id``.
    """

    id: str
    external_id: str | None = None
    first_name: str = ""
    last_name: str = ""
    middle_name: str | None = None
    birthdate: Birthdate | None = None
    language: str | None = None
    contact_infos: list[ContactInfo] = Field(default_factory=list)
    note: str | None = None
    address: Address | None = None
    status: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class MotiveStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"


class Motive(BackendModel):
    """Appointment reason configured on one or more calendars."""

    id: str
    calendar_ids: list[str] = Field(default_factory=list)
    label: str = ""
    new_patient_duration: int = 0
    existing_patient_duration: int = 0
    is_bookable_online: bool = False
    color: str | None = None
    status: MotiveStatus = MotiveStatus.ACTIVE
    is_sending_notifications_disabled: bool = False
