"""View model state: navigation cursor, filters and the derived window."""

from datetime import date, datetime
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from clinic_calendar.models.events import EventStatus, EventType


class ViewMode(str, Enum):
    """Granularity of the calendar view."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class DateRange(BaseModel):
    """Inclusive start and end instants of the visible window."""

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError("Range start must not be after its end")
        return self


class FilterCriteria(BaseModel):
    """Multi-select filter selections.

    An empty set applies no filtering on its dimension.
    """

    site_ids: set[str] = Field(default_factory=set)
    hp_ids: set[str] = Field(default_factory=set)
    patient_ids: set[str] = Field(default_factory=set)
    statuses: set[EventStatus] = Field(default_factory=set)
    types: set[EventType] = Field(default_factory=set)

    def is_empty(self) -> bool:
        return not (self.site_ids or self.hp_ids or self.patient_ids or self.statuses or self.types)


class ViewModelState(BaseModel):
    """Everything the user controls on the calendar page."""

    pivot_date: date
    view: ViewMode = ViewMode.WEEK
    timezone: str = "UTC"
    criteria: FilterCriteria = Field(default_factory=FilterCriteria)
    # None until calendars have been loaded once
    visible_calendar_ids: set[str] | None = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
