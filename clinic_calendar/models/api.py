"""Request and response models for the HTTP endpoints."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, model_validator

from clinic_calendar.models.view import ViewMode


class CreateViewRequest(BaseModel):
    """Request model for opening a calendar view."""

    pivot_date: date | None = None
    view: ViewMode = ViewMode.WEEK
    timezone: str | None = None


class NavigateRequest(BaseModel):
    """Request model for moving the view's pivot date."""

    action: Literal["today", "prev", "next", "goto"]
    target: date | None = None

    @model_validator(mode="after")
    def check_target(self) -> "NavigateRequest":
        if self.action == "goto" and self.target is None:
            raise ValueError("target is required for goto")
        return self


class ViewModeRequest(BaseModel):
    view: ViewMode


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
    active_views: int
