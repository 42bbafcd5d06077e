"""Main FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinic_calendar import __version__
from clinic_calendar.api.endpoints import router
from clinic_calendar.services.calendar_view import calendar_view_service
from clinic_calendar.utils.logging import setup_logging

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await calendar_view_service.api_client.close()


app = FastAPI(
    title="Clinic Calendar",
    description=(
        "Calendar view model for the clinic admin console: date windows, "
        "event filtering by site, therapist, patient, status and type, and header labels."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Views",
            "description": "Open calendar views, navigate them and apply filters.",
        },
        {
            "name": "Events",
            "description": "Bulk create, update and delete events on the scheduling backend.",
        },
        {
            "name": "Health",
            "description": "Service health monitoring and status checks.",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("clinic_calendar.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
