"""In-memory storage of open calendar views."""

import os
from datetime import UTC, date, datetime, timedelta

from cuid2 import cuid_wrapper

from clinic_calendar.models.session import ViewSession
from clinic_calendar.models.view import ViewMode, ViewModelState

cuid = cuid_wrapper()


class InMemoryViewSessionManager:
    """Keeps one ``ViewSession`` per open calendar page until it goes idle."""

    def __init__(self, session_timeout_minutes: int | None = None, default_timezone: str | None = None):
        """Initialize session manager.

        Args:
            session_timeout_minutes: Minutes of inactivity before a view expires
            default_timezone: Timezone for views that do not name one
        """
        if session_timeout_minutes is None:
            session_timeout_minutes = int(os.getenv("VIEW_SESSION_TIMEOUT_MINUTES", "60"))
        self.sessions: dict[str, ViewSession] = {}
        self.session_timeout = timedelta(minutes=session_timeout_minutes)
        self.default_timezone = default_timezone or os.getenv("CALENDAR_TIMEZONE", "UTC")

    def create_session(
        self,
        pivot_date: date | None = None,
        view: ViewMode | str = ViewMode.WEEK,
        timezone: str | None = None,
    ) -> ViewSession:
        """Open a new view, centred on today unless a pivot date is given.

        Raises:
            ValueError: If the timezone is unknown
        """
        self._cleanup_expired_sessions()

        timezone = timezone or self.default_timezone
        state = ViewModelState(pivot_date=pivot_date or date.today(), view=view, timezone=timezone)
        if pivot_date is None:
            state.pivot_date = datetime.now(state.tzinfo).date()

        session = ViewSession(session_id=self._generate_session_id(), state=state)
        self.sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> ViewSession | None:
        """Get existing view by ID.

        Args:
            session_id: Session identifier

        Returns:
            Session if found and not expired, None otherwise
        """
        self._cleanup_expired_sessions()

        session = self.sessions.get(session_id)
        if session:
            session.update_activity()
        return session

    def delete_session(self, session_id: str) -> bool:
        """Delete a view, cancelling any event fetch still in flight.

        Returns:
            True if session was deleted, False if not found
        """
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        if session.events_task and not session.events_task.done():
            session.events_task.cancel()
        return True

    def _generate_session_id(self) -> str:
        """Generate a new CUID-based session ID."""
        return cuid()

    def _cleanup_expired_sessions(self) -> None:
        """Remove expired sessions from memory."""
        current_time = datetime.now(UTC)
        expired_sessions = [
            session_id
            for session_id, session in self.sessions.items()
            if current_time - session.last_activity > self.session_timeout
        ]

        for session_id in expired_sessions:
            self.delete_session(session_id)

    def get_session_count(self) -> int:
        """Get current number of active views."""
        self._cleanup_expired_sessions()
        return len(self.sessions)


view_session_manager = InMemoryViewSessionManager()
