"""Navigation and filter-setter operations over the view model state."""

from collections.abc import Callable
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from clinic_calendar.models.view import FilterCriteria, ViewMode, ViewModelState
from clinic_calendar.utils.logging import get_logger

logger = get_logger(__name__)


class NavigationController:
    """Moves the pivot date and switches the view granularity.

    The controller is the only place the cursor of a ``ViewModelState`` is
    mutated. Every transition is total.
    """

    def __init__(self, state: ViewModelState, clock: Callable[[], datetime] | None = None):
        """Initialize controller.

        Args:
            state: State to mutate in place
            clock: Returns the current time, used by today()
        """
        self.state = state
        self._clock = clock or (lambda: datetime.now(state.tzinfo))

    def today(self) -> ViewModelState:
        """Move the pivot to the current date, keeping the view."""
        now = self._clock()
        if now.tzinfo is not None:
            now = now.astimezone(self.state.tzinfo)
        self.state.pivot_date = now.date()
        return self.state

    def prev(self) -> ViewModelState:
        """Step back one unit of the current view."""
        self.state.pivot_date = self.state.pivot_date - self._step()
        return self.state

    def next(self) -> ViewModelState:
        """Step forward one unit of the current view."""
        self.state.pivot_date = self.state.pivot_date + self._step()
        return self.state

    def go_to(self, pivot: date) -> ViewModelState:
        """Jump straight to ``pivot``, as picked on the mini calendar."""
        self.state.pivot_date = pivot
        return self.state

    def set_view(self, view: ViewMode | str) -> ViewModelState:
        """Change granularity without moving the pivot."""
        self.state.view = ViewMode(view)
        return self.state

    def set_criteria(self, criteria: FilterCriteria) -> ViewModelState:
        self.state.criteria = criteria
        return self.state

    def toggle_calendar_visibility(self, calendar_id: str) -> ViewModelState:
        """Show a hidden calendar or hide a shown one."""
        visible = set(self.state.visible_calendar_ids or set())
        if calendar_id in visible:
            visible.remove(calendar_id)
        else:
            visible.add(calendar_id)
        logger.debug(f"Calendar {calendar_id} visible: {calendar_id in visible}")
        self.state.visible_calendar_ids = visible
        return self.state

    def _step(self) -> timedelta | relativedelta:
        if self.state.view is ViewMode.MONTH:
            # Clamps to the month's last day, so Jan 31 + 1 month is Feb 28/29
            return relativedelta(months=1)
        if self.state.view is ViewMode.WEEK:
            return timedelta(days=7)
        return timedelta(days=1)
