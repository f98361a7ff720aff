"""
Calendar navigation state machine
Translates previous/next/today/pick actions into a new ViewState
"""
import logging
from datetime import date, timedelta

from clinic_portal.models.view_state import ViewState, Granularity, PanelMode
from clinic_portal.utils.calendar_utils import add_months, add_years, parse_date

logger = logging.getLogger(__name__)

# Latest date whose Monday-to-Sunday week still fits in the calendar
LATEST_DATE = date.max - timedelta(days=date.max.isoweekday())


class CalendarNavigator:
    """
    Owns the ViewState of one appointments page

    Month and year steps clamp to the target month length but remember the
    day-of-month the user started from, so stepping forward and back lands
    on the starting anchor again.
    """

    def __init__(self, clock, granularity=Granularity.DAY, state=None):
        """
        Args:
            clock: callable returning the current local datetime
            granularity: initial granularity when no state is given
            state: existing ViewState to continue from
        """
        self._clock = clock
        self.state = state or ViewState.initial(self.today(), granularity)
        self._preferred_day = self.state.anchor_date.day

    def today(self):
        return self._clock().date()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def previous(self):
        return self._step(-1)

    def next(self):
        return self._step(1)

    def go_to_today(self):
        today = self.today()
        self._set_anchor(today)
        self.state.selected_date = today
        self.state.panel_mode = PanelMode.TODAY
        return self.state

    def pick_date(self, d):
        """Select a day (month-grid click); re-anchor if it is outside the visible month"""
        self._check_range(d)
        self.state.selected_date = d
        self.state.panel_mode = PanelMode.SELECTED
        anchor = self.state.anchor_date
        if (d.year, d.month) != (anchor.year, anchor.month):
            self._set_anchor(d)
        return self.state

    def jump_days(self, days):
        """Date-picker presets: Tomorrow (1), Next week (7)"""
        target = self._shift(self.today(), days)
        self._set_anchor(target)
        self.state.selected_date = target
        self.state.panel_mode = PanelMode.SELECTED
        return self.state

    def set_granularity(self, granularity):
        self.state.granularity = Granularity.parse(granularity)
        return self.state

    def pick_month(self, month):
        """Year-view month card: open that month in month view"""
        if not 1 <= int(month) <= 12:
            raise ValueError(f"Invalid month {month!r}. Use 1-12")
        first = date(self.state.anchor_date.year, int(month), 1)
        self._set_anchor(first)
        self.state.selected_date = first
        self.state.granularity = Granularity.MONTH
        return self.state

    def drill_down(self, d):
        """Week-view block click: show that appointment's day"""
        self._check_range(d)
        self._set_anchor(d)
        self.state.selected_date = d
        self.state.panel_mode = PanelMode.SELECTED
        self.state.granularity = Granularity.DAY
        return self.state

    def apply(self, action, **params):
        """
        Dispatch a named action coming from the HTTP layer

        Raises:
            ValueError: unknown action or bad parameter
        """
        if action == 'previous':
            return self.previous()
        if action == 'next':
            return self.next()
        if action == 'today':
            return self.go_to_today()
        if action == 'pick_date':
            return self.pick_date(self._require_date(params.get('date')))
        if action == 'jump':
            try:
                days = int(params.get('days'))
            except (TypeError, ValueError, OverflowError):
                raise ValueError("'days' must be an integer")
            return self.jump_days(days)
        if action == 'set_granularity':
            return self.set_granularity(params.get('granularity'))
        if action == 'pick_month':
            try:
                month = int(params.get('month'))
            except (TypeError, ValueError, OverflowError):
                raise ValueError("'month' must be an integer 1-12")
            return self.pick_month(month)
        if action == 'drill_down':
            return self.drill_down(self._require_date(params.get('date')))
        raise ValueError(f"Unknown navigation action {action!r}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _step(self, direction):
        state = self.state
        if state.granularity in (Granularity.DAY, Granularity.WEEK):
            days = (1 if state.granularity == Granularity.DAY else 7) * direction
            anchor = self._shift(state.anchor_date, days)
            selected = self._shift(state.focus_date(self.today()), days)
            self._set_anchor(anchor)
            state.selected_date = selected
            state.panel_mode = PanelMode.SELECTED
        elif state.granularity == Granularity.MONTH:
            state.anchor_date = self._checked(add_months, state.anchor_date, direction, self._preferred_day)
        else:
            state.anchor_date = self._checked(add_years, state.anchor_date, direction, self._preferred_day)

        logger.debug("Stepped %s %+d -> anchor %s", state.granularity.value, direction, state.anchor_date)
        return state

    def _set_anchor(self, d):
        self.state.anchor_date = d
        self._preferred_day = d.day

    @staticmethod
    def _check_range(d):
        if not date.min <= d <= LATEST_DATE:
            raise ValueError("date out of range")
        return d

    def _shift(self, d, days):
        """d + days, rejecting results outside the navigable range"""
        try:
            return self._check_range(d + timedelta(days=days))
        except OverflowError:
            raise ValueError("date out of range")

    def _checked(self, step, d, amount, preferred_day):
        try:
            return self._check_range(step(d, amount, preferred_day))
        except (ValueError, OverflowError):
            raise ValueError("date out of range")

    @staticmethod
    def _require_date(value):
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError("'date' must be YYYY-MM-DD")
        return parsed
