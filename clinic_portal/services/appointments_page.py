"""
Appointments page instances
Ties the data accessor, the navigator and the layout engine together for one
mounted page, and keeps open pages in a bounded in-process registry
"""
import logging
import threading
import uuid
from collections import OrderedDict

from clinic_portal.services.slot_layout import appointment_card
from clinic_portal.utils.formatting import format_date, format_granularity, format_time

logger = logging.getLogger(__name__)


class PageNotFound(LookupError):
    """Unknown or evicted page id"""


class AppointmentsPage:
    """
    One mounted appointments page

    Requests for the same page can arrive on several server threads; every
    public operation holds the page lock so state changes are applied whole.
    """

    def __init__(self, source, navigator, engine, clock, upcoming_window=30, page_id=None):
        self.page_id = page_id or uuid.uuid4().hex
        self.source = source
        self.navigator = navigator
        self.engine = engine
        self.clock = clock
        self.upcoming_window = upcoming_window
        self._lock = threading.RLock()

    @property
    def state(self):
        return self.navigator.state

    def mount(self):
        """Initial (and only automatic) fetch"""
        with self._lock:
            self.source.load()
        return self

    def refresh(self):
        with self._lock:
            self.source.refresh()
        return self

    def navigate(self, action, **params):
        with self._lock:
            return self.navigator.apply(action, **params)

    def panel(self, search=None):
        """Side-panel list for the focus date, filtered by the search box"""
        with self._lock:
            today = self.clock().date()
            focus = self.state.focus_date(today)
            appointments = self.source.panel_appointments(focus, search)
            return {
                'date': focus.isoformat(),
                'label': format_date(focus),
                'mode': self.state.panel_mode.value,
                'search': search or '',
                'appointments': [appointment_card(a) for a in appointments],
            }

    def upcoming_banner(self):
        upcoming = self.source.upcoming(self.clock(), self.upcoming_window)
        if not upcoming:
            return None
        return {
            'title': f"Upcoming Appointments ({len(upcoming)})",
            'text': ', '.join(f"{a.display_name} at {format_time(a.start)}" for a in upcoming),
            'appointments': [appointment_card(a) for a in upcoming],
        }

    def layout(self, search=None):
        """Everything the render layer needs for the current state"""
        with self._lock:
            now = self.clock()
            today = now.date()
            appointments = self.source.appointments
            focus = self.state.focus_date(today)
            panel_appointments = self.source.panel_appointments(focus, search)

            return {
                'page_id': self.page_id,
                'state': self.state.to_dict(),
                'granularity_label': format_granularity(self.state.granularity),
                'date_button': format_date(focus),
                'loading': self.source.loading,
                'error': self.source.error,
                'upcoming': self.upcoming_banner(),
                'today': [appointment_card(a) for a in self.source.today_appointments(today)],
                'view': self.engine.build(appointments, self.state, now, panel_appointments=panel_appointments),
                'panel': self.panel(search),
            }


class PageRegistry:
    """Bounded map of open pages; least recently used pages are evicted first"""

    def __init__(self, max_pages=256):
        self.max_pages = max_pages
        self._pages = OrderedDict()
        self._lock = threading.Lock()

    def init_app(self, app):
        self.max_pages = app.config.get('MAX_OPEN_PAGES', self.max_pages)
        app.extensions['appointment_pages'] = self

    def add(self, page):
        with self._lock:
            self._pages[page.page_id] = page
            self._pages.move_to_end(page.page_id)
            while len(self._pages) > self.max_pages:
                evicted, _ = self._pages.popitem(last=False)
                logger.info("Evicted appointments page %s", evicted)
        return page

    def get(self, page_id):
        with self._lock:
            page = self._pages.get(page_id)
            if page is None:
                raise PageNotFound(page_id)
            self._pages.move_to_end(page_id)
            return page

    def discard(self, page_id):
        with self._lock:
            return self._pages.pop(page_id, None) is not None

    def clear(self):
        with self._lock:
            self._pages.clear()

    def __len__(self):
        with self._lock:
            return len(self._pages)

    def __contains__(self, page_id):
        with self._lock:
            return page_id in self._pages
