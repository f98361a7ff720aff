"""Tests for page instances shared across request threads."""
import threading
from datetime import timedelta, timezone

import pytest

from clinic_portal.services.appointment_source import AppointmentSource
from clinic_portal.services.appointments_page import AppointmentsPage, PageNotFound, PageRegistry
from clinic_portal.services.slot_layout import SlotLayoutEngine
from clinic_portal.services.view_state import CalendarNavigator
from tests.conftest import FIXED_NOW, SAMPLE_APPOINTMENTS


class StaticClient:
    def get(self, path, **kwargs):
        return {'appointments': SAMPLE_APPOINTMENTS}


def clock():
    return FIXED_NOW


@pytest.fixture
def page():
    source = AppointmentSource(StaticClient(), tz=timezone.utc)
    return AppointmentsPage(source, CalendarNavigator(clock), SlotLayoutEngine(), clock).mount()


class TestConcurrentNavigation:

    def test_no_step_is_lost(self, page):
        def click_next():
            for _ in range(25):
                page.navigate('next')

        threads = [threading.Thread(target=click_next) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        expected = FIXED_NOW.date() + timedelta(days=200)
        assert page.state.anchor_date == expected
        assert page.state.selected_date == expected

    def test_layout_never_sees_a_half_applied_step(self, page):
        snapshots = []
        done = threading.Event()

        def read_layouts():
            while not done.is_set():
                snapshots.append(page.layout()['state'])

        reader = threading.Thread(target=read_layouts)
        reader.start()
        for _ in range(100):
            page.navigate('next')
        done.set()
        reader.join()

        assert snapshots
        assert all(s['anchor_date'] == s['selected_date'] for s in snapshots)


class TestRegistry:

    def test_lookup_and_discard(self, page):
        registry = PageRegistry(max_pages=2)
        registry.add(page)
        assert registry.get(page.page_id) is page

        assert registry.discard(page.page_id) is True
        with pytest.raises(PageNotFound):
            registry.get(page.page_id)
