"""
Slot layout for the appointments calendar
Turns the appointment list and a ViewState into day/week/month/year grids
"""
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from clinic_portal.models.view_state import Granularity
from clinic_portal.utils.calendar_utils import (
    WEEKDAY_LABELS_MONDAY_FIRST,
    WEEKDAY_LABELS_SUNDAY_FIRST,
    calendar_grid,
    is_same_day,
    is_today,
    month_days,
    overlaps,
    time_slots,
    week_dates,
)
from clinic_portal.utils.formatting import (
    MONTH_NAMES,
    format_date,
    format_hour,
    format_month,
    format_slot_label,
    format_time,
    pluralize,
    status_color,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridSettings:
    """Geometry of the time grid"""
    start_hour: int = 8
    end_hour: int = 20
    slot_minutes: int = 30
    slot_pixel_height: int = 60
    min_block_height: int = 20
    booking_start_hour: int = 9
    booking_end_hour: int = 17

    @classmethod
    def from_config(cls, config):
        return cls(
            start_hour=config.get('DAY_START_HOUR', cls.start_hour),
            end_hour=config.get('DAY_END_HOUR', cls.end_hour),
            slot_minutes=config.get('SLOT_MINUTES', cls.slot_minutes),
            slot_pixel_height=config.get('SLOT_PIXEL_HEIGHT', cls.slot_pixel_height),
            min_block_height=config.get('MIN_BLOCK_HEIGHT', cls.min_block_height),
            booking_start_hour=config.get('BOOKING_START_HOUR', cls.booking_start_hour),
            booking_end_hour=config.get('BOOKING_END_HOUR', cls.booking_end_hour),
        )

    @property
    def pixels_per_minute(self):
        return self.slot_pixel_height / self.slot_minutes


def appointment_card(appointment):
    """Render-ready fields of one appointment"""
    return {
        'id': appointment.id,
        'patient_name': appointment.display_name,
        'start': appointment.start.isoformat() if appointment.start else None,
        'end': appointment.end.isoformat() if appointment.end else None,
        'time': format_time(appointment.start),
        'duration': appointment.duration,
        'status': appointment.status,
        'category': appointment.category,
        'color': status_color(appointment.status),
        'notes': appointment.notes,
        'meet_link': appointment.meet_link,
        'appointment_type': appointment.appointment_type,
    }


class SlotLayoutEngine:
    """Pure layout computations; never touches the network"""

    def __init__(self, settings=None):
        self.settings = settings or GridSettings()
        self._slots = time_slots(
            self.settings.start_hour,
            self.settings.end_hour,
            self.settings.slot_minutes,
            include_end=True,
        )

    @property
    def slots(self):
        return list(self._slots)

    # ------------------------------------------------------------------
    # Bucketing
    # ------------------------------------------------------------------

    @staticmethod
    def appointments_for_date(appointments, d):
        """Scheduled appointments starting on `d`, ordered by start"""
        matched = [a for a in appointments if a.is_scheduled and is_same_day(a.start, d)]
        return sorted(matched, key=lambda a: a.start)

    @staticmethod
    def appointments_in_month(appointments, year, month):
        return [
            a for a in appointments
            if a.is_scheduled and a.start.year == year and a.start.month == month
        ]

    @staticmethod
    def appointments_in_year(appointments, year):
        return [a for a in appointments if a.is_scheduled and a.start.year == year]

    def has_appointments(self, appointments, d):
        return any(a.is_scheduled and is_same_day(a.start, d) for a in appointments)

    def window(self, d):
        """(start, end) datetimes of the visible time column for day `d`"""
        start = datetime.combine(d, time(self.settings.start_hour, 0))
        end = start + timedelta(minutes=len(self._slots) * self.settings.slot_minutes)
        return start, end

    # ------------------------------------------------------------------
    # Day timeline
    # ------------------------------------------------------------------

    def day_timeline(self, appointments, d, now=None):
        """
        Time column for one day

        Every slot lists the appointments overlapping it (a later slot marks
        them as continuations); each appointment gets exactly one block
        positioned against the whole column.
        """
        day_appointments = self.appointments_for_date(appointments, d)
        slot_minutes = self.settings.slot_minutes

        slots = []
        for index, (hour, minute) in enumerate(self._slots):
            slot_start = datetime.combine(d, time(hour, minute))
            slot_end = slot_start + timedelta(minutes=slot_minutes)
            entries = [
                {'id': a.id, 'continuation': a.start < slot_start}
                for a in day_appointments
                if overlaps(a.start, a.duration, slot_start, slot_minutes)
            ]
            slots.append({
                'index': index,
                'hour': hour,
                'minute': minute,
                'label': format_hour(hour, minute),
                'is_current': now is not None and slot_start <= now < slot_end,
                'appointments': entries,
            })

        blocks = self._blocks(day_appointments, d)
        window_start, window_end = self.window(d)
        return {
            'date': d.isoformat(),
            'window_start': window_start.isoformat(),
            'window_end': window_end.isoformat(),
            'height': len(self._slots) * self.settings.slot_pixel_height,
            'slots': slots,
            'blocks': blocks,
        }

    def _blocks(self, day_appointments, d):
        window_start, window_end = self.window(d)
        ppm = self.settings.pixels_per_minute
        slot_minutes = self.settings.slot_minutes

        blocks = []
        for appointment in day_appointments:
            visible_start = max(appointment.start, window_start)
            visible_end = min(appointment.end, window_end)
            if visible_start >= visible_end:
                continue

            offset = (visible_start - window_start).total_seconds() / 60
            span = (visible_end - visible_start).total_seconds() / 60
            first_slot = int(offset // slot_minutes)
            last_slot = int(((visible_end - window_start).total_seconds() / 60 - 1e-9) // slot_minutes)

            blocks.append({
                'appointment': appointment_card(appointment),
                'top': offset * ppm,
                'height': max(span * ppm, self.settings.min_block_height),
                'visible_minutes': span,
                'first_slot_index': first_slot,
                'slot_span': last_slot - first_slot + 1,
                'clipped_top': appointment.start < window_start,
                'clipped_bottom': appointment.end > window_end,
                '_start': visible_start,
                '_end': visible_end,
            })

        self._assign_lanes(blocks)
        for block in blocks:
            del block['_start'], block['_end']
        return blocks

    @staticmethod
    def _assign_lanes(blocks):
        """Pack overlapping blocks side by side (greedy interval partitioning)"""
        ordered = sorted(blocks, key=lambda b: (b['_start'], -(b['_end'] - b['_start']).total_seconds()))
        cluster = []
        cluster_end = None
        lane_ends = []

        def close_cluster():
            for member in cluster:
                member['lanes'] = len(lane_ends)

        for block in ordered:
            if cluster and block['_start'] >= cluster_end:
                close_cluster()
                cluster, lane_ends = [], []
                cluster_end = None

            for lane, lane_end in enumerate(lane_ends):
                if lane_end <= block['_start']:
                    lane_ends[lane] = block['_end']
                    block['lane'] = lane
                    break
            else:
                block['lane'] = len(lane_ends)
                lane_ends.append(block['_end'])

            cluster.append(block)
            cluster_end = block['_end'] if cluster_end is None else max(cluster_end, block['_end'])

        if cluster:
            close_cluster()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def day_view(self, appointments, d, now=None):
        return {
            'granularity': Granularity.DAY.value,
            'date': d.isoformat(),
            'timeline': self.day_timeline(appointments, d, now),
        }

    def week_view(self, appointments, anchor, now=None):
        today = now.date() if now else None
        columns = []
        for index, d in enumerate(week_dates(anchor)):
            timeline = self.day_timeline(appointments, d, now)
            for block in timeline['blocks']:
                block['drill_down_date'] = d.isoformat()
            columns.append({
                'date': d.isoformat(),
                'weekday': WEEKDAY_LABELS_MONDAY_FIRST[index],
                'day': d.day,
                'is_today': is_today(d, today),
                'count': len(self.appointments_for_date(appointments, d)),
                'slot_appointments': [slot['appointments'] for slot in timeline['slots']],
                'blocks': timeline['blocks'],
            })

        return {
            'granularity': Granularity.WEEK.value,
            'rows': [
                {'hour': hour, 'minute': minute, 'label': format_hour(hour, minute)}
                for hour, minute in self._slots
            ],
            'height': len(self._slots) * self.settings.slot_pixel_height,
            'columns': columns,
        }

    def month_view(self, appointments, anchor, selected=None, today=None, focus=None, now=None, timeline_appointments=None):
        """
        Month grid with presence dots

        The focus day's timeline is included for the right-hand column.
        """
        cells = []
        for d in calendar_grid(anchor):
            if d is None:
                cells.append(None)
                continue
            count = len(self.appointments_for_date(appointments, d))
            cells.append({
                'date': d.isoformat(),
                'day': d.day,
                'has_appointments': count > 0,
                'count': count,
                'is_today': is_today(d, today),
                'is_selected': is_same_day(d, selected),
            })

        view = {
            'granularity': Granularity.MONTH.value,
            'month': anchor.month,
            'year': anchor.year,
            'name': format_month(anchor),
            'weekdays': list(WEEKDAY_LABELS_SUNDAY_FIRST),
            'weeks': [cells[i:i + 7] for i in range(0, len(cells), 7)],
        }
        if focus is not None:
            source = appointments if timeline_appointments is None else timeline_appointments
            view['timeline'] = self.day_timeline(source, focus, now)
        return view

    def year_view(self, appointments, anchor, today=None):
        months = []
        for month in range(1, 13):
            days = []
            for d in month_days(anchor.year, month):
                days.append({
                    'date': d.isoformat(),
                    'day': d.day,
                    'has_appointments': self.has_appointments(appointments, d),
                    'is_today': is_today(d, today),
                })
            months.append({
                'month': month,
                'name': MONTH_NAMES[month - 1],
                'count': len(self.appointments_in_month(appointments, anchor.year, month)),
                'is_current_month': today is not None and (today.year, today.month) == (anchor.year, month),
                'days': days,
            })
        return {
            'granularity': Granularity.YEAR.value,
            'year': anchor.year,
            'months': months,
        }

    def booking_slots(self):
        """
        Selectable booking times

        Every option is reported available; existing appointments are not
        cross-checked here.
        """
        return [
            {
                'time': format_hour(hour, minute),
                'label': format_slot_label(hour, minute),
                'available': True,
            }
            for hour, minute in time_slots(
                self.settings.booking_start_hour,
                self.settings.booking_end_hour,
                self.settings.slot_minutes,
            )
        ]

    # ------------------------------------------------------------------
    # Page assembly
    # ------------------------------------------------------------------

    def summary(self, appointments, state, today, panel_count=None):
        """Header title and count line for the active granularity"""
        granularity = state.granularity
        focus = state.focus_date(today)

        if granularity == Granularity.DAY:
            count = panel_count if panel_count is not None else len(self.appointments_for_date(appointments, focus))
            return format_date(focus), pluralize(count, 'appointment')
        if granularity == Granularity.WEEK:
            week = week_dates(focus)
            count = sum(len(self.appointments_for_date(appointments, d)) for d in week)
            return f"Week of {format_date(week[0])}", f"{pluralize(count, 'appointment')} this week"
        if granularity == Granularity.MONTH:
            anchor = state.anchor_date
            count = len(self.appointments_in_month(appointments, anchor.year, anchor.month))
            return format_month(anchor), f"{pluralize(count, 'appointment')} this month"
        count = len(self.appointments_in_year(appointments, state.anchor_date.year))
        return str(state.anchor_date.year), f"{pluralize(count, 'appointment')} this year"

    def build(self, appointments, state, now, panel_appointments=None):
        """
        Layout for whatever the ViewState currently shows

        Args:
            appointments: full appointment list
            state: ViewState
            now: current local datetime
            panel_appointments: search-filtered list for the focus day; the
                day timelines render this subset when given
        """
        today = now.date()
        focus = state.focus_date(today)
        timeline_source = appointments if panel_appointments is None else panel_appointments

        if state.granularity == Granularity.DAY:
            view = self.day_view(timeline_source, focus, now)
        elif state.granularity == Granularity.WEEK:
            view = self.week_view(appointments, focus, now)
        elif state.granularity == Granularity.MONTH:
            view = self.month_view(
                appointments,
                state.anchor_date,
                selected=state.selected_date,
                today=today,
                focus=focus,
                now=now,
                timeline_appointments=timeline_source,
            )
        else:
            view = self.year_view(appointments, state.anchor_date, today)

        title, subtitle = self.summary(
            appointments,
            state,
            today,
            panel_count=len(panel_appointments) if panel_appointments is not None else None,
        )
        view['title'] = title
        view['subtitle'] = subtitle
        return view
