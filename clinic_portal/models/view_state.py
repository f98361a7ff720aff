from dataclasses import dataclass
from datetime import date
from enum import Enum


class Granularity(str, Enum):
    """Calendar view granularity"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ', '.join(g.value for g in cls)
            raise ValueError(f"Invalid granularity {value!r}. Use one of: {allowed}")


class PanelMode(str, Enum):
    """Which date the side panel follows"""
    TODAY = "today"
    SELECTED = "selected"


@dataclass
class ViewState:
    """Navigation state of one appointments page (never persisted)"""

    anchor_date: date
    selected_date: date
    granularity: Granularity = Granularity.DAY
    panel_mode: PanelMode = PanelMode.TODAY

    @classmethod
    def initial(cls, today, granularity=Granularity.DAY):
        return cls(
            anchor_date=today,
            selected_date=today,
            granularity=Granularity.parse(granularity),
            panel_mode=PanelMode.TODAY,
        )

    def focus_date(self, today):
        """Date shown by the day/week grids and the side panel"""
        return today if self.panel_mode == PanelMode.TODAY else self.selected_date

    def to_dict(self):
        return {
            'anchor_date': self.anchor_date.isoformat(),
            'selected_date': self.selected_date.isoformat(),
            'granularity': self.granularity.value,
            'panel_mode': self.panel_mode.value,
        }
