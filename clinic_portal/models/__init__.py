from .appointment import Appointment, DEFAULT_DURATION_MINUTES
from .view_state import ViewState, Granularity, PanelMode

__all__ = ["Appointment", "DEFAULT_DURATION_MINUTES", "ViewState", "Granularity", "PanelMode"]
