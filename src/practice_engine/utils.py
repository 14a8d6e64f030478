"""Small numeric and date helpers shared across engines."""

import math
from datetime import datetime


def round_half_up(value: float) -> int:
    """Round .5 up instead of to the nearest even integer."""
    return math.floor(value + 0.5)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
