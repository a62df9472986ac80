from __future__ import annotations

import math
from datetime import datetime

TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def round_half_up(value: float) -> int:
    # x.5 goes to x+1; inputs are hit counts and rates, never negative
    return int(math.floor(value + 0.5))


def format_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime(TIME_FORMAT)[:-3]
