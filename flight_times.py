# Scheduled/estimated time extraction for the departures board.

import re
from typing import NamedTuple

NO_TIME = "--:--"
MINUTES_PER_DAY = 24 * 60
ROLLOVER_THRESHOLD_MIN = 12 * 60

TIME_PATTERN = re.compile(r"([0-9]{1,2}:[0-9]{2})")


class TimeAndDelay(NamedTuple):
    std: str
    etd: str
    delay_mins: int


NO_TIMES = TimeAndDelay(NO_TIME, NO_TIME, 0)


def to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def compute_delay_minutes(std: str, etd: str) -> int:
    if std == etd:
        return 0
    std_min = to_minutes(std)
    etd_min = to_minutes(etd)
    # An estimate more than half a day "early" has rolled past midnight.
    if etd_min < std_min - ROLLOVER_THRESHOLD_MIN:
        etd_min += MINUTES_PER_DAY
    return max(0, etd_min - std_min)


def parse_time_and_delay(raw_text: str) -> TimeAndDelay:
    """Split a board time cell such as ``"10:05 10:40"`` into std/etd/delay.

    The first ``H:MM``/``HH:MM`` token is the scheduled time and the second the
    estimate; later tokens are ignored. Text without any token, or that cannot
    be read at all, yields ``NO_TIMES``.
    """
    try:
        times = TIME_PATTERN.findall(raw_text)
        if not times:
            return NO_TIMES
        std = times[0]
        etd = times[1] if len(times) > 1 else std
        return TimeAndDelay(std, etd, compute_delay_minutes(std, etd))
    except (TypeError, ValueError):
        return NO_TIMES
