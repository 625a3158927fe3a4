#!/usr/bin/env python3
"""
Wall-clock time for the watch face and the hand angles derived from it.
"""

import sys
import time
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class ClockTime:
    """
    Wall-clock time split into the fields the hands need.
    hour is 0-23, minute and second 0-59, millisecond 0-999.
    """

    __slots__ = ('hour', 'minute', 'second', 'millisecond')

    def __init__(self, hour=0, minute=0, second=0, millisecond=0):
        for field, value, limit in (('hour', hour, 24), ('minute', minute, 60),
                                    ('second', second, 60), ('millisecond', millisecond, 1000)):
            if not 0 <= value < limit:
                raise ValueError(f"{field} must be in [0, {limit}), got {value}")
        self.hour = hour
        self.minute = minute
        self.second = second
        self.millisecond = millisecond

    @classmethod
    def from_datetime(cls, dt):
        return cls(dt.hour, dt.minute, dt.second, dt.microsecond // 1000)

    @property
    def millis_since_midnight(self):
        return ((self.hour * 60 + self.minute) * 60 + self.second) * 1000 + self.millisecond

    def __eq__(self, other):
        if not isinstance(other, ClockTime):
            return NotImplemented
        return (self.hour, self.minute, self.second, self.millisecond) == \
               (other.hour, other.minute, other.second, other.millisecond)

    def __repr__(self):
        return f"ClockTime({self.hour:02d}:{self.minute:02d}:{self.second:02d}.{self.millisecond:03d})"


def hour_angle(clock_time):
    """
    Hour hand angle in degrees, clockwise from 12 o'clock.
    The fractional hour comes from the milliseconds since midnight, so the
    hand moves continuously instead of jumping on the hour.
    """
    fractional_hour = (clock_time.millis_since_midnight / 1000.0 / 3600.0) % 1
    return ((360.0 / 12.0) * (clock_time.hour + fractional_hour)) % 360.0


def minute_angle(clock_time):
    """Minute hand angle; creeps by a tenth of a degree per second."""
    return ((360.0 / 60.0) * clock_time.minute + clock_time.second / 10.0) % 360.0


def second_angle(clock_time):
    return ((360.0 / 60.0) * clock_time.second) % 360.0


def hand_angles(clock_time):
    """Return (hour, minute, second) angles in degrees."""
    return hour_angle(clock_time), minute_angle(clock_time), second_angle(clock_time)


class TimeSource:
    """
    Produces ClockTime values for the current moment.
    time_zone is an IANA name such as 'Europe/Warsaw', or None for the
    zone of the running process.
    """

    def __init__(self, time_zone=None):
        self._zone = None
        self.reset(time_zone)

    @classmethod
    def from_setting(cls, time_zone):
        """A TimeSource for a configured zone, falling back to the local zone if it is unknown."""
        try:
            return cls(time_zone)
        except ValueError as e:
            print(f"Warning: {e}, using the local time zone", file=sys.stderr)
            return cls()

    @property
    def time_zone(self):
        return self._zone.key if self._zone is not None else None

    def reset(self, time_zone=None):
        """
        Re-read the time zone after a change.

        Args:
            time_zone: Zone name to switch to, or None to re-read the local zone

        Raises:
            ValueError: If the zone name is unknown
        """
        if time_zone is None:
            # Picks up a changed TZ variable or /etc/localtime
            if hasattr(time, 'tzset'):
                time.tzset()
            self._zone = None
            return

        try:
            self._zone = ZoneInfo(time_zone)
        except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
            raise ValueError(f"Unknown time zone '{time_zone}'") from e

    def now(self):
        if self._zone is None:
            return ClockTime.from_datetime(datetime.now())
        return ClockTime.from_datetime(datetime.now(self._zone))
