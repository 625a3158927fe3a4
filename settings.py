#!/usr/bin/env python3
"""
Settings class for the watch face window and its behaviour.
"""

import os
import sys

from property_bag import PropertyBag


def get_config_dir():
    """Per-user configuration directory (snap-aware)."""
    snap_user_data = os.environ.get('SNAP_USER_DATA')
    if snap_user_data:
        return snap_user_data
    return os.path.expanduser('~/.config/polishclock')


class Settings(PropertyBag):
    """
    Property bag for behavioural settings: window geometry, ambient mode
    policy, time zone and the active face.
    """

    DEFAULTS = {
        # Window geometry (position is nullable)
        'window_x': None,
        'window_y': None,
        'width': 320,
        'height': 320,
        'always_on_top': False,

        # Ambient mode
        'low_bit_ambient': False,
        'start_ambient': False,
        'ambient_idle_timeout': 0,  # Seconds without pointer activity, 0 = never

        # Time
        'time_zone': None,  # IANA name, None = system zone
        'update_interval_ms': 1000,

        'active_face_name': 'polish',
    }

    def __init__(self, settings_file=None):
        if settings_file is None:
            settings_file = os.path.join(get_config_dir(), 'settings.json')
        super().__init__(settings_file)

    def update_interval(self):
        """
        Interactive redraw interval in milliseconds.
        A value that is not a positive integer is reported and replaced by the default.
        """
        value = self.get('update_interval_ms')
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            default = self.DEFAULTS['update_interval_ms']
            print(f"Warning: update_interval_ms must be a positive integer, got {value!r}; using {default}",
                  file=sys.stderr)
            return default
        return value
