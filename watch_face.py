#!/usr/bin/env python3
"""
Watch face engine: reacts to the host's lifecycle notifications, keeps the
render state and drives the redraw timer.

Analog watch face with a ticking second hand. In ambient mode the second
hand isn't shown. On displays with low-bit ambient mode the hands are drawn
without anti-aliasing while in ambient mode.
"""

from clock_time import TimeSource
from scheduler import INTERACTIVE_UPDATE_RATE_MS, RefreshScheduler


class RenderState:
    """Flags that change how a frame is drawn."""

    def __init__(self, ambient=False, low_bit_ambient=False):
        self.ambient = ambient
        self.low_bit_ambient = low_bit_ambient

    def __repr__(self):
        return f"RenderState(ambient={self.ambient}, low_bit_ambient={self.low_bit_ambient})"


class WatchFace:
    """
    Everything the host talks to. All methods must be called from the host's
    event thread.
    """

    def __init__(self, renderer, invalidate, timer, time_source=None,
                 time_zone_monitor=None, clock=None, interval_ms=INTERACTIVE_UPDATE_RATE_MS):
        """
        Args:
            renderer: ClockRenderer with all images loaded
            invalidate: Called to ask the host for a redraw
            timer: Timer backend for the refresh scheduler (see GLibTimer)
            time_source: TimeSource, defaults to the system zone
            time_zone_monitor: Object with start()/stop(), run while visible
            clock: Wall-clock milliseconds for tick alignment
            interval_ms: Interactive redraw interval
        """
        self.renderer = renderer
        self._invalidate = invalidate
        self.time_source = time_source or TimeSource()
        self.time_zone_monitor = time_zone_monitor
        self.render_state = RenderState()
        self.visible = False
        self.scheduler = RefreshScheduler(timer, self._invalidate, clock=clock, interval_ms=interval_ms)
        self.clock_time = self.time_source.now()

    @property
    def destroyed(self):
        return self.scheduler.destroyed

    def notify_properties(self, low_bit_ambient):
        if self.destroyed:
            return
        self.render_state.low_bit_ambient = bool(low_bit_ambient)

    def notify_ambient(self, ambient, low_bit_ambient=None):
        """Enter or leave ambient mode."""
        if self.destroyed:
            return

        if low_bit_ambient is not None:
            self.notify_properties(low_bit_ambient)

        ambient = bool(ambient)
        if self.render_state.ambient != ambient:
            self.render_state.ambient = ambient
            self._invalidate()

        # Whether the timer should run depends on visibility as well
        self.scheduler.set_ambient(ambient)

    def notify_visibility(self, visible):
        if self.destroyed:
            return

        visible = bool(visible)
        self.visible = visible
        if visible:
            self._start_monitor()
            # The zone may have changed while hidden
            self.time_source.reset(self.time_source.time_zone)
            self.clock_time = self.time_source.now()
        else:
            self._stop_monitor()

        self.scheduler.set_visible(visible)

    def notify_time_zone(self, time_zone=None):
        """
        The system time zone changed.

        Args:
            time_zone: New zone name, or None to re-read the local zone
        """
        if self.destroyed:
            return
        self.time_source.reset(time_zone)
        self.clock_time = self.time_source.now()
        self._invalidate()

    def notify_time_tick(self):
        """Once-a-minute host tick, the only redraw trigger in ambient mode."""
        if self.destroyed:
            return
        self._invalidate()

    def draw(self, cr, width, height):
        self.clock_time = self.time_source.now()
        self.renderer.draw(cr, width, height, self.clock_time, self.render_state)

    def destroy(self):
        self.scheduler.destroy()
        self._stop_monitor()

    def _start_monitor(self):
        if self.time_zone_monitor is not None:
            self.time_zone_monitor.start()

    def _stop_monitor(self):
        if self.time_zone_monitor is not None:
            self.time_zone_monitor.stop()
