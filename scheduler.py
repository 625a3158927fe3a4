#!/usr/bin/env python3
"""
Redraw timer for the watch face.

The timer only runs while the face is visible and not in ambient mode, and
its ticks are lined up with wall-clock second boundaries.
"""

import time


INTERACTIVE_UPDATE_RATE_MS = 1000

IDLE = 'idle'
SCHEDULED = 'scheduled'


def next_tick_delay(now_ms, interval_ms=INTERACTIVE_UPDATE_RATE_MS):
    """Milliseconds until the next multiple of interval_ms."""
    return interval_ms - (now_ms % interval_ms)


def _wall_clock_ms():
    return int(time.time() * 1000)


class GLibTimer:
    """One-shot timers on the GLib main loop."""

    def __init__(self):
        from gi.repository import GLib
        self._glib = GLib

    def call_later(self, delay_ms, callback, *args):
        """Run callback(*args) once after delay_ms. Returns a handle for cancel()."""
        def dispatch():
            callback(*args)
            return self._glib.SOURCE_REMOVE
        return self._glib.timeout_add(max(0, int(delay_ms)), dispatch)

    def cancel(self, handle):
        self._glib.source_remove(handle)


class RefreshScheduler:
    """
    Keeps at most one redraw tick pending.

    Every scheduled tick carries the epoch it was scheduled in. cancel()
    moves to a new epoch, so a callback that was already queued finds its
    token stale and does nothing.
    """

    def __init__(self, timer, on_tick, clock=None, interval_ms=INTERACTIVE_UPDATE_RATE_MS):
        """
        Args:
            timer: Object with call_later(delay_ms, callback, *args) and cancel(handle)
            on_tick: Called on every tick to request a redraw
            clock: Returns wall-clock milliseconds (defaults to time.time)
            interval_ms: Tick interval
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self._timer = timer
        self._on_tick = on_tick
        self._clock = clock or _wall_clock_ms
        self.interval_ms = interval_ms

        self.visible = False
        self.ambient = False
        self._epoch = 0
        self._handle = None
        self._destroyed = False

    @property
    def pending(self):
        return self._handle is not None

    @property
    def state(self):
        return SCHEDULED if self.pending else IDLE

    @property
    def destroyed(self):
        return self._destroyed

    def should_run(self):
        return self.visible and not self.ambient and not self._destroyed

    def set_visible(self, visible):
        self.visible = bool(visible)
        self.update()

    def set_ambient(self, ambient):
        self.ambient = bool(ambient)
        self.update()

    def update(self):
        """Cancel any pending tick, then start again at once if the timer should run."""
        self.cancel()
        if self.should_run():
            self._schedule(0)

    def cancel(self):
        """Drop the pending tick, if any. Safe to call repeatedly."""
        self._epoch += 1
        if self._handle is not None:
            handle, self._handle = self._handle, None
            self._timer.cancel(handle)

    def destroy(self):
        self.cancel()
        self._destroyed = True

    def _schedule(self, delay_ms):
        self._handle = self._timer.call_later(delay_ms, self._fire, self._epoch)

    def _fire(self, token):
        if token != self._epoch or self._destroyed:
            return
        self._handle = None
        self._on_tick()
        # on_tick may have cancelled or rescheduled already
        if token == self._epoch and self.should_run():
            self._schedule(next_tick_delay(self._clock(), self.interval_ms))
