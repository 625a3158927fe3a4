"""Tests for the watch face engine and its lifecycle hooks."""

import cairo
import pytest

from clock_time import ClockTime
from conftest import pixel
from scheduler import IDLE, SCHEDULED
from watch_face import RenderState, WatchFace


class FakeTimeSource:
    def __init__(self, now=ClockTime(3, 0, 0, 0)):
        self.current = now
        self.time_zone = None
        self.resets = []

    def reset(self, time_zone=None):
        self.time_zone = time_zone
        self.resets.append(time_zone)

    def now(self):
        return self.current


class FakeMonitor:
    def __init__(self):
        self.running = False
        self.starts = 0

    def start(self):
        if not self.running:
            self.running = True
            self.starts += 1

    def stop(self):
        self.running = False


class RecordingRenderer:
    def __init__(self):
        self.calls = []

    def draw(self, cr, width, height, clock_time, render_state):
        self.calls.append((width, height, clock_time, render_state.ambient, render_state.low_bit_ambient))


class Invalidations:
    def __init__(self):
        self.count = 0

    def __call__(self):
        self.count += 1


@pytest.fixture
def invalidate():
    return Invalidations()


@pytest.fixture
def monitor():
    return FakeMonitor()


@pytest.fixture
def time_source():
    return FakeTimeSource()


@pytest.fixture
def face(timer, clock, invalidate, monitor, time_source):
    return WatchFace(RecordingRenderer(), invalidate, timer, time_source=time_source,
                     time_zone_monitor=monitor, clock=clock)


def test_render_state_defaults():
    state = RenderState()
    assert not state.ambient
    assert not state.low_bit_ambient


def test_visible_face_runs_the_timer_and_monitor(face, monitor, time_source):
    face.notify_visibility(True)

    assert face.scheduler.state == SCHEDULED
    assert monitor.running
    assert time_source.resets == [None]


def test_hidden_face_stops_the_timer_and_monitor(face, monitor):
    face.notify_visibility(True)
    face.notify_visibility(False)

    assert face.scheduler.state == IDLE
    assert not monitor.running


def test_notifications_after_destroy_are_ignored(face, invalidate, timer, time_source):
    face.notify_visibility(True)
    face.destroy()
    redraws = invalidate.count

    face.notify_ambient(True)
    face.notify_time_zone('Europe/Warsaw')
    face.notify_time_tick()
    face.notify_properties(True)

    assert invalidate.count == redraws
    assert time_source.resets == [None]
    assert not face.render_state.ambient
    assert not face.render_state.low_bit_ambient
    assert timer.pending == {}


def test_repeated_visibility_is_harmless(face, monitor, timer):
    for _ in range(3):
        face.notify_visibility(True)
    assert monitor.starts == 1
    assert len(timer.pending) == 1


def test_entering_ambient_redraws_once_and_stops_ticking(face, invalidate):
    face.notify_visibility(True)
    face.notify_ambient(True)
    face.notify_ambient(True)

    assert invalidate.count == 1
    assert face.render_state.ambient
    assert face.scheduler.state == IDLE

    face.notify_ambient(False)
    assert invalidate.count == 2
    assert face.scheduler.state == SCHEDULED


def test_ambient_notification_can_carry_low_bit_flag(face):
    face.notify_ambient(True, low_bit_ambient=True)
    assert face.render_state.low_bit_ambient

    face.notify_ambient(True, low_bit_ambient=False)
    assert not face.render_state.low_bit_ambient


def test_properties_set_low_bit_ambient(face):
    face.notify_properties(True)
    assert face.render_state.low_bit_ambient
    assert not face.render_state.ambient


def test_ticks_request_redraws(face, timer, invalidate):
    face.notify_visibility(True)
    timer.fire()
    timer.fire()
    assert invalidate.count == 2


def test_time_zone_change_resets_time_and_redraws(face, time_source, invalidate):
    face.notify_time_zone('Europe/Warsaw')

    assert time_source.resets == ['Europe/Warsaw']
    assert invalidate.count == 1


def test_time_tick_redraws(face, invalidate):
    face.notify_ambient(True)
    face.notify_time_tick()
    assert invalidate.count == 2


def test_draw_uses_current_time_and_state(face, time_source):
    face.notify_ambient(True, low_bit_ambient=True)
    time_source.current = ClockTime(11, 59, 30, 0)

    face.draw(None, 200, 180)

    assert face.renderer.calls == [(200, 180, ClockTime(11, 59, 30, 0), True, True)]
    assert face.clock_time == ClockTime(11, 59, 30, 0)


def test_destroy_cancels_and_is_idempotent(face, monitor, timer):
    face.notify_visibility(True)
    face.destroy()
    face.destroy()

    assert face.destroyed
    assert timer.pending == {}
    assert not monitor.running

    face.notify_visibility(True)
    assert face.scheduler.state == IDLE
    assert not monitor.running


def test_face_without_monitor(timer, invalidate, time_source):
    face = WatchFace(RecordingRenderer(), invalidate, timer, time_source=time_source)
    face.notify_visibility(True)
    face.notify_visibility(False)
    face.destroy()
    assert face.scheduler.state == IDLE


def test_draw_with_real_renderer(renderer, timer, invalidate):
    face = WatchFace(renderer, invalidate, timer, time_source=FakeTimeSource(ClockTime(0, 0, 0, 0)))
    surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, 100, 100)

    face.draw(cairo.Context(surface), 100, 100)
    r, g, b, a = pixel(surface, 50, 50)
    assert g > 200

    face.notify_ambient(True)
    face.draw(cairo.Context(surface), 100, 100)
    r, g, b, a = pixel(surface, 50, 50)
    assert b > 200 and g < 50
