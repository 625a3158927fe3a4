"""Shared fixtures: a fake timer, a fake clock and small face images."""

import os

import cairo
import pytest
from PIL import Image

from renderer import ClockRenderer, SourceImage


class FakeTimer:
    """Collects call_later() requests instead of running them."""

    def __init__(self):
        self.pending = {}
        self.delays = []
        self.cancelled = []
        self._next_handle = 1

    def call_later(self, delay_ms, callback, *args):
        handle = self._next_handle
        self._next_handle += 1
        self.pending[handle] = (callback, args)
        self.delays.append(delay_ms)
        return handle

    def cancel(self, handle):
        self.pending.pop(handle, None)
        self.cancelled.append(handle)

    def fire(self):
        """Run the oldest pending callback."""
        handle = min(self.pending)
        callback, args = self.pending.pop(handle)
        callback(*args)


class FakeClock:
    def __init__(self, now_ms=0):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def clock():
    return FakeClock(1_700_000_000_400)


def solid_source(name, width, height, rgba):
    """SourceImage of one colour; rgba components are 0.0-1.0."""
    surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, width, height)
    cr = cairo.Context(surface)
    cr.set_source_rgba(*rgba)
    cr.set_operator(cairo.OPERATOR_SOURCE)
    cr.paint()
    surface.flush()
    return SourceImage(name, surface)


def pixel(surface, x, y):
    """(r, g, b, a) of one pixel of a little-endian ARGB32 surface."""
    surface.flush()
    data = surface.get_data()
    offset = y * surface.get_stride() + x * 4
    b, g, r, a = data[offset:offset + 4]
    return r, g, b, a


@pytest.fixture
def renderer():
    """Blue background, invisible hour and minute hands, green second hand."""
    return ClockRenderer(
        solid_source('background', 10, 10, (0, 0, 1, 1)),
        solid_source('hour_hand', 10, 10, (0, 0, 0, 0)),
        solid_source('minute_hand', 10, 10, (0, 0, 0, 0)),
        solid_source('second_hand', 10, 2, (0, 1, 0, 1)),
    )


FACE_IMAGES = {
    'polclock.png': ((40, 40), (255, 255, 255, 255)),
    'hourhand.png': ((8, 40), (0, 0, 0, 255)),
    'minutehand.png': ((6, 40), (0, 0, 0, 255)),
    'secondhand.png': ((2, 40), (255, 0, 0, 255)),
}


def write_face(directory, images=FACE_IMAGES):
    """Write PNG files for a face into directory and return its path."""
    os.makedirs(directory, exist_ok=True)
    for filename, (size, color) in images.items():
        Image.new('RGBA', size, color).save(os.path.join(directory, filename))
    return str(directory)


@pytest.fixture
def faces_dir(tmp_path):
    root = tmp_path / 'faces'
    write_face(root / 'polish')
    return str(root)
