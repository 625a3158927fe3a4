#!/usr/bin/env python3
"""
Clock face compositing: a background image plus rotating hour, minute and
second hand images, drawn with cairo.
"""

import math
import sys
from collections import namedtuple

import cairo
from PIL import Image

from clock_time import hand_angles


IMAGE_NAMES = ('background', 'hour_hand', 'minute_hand', 'second_hand')

HandPlacement = namedtuple('HandPlacement', ['name', 'angle', 'pivot', 'center'])


class ResourceLoadError(Exception):
    """An image the face needs is missing or could not be decoded."""

    def __init__(self, name, path, reason=None):
        self.name = name
        self.path = path
        message = f"Could not load {name} image"
        if path:
            message += f" from {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class SourceImage:
    """
    A decoded image, held as a cairo ARGB32 surface.
    Loaded once at start-up and never modified afterwards.
    """

    def __init__(self, name, surface):
        self._name = name
        self._surface = surface

    @property
    def name(self):
        return self._name

    @property
    def surface(self):
        return self._surface

    @property
    def width(self):
        return self._surface.get_width()

    @property
    def height(self):
        return self._surface.get_height()


def _pil_to_surface(image):
    """Convert a Pillow image to a premultiplied cairo ARGB32 surface."""
    # cairo wants premultiplied alpha in native-endian 32-bit words
    r, g, b, a = image.convert('RGBA').convert('RGBa').split()
    if sys.byteorder == 'little':
        bands = (b, g, r, a)
    else:
        bands = (a, r, g, b)
    data = bytearray(Image.merge('RGBA', bands).tobytes())

    width, height = image.size
    stride = cairo.ImageSurface.format_stride_for_width(cairo.FORMAT_ARGB32, width)
    return cairo.ImageSurface.create_for_data(data, cairo.FORMAT_ARGB32, width, height, stride)


def load_source_image(name, path):
    """
    Decode an image file into a SourceImage.

    Args:
        name: One of IMAGE_NAMES, used in error messages
        path: Path to the image file

    Returns:
        SourceImage

    Raises:
        ResourceLoadError: If the file is missing or not a decodable image
    """
    if not path:
        raise ResourceLoadError(name, path, "no file configured")
    try:
        with Image.open(path) as image:
            image.load()
            surface = _pil_to_surface(image)
    except OSError as e:
        raise ResourceLoadError(name, path, e) from e

    if surface.get_width() <= 0 or surface.get_height() <= 0:
        raise ResourceLoadError(name, path, "image is empty")
    return SourceImage(name, surface)


def scaled_size(source_width, source_height, output_width):
    """
    Size of a source image scaled to the output width, aspect ratio kept.
    The height uses truncating integer division and never drops below 1.
    """
    return output_width, max(1, output_width * source_height // source_width)


class ScaledImageCache:
    """
    One scaled copy per source image, tied to the output size it was made for.
    A request for a different size replaces the entry.
    """

    def __init__(self):
        self._entries = {}
        self.regenerations = 0

    def get(self, source, width, height):
        entry = self._entries.get(source)
        if entry is not None and entry[0] == width and entry[1] == height:
            return entry[2]

        scaled = self._scale(source, width)
        self._entries[source] = (width, height, scaled)
        self.regenerations += 1
        return scaled

    def __len__(self):
        return len(self._entries)

    def _scale(self, source, output_width):
        target_w, target_h = scaled_size(source.width, source.height, output_width)
        surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, target_w, target_h)
        ctx = cairo.Context(surface)
        ctx.scale(target_w / source.width, target_h / source.height)
        ctx.set_source_surface(source.surface, 0, 0)
        ctx.get_source().set_filter(cairo.FILTER_GOOD)
        ctx.paint()
        surface.flush()
        return surface


class ClockRenderer:
    """
    Composites the clock face for a given output size, time and render state.
    Must only be used from one thread.
    """

    def __init__(self, background, hour_hand, minute_hand, second_hand, background_color=(0.0, 0.0, 0.0)):
        sources = dict(zip(IMAGE_NAMES, (background, hour_hand, minute_hand, second_hand)))
        for name, source in sources.items():
            if source is None:
                raise ResourceLoadError(name, None, "image was not loaded")
        self._sources = sources
        self.background_color = self._check_color(background_color)
        self.cache = ScaledImageCache()

    @staticmethod
    def _check_color(color):
        """
        Validate an (r, g, b) colour with components in [0, 1].

        Raises:
            ValueError: If it is not three numbers in range
        """
        if isinstance(color, (str, bytes)) or not isinstance(color, (list, tuple)) or len(color) != 3:
            raise ValueError(f"Background colour must be three numbers in [0, 1], got {color!r}")
        for component in color:
            if isinstance(component, bool) or not isinstance(component, (int, float)) \
                    or not 0.0 <= component <= 1.0:
                raise ValueError(f"Background colour must be three numbers in [0, 1], got {color!r}")
        return tuple(float(component) for component in color)

    @classmethod
    def from_face(cls, face):
        """
        Load the four images named by a Face and build a renderer.

        Raises:
            ResourceLoadError: If any image is missing or undecodable
            ValueError: If the face's background colour is malformed
        """
        images = [load_source_image(name, face.resolve_image_path(name)) for name in IMAGE_NAMES]
        return cls(*images, background_color=face.get('background_color'))

    @staticmethod
    def _check_size(width, height):
        for label, value in (('width', width), ('height', height)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Output {label} must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"Output {label} must be positive, got {value}")

    def layout(self, width, height, clock_time, render_state):
        """
        Work out where each hand goes, in draw order.

        Returns:
            list of HandPlacement. The pivot is the centre of the scaled hand
            image and the centre is the middle of the whole output surface.
        """
        self._check_size(width, height)
        center = (width / 2.0, height / 2.0)

        hour, minute, second = hand_angles(clock_time)
        hands = [('hour_hand', hour), ('minute_hand', minute)]
        if not render_state.ambient:
            hands.append(('second_hand', second))

        placements = []
        for name, angle in hands:
            source = self._sources[name]
            hand_w, hand_h = scaled_size(source.width, source.height, width)
            placements.append(HandPlacement(name, angle, (hand_w / 2.0, hand_h / 2.0), center))
        return placements

    def draw(self, cr, width, height, clock_time, render_state):
        """Draw the face into an existing cairo context."""
        placements = self.layout(width, height, clock_time, render_state)

        # Background colour under everything
        cr.save()
        cr.set_source_rgb(*self.background_color)
        cr.rectangle(0, 0, width, height)
        cr.fill()
        cr.restore()

        background = self.cache.get(self._sources['background'], width, height)
        cr.set_source_surface(background, 0, 0)
        cr.paint()

        smooth = not (render_state.ambient and render_state.low_bit_ambient)
        for placement in placements:
            hand = self.cache.get(self._sources[placement.name], width, height)
            center_x, center_y = placement.center
            pivot_x, pivot_y = placement.pivot

            cr.save()
            cr.set_antialias(cairo.ANTIALIAS_DEFAULT if smooth else cairo.ANTIALIAS_NONE)
            cr.translate(center_x, center_y)
            cr.rotate(math.radians(placement.angle))
            cr.translate(-pivot_x, -pivot_y)
            cr.set_source_surface(hand, 0, 0)
            cr.get_source().set_filter(cairo.FILTER_GOOD if smooth else cairo.FILTER_NEAREST)
            cr.paint()
            cr.restore()

    def render(self, width, height, clock_time, render_state):
        """
        Composite a complete frame.

        Returns:
            cairo.ImageSurface of exactly width x height
        """
        self._check_size(width, height)
        surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, width, height)
        cr = cairo.Context(surface)
        self.draw(cr, width, height, clock_time, render_state)
        surface.flush()
        return surface
