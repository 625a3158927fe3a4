#!/usr/bin/env python3
"""
Face class: which images make up a watch face and how to find them.
"""

import os

from property_bag import PropertyBag
from settings import get_config_dir


FACE_FILE = 'face.json'


def get_builtin_faces_dir():
    snap_dir = os.environ.get('SNAP')
    if snap_dir:
        return os.path.join(snap_dir, 'lib', 'polishclock', 'assets', 'faces')
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), 'assets', 'faces')


def get_user_faces_dir():
    return os.path.join(get_config_dir(), 'faces')


class Face(PropertyBag):
    """
    Property bag describing one face.

    A face is a directory holding the four images and an optional face.json
    overriding the defaults below. Image names are relative to that directory.
    User faces take precedence over built-in faces of the same name.
    """

    DEFAULTS = {
        'background_image': 'polclock.png',
        'hour_hand_image': 'hourhand.png',
        'minute_hand_image': 'minutehand.png',
        'second_hand_image': 'secondhand.png',
        'background_color': (0.0, 0.0, 0.0),
    }

    def __init__(self, name='polish', faces_dirs=None):
        """
        Args:
            name: Face directory name
            faces_dirs: Directories to search, first match wins
                        (defaults to the user faces dir, then the built-in one)
        """
        self.name = name
        if faces_dirs is None:
            faces_dirs = [get_user_faces_dir(), get_builtin_faces_dir()]
        self.faces_dirs = list(faces_dirs)
        self.directory = self._find_directory()

        file_path = os.path.join(self.directory, FACE_FILE) if self.directory else None
        super().__init__(file_path)

    def _find_directory(self):
        for faces_dir in self.faces_dirs:
            candidate = os.path.join(faces_dir, self.name)
            if os.path.isdir(candidate):
                return candidate
        return None

    def load(self):
        """
        Load face.json if the face has one; a face without it uses the defaults.

        Returns:
            bool: False if the face directory does not exist or face.json is corrupt
        """
        if self.directory is None:
            print(f"Warning: face '{self.name}' not found in {', '.join(self.faces_dirs)}")
            self._reset()
            return False
        if not os.path.exists(self.file_path):
            self._reset()
            return True
        return super().load()

    def resolve_image_path(self, kind):
        """
        Path of one of the face images.

        Args:
            kind: 'background', 'hour_hand', 'minute_hand' or 'second_hand'

        Returns:
            Absolute path, or None if the face directory is missing
        """
        image = self.get(f'{kind}_image')
        if not image:
            return None
        if os.path.isabs(image):
            return image
        if self.directory is None:
            return None
        return os.path.join(self.directory, image)

    @staticmethod
    def list_available_faces(*faces_dirs):
        """
        Names of all face directories under the given directories.

        Returns:
            Sorted list without duplicates
        """
        if not faces_dirs:
            faces_dirs = (get_user_faces_dir(), get_builtin_faces_dir())

        names = set()
        for faces_dir in faces_dirs:
            if not faces_dir or not os.path.isdir(faces_dir):
                continue
            try:
                for entry in os.listdir(faces_dir):
                    if os.path.isdir(os.path.join(faces_dir, entry)):
                        names.add(entry)
            except OSError as e:
                print(f"Warning: could not list {faces_dir}: {e}")
        return sorted(names)
