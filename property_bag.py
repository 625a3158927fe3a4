#!/usr/bin/env python3
"""
JSON-backed key/value store shared by the settings and face configuration.
"""

import json
import os
import sys


class PropertyBag:
    """
    Fixed set of named properties with defaults, dirty tracking and JSON persistence.
    Subclasses list every allowed key in DEFAULTS.
    """

    DEFAULTS = {}

    def __init__(self, file_path=None):
        """
        Args:
            file_path: JSON file to load from and save to (None keeps it in memory)
        """
        self.file_path = file_path
        self._properties = self.DEFAULTS.copy()
        self._dirty = False

    def _check_key(self, key):
        if key not in self.DEFAULTS:
            raise KeyError(f"Unknown property '{key}' in {self.__class__.__name__}")

    def _coerce(self, key, value):
        # JSON has no tuples; colours and the like come back as lists
        if isinstance(self.DEFAULTS[key], tuple) and isinstance(value, list):
            return tuple(value)
        return value

    def set(self, key, value):
        """
        Set a property, marking the bag dirty if the value changed.

        Raises:
            KeyError: If key is not in DEFAULTS
        """
        self._check_key(key)
        value = self._coerce(key, value)
        if self._properties.get(key) != value:
            self._properties[key] = value
            self._dirty = True

    def get(self, key):
        self._check_key(key)
        return self._properties.get(key, self.DEFAULTS[key])

    @property
    def is_dirty(self):
        return self._dirty

    def get_all(self):
        return self._properties.copy()

    def _reset(self):
        self._properties = self.DEFAULTS.copy()
        self._dirty = False

    def load(self):
        """
        Load from the JSON file, filling anything missing from DEFAULTS.
        Unknown keys in the file are ignored.

        Returns:
            bool: True if the file was read, False if defaults are in use
        """
        if not self.file_path or not os.path.exists(self.file_path):
            self._reset()
            return False

        try:
            with open(self.file_path, 'r') as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                raise ValueError("top level is not an object")
        except (json.JSONDecodeError, ValueError, OSError) as e:
            print(f"Warning: could not load {self.file_path}: {e}", file=sys.stderr)
            self._reset()
            return False

        self._reset()
        for key, value in loaded.items():
            if key in self.DEFAULTS:
                self._properties[key] = self._coerce(key, value)
        return True

    def save(self):
        """
        Write all properties to the JSON file.

        Returns:
            bool: True if written, False if there is no file or writing failed
        """
        if not self.file_path:
            return False

        try:
            directory = os.path.dirname(self.file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.file_path, 'w') as f:
                json.dump(self._properties, f, indent=2)
        except OSError as e:
            print(f"ERROR: could not save {self.file_path}: {e}", file=sys.stderr)
            return False

        self._dirty = False
        return True
