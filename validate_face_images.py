#!/usr/bin/env python3
"""
Face Image Validator

Checks that a watch face has all four images (background, hour hand,
minute hand, second hand), that each one decodes, and shows the size it
will be drawn at for a given window width.

Usage:
    python3 validate_face_images.py <face> [--width N]

Arguments:
    face: Face name (searched in the user and built-in face directories)
          or a path to a face directory
    --width N: Window width to compute scaled sizes for (default: 320)

Example:
    python3 validate_face_images.py polish
    python3 validate_face_images.py ~/faces/marble --width 454
"""

import argparse
import os
import sys

from PIL import Image

from face import Face
from renderer import IMAGE_NAMES, scaled_size


def check_image(kind, path, width):
    """
    Open one face image and report on it.

    Returns:
        True if the image exists and decodes, False otherwise.
    """
    print(f"\n{kind}:")
    print(f"  Source: {path}")

    if not path or not os.path.exists(path):
        print(f"  ❌ ERROR: File does not exist")
        return False

    try:
        with Image.open(path) as img:
            img.load()
            img_format = img.format
            img_mode = img.mode
            img_width, img_height = img.size
            has_alpha = img_mode in ('RGBA', 'LA', 'PA') or 'transparency' in img.info
    except OSError as e:
        print(f"  ❌ ERROR: {e}")
        return False

    if img_width <= 0 or img_height <= 0:
        print(f"  ❌ ERROR: Image is empty")
        return False

    print(f"  ✓ Format: {img_format} ({img_mode})")
    print(f"  ✓ Size: {img_width}x{img_height} pixels")
    if not has_alpha and kind != 'background':
        print(f"  ! Hand has no alpha channel; it will cover the background")

    target_w, target_h = scaled_size(img_width, img_height, width)
    print(f"  ✓ Drawn at: {target_w}x{target_h} pixels for width {width}")
    if kind != 'background':
        print(f"  ✓ Pivot: ({target_w / 2:g}, {target_h / 2:g})")
    return True


def validate_face(face, width=320):
    """
    Validate every image of a face.

    Args:
        face: Face instance
        width: Window width to compute scaled sizes for

    Returns:
        True if all four images are usable, False otherwise.
    """
    print(f"=" * 70)
    print(f"Validating face: {face.name}")
    print(f"=" * 70)

    if face.directory is None:
        print(f"\n❌ ERROR: Face directory not found")
        for faces_dir in face.faces_dirs:
            print(f"   Checked: {os.path.join(faces_dir, face.name)}")
        available = Face.list_available_faces(*face.faces_dirs)
        print(f"   Available faces: {', '.join(available) if available else 'none'}")
        return False

    print(f"\nFace directory: {face.directory}")
    if not face.load():
        print(f"\n❌ ERROR: face.json could not be read")
        return False

    success = True
    for kind in IMAGE_NAMES:
        if not check_image(kind, face.resolve_image_path(kind), width):
            success = False

    print(f"\n" + "=" * 70)
    if success:
        print(f"✓ SUCCESS: All images are usable")
    else:
        print(f"❌ FAILED: Some images had errors")
    print(f"=" * 70)

    return success


def face_from_argument(argument):
    """A face name, or a path to a face directory."""
    path = os.path.expanduser(argument)
    if os.path.isdir(path):
        path = os.path.abspath(path)
        return Face(os.path.basename(path), [os.path.dirname(path)])
    return Face(argument)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Validate the images of a watch face.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 validate_face_images.py polish
  python3 validate_face_images.py ~/faces/marble --width 454

Face directory:
  <face>/
    face.json       # Optional, overrides the image names below
    polclock.png
    hourhand.png
    minutehand.png
    secondhand.png
        """
    )

    parser.add_argument('face', help='Face name or face directory')
    parser.add_argument('--width', type=int, default=320,
                        help='Window width to compute scaled sizes for (default: 320)')

    args = parser.parse_args(argv)

    if args.width <= 0:
        print("Error: Width must be positive")
        return 1

    return 0 if validate_face(face_from_argument(args.face), args.width) else 1


if __name__ == '__main__':
    sys.exit(main())
