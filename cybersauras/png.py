"""Loading and saving of RGBA PNG images."""

from __future__ import annotations

import enum
from typing import BinaryIO

import numpy as np
from PIL import Image, UnidentifiedImageError

__all__ = ["Origin", "read_png", "write_png", "load_png", "save_png"]


class Origin(enum.Enum):
    """Which corner the first row of pixel data belongs to."""

    LOWER_LEFT = "lower_left"
    UPPER_LEFT = "upper_left"


def read_png(stream: BinaryIO, origin: Origin) -> tuple[int, int, np.ndarray]:
    """Decode a PNG from ``stream`` into 8-bit RGBA pixels.

    Returns ``(width, height, pixels)``; ``pixels`` has shape
    ``(height, width, 4)`` with rows ordered according to ``origin``.
    Palette and grey images are expanded to RGB, and a missing alpha
    channel is filled with 255.
    """
    try:
        with Image.open(stream) as image:
            if image.format != "PNG":
                raise ValueError("stream does not hold a PNG image")
            image.load()
            rgba = image.convert("RGBA")
    except (UnidentifiedImageError, OSError, SyntaxError, EOFError) as exc:
        raise ValueError(f"could not decode PNG image: {exc}") from exc

    pixels = np.asarray(rgba, dtype=np.uint8).reshape(rgba.height, rgba.width, 4)
    if origin is Origin.LOWER_LEFT:
        pixels = pixels[::-1]
    return rgba.width, rgba.height, np.ascontiguousarray(pixels)


def _as_rgba_rows(width: int, height: int, pixels) -> np.ndarray:
    array = np.asarray(pixels, dtype=np.uint8)
    if array.size != width * height * 4:
        raise ValueError(
            f"expected {width}x{height} RGBA pixels, got {array.size} values"
        )
    return array.reshape(height, width, 4)


def write_png(stream: BinaryIO, width: int, height: int, pixels, origin: Origin) -> None:
    """Encode ``width`` x ``height`` RGBA ``pixels`` as a PNG into ``stream``.

    ``pixels`` is any array-like of ``width * height * 4`` bytes, rows
    ordered according to ``origin``.
    """
    if width <= 0 or height <= 0:
        raise ValueError("image dimensions must be positive")
    rows = _as_rgba_rows(width, height, pixels)
    if origin is Origin.LOWER_LEFT:
        rows = rows[::-1]
    Image.fromarray(np.ascontiguousarray(rows)).save(stream, format="PNG")


def load_png(filename: str, origin: Origin) -> tuple[int, int, np.ndarray]:
    """Read a PNG file; see :func:`read_png`."""
    try:
        stream = open(filename, "rb")
    except OSError as exc:
        raise OSError(f"Failed to open PNG image file '{filename}'.") from exc
    with stream:
        try:
            return read_png(stream, origin)
        except ValueError as exc:
            raise ValueError(f"Failed to read PNG image from '{filename}'.") from exc


def save_png(filename: str, width: int, height: int, pixels, origin: Origin) -> None:
    """Write a PNG file; see :func:`write_png`."""
    with open(filename, "wb") as stream:
        write_png(stream, width, height, pixels, origin)