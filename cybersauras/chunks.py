"""Reading and writing of tagged binary chunks.

A chunk is laid out as::

    |ma|gi|c.|..|   four byte magic tag
    |sz|sz|sz|sz|   four byte unsigned size of the payload in bytes
    |TT...TT| * n   payload: n fixed-size records

Records are described by a :mod:`struct` format string.  The byte order
prefix of that format (``<``, ``>``, ``!``, ``=`` or ``@``) also applies to
the header's size field; with no prefix the native byte order is used.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Iterable

__all__ = ["ChunkError", "read_chunk", "write_chunk"]

_HEADER_SIZE = 8


class ChunkError(ValueError):
    """Raised when a chunk cannot be read or written."""


def _header_struct(element_format: str) -> struct.Struct:
    prefix = element_format[:1]
    if prefix in ("<", ">", "!", "="):
        order = prefix
    else:
        order = "="
    return struct.Struct(order + "4sI")


def _magic_bytes(magic: str | bytes) -> bytes:
    if isinstance(magic, str):
        return magic.encode("latin-1")
    return bytes(magic)


def _element_struct(element_format: str) -> struct.Struct:
    try:
        element = struct.Struct(element_format)
    except struct.error as exc:
        raise ValueError(f"invalid element format {element_format!r}") from exc
    if element.size == 0:
        raise ValueError("element format must describe at least one byte")
    return element


def read_chunk(stream: BinaryIO, magic: str | bytes, element_format: str) -> list[tuple]:
    """Read one chunk tagged ``magic`` and return its records as tuples."""
    element = _element_struct(element_format)
    header = _header_struct(element_format)

    raw_header = stream.read(_HEADER_SIZE)
    if len(raw_header) != _HEADER_SIZE:
        raise ChunkError("Failed to read chunk header")
    found_magic, size = header.unpack(raw_header)
    if found_magic != _magic_bytes(magic):
        raise ChunkError("Unexpected magic number in chunk")
    if size % element.size != 0:
        raise ChunkError("Size of chunk not divisible by element size")

    payload = stream.read(size)
    if len(payload) != size:
        raise ChunkError("Failed to read chunk data.")
    return list(element.iter_unpack(payload))


def write_chunk(
    stream: BinaryIO,
    magic: str | bytes,
    element_format: str,
    items: Iterable,
) -> None:
    """Write ``items`` as one chunk tagged ``magic``.

    Each item is a tuple of field values, or a single value for one-field
    formats.
    """
    tag = _magic_bytes(magic)
    if len(tag) != 4:
        raise ValueError("chunk magic must be exactly four bytes")
    element = _element_struct(element_format)
    header = _header_struct(element_format)

    try:
        payload = b"".join(
            element.pack(*item) if isinstance(item, tuple) else element.pack(item)
            for item in items
        )
    except struct.error as exc:
        raise ChunkError(f"cannot pack chunk records: {exc}") from exc

    stream.write(header.pack(tag, len(payload)))
    stream.write(payload)