import io
import struct

import pytest

from cybersauras.chunks import ChunkError, read_chunk, write_chunk


def test_header_layout_is_magic_then_size():
    buf = io.BytesIO()
    write_chunk(buf, "str0", "<c", [b"a", b"b", b"c"])
    data = buf.getvalue()
    assert data[:4] == b"str0"
    assert data[4:8] == b"\x03\x00\x00\x00"
    assert data[8:] == b"abc"


def test_round_trip_records():
    records = [(0xFFFFFFFF, 0, 5, 1.0, 2.0), (0, 5, 9, -3.5, 0.25)]
    buf = io.BytesIO()
    write_chunk(buf, b"xfh0", "<IIIff", records)
    buf.seek(0)
    assert read_chunk(buf, "xfh0", "<IIIff") == records


def test_round_trip_scalars():
    buf = io.BytesIO()
    write_chunk(buf, "nums", "<i", [1, -2, 3])
    buf.seek(0)
    assert read_chunk(buf, "nums", "<i") == [(1,), (-2,), (3,)]


def test_empty_chunk_round_trip():
    buf = io.BytesIO()
    write_chunk(buf, "msh0", "<III", [])
    assert len(buf.getvalue()) == 8
    buf.seek(0)
    assert read_chunk(buf, "msh0", "<III") == []


def test_consecutive_chunks_read_in_order():
    buf = io.BytesIO()
    write_chunk(buf, "aaaa", "<H", [7, 8])
    write_chunk(buf, "bbbb", "<B", [9])
    buf.seek(0)
    assert read_chunk(buf, "aaaa", "<H") == [(7,), (8,)]
    assert read_chunk(buf, "bbbb", "<B") == [(9,)]
    assert buf.read() == b""


def test_big_endian_header():
    buf = io.BytesIO()
    write_chunk(buf, "beef", ">H", [1])
    assert buf.getvalue()[4:8] == struct.pack(">I", 2)
    buf.seek(0)
    assert read_chunk(buf, "beef", ">H") == [(1,)]


def test_wrong_magic_raises():
    buf = io.BytesIO()
    write_chunk(buf, "str0", "<c", [b"x"])
    buf.seek(0)
    with pytest.raises(ChunkError, match="Unexpected magic"):
        read_chunk(buf, "xfh0", "<c")


def test_truncated_header_raises():
    with pytest.raises(ChunkError, match="chunk header"):
        read_chunk(io.BytesIO(b"str0\x01"), "str0", "<c")


def test_truncated_data_raises():
    buf = io.BytesIO(b"str0" + struct.pack("<I", 4) + b"ab")
    with pytest.raises(ChunkError, match="chunk data"):
        read_chunk(buf, "str0", "<c")


def test_size_not_divisible_raises():
    buf = io.BytesIO(b"nums" + struct.pack("<I", 5) + b"\x00" * 5)
    with pytest.raises(ChunkError, match="not divisible"):
        read_chunk(buf, "nums", "<I")


def test_bad_magic_length_on_write():
    with pytest.raises(ValueError):
        write_chunk(io.BytesIO(), "toolong", "<B", [1])


def test_unpackable_item_raises():
    with pytest.raises(ChunkError):
        write_chunk(io.BytesIO(), "nums", "<B", [300])