from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
import pytest

HEADER_FMT = "<4sHH16sBB32s32sHHHIIBHI5I3d3d6d"
HEADER_LEN = struct.calcsize(HEADER_FMT)
CORE_FMT = "<iiiHBBbBH"
RECORD_SIZES = (20, 28, 26, 34, 57, 63)


@dataclass(frozen=True)
class RawPoint:
    x: int
    y: int
    z: int
    intensity: int
    flags: int
    classification: int
    scan_angle: int
    user_data: int
    point_source_id: int


def build_header(
    *,
    magic: bytes = b"LASF",
    version: Tuple[int, int] = (1, 2),
    point_format: int = 0,
    point_size: int | None = None,
    point_count: int = 0,
    point_offset: int | None = None,
    scale: Sequence[float] = (0.01, 0.01, 0.01),
    offset: Sequence[float] = (0.0, 0.0, 0.0),
    mins: Sequence[float] = (0.0, 0.0, 0.0),
    maxs: Sequence[float] = (0.0, 0.0, 0.0),
    global_encoding: int = 0,
    guid: bytes = bytes(16),
    system_identifier: bytes = b"lasdecode tests",
    software: bytes = b"conftest",
    vlr_count: int = 0,
    points_by_return: Sequence[int] = (0, 0, 0, 0, 0),
) -> bytes:
    if point_size is None:
        point_size = RECORD_SIZES[point_format] if point_format < len(RECORD_SIZES) else 30
    if point_offset is None:
        point_offset = HEADER_LEN
    return struct.pack(
        HEADER_FMT,
        magic,
        7,
        global_encoding,
        guid,
        version[0],
        version[1],
        system_identifier,
        software,
        42,
        2024,
        HEADER_LEN,
        point_offset,
        vlr_count,
        point_format,
        point_size,
        point_count,
        *points_by_return,
        *scale,
        *offset,
        maxs[0],
        mins[0],
        maxs[1],
        mins[1],
        maxs[2],
        mins[2],
    )


def build_record(point: RawPoint, point_format: int = 0, point_size: int | None = None) -> bytes:
    size = RECORD_SIZES[point_format] if point_size is None else point_size
    record = bytearray(size)
    struct.pack_into(
        CORE_FMT,
        record,
        0,
        point.x,
        point.y,
        point.z,
        point.intensity,
        point.flags,
        point.classification,
        point.scan_angle,
        point.user_data,
        point.point_source_id,
    )
    # Fill the format-specific tail with noise so misplaced offsets show up.
    for pos in range(20, size):
        record[pos] = (pos * 31 + point.user_data) & 0xFF
    return bytes(record)


def build_las(
    points: Sequence[RawPoint],
    *,
    point_format: int = 0,
    point_size: int | None = None,
    padding: int = 0,
    **header_kwargs,
) -> bytes:
    size = RECORD_SIZES[point_format] if point_size is None else point_size
    header = build_header(
        point_format=point_format,
        point_size=size,
        point_count=len(points),
        point_offset=HEADER_LEN + padding,
        **header_kwargs,
    )
    body = b"".join(build_record(p, point_format, size) for p in points)
    return header + b"\x00" * padding + body


def make_points(count: int) -> List[RawPoint]:
    return [
        RawPoint(
            x=100_000 + i * 3_701,
            y=-250_000 + i * 1_117,
            z=i * 313 - 5_000,
            intensity=(i * 4_099) & 0xFFFF,
            flags=(i * 29 + 3) & 0xFF,
            classification=(i * 13 + 2) & 0xFF,
            scan_angle=((i * 7) & 0xFF) - 128,
            user_data=(i * 5) & 0xFF,
            point_source_id=(i * 257) & 0xFFFF,
        )
        for i in range(count)
    ]


def expected_coordinate(value: int, scale: float, offset: float) -> np.float32:
    return np.float32(np.float32(value) * np.float32(scale) + np.float32(offset))


@pytest.fixture
def points() -> List[RawPoint]:
    return make_points(37)


@pytest.fixture(params=range(6), ids=lambda fmt: f"format{fmt}")
def point_format(request) -> int:
    return request.param


@pytest.fixture
def las_bytes(points, point_format) -> bytes:
    return build_las(
        points,
        point_format=point_format,
        padding=13,
        scale=(0.001, 0.002, 0.0005),
        offset=(500_000.25, 4_000_000.5, -12.75),
    )


class RecordingReader:
    """Read function over bytes that remembers every call."""

    def __init__(self, blob: bytes, *, limit: int | None = None) -> None:
        self.blob = blob
        self.limit = limit
        self.calls: List[Tuple[int, int]] = []

    def __call__(self, dest: memoryview, size: int, offset: int) -> int:
        self.calls.append((offset, size))
        end = len(self.blob) if self.limit is None else min(self.limit, len(self.blob))
        chunk = self.blob[offset : min(offset + size, end)]
        dest[: len(chunk)] = chunk
        return len(chunk)
