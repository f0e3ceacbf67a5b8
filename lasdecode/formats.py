"""
Static description of the point record layouts.

Point data records are fixed-size and little endian. Every layout starts with
the same 20-byte core:

    int32  X, Y, Z          scaled integer coordinates
    uint16 intensity
    uint8  flags            return number / count, scan direction, edge
    uint8  classification   class type + synthetic / keypoint / withheld
    int8   scan angle rank
    uint8  user data
    uint16 point source id

Formats 1-5 append GPS time, RGB and waveform packets at the offsets listed in
``ATTRIBUTE_OFFSET_TABLE``. Formats 6-10 are recognized for their record size
only; none of their attributes can be decoded here.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Tuple

import numpy as np


class LogicalAttribute(IntEnum):
    NONE = -1

    X = 0
    Y = 1
    Z = 2
    INTENSITY = 3
    FLAGS = 4
    CLASSIFICATION = 5
    SCAN_ANGLE = 6
    USER_DATA = 7
    POINT_SOURCE_ID = 8

    # Present in newer layouts, not decodable by the simple path.
    GPS_TIME = 9
    RED = 10
    GREEN = 11
    BLUE = 12
    WAVEFORM_ID = 13
    WAVEFORM_OFFSET = 14
    WAVEFORM_SIZE = 15
    WAVEFORM_LOCATION = 16
    X_TIME = 17
    Y_TIME = 18
    Z_TIME = 19


# Attributes 0..SIMPLE_ATTRIBUTE_COUNT-1 are the ones the projector decodes.
SIMPLE_ATTRIBUTE_COUNT = 9
SIMPLE_ATTRIBUTES: Tuple[LogicalAttribute, ...] = tuple(LogicalAttribute(i) for i in range(SIMPLE_ATTRIBUTE_COUNT))
SPATIAL_ATTRIBUTES = (LogicalAttribute.X, LogicalAttribute.Y, LogicalAttribute.Z)

SUPPORTED_POINT_FORMATS = range(6)
KNOWN_POINT_FORMATS = range(11)

# format id -> byte offset of each LogicalAttribute (indexed by its value).
# Zero entries past the core attributes mean "not present"; check the mask.
ATTRIBUTE_OFFSET_TABLE: Tuple[Tuple[int, ...], ...] = (
    (0, 4, 8, 12, 14, 15, 16, 17, 18, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    (0, 4, 8, 12, 14, 15, 16, 17, 18, 20, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    (0, 4, 8, 12, 14, 15, 16, 17, 18, 0, 20, 22, 24, 0, 0, 0, 0, 0, 0, 0),
    (0, 4, 8, 12, 14, 15, 16, 17, 18, 20, 28, 30, 32, 0, 0, 0, 0, 0, 0, 0),
    (0, 4, 8, 12, 14, 15, 16, 17, 18, 20, 0, 0, 0, 28, 29, 37, 41, 45, 49, 53),
    (0, 4, 8, 12, 14, 15, 16, 17, 18, 20, 28, 30, 32, 34, 35, 43, 47, 51, 55, 59),
)

# format id -> bit (1 << attribute) set for every attribute the layout carries.
VALID_ATTRIBUTE_TABLE: Tuple[int, ...] = (0x1FF, 0x3FF, 0x1DFF, 0x1FFF, 0xFE3FF, 0xFFFFF)

# Minimum record size in bytes for every known format id.
POINT_RECORD_SIZES: Tuple[int, ...] = (20, 28, 26, 34, 57, 63, 30, 36, 38, 59, 67)

# Stored representation of the simple-path attributes inside a raw record.
RAW_ATTRIBUTE_DTYPES: dict[LogicalAttribute, np.dtype] = {
    LogicalAttribute.X: np.dtype("<i4"),
    LogicalAttribute.Y: np.dtype("<i4"),
    LogicalAttribute.Z: np.dtype("<i4"),
    LogicalAttribute.INTENSITY: np.dtype("<u2"),
    LogicalAttribute.FLAGS: np.dtype("u1"),
    LogicalAttribute.CLASSIFICATION: np.dtype("u1"),
    LogicalAttribute.SCAN_ANGLE: np.dtype("i1"),
    LogicalAttribute.USER_DATA: np.dtype("u1"),
    LogicalAttribute.POINT_SOURCE_ID: np.dtype("<u2"),
}

# Decoded representation written into the caller's destination.
ATTRIBUTE_DTYPES: dict[LogicalAttribute, np.dtype] = {
    **RAW_ATTRIBUTE_DTYPES,
    LogicalAttribute.X: np.dtype("<f4"),
    LogicalAttribute.Y: np.dtype("<f4"),
    LogicalAttribute.Z: np.dtype("<f4"),
}


def attribute_flag(attribute: LogicalAttribute) -> int:
    return 1 << int(attribute)


def is_attribute_valid(point_format: int, attribute: LogicalAttribute) -> bool:
    """Whether records of ``point_format`` carry ``attribute`` at all."""

    if point_format not in SUPPORTED_POINT_FORMATS or attribute == LogicalAttribute.NONE:
        return False
    return bool(VALID_ATTRIBUTE_TABLE[point_format] & attribute_flag(attribute))


def attribute_offset(point_format: int, attribute: LogicalAttribute) -> int:
    """
    Byte offset of ``attribute`` inside a raw record of ``point_format``.

    Returns the table's 0 sentinel for attributes the layout lacks, so callers
    must gate on :func:`is_attribute_valid` before trusting the result.
    """

    return ATTRIBUTE_OFFSET_TABLE[point_format][int(attribute)]


def attribute_width(attribute: LogicalAttribute) -> int:
    """Decoded width in bytes of a simple-path attribute."""

    return ATTRIBUTE_DTYPES[LogicalAttribute(attribute)].itemsize


def record_size(point_format: int) -> int:
    if point_format not in KNOWN_POINT_FORMATS:
        raise ValueError(f"Unknown point format: {point_format}")
    return POINT_RECORD_SIZES[point_format]
