"""
The fixed point record used by the non-granular readers.

``POINT_DTYPE`` mirrors the 20-byte core every simple-path format shares, with
coordinates already scaled to float32. Flags and classification are stored as
the raw packed bytes; the helpers below unpack them with explicit shift/mask
pairs:

    flags           bits 0-2 return number, bits 3-5 return count,
                    bit 6 scan direction, bit 7 edge of flight line
    classification  bits 0-4 class type, bit 5 synthetic, bit 6 keypoint,
                    bit 7 withheld
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterator, Tuple

import numpy as np

from .attributes import AttributeRequest
from .formats import LogicalAttribute

POINT_DTYPE = np.dtype(
    [
        ("x", "<f4"),
        ("y", "<f4"),
        ("z", "<f4"),
        ("intensity", "<u2"),
        ("flags", "u1"),
        ("classification", "u1"),
        ("scan_angle", "i1"),
        ("user_data", "u1"),
        ("point_source_id", "<u2"),
    ]
)
DEFAULT_POINT_STRIDE = POINT_DTYPE.itemsize  # 20

_FIELD_ATTRIBUTES = (
    ("x", LogicalAttribute.X),
    ("y", LogicalAttribute.Y),
    ("z", LogicalAttribute.Z),
    ("intensity", LogicalAttribute.INTENSITY),
    ("flags", LogicalAttribute.FLAGS),
    ("classification", LogicalAttribute.CLASSIFICATION),
    ("scan_angle", LogicalAttribute.SCAN_ANGLE),
    ("user_data", LogicalAttribute.USER_DATA),
    ("point_source_id", LogicalAttribute.POINT_SOURCE_ID),
)

DEFAULT_ATTRIBUTES: Tuple[AttributeRequest, ...] = tuple(
    AttributeRequest(attribute, POINT_DTYPE.fields[name][1]) for name, attribute in _FIELD_ATTRIBUTES
)

# (shift, mask) pairs over the packed byte.
RETURN_NUMBER = (0, 0b111)
RETURN_COUNT = (3, 0b111)
SCAN_DIRECTION = (6, 0b1)
EDGE = (7, 0b1)

CLASS_TYPE = (0, 0b11111)
SYNTHETIC = (5, 0b1)
KEYPOINT = (6, 0b1)
WITHHELD = (7, 0b1)


class Classification(IntEnum):
    NEVER_CLASSIFIED = 0
    UNCLASSIFIED = 1
    GROUND = 2
    LOW_VEGETATION = 3
    MED_VEGETATION = 4
    HIGH_VEGETATION = 5
    BUILDING = 6
    LOW_POINT = 7
    MODEL_KEY_POINT = 8
    WATER = 9
    RESERVED_1 = 10
    RESERVED_2 = 11
    OVERLAP_POINTS = 12
    RESERVED_3 = 13
    RESERVED_4 = 14
    RESERVED_5 = 15
    RESERVED_6 = 16
    RESERVED_7 = 17
    RESERVED_8 = 18
    RESERVED_9 = 19
    RESERVED_10 = 20
    RESERVED_11 = 21
    RESERVED_12 = 22
    RESERVED_13 = 23
    RESERVED_14 = 24
    RESERVED_15 = 25
    RESERVED_16 = 26
    RESERVED_17 = 27
    RESERVED_18 = 28
    RESERVED_19 = 29
    RESERVED_20 = 30


def _field(value, bits: Tuple[int, int]):
    shift, mask = bits
    return (value >> shift) & mask


@dataclass(frozen=True)
class PointFlags:
    return_number: int
    return_count: int
    scan_direction: int
    edge: int

    @classmethod
    def from_byte(cls, value: int) -> PointFlags:
        value = int(value)
        return cls(
            return_number=_field(value, RETURN_NUMBER),
            return_count=_field(value, RETURN_COUNT),
            scan_direction=_field(value, SCAN_DIRECTION),
            edge=_field(value, EDGE),
        )


@dataclass(frozen=True)
class PointClassification:
    type: int
    synthetic: int
    keypoint: int
    withheld: int

    @classmethod
    def from_byte(cls, value: int) -> PointClassification:
        value = int(value)
        return cls(
            type=_field(value, CLASS_TYPE),
            synthetic=_field(value, SYNTHETIC),
            keypoint=_field(value, KEYPOINT),
            withheld=_field(value, WITHHELD),
        )

    @property
    def label(self) -> Classification | None:
        try:
            return Classification(self.type)
        except ValueError:
            return None


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    z: float
    intensity: int
    flags: PointFlags
    classification: PointClassification
    scan_angle: int
    user_data: int
    point_source_id: int


def allocate_point_rows(count: int, stride: int = DEFAULT_POINT_STRIDE) -> np.ndarray:
    """Zeroed ``(count, stride)`` byte matrix, one row per destination element."""

    if stride < DEFAULT_POINT_STRIDE:
        raise ValueError(f"stride {stride} cannot hold a {DEFAULT_POINT_STRIDE}-byte point record")
    return np.zeros((count, stride), dtype=np.uint8)


def points_from_rows(rows: np.ndarray) -> np.ndarray:
    """``POINT_DTYPE`` view over the leading bytes of each row of ``rows``."""

    return rows[:, :DEFAULT_POINT_STRIDE].view(POINT_DTYPE)[:, 0]


def unpack_flags(flags: np.ndarray) -> Dict[str, np.ndarray]:
    flags = np.asarray(flags, dtype=np.uint8)
    return {
        "return_number": _field(flags, RETURN_NUMBER),
        "return_count": _field(flags, RETURN_COUNT),
        "scan_direction": _field(flags, SCAN_DIRECTION),
        "edge": _field(flags, EDGE),
    }


def unpack_classification(classification: np.ndarray) -> Dict[str, np.ndarray]:
    classification = np.asarray(classification, dtype=np.uint8)
    return {
        "type": _field(classification, CLASS_TYPE),
        "synthetic": _field(classification, SYNTHETIC),
        "keypoint": _field(classification, KEYPOINT),
        "withheld": _field(classification, WITHHELD),
    }


def iter_points(points: np.ndarray) -> Iterator[Point]:
    """Yield one :class:`Point` per element of a ``POINT_DTYPE`` array."""

    for record in points:
        yield Point(
            x=float(record["x"]),
            y=float(record["y"]),
            z=float(record["z"]),
            intensity=int(record["intensity"]),
            flags=PointFlags.from_byte(record["flags"]),
            classification=PointClassification.from_byte(record["classification"]),
            scan_angle=int(record["scan_angle"]),
            user_data=int(record["user_data"]),
            point_source_id=int(record["point_source_id"]),
        )
