import numpy as np
import pytest

from conftest import RawPoint, build_las
from lasdecode.formats import LogicalAttribute
from lasdecode.mem import read_from_mem
from lasdecode.points import (
    DEFAULT_ATTRIBUTES,
    POINT_DTYPE,
    Classification,
    PointClassification,
    PointFlags,
    iter_points,
    unpack_classification,
    unpack_flags,
)


def test_point_record_shape():
    assert POINT_DTYPE.itemsize == 20
    offsets = {request.attribute: request.offset for request in DEFAULT_ATTRIBUTES}
    assert offsets == {
        LogicalAttribute.X: 0,
        LogicalAttribute.Y: 4,
        LogicalAttribute.Z: 8,
        LogicalAttribute.INTENSITY: 12,
        LogicalAttribute.FLAGS: 14,
        LogicalAttribute.CLASSIFICATION: 15,
        LogicalAttribute.SCAN_ANGLE: 16,
        LogicalAttribute.USER_DATA: 17,
        LogicalAttribute.POINT_SOURCE_ID: 18,
    }


def test_flags_byte_unpacking():
    flags = PointFlags.from_byte(0b10100011)
    assert (flags.return_number, flags.return_count, flags.scan_direction, flags.edge) == (3, 4, 0, 1)
    assert PointFlags.from_byte(0b01000000) == PointFlags(0, 0, 1, 0)


def test_classification_byte_unpacking():
    cls = PointClassification.from_byte(0b10100110)
    assert (cls.type, cls.synthetic, cls.keypoint, cls.withheld) == (6, 1, 0, 1)
    assert cls.label is Classification.BUILDING
    assert PointClassification.from_byte(0b01011111) == PointClassification(31, 0, 1, 0)
    assert PointClassification.from_byte(31).label is None


def test_vectorized_unpacking_matches_scalar():
    values = np.arange(256, dtype=np.uint8)
    flags = unpack_flags(values)
    classes = unpack_classification(values)
    for value in range(256):
        scalar = PointFlags.from_byte(value)
        assert flags["return_number"][value] == scalar.return_number
        assert flags["return_count"][value] == scalar.return_count
        assert flags["scan_direction"][value] == scalar.scan_direction
        assert flags["edge"][value] == scalar.edge
        scalar_cls = PointClassification.from_byte(value)
        assert classes["type"][value] == scalar_cls.type
        assert classes["synthetic"][value] == scalar_cls.synthetic
        assert classes["keypoint"][value] == scalar_cls.keypoint
        assert classes["withheld"][value] == scalar_cls.withheld


def test_default_decoder_unpacks_flags_from_file():
    point = RawPoint(100, 200, 300, 55, 0b10100011, 0b00100010, -12, 9, 321)
    decoded = read_from_mem(build_las([point], point_format=1))
    (result,) = list(iter_points(decoded))
    assert result.flags == PointFlags(return_number=3, return_count=4, scan_direction=0, edge=1)
    assert result.classification == PointClassification(type=2, synthetic=1, keypoint=0, withheld=0)
    assert result.classification.label is Classification.GROUND
    assert result.intensity == 55
    assert result.scan_angle == -12
    assert result.user_data == 9
    assert result.point_source_id == 321
    assert result.x == pytest.approx(1.0)
    assert result.z == pytest.approx(3.0)


def test_returned_array_unpacks_with_vectorized_helpers():
    packed = [(0b10100011, 0b00100010), (0b01001001, 0b10000110)]
    raw = [RawPoint(i, i, i, i, flags, cls, 0, 0, 0) for i, (flags, cls) in enumerate(packed)]
    decoded = read_from_mem(build_las(raw, point_format=3))
    flags = unpack_flags(decoded["flags"])
    classes = unpack_classification(decoded["classification"])
    assert flags["return_number"].tolist() == [3, 1]
    assert flags["return_count"].tolist() == [4, 1]
    assert flags["scan_direction"].tolist() == [0, 1]
    assert flags["edge"].tolist() == [1, 0]
    assert classes["type"].tolist() == [2, 6]
    assert classes["synthetic"].tolist() == [1, 0]
    assert classes["withheld"].tolist() == [0, 1]


def test_classification_codes():
    assert Classification.NEVER_CLASSIFIED == 0
    assert Classification.WATER == 9
    assert Classification.OVERLAP_POINTS == 12
    assert Classification.RESERVED_20 == 30
    assert len(Classification) == 31
