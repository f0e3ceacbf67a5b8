"""
Transcode raw point records into caller memory.

A projection names which attributes to decode and where each one lands inside
a destination element; consecutive elements sit ``stride`` bytes apart.
Coordinates are reconstructed in single precision as ``int * scale + offset``,
every other attribute is copied through unchanged (flags and classification
stay packed bytes here). Bytes not covered by a requested attribute are never
written.
"""

from __future__ import annotations

import logging

import numpy as np

from .attributes import Projection
from .buffers import as_byte_array
from .errors import InvalidFileError, InvalidRangeError
from .formats import (
    ATTRIBUTE_DTYPES,
    RAW_ATTRIBUTE_DTYPES,
    LogicalAttribute,
    attribute_offset,
    record_size,
)
from .header import FileInfo

logger = logging.getLogger(__name__)


def resolve_range(info: FileInfo, first: int, count: int | None) -> int:
    """Return the concrete record count for ``first``/``count`` or raise."""

    if first < 0 or (count is not None and count < 0):
        raise InvalidRangeError(f"first={first} count={count}")
    if count is None:
        count = max(info.point_count - first, 0)
    if first + count > info.point_count:
        raise InvalidRangeError(f"{first}+{count} exceeds point count {info.point_count}")
    return count


def check_record_size(info: FileInfo) -> None:
    required = record_size(info.point_format)
    if info.point_size < required:
        raise InvalidFileError(
            f"point format {info.point_format} needs {required}-byte records, header declares {info.point_size}"
        )


def check_destination(dest, stride: int, projection: Projection, count: int, dest_offset: int = 0) -> np.ndarray:
    """Writable byte view of ``dest`` once it is known to hold ``count`` elements."""

    if stride <= 0:
        raise ValueError(f"stride must be positive, got {stride}")
    out = as_byte_array(dest, writable=True)
    if count and projection.flags:
        needed = dest_offset + (count - 1) * stride + projection.extent()
        if needed > len(out):
            raise ValueError(f"destination holds {len(out)} bytes, {count} elements of stride {stride} need {needed}")
    return out


def _coordinate_transform(info: FileInfo, attribute: LogicalAttribute) -> tuple[np.float32, np.float32]:
    axis = int(attribute) - int(LogicalAttribute.X)
    return np.float32(info.scale[axis]), np.float32(info.offset[axis])


def _decode_column(
    raw: np.ndarray,
    base: int,
    info: FileInfo,
    attribute: LogicalAttribute,
    count: int,
) -> np.ndarray:
    column = np.ndarray(
        (count,),
        dtype=RAW_ATTRIBUTE_DTYPES[attribute],
        buffer=raw,
        offset=base + attribute_offset(info.point_format, attribute),
        strides=(info.point_size,),
    )
    if attribute in (LogicalAttribute.X, LogicalAttribute.Y, LogicalAttribute.Z):
        scale, offset = _coordinate_transform(info, attribute)
        return column.astype(np.float32) * scale + offset
    return column


def project_records(
    dest,
    stride: int,
    projection: Projection,
    info: FileInfo,
    raw,
    *,
    first: int = 0,
    count: int | None = None,
    raw_offset: int = 0,
    dest_offset: int = 0,
) -> int:
    """
    Decode ``count`` records starting at record ``first`` of ``raw``.

    ``raw_offset`` is where record 0 begins inside ``raw``; ``dest_offset`` is
    where the first destination element begins inside ``dest``. Returns the
    number of records decoded.
    """

    if stride <= 0:
        raise ValueError(f"stride must be positive, got {stride}")
    count = resolve_range(info, first, count)
    check_record_size(info)
    if count == 0 or not projection.flags:
        return 0

    src = as_byte_array(raw)
    base = raw_offset + first * info.point_size
    needed = base + count * info.point_size
    if needed > len(src):
        raise ValueError(f"source holds {len(src)} bytes, records {first}..{first + count} need {needed}")

    out = check_destination(dest, stride, projection, count, dest_offset)
    extent = projection.extent()
    attributes = list(projection.present())
    if extent <= stride:
        for attribute in attributes:
            target = np.ndarray(
                (count,),
                dtype=ATTRIBUTE_DTYPES[attribute],
                buffer=out,
                offset=dest_offset + projection.offset_of(attribute),
                strides=(stride,),
            )
            target[...] = _decode_column(src, base, info, attribute, count)
    else:
        # Fields spill into the next element; keep record-major write order.
        columns = []
        for attribute in attributes:
            values = np.ascontiguousarray(_decode_column(src, base, info, attribute, count), dtype=ATTRIBUTE_DTYPES[attribute])
            columns.append((projection.offset_of(attribute), values.view(np.uint8).reshape(count, -1)))
        position = dest_offset
        for index in range(count):
            for field_offset, rows in columns:
                start = position + field_offset
                out[start : start + rows.shape[1]] = rows[index]
            position += stride

    logger.debug("projected %d records (format %d, stride %d)", count, info.point_format, stride)
    return count
