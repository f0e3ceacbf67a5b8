"""
Public header block parsing.

The legacy (1.0 - 1.3) header is a packed little-endian block of 227 bytes:

    char[4]  magic "LASF"
    uint16   file source id
    uint16   global encoding bits
    byte[16] project GUID
    uint8    version major, version minor
    char[32] system identifier
    char[32] generating software
    uint16   creation day of year, creation year
    uint16   header size
    uint32   offset to point data
    uint32   number of variable length records
    uint8    point data format id
    uint16   point data record length
    uint32   number of point records
    uint32[5] number of points by return
    double   x/y/z scale, x/y/z offset
    double   max x, min x, max y, min y, max z, min z

Version 1.3 headers are longer on disk, but nothing the decoder needs lives
past byte 227, so that is all we ever read.
"""

from __future__ import annotations

import logging
import struct
import uuid
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .buffers import as_byte_array
from .errors import FormatUnsupportedError, InvalidFileError, VersionUnsupportedError
from .formats import SUPPORTED_POINT_FORMATS

logger = logging.getLogger(__name__)

MAGIC = b"LASF"
MAX_VERSION = (1, 3)

HEADER_STRUCT = struct.Struct("<4sHH16sBB32s32sHHHIIBHI5I3d3d6d")
HEADER_SIZE = HEADER_STRUCT.size  # 227

GLOBAL_ENCODING_GPS_TIME_TYPE = 1 << 0
GLOBAL_ENCODING_WAVEFORM_INTERNAL = 1 << 1
GLOBAL_ENCODING_WAVEFORM_EXTERNAL = 1 << 2
GLOBAL_ENCODING_SYNTHETIC_RETURN_NUMBERS = 1 << 3
GLOBAL_ENCODING_WKT = 1 << 4


def _decode_text(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace").rstrip()


def _narrow(value: float) -> float:
    return float(np.float32(value))


@dataclass(frozen=True)
class PublicHeaderBlock:
    magic: bytes
    file_source_id: int
    global_encoding: int
    guid: uuid.UUID
    version_major: int
    version_minor: int
    system_identifier: str
    generating_software: str
    creation_day: int
    creation_year: int
    header_size: int
    point_offset: int
    vlr_count: int
    point_format: int
    point_size: int
    point_count: int
    points_by_return: Tuple[int, int, int, int, int]
    scale: Tuple[float, float, float]
    offset: Tuple[float, float, float]
    maxs: Tuple[float, float, float]
    mins: Tuple[float, float, float]

    @property
    def version(self) -> Tuple[int, int]:
        return self.version_major, self.version_minor

    @property
    def gps_time_type(self) -> bool:
        return bool(self.global_encoding & GLOBAL_ENCODING_GPS_TIME_TYPE)

    @property
    def waveform_internal(self) -> bool:
        return bool(self.global_encoding & GLOBAL_ENCODING_WAVEFORM_INTERNAL)

    @property
    def waveform_external(self) -> bool:
        return bool(self.global_encoding & GLOBAL_ENCODING_WAVEFORM_EXTERNAL)

    @property
    def synthetic_return_numbers(self) -> bool:
        return bool(self.global_encoding & GLOBAL_ENCODING_SYNTHETIC_RETURN_NUMBERS)

    @property
    def wkt(self) -> bool:
        return bool(self.global_encoding & GLOBAL_ENCODING_WKT)


@dataclass(frozen=True)
class FileInfo:
    """
    Normalized, read-only summary of one file.

    Scale, offset and bounds are narrowed to single precision; every decoded
    coordinate inherits that rounding.
    """

    version_major: int
    version_minor: int
    point_count: int
    point_offset: int
    point_size: int
    point_format: int
    scale_x: float
    scale_y: float
    scale_z: float
    offset_x: float
    offset_y: float
    offset_z: float
    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    @property
    def version(self) -> Tuple[int, int]:
        return self.version_major, self.version_minor

    @property
    def scale(self) -> Tuple[float, float, float]:
        return self.scale_x, self.scale_y, self.scale_z

    @property
    def offset(self) -> Tuple[float, float, float]:
        return self.offset_x, self.offset_y, self.offset_z

    @property
    def mins(self) -> Tuple[float, float, float]:
        return self.min_x, self.min_y, self.min_z

    @property
    def maxs(self) -> Tuple[float, float, float]:
        return self.max_x, self.max_y, self.max_z

    @property
    def point_data_size(self) -> int:
        return self.point_count * self.point_size


def parse_public_header(blob) -> PublicHeaderBlock:
    """Unpack the fixed header without validating any of it."""

    data = as_byte_array(blob)
    if len(data) < HEADER_SIZE:
        raise InvalidFileError(f"header needs {HEADER_SIZE} bytes, got {len(data)}")
    (
        magic,
        file_source_id,
        global_encoding,
        guid,
        version_major,
        version_minor,
        system_identifier,
        generating_software,
        creation_day,
        creation_year,
        header_size,
        point_offset,
        vlr_count,
        point_format,
        point_size,
        point_count,
        *rest,
    ) = HEADER_STRUCT.unpack_from(data, 0)
    points_by_return = tuple(rest[0:5])
    scale = tuple(rest[5:8])
    offset = tuple(rest[8:11])
    x_max, x_min, y_max, y_min, z_max, z_min = rest[11:17]
    return PublicHeaderBlock(
        magic=magic,
        file_source_id=file_source_id,
        global_encoding=global_encoding,
        guid=uuid.UUID(bytes_le=guid),
        version_major=version_major,
        version_minor=version_minor,
        system_identifier=_decode_text(system_identifier),
        generating_software=_decode_text(generating_software),
        creation_day=creation_day,
        creation_year=creation_year,
        header_size=header_size,
        point_offset=point_offset,
        vlr_count=vlr_count,
        point_format=point_format,
        point_size=point_size,
        point_count=point_count,
        points_by_return=points_by_return,
        scale=scale,
        offset=offset,
        maxs=(x_max, y_max, z_max),
        mins=(x_min, y_min, z_min),
    )


def check_magic(blob) -> None:
    data = as_byte_array(blob)
    magic = data[: len(MAGIC)].tobytes()
    if magic != MAGIC:
        logger.debug("rejecting source with magic %r", magic)
        raise InvalidFileError(f"expected magic {MAGIC!r}, found {magic!r}")


def info_from_header(header: PublicHeaderBlock) -> FileInfo:
    """Validate ``header`` and narrow it to a :class:`FileInfo`."""

    if header.magic != MAGIC:
        raise InvalidFileError(f"expected magic {MAGIC!r}, found {header.magic!r}")
    if header.version > MAX_VERSION:
        logger.debug("rejecting version %d.%d", header.version_major, header.version_minor)
        raise VersionUnsupportedError(f"{header.version_major}.{header.version_minor}")
    if header.point_format not in SUPPORTED_POINT_FORMATS:
        logger.debug("rejecting point format %d", header.point_format)
        raise FormatUnsupportedError(str(header.point_format))

    info = FileInfo(
        version_major=header.version_major,
        version_minor=header.version_minor,
        point_count=header.point_count,
        point_offset=header.point_offset,
        point_size=header.point_size,
        point_format=header.point_format,
        scale_x=_narrow(header.scale[0]),
        scale_y=_narrow(header.scale[1]),
        scale_z=_narrow(header.scale[2]),
        offset_x=_narrow(header.offset[0]),
        offset_y=_narrow(header.offset[1]),
        offset_z=_narrow(header.offset[2]),
        min_x=_narrow(header.mins[0]),
        min_y=_narrow(header.mins[1]),
        min_z=_narrow(header.mins[2]),
        max_x=_narrow(header.maxs[0]),
        max_y=_narrow(header.maxs[1]),
        max_z=_narrow(header.maxs[2]),
    )
    logger.debug(
        "header ok: version=%d.%d format=%d points=%d size=%d offset=%d",
        info.version_major,
        info.version_minor,
        info.point_format,
        info.point_count,
        info.point_size,
        info.point_offset,
    )
    return info


def interpret_header(blob) -> FileInfo:
    """
    Produce a :class:`FileInfo` from the leading bytes of a file.

    Checks run in a fixed order: magic signature, version (at most 1.3), then
    point format (0-5). The first failure wins.
    """

    check_magic(blob)
    return info_from_header(parse_public_header(blob))
