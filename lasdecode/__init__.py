"""
Read-only decoding of LAS 1.0 - 1.3 point clouds (point formats 0-5).
"""

from logging import NullHandler, getLogger

from .attributes import ATTRIBUTE_END, AttributeRequest, Projection, build_projection
from .errors import (
    FormatUnsupportedError,
    InvalidFileError,
    InvalidRangeError,
    IoReadError,
    LasDecodeError,
    ResultCode,
    VersionUnsupportedError,
    result_str,
)
from .formats import (
    ATTRIBUTE_OFFSET_TABLE,
    KNOWN_POINT_FORMATS,
    POINT_RECORD_SIZES,
    SUPPORTED_POINT_FORMATS,
    VALID_ATTRIBUTE_TABLE,
    LogicalAttribute,
    attribute_offset,
    is_attribute_valid,
)
from .header import HEADER_SIZE, MAGIC, FileInfo, PublicHeaderBlock, interpret_header, parse_public_header
from .logging import ChunkReadLog
from .mem import info_from_mem, read_from_mem, read_range_from_mem, read_range_from_mem_with_attribs
from .points import (
    DEFAULT_ATTRIBUTES,
    POINT_DTYPE,
    Classification,
    Point,
    PointClassification,
    PointFlags,
    iter_points,
    unpack_classification,
    unpack_flags,
)
from .projector import project_records
from .stream import (
    DEFAULT_CHUNK_BYTES,
    ReadFn,
    bytes_read_fn,
    file_read_fn,
    info_from_io,
    read_from_io,
    read_range_from_io,
    read_range_from_io_with_attribs,
)

__version__ = "0.1.0"

getLogger(__name__).addHandler(NullHandler())

__all__ = [
    "ATTRIBUTE_END",
    "AttributeRequest",
    "Projection",
    "build_projection",
    "FormatUnsupportedError",
    "InvalidFileError",
    "InvalidRangeError",
    "IoReadError",
    "LasDecodeError",
    "ResultCode",
    "VersionUnsupportedError",
    "result_str",
    "ATTRIBUTE_OFFSET_TABLE",
    "KNOWN_POINT_FORMATS",
    "POINT_RECORD_SIZES",
    "SUPPORTED_POINT_FORMATS",
    "VALID_ATTRIBUTE_TABLE",
    "LogicalAttribute",
    "attribute_offset",
    "is_attribute_valid",
    "HEADER_SIZE",
    "MAGIC",
    "FileInfo",
    "PublicHeaderBlock",
    "interpret_header",
    "parse_public_header",
    "ChunkReadLog",
    "info_from_mem",
    "read_from_mem",
    "read_range_from_mem",
    "read_range_from_mem_with_attribs",
    "DEFAULT_ATTRIBUTES",
    "POINT_DTYPE",
    "Classification",
    "Point",
    "PointClassification",
    "PointFlags",
    "iter_points",
    "unpack_classification",
    "unpack_flags",
    "project_records",
    "DEFAULT_CHUNK_BYTES",
    "ReadFn",
    "bytes_read_fn",
    "file_read_fn",
    "info_from_io",
    "read_from_io",
    "read_range_from_io",
    "read_range_from_io_with_attribs",
]
