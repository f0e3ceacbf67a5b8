"""
Decode points from a source that is only reachable through positioned reads.

The caller injects a read function ``read(dest, size, offset) -> int`` that
copies ``size`` bytes starting at absolute file ``offset`` into the writable
``dest`` buffer and returns how many bytes it actually placed there. A short
count is treated as truncation.

Records are pulled through one bounded scratch buffer, ``chunk_bytes`` at a
time. Each chunk starts where the previous one ended, so ranges that are not a
multiple of the chunk capacity get their tail read too.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from .attributes import AttributeRequest, Projection, build_projection
from .buffers import as_byte_array
from .errors import IoReadError
from .header import HEADER_SIZE, FileInfo, interpret_header
from .logging import ChunkReadLog
from .points import DEFAULT_ATTRIBUTES, DEFAULT_POINT_STRIDE, allocate_point_rows, points_from_rows
from .projector import check_destination, check_record_size, project_records, resolve_range

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_BYTES = 2048

ReadFn = Callable[[memoryview, int, int], int]


def bytes_read_fn(blob) -> ReadFn:
    """Read function over an in-memory image, e.g. for tests or mmap'd files."""

    data = as_byte_array(blob)

    def read(dest: memoryview, size: int, offset: int) -> int:
        chunk = data[offset : offset + size]
        dest[: len(chunk)] = chunk.tobytes()
        return len(chunk)

    return read


def file_read_fn(fileobj) -> ReadFn:
    """Read function over an already open binary file object."""

    def read(dest: memoryview, size: int, offset: int) -> int:
        fileobj.seek(offset)
        return fileobj.readinto(dest[:size]) or 0

    return read


def info_from_io(read: ReadFn) -> FileInfo:
    scratch = bytearray(HEADER_SIZE)
    received = read(memoryview(scratch), HEADER_SIZE, 0)
    if received < HEADER_SIZE:
        raise IoReadError(f"header read returned {received} of {HEADER_SIZE} bytes")
    return interpret_header(scratch)


def _read_records(
    dest,
    stride: int,
    projection: Projection,
    info: FileInfo,
    read: ReadFn,
    first: int,
    count: int | None,
    chunk_bytes: int,
    trace: ChunkReadLog | None,
) -> int:
    count = resolve_range(info, first, count)
    check_record_size(info)
    check_destination(dest, stride, projection, count)
    if not projection.flags:
        return 0

    point_size = info.point_size
    per_chunk = max(chunk_bytes // point_size, 1)
    scratch = bytearray(per_chunk * point_size)
    view = memoryview(scratch)

    done = 0
    chunk = 0
    while done < count:
        points = min(per_chunk, count - done)
        expected = points * point_size
        offset = info.point_offset + (first + done) * point_size
        received = read(view, expected, offset)
        logger.debug("chunk %d: offset=%d requested=%d received=%d", chunk, offset, expected, received)
        if trace is not None:
            trace.record(
                chunk=chunk,
                offset=offset,
                requested=expected,
                received=received,
                first_point=first + done,
                point_count=points,
            )
        if received < expected:
            raise IoReadError(f"chunk {chunk} at offset {offset} returned {received} of {expected} bytes")
        project_records(
            dest,
            stride,
            projection,
            info,
            scratch,
            count=points,
            dest_offset=done * stride,
        )
        done += points
        chunk += 1
    return count


def read_range_from_io_with_attribs(
    dest,
    stride: int,
    attribs: Iterable[AttributeRequest],
    read: ReadFn,
    first: int = 0,
    count: int | None = None,
    *,
    chunk_bytes: int = DEFAULT_CHUNK_BYTES,
    trace: ChunkReadLog | None = None,
) -> int:
    """
    Decode records ``[first, first + count)`` into ``dest`` via ``read``.

    The header costs one read; every chunk of records costs one more. The range
    and the destination size are checked before any record data is read, and an
    empty projection reads no records at all.
    """

    info = info_from_io(read)
    projection = build_projection(attribs)
    return _read_records(dest, stride, projection, info, read, first, count, chunk_bytes, trace)


def read_range_from_io(
    read: ReadFn,
    first: int = 0,
    count: int | None = None,
    *,
    out=None,
    stride: int | None = None,
    chunk_bytes: int = DEFAULT_CHUNK_BYTES,
    trace: ChunkReadLog | None = None,
):
    """
    Streaming counterpart of ``read_range_from_mem``; the header is read once.

    Flags and classification come back as packed bytes: use ``iter_points`` or
    ``unpack_flags`` / ``unpack_classification`` for their sub-fields.
    """

    stride = DEFAULT_POINT_STRIDE if stride is None else stride
    info = info_from_io(read)
    projection = build_projection(DEFAULT_ATTRIBUTES)
    if out is not None:
        _read_records(out, stride, projection, info, read, first, count, chunk_bytes, trace)
        return out
    rows = allocate_point_rows(resolve_range(info, first, count), stride)
    _read_records(rows, stride, projection, info, read, first, count, chunk_bytes, trace)
    return points_from_rows(rows)


def read_from_io(
    read: ReadFn,
    *,
    out=None,
    stride: int | None = None,
    chunk_bytes: int = DEFAULT_CHUNK_BYTES,
    trace: ChunkReadLog | None = None,
):
    return read_range_from_io(read, 0, None, out=out, stride=stride, chunk_bytes=chunk_bytes, trace=trace)
