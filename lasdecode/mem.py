"""Decode points straight out of a fully buffered file image."""

from __future__ import annotations

from typing import Iterable

from .attributes import AttributeRequest, build_projection
from .header import FileInfo, interpret_header
from .points import DEFAULT_ATTRIBUTES, DEFAULT_POINT_STRIDE, allocate_point_rows, points_from_rows
from .projector import project_records, resolve_range


def info_from_mem(mem) -> FileInfo:
    return interpret_header(mem)


def read_range_from_mem_with_attribs(
    dest,
    stride: int,
    attribs: Iterable[AttributeRequest],
    mem,
    first: int = 0,
    count: int | None = None,
) -> int:
    """
    Decode records ``[first, first + count)`` of ``mem`` into ``dest``.

    The header is re-read from ``mem`` on every call. Only the declared point
    count bounds the range; ``mem`` must actually hold the records, otherwise
    ``ValueError`` is raised before anything is written.
    """

    info = interpret_header(mem)
    projection = build_projection(attribs)
    return project_records(
        dest,
        stride,
        projection,
        info,
        mem,
        first=first,
        count=count,
        raw_offset=info.point_offset,
    )


def read_range_from_mem(
    mem,
    first: int = 0,
    count: int | None = None,
    *,
    out=None,
    stride: int | None = None,
):
    """
    Decode the default point record for a range of ``mem``.

    Without ``out`` a zeroed ``POINT_DTYPE`` array sized to the range is
    allocated and returned, its elements ``stride`` bytes apart; otherwise
    ``out`` is filled and returned. Flags and classification come back as
    packed bytes: use ``iter_points`` or ``unpack_flags`` /
    ``unpack_classification`` for their sub-fields.
    """

    stride = DEFAULT_POINT_STRIDE if stride is None else stride
    if out is not None:
        read_range_from_mem_with_attribs(out, stride, DEFAULT_ATTRIBUTES, mem, first, count)
        return out
    info = interpret_header(mem)
    rows = allocate_point_rows(resolve_range(info, first, count), stride)
    read_range_from_mem_with_attribs(rows, stride, DEFAULT_ATTRIBUTES, mem, first, count)
    return points_from_rows(rows)


def read_from_mem(mem, *, out=None, stride: int | None = None):
    """All points of ``mem`` as ``POINT_DTYPE`` records; see ``read_range_from_mem``."""

    return read_range_from_mem(mem, 0, None, out=out, stride=stride)
