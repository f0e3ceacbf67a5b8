from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

from .formats import (
    ATTRIBUTE_DTYPES,
    SIMPLE_ATTRIBUTE_COUNT,
    SIMPLE_ATTRIBUTES,
    LogicalAttribute,
    attribute_flag,
)


@dataclass(frozen=True)
class AttributeRequest:
    """Decode ``attribute`` to byte ``offset`` inside each destination element."""

    attribute: LogicalAttribute
    offset: int = 0


ATTRIBUTE_END = AttributeRequest(LogicalAttribute.NONE, 0)


@dataclass(frozen=True)
class Projection:
    """
    A request list folded into a presence bitmask plus an offset per attribute.

    ``offsets`` is indexed by :class:`LogicalAttribute` value; entries whose
    flag is not set in ``flags`` are meaningless.
    """

    flags: int
    offsets: Tuple[int, ...]

    def __contains__(self, attribute: LogicalAttribute) -> bool:
        return bool(self.flags & attribute_flag(attribute))

    def offset_of(self, attribute: LogicalAttribute) -> int:
        return self.offsets[int(attribute)]

    def present(self) -> Iterator[LogicalAttribute]:
        """Requested attributes in decode order."""

        for attribute in SIMPLE_ATTRIBUTES:
            if attribute in self:
                yield attribute

    def extent(self) -> int:
        """Bytes from the start of an element to the end of its last field."""

        return max(
            (self.offset_of(a) + ATTRIBUTE_DTYPES[a].itemsize for a in self.present()),
            default=0,
        )

    def fits_within(self, stride: int) -> bool:
        return self.extent() <= stride


def build_projection(requests: Iterable[AttributeRequest]) -> Projection:
    """
    Fold ``requests`` into a :class:`Projection`.

    Iteration stops at the first ``NONE`` entry. Order does not matter and a
    repeated attribute keeps its last offset.
    """

    flags = 0
    offsets = [0] * SIMPLE_ATTRIBUTE_COUNT
    for request in requests:
        attribute = LogicalAttribute(request.attribute)
        if attribute == LogicalAttribute.NONE:
            break
        if int(attribute) >= SIMPLE_ATTRIBUTE_COUNT:
            raise ValueError(f"{attribute.name} cannot be decoded by the simple attribute path")
        if request.offset < 0:
            raise ValueError(f"negative destination offset for {attribute.name}: {request.offset}")
        offsets[int(attribute)] = request.offset
        flags |= attribute_flag(attribute)
    return Projection(flags=flags, offsets=tuple(offsets))
