from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List


@dataclass
class ChunkReadLog:
    """
    Collects one line per range read issued by the streaming reader and
    writes them to ``destination`` on :meth:`flush`.
    """

    destination: Path

    def __post_init__(self) -> None:
        self._lines: List[str] = []

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def record(
        self,
        *,
        chunk: int,
        offset: int,
        requested: int,
        received: int,
        first_point: int,
        point_count: int,
    ) -> None:
        line = (
            f"chunk[{chunk:04d}] off=0x{offset:08X} requested={requested:<6} received={received:<6} "
            f"points={first_point}..{first_point + point_count}"
        )
        if received != requested:
            line += " | short read"
        self._lines.append(line)

    def flush(self) -> None:
        if not self._lines:
            return
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        self.destination.write_text("\n".join(self._lines) + "\n", encoding="utf-8")
