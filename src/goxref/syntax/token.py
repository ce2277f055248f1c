"""Source positions.

A position identifies one byte in one source file. Positions compare by
value, so two occurrences are "the same place" exactly when filename and
offset agree. ``None`` stands for "no position" everywhere in goxref.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """A byte position in a source file (line and column are 1-based)."""

    filename: str
    offset: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def to_dict(self) -> dict[str, str | int]:
        return {
            "filename": self.filename,
            "offset": self.offset,
            "line": self.line,
            "column": self.column,
        }


def format_position(pos: Position | None) -> str:
    """Render a position for messages; ``-`` when there is none."""
    return "-" if pos is None else str(pos)
