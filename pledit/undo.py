from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RecordKind(Enum):
    INSERT = "ins"
    DELETE = "del"


@dataclass
class UndoRecord:
    """Snapshot of the text fragment touched by one primitive edit.

    ``anchor`` is the cursor position (line, column) when the edit was made.
    """
    kind: RecordKind
    lines: list[str]
    anchor: tuple[int, int]

    def end_point(self) -> tuple[int, int]:
        """Return the point just after the fragment when laid down at anchor."""
        ai, aj = self.anchor
        if len(self.lines) == 1:
            return ai, aj + len(self.lines[0])
        return ai + len(self.lines) - 1, len(self.lines[-1]) + 1


@dataclass
class UndoLog:
    """Linear undo log with a top pointer.

    Records at index >= ``top`` are pending redo. Pushing a new record
    discards them.
    """
    max_entries: Optional[int] = None
    records: list[UndoRecord] = field(default_factory=list)
    top: int = 0

    def clear(self):
        self.records.clear()
        self.top = 0

    def push(self, record: UndoRecord):
        # Any new edit invalidates redo history
        if len(self.records) > self.top:
            del self.records[self.top:]
        self.records.append(record)
        self.top += 1
        # Cap history
        if self.max_entries is not None and len(self.records) > self.max_entries:
            self.records.pop(0)
            self.top -= 1

    def can_undo(self) -> bool:
        return self.top > 0

    def can_redo(self) -> bool:
        return self.top < len(self.records)

    def peek_undo(self) -> Optional[UndoRecord]:
        if not self.can_undo():
            return None
        return self.records[self.top - 1]

    def peek_redo(self) -> Optional[UndoRecord]:
        if not self.can_redo():
            return None
        return self.records[self.top]

    def __len__(self) -> int:
        return len(self.records)
