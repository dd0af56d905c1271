import re
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .errors import InvalidEncoding, NothingToRedo, NothingToUndo, PreconditionViolation
from .undo import RecordKind, UndoLog, UndoRecord

Fragment = Union[str, bytes, Sequence[Union[str, bytes]]]

# Sentinel column/line meaning "last line" or "end of line"
MAX = 0xFFFFFFFF


@dataclass(frozen=True, order=True)
class CursorPosition:
    """A (line, column) point in a buffer, both 1-based.

    Ordering is document order: by line, then by column.
    """
    line: int = 1
    column: int = 1


def split_lines(text: str) -> list[str]:
    """Split text into a list of lines, accepting LF and CRLF endings."""
    return re.split(r"\r?\n", text)


def _check_line(line: Union[str, bytes]) -> str:
    if isinstance(line, (bytes, bytearray)):
        try:
            return bytes(line).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncoding(f"invalid UTF8 sequence: {e.reason}") from e
    try:
        # Lone surrogates (e.g. from surrogateescape) are not encodable
        line.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidEncoding(f"invalid UTF8 sequence: {e.reason}") from e
    return line


def normalize_fragment(fragment: Fragment) -> list[str]:
    """Return fragment as a validated list of lines.

    A single string is split on newlines; list elements must already be
    single lines. Raises InvalidEncoding before anything is applied.
    """
    if isinstance(fragment, (str, bytes, bytearray)):
        return split_lines(_check_line(fragment))
    lines = [_check_line(line) for line in fragment]
    for line in lines:
        if "\n" in line:
            raise ValueError("fragment lines must not contain newlines")
    return lines


class TextBuffer:
    """A document (list of lines), a cursor, an optional mark and an undo log.

    Columns are codepoint offsets. The cursor is always valid: every
    mutation clamps instead of producing out-of-range positions.
    """

    def __init__(self, lines: Optional[Sequence[str]] = None, filename: Optional[str] = None,
                 undo_limit: Optional[int] = None):
        self.lines: list[str] = list(lines) if lines else [""]
        self.filename = filename
        self.ci = 1
        self.cj = 1
        self.si: Optional[int] = None
        self.sj: Optional[int] = None
        self.unsaved = False
        # True when content, cursor or mark changed since last display
        self.changed = True
        self.undo_log = UndoLog(max_entries=undo_limit)

    # --- predicates and accessors ---

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def cursor(self) -> CursorPosition:
        return CursorPosition(self.ci, self.cj)

    @property
    def mark(self) -> Optional[CursorPosition]:
        if self.si is None:
            return None
        return CursorPosition(self.si, self.sj)

    def at_eol(self) -> bool:
        return self.cj > len(self.lines[self.ci - 1])

    def at_bol(self) -> bool:
        return self.cj <= 1

    def at_first(self) -> bool:
        return self.ci <= 1

    def at_last(self) -> bool:
        return self.ci >= len(self.lines)

    def at_eot(self) -> bool:
        return self.at_last() and self.at_eol()

    def at_bot(self) -> bool:
        return self.at_first() and self.at_bol()

    def is_before_cursor(self, i: int, j: int) -> bool:
        """Return True if point (i, j) is strictly before the cursor."""
        return i < self.ci or (i == self.ci and j < self.cj)

    def mark_before_cursor(self) -> bool:
        return self.si is not None and self.is_before_cursor(self.si, self.sj)

    def current_char(self) -> Optional[str]:
        """Return the character at the cursor, or None at end of line."""
        if self.at_eol():
            return None
        return self.lines[self.ci - 1][self.cj - 1]

    def end_of_line(self) -> tuple[int, int]:
        return self.ci, len(self.lines[self.ci - 1]) + 1

    def end_of_text(self) -> tuple[int, int]:
        n = len(self.lines)
        return n, len(self.lines[n - 1]) + 1

    def get_line(self, i: Optional[int] = None) -> str:
        return self.lines[(i or self.ci) - 1]

    def get_lines(self, to_line: int, to_col: int) -> list[str]:
        """Return the text between the cursor and (to_line, to_col).

        The point must not be before the cursor.
        """
        to_line, to_col = self._clamp(to_line, to_col)
        if self.is_before_cursor(to_line, to_col):
            raise PreconditionViolation("point must be after cursor")
        ci, cj = self.ci, self.cj
        if to_line == ci:
            return [self.lines[ci - 1][cj - 1:to_col - 1]]
        result = []
        for i in range(ci, to_line + 1):
            line = self.lines[i - 1]
            if i == to_line:
                line = line[:to_col - 1]
            if i == ci:
                line = line[cj - 1:]
            result.append(line)
        return result

    def get_text(self) -> str:
        return "\n".join(self.lines)

    # --- cursor movement ---

    def _clamp(self, i: int, j: int) -> tuple[int, int]:
        i = max(1, min(i, len(self.lines)))
        j = max(1, min(j, len(self.lines[i - 1]) + 1))
        return i, j

    def set_cursor(self, i: Optional[int] = None, j: Optional[int] = None) -> bool:
        """Set the cursor; None leaves a coordinate unchanged. Values clamp."""
        if i is not None:
            self.ci = max(1, min(i, len(self.lines)))
        if j is not None:
            self.cj = j
        # Re-clamp the column even when only the line moved
        self.cj = max(1, min(self.cj, len(self.lines[self.ci - 1]) + 1))
        return True

    def move_cursor(self, di: int, dj: int) -> bool:
        return self.set_cursor(self.ci + di, self.cj + dj)

    # --- mark / selection ---

    def set_mark(self):
        self.si, self.sj = self.ci, self.cj
        self.changed = True

    def clear_mark(self):
        self.si = self.sj = None
        self.changed = True

    def exchange_mark(self):
        if self.si is None:
            return
        self.si, self.ci = self.ci, self.si
        self.sj, self.cj = self.cj, self.sj
        # The text may have shrunk since the mark was set
        self.si, self.sj = self._clamp(self.si, self.sj)
        self.set_cursor(self.ci, self.cj)

    def selection(self) -> Optional[tuple[CursorPosition, CursorPosition]]:
        """Return the ordered (begin, end) of the selection, or None."""
        mark = self.mark
        if mark is None:
            return None
        cursor = self.cursor
        if mark <= cursor:
            return mark, cursor
        return cursor, mark

    def selected_lines(self) -> list[str]:
        """Return the selected text as a list of lines (empty if no mark)."""
        sel = self.selection()
        if sel is None:
            return []
        begin, end = sel
        lines = self.lines[begin.line - 1:end.line]
        if begin.line == end.line:
            return [lines[0][begin.column - 1:end.column - 1]]
        lines[-1] = lines[-1][:end.column - 1]
        lines[0] = lines[0][begin.column - 1:]
        return lines

    # --- modification at cursor ---

    def insert(self, fragment: Fragment, record: bool = True) -> bool:
        """Insert a list of lines at the cursor.

        ["xx"] inserts within the current line, ["xx", "yy"] splits it,
        ["", ""] inserts a single newline. The cursor ends up after the
        inserted text.
        """
        sl = normalize_fragment(fragment)
        if not sl:
            return True
        if record:
            self.undo_log.push(UndoRecord(RecordKind.INSERT, list(sl), (self.ci, self.cj)))
        ci, cj = self.ci, self.cj
        line = self.lines[ci - 1]
        before, after = line[:cj - 1], line[cj - 1:]
        if len(sl) == 1:
            self.lines[ci - 1] = before + sl[0] + after
            self.set_cursor(ci, cj + len(sl[0]))
        else:
            new_lines = [before + sl[0]] + sl[1:-1] + [sl[-1] + after]
            self.lines[ci - 1:ci] = new_lines
            self.set_cursor(ci + len(sl) - 1, len(sl[-1]) + 1)
        self.changed = True
        self.unsaved = True
        return True

    def delete(self, to_line: int, to_col: int, record: bool = True) -> bool:
        """Delete all characters between the cursor and (to_line, to_col).

        The point must not be before the cursor; this is a caller contract.
        """
        to_line, to_col = self._clamp(to_line, to_col)
        if self.is_before_cursor(to_line, to_col):
            raise PreconditionViolation("point must be after cursor")
        if record:
            self.undo_log.push(
                UndoRecord(RecordKind.DELETE, self.get_lines(to_line, to_col), (self.ci, self.cj))
            )
        ci, cj = self.ci, self.cj
        head = self.lines[ci - 1][:cj - 1]
        tail = self.lines[to_line - 1][to_col - 1:]
        self.lines[ci - 1:to_line] = [head + tail]
        self.changed = True
        self.unsaved = True
        return True

    def set_text(self, text: Union[str, bytes]) -> bool:
        """Replace the whole text. This cannot be undone and clears the log."""
        text = _check_line(text)
        self.undo_log.clear()
        self.lines = split_lines(text)
        self.ci = self.cj = 1
        self.si = self.sj = None
        self.changed = True
        self.unsaved = True
        return True

    # --- undo / redo ---

    def _replay(self, rec: UndoRecord, kind: RecordKind):
        self.set_cursor(*rec.anchor)
        if kind == RecordKind.INSERT:
            self.insert(rec.lines, record=False)
        else:
            self.delete(*rec.end_point(), record=False)

    def undo(self) -> bool:
        rec = self.undo_log.peek_undo()
        if rec is None:
            raise NothingToUndo()
        # Undoing an insertion deletes it and vice versa
        inverse = RecordKind.DELETE if rec.kind == RecordKind.INSERT else RecordKind.INSERT
        self._replay(rec, inverse)
        self.undo_log.top -= 1
        return True

    def redo(self) -> bool:
        rec = self.undo_log.peek_redo()
        if rec is None:
            raise NothingToRedo()
        self.undo_log.top += 1
        self._replay(rec, rec.kind)
        return True
