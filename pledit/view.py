from dataclasses import dataclass
from typing import Optional, Protocol

from .constants import EditorConstants
from .model import TextBuffer


class ScreenSink(Protocol):
    """What the viewport needs from a terminal."""

    def move(self, row: int, col: int): ...

    def clear_eol(self): ...

    def set_style(self, name: str): ...

    def write(self, text: str): ...

    def flush(self): ...


@dataclass
class Box:
    """A rectangular area of the screen.

    (row, col) is the 1-based top left corner; height and width count
    lines and columns.
    """
    row: int
    col: int
    height: int
    width: int

    @property
    def blank(self) -> str:
        return " " * self.width


def char_repr(ch: str, column: int, tab_width: int = EditorConstants.TAB_WIDTH) -> str:
    """Return the display form of ch when drawn at 0-based column."""
    code = ord(ch)
    if ch == "\t":
        return " " * (tab_width - column % tab_width)
    if code < 32 or 127 <= code < 160:
        return EditorConstants.NDC_MARKER
    return ch


def display_column(line: str, cj: int, tab_width: int = EditorConstants.TAB_WIDTH) -> int:
    """Return the 0-based screen column of codepoint offset cj in line."""
    col = 0
    for ch in line[:cj - 1]:
        if ch == "\t":
            col += tab_width - col % tab_width
        else:
            col += 1
    return col


class Viewport:
    """Maps a TextBuffer onto a box of the screen.

    Holds the scroll state for one buffer: ``top_line`` is the buffer line
    shown on the first row of the box and ``hscroll`` the number of columns
    scrolled off to the left. ``dirty`` means every row must be redrawn.
    """

    def __init__(self, buffer: TextBuffer, screen: ScreenSink, box: Box,
                 status_row: Optional[int] = None,
                 tab_width: int = EditorConstants.TAB_WIDTH,
                 hscroll_step: int = EditorConstants.HSCROLL_STEP):
        self.buffer = buffer
        self.screen = screen
        self.box = box
        self.status_row = status_row
        self.tab_width = tab_width
        self.hscroll_step = hscroll_step
        self.top_line = 1
        self.hscroll = 0
        self.dirty = True
        # Screen position of the buffer cursor after the last adjustment
        self.cursor_row = box.row
        self.cursor_col = box.col

    def set_box(self, box: Box):
        self.box = box
        self.dirty = True

    def cursor_column(self) -> int:
        """Return the 0-based column of the cursor, ignoring horizontal scroll."""
        buf = self.buffer
        return display_column(buf.get_line(), buf.cj, self.tab_width)

    def adjust_scroll(self) -> bool:
        """Update top_line and hscroll so that the cursor is in the box.

        Returns True if the view became dirty.
        """
        buf = self.buffer
        height = self.box.height
        if buf.ci < self.top_line or buf.ci >= self.top_line + height:
            # Cursor has moved out of box: center it vertically
            self.top_line = max(1, buf.ci - height // 2)
            self.dirty = True
        cy = self.cursor_column()
        # The last column of the box is kept for the overflow marker
        limit = max(1, self.box.width - 1)
        # A stride wider than the box would scroll the cursor off its left edge
        step = min(self.hscroll_step, limit)
        hs = 0
        while cy - hs >= limit:
            hs += step
        if hs != self.hscroll:
            self.hscroll = hs
            self.dirty = True
        self.cursor_row = self.box.row + buf.ci - self.top_line
        self.cursor_col = self.box.col + cy - self.hscroll
        return self.dirty

    def render_line(self, row: int, line: str, in_selection: bool = False,
                    sel_on: Optional[int] = None, sel_off: Optional[int] = None) -> Optional[int]:
        """Draw line on the row-th line of the box (1-based).

        in_selection: the line starts inside the selection.
        sel_on: if set and not in_selection, column where the selection starts.
        sel_off: if set, column where the selection ends.

        Returns the 1-based index of the first character that did not fit,
        or None if the whole line was drawn.
        """
        box, hs, screen = self.box, self.hscroll, self.screen
        y = box.row + row - 1
        # Clear the row (not cleareol: the box may be narrower than the screen)
        screen.set_style('normal')
        screen.move(y, box.col)
        screen.write(box.blank)
        screen.move(y, box.col)
        if in_selection:
            screen.set_style('selection')
        cc = 0  # current column in the line
        for j, ch in enumerate(line, start=1):
            if not in_selection and sel_on is not None and j == sel_on:
                screen.set_style('selection')
                in_selection = True
            if in_selection and sel_off is not None and j == sel_off:
                screen.set_style('normal')
                in_selection = False
            chs = char_repr(ch, cc, self.tab_width)
            start = cc
            cc += len(chs)
            if cc >= box.width + hs:
                screen.set_style('normal')
                screen.move(y, box.col + box.width - 1)
                screen.write(EditorConstants.EOL_MARKER)
                return j
            if cc > hs:
                screen.write(chs[max(0, hs - start):])
        screen.set_style('normal')
        return None

    def display_lines(self):
        """Draw every row of the box, starting at top_line."""
        buf = self.buffer
        sel = buf.selection()
        for i in range(1, self.box.height + 1):
            lx = self.top_line + i - 1
            in_selection, sel_on, sel_off = False, None, None
            if sel is not None:
                begin, end = sel
                if begin.line < lx < end.line:
                    in_selection = True
                elif lx == begin.line and lx == end.line:
                    sel_on, sel_off = begin.column, end.column
                elif lx == begin.line:
                    sel_on = begin.column
                elif lx == end.line:
                    sel_off = end.column
                    in_selection = True
            if lx <= buf.line_count:
                self.render_line(i, buf.get_line(lx), in_selection, sel_on, sel_off)
            else:
                self.render_line(i, EditorConstants.EOT_MARKER)
        self.screen.flush()

    def _place_cursor(self, status: Optional[str]):
        screen = self.screen
        if status is not None and self.status_row is not None:
            screen.move(self.status_row, 1)
            screen.clear_eol()
            screen.set_style('status')
            screen.write(status)
            screen.set_style('normal')
        screen.move(self.cursor_row, self.cursor_col)
        screen.flush()

    def redisplay(self, status: Optional[str] = None) -> bool:
        """Adjust scrolling and repaint the box if needed.

        When nothing but the cursor moved, only the status line and the
        hardware cursor are updated. Returns True if the box was repainted.
        """
        buf = self.buffer
        self.adjust_scroll()
        repaint = self.dirty or buf.changed or buf.mark is not None
        if repaint:
            self.display_lines()
        self.dirty = False
        buf.changed = False
        self._place_cursor(status)
        return repaint

    def full_redisplay(self, status: Optional[str] = None) -> bool:
        self.dirty = True
        return self.redisplay(status)

    def page_size(self) -> int:
        return max(1, self.box.height - EditorConstants.PAGE_OVERLAP)
