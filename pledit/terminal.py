"""Terminal interface using Blessed for display and raw byte input."""

import os
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import blessed


class TerminalInterface:
    """Handles terminal I/O using Blessed.

    Screen coordinates taken by the drawing methods are 1-based
    (row 1 is the top line), matching the editor's box geometry.
    """

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._styles = {
            'normal': lambda: self.term.normal,
            'status': lambda: self.term.normal + self.term.bold_red,
            'message': lambda: self.term.normal + self.term.green,
            'selection': lambda: self.term.normal + self.term.bold_magenta,
        }

    def setup(self):
        """Enter fullscreen mode and prepare terminal."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.normal + self.term.clear, end='', flush=True)
        self.is_fullscreen = True

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self.is_fullscreen:
            print(self.term.normal + self.term.normal_cursor, end='')
            print(self.term.exit_fullscreen, end='', flush=True)
            self.is_fullscreen = False

    @contextmanager
    def raw(self) -> Iterator[None]:
        """Put the tty in raw mode for the duration of the block.

        Raw mode (rather than cbreak) delivers ^C, ^Q, ^S and ^Z as
        ordinary bytes, which the key bindings rely on.
        """
        with self.term.raw():
            yield

    @contextmanager
    def session(self) -> Iterator[None]:
        """Full-screen raw session; the terminal is restored on any exit."""
        self.setup()
        try:
            with self.raw():
                yield
        finally:
            self.cleanup()

    def read_byte(self) -> Optional[int]:
        """Block until one byte is available on stdin; None at end of input."""
        data = os.read(sys.stdin.fileno(), 1)
        if not data:
            return None
        return data[0]

    # --- screen sink primitives ---

    def move(self, row: int, col: int):
        """Move the hardware cursor to a 1-based (row, col)."""
        print(self.term.move_yx(row - 1, col - 1), end='')

    def clear_eol(self):
        print(self.term.clear_eol, end='')

    def clear_screen(self):
        """Clear the entire screen."""
        print(self.term.home + self.term.clear, end='')

    def set_style(self, name: str):
        print(self._styles.get(name, self._styles['normal'])(), end='')

    def write(self, text: str):
        print(text, end='')

    def flush(self):
        sys.stdout.flush()

    @property
    def width(self):
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self):
        """Terminal height in rows."""
        return self.term.height
