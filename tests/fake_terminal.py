"""In-memory screen and byte source used by the tests."""

from contextlib import contextmanager

from pledit.keyboard import KeyDecoder


class FakeScreen:
    """Records what is drawn into a character grid with a style per cell.

    Rows and columns are 1-based, like the real terminal interface.
    """

    def __init__(self, width=20, height=8):
        self.width = width
        self.height = height
        self.cells = [[" "] * width for _ in range(height)]
        self.styles = [["normal"] * width for _ in range(height)]
        self.row = 1
        self.col = 1
        self.style = "normal"
        self.writes = 0
        self.flushes = 0
        self.clears = 0

    def move(self, row, col):
        self.row, self.col = row, col

    def clear_eol(self):
        if 1 <= self.row <= self.height:
            for c in range(self.col - 1, self.width):
                self.cells[self.row - 1][c] = " "
                self.styles[self.row - 1][c] = "normal"

    def clear_screen(self):
        self.clears += 1
        for r in range(self.height):
            self.cells[r] = [" "] * self.width
            self.styles[r] = ["normal"] * self.width

    def set_style(self, name):
        self.style = name

    def write(self, text):
        self.writes += 1
        for ch in text:
            if 1 <= self.row <= self.height and 1 <= self.col <= self.width:
                self.cells[self.row - 1][self.col - 1] = ch
                self.styles[self.row - 1][self.col - 1] = self.style
            self.col += 1

    def flush(self):
        self.flushes += 1

    @contextmanager
    def raw(self):
        yield

    @contextmanager
    def session(self):
        yield

    # --- inspection helpers ---

    def line(self, row):
        """Return the text of a screen row, trailing blanks removed."""
        return "".join(self.cells[row - 1]).rstrip()

    def style_at(self, row, col):
        return self.styles[row - 1][col - 1]

    def styled(self, row, name):
        """Return the characters of row drawn with style name."""
        return "".join(ch for ch, st in zip(self.cells[row - 1], self.styles[row - 1])
                       if st == name)


def byte_source(data):
    """Return a read_byte callable over data, then None at end of input."""
    it = iter(bytes(data))

    def read_byte():
        return next(it, None)
    return read_byte


def decoder_for(data):
    return KeyDecoder(byte_source(data))
