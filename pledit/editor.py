"""Main editor controller: buffers, key dispatch, prompts and the main loop."""

import logging
import re
from typing import List, Optional, Tuple

from .commands import CommandRegistry, EditorCommand, InsertCharCommand
from .config import EditorConfig
from .constants import EditorConstants
from .errors import EditorError
from .keyboard import CR, DEL, ESC, SPECIAL_BASE, TAB, KeyDecoder, create_key_decoder, key_name
from .model import TextBuffer
from .storage import read_lines, write_lines
from .terminal import TerminalInterface
from .view import Box, Viewport

logger = logging.getLogger(__name__)

BEL = 0x07  # ^G aborts prompts
BACKSPACE = 0x08

HELP_TEXT = """\
pledit key bindings

Cursor movement
  ^F, right  forward char            ^B, left   backward char
  ^N, down   next line               ^P, up     previous line
  ^A, home   beginning of line       ^E, end    end of line
  pgdn       page down               pgup       page up
  esc <      beginning of buffer     esc >      end of buffer

Edition
  ^D, del    delete char             ^H, bksp   delete previous char
  ^K         kill to end of line     esc k      kill line (appends)
  ^@         set mark                ^X^X       exchange mark and cursor
  ^W         wipe selection          ^Y         yank
  ^G         cancel selection        ^L         redisplay
  ^Z         undo                    esc z      redo

Search and replace
  ^S         search                  ^R         search again
  esc 5      replace                 esc 7      replace again

Files and buffers
  ^X^F       open file               ^X^W       write file as
  ^X^S       save file               ^X^B       new buffer
  ^X^N       next buffer             ^X^P       previous buffer

Macros
  ^X(        start recording         ^X)        stop recording
  ^Xe, ^], ^O  play macro

Exit
  ^X^C       exit (asks if buffers are not saved)
  ^Q         quit without saving
"""


def is_self_inserting(code: int) -> bool:
    """Return True for keys that insert themselves when unbound."""
    if code == TAB:
        return True
    return 32 <= code < SPECIAL_BASE and code != DEL and not 128 <= code < 160


class BufferList:
    """Ordered list of viewports, one per buffer, with a current index."""

    def __init__(self):
        self.views: List[Viewport] = []
        self.index = -1

    def __len__(self) -> int:
        return len(self.views)

    def __iter__(self):
        return iter(self.views)

    @property
    def current(self) -> Optional[Viewport]:
        if self.index < 0:
            return None
        return self.views[self.index]

    def add(self, view: Viewport) -> Viewport:
        """Insert view after the current one and make it current."""
        self.index += 1
        self.views.insert(self.index, view)
        return view

    def next(self) -> Viewport:
        self.index = (self.index + 1) % len(self.views)
        return self.views[self.index]

    def previous(self) -> Viewport:
        self.index = (self.index - 1) % len(self.views)
        return self.views[self.index]

    def select(self, view: Viewport):
        self.index = self.views.index(view)

    def find_by_filename(self, filename: str) -> Optional[Viewport]:
        for view in self.views:
            if view.buffer.filename == filename:
                return view
        return None

    def any_unsaved(self) -> bool:
        return any(view.buffer.unsaved for view in self.views)


class MacroRecorder:
    """Records executed commands while recording is on."""

    def __init__(self):
        self.recording = False
        self.steps: List[Tuple[EditorCommand, Optional[int]]] = []

    def start(self):
        self.recording = True
        self.steps = []

    def stop(self):
        self.recording = False

    def reset(self):
        self.recording = False
        self.steps = []

    def record(self, command: EditorCommand, key: Optional[int]):
        if self.recording and command.recordable:
            self.steps.append((command, key))


class Editor:
    """Main text editor application controller."""

    def __init__(self, terminal: Optional[TerminalInterface] = None,
                 config: Optional[EditorConfig] = None,
                 decoder: Optional[KeyDecoder] = None):
        """Initialize the editor components."""
        self.terminal = terminal or TerminalInterface()
        self.config = config or EditorConfig()
        self.decoder = decoder or create_key_decoder(self.terminal)
        self.command_registry = CommandRegistry()  # Command pattern for key handling
        self.buffers = BufferList()
        self.macro = MacroRecorder()
        self.kill_lines: List[str] = []
        self.pattern: Optional[str] = None
        self.replacement: Optional[str] = None
        # Column kept across vertical moves
        self.goal_column: Optional[int] = None
        self.last_command: Optional[EditorCommand] = None
        self.quit = False

    # --- layout ---

    def box(self) -> Box:
        """Return the box for buffer text: rows 2..H-1, full width."""
        height = max(EditorConstants.MIN_BOX_HEIGHT, self.terminal.height - 2)
        return Box(EditorConstants.BOX_FIRST_ROW, 1, height, self.terminal.width)

    @property
    def message_row(self) -> int:
        return self.terminal.height

    @property
    def view(self) -> Viewport:
        return self.buffers.current

    @property
    def buffer(self) -> TextBuffer:
        return self.buffers.current.buffer

    # --- buffers ---

    def new_buffer(self, lines: Optional[List[str]] = None,
                   filename: Optional[str] = None) -> Viewport:
        """Create a buffer after the current one and make it current."""
        buf = TextBuffer(lines, filename, undo_limit=self.config.undo_limit)
        view = Viewport(buf, self.terminal, self.box(),
                        status_row=EditorConstants.STATUS_ROW,
                        tab_width=self.config.tab_width,
                        hscroll_step=self.config.hscroll_step)
        self.buffers.add(view)
        self.goal_column = None
        return view

    def load_file(self, filename: str) -> Viewport:
        """Open filename in a new buffer; a missing file gives an empty buffer.

        Raises InvalidEncoding if the file is not UTF-8.
        """
        try:
            lines = read_lines(filename)
        except FileNotFoundError:
            logger.info("%s does not exist, starting a new file", filename)
            lines = None
        return self.new_buffer(lines, filename)

    def write_buffer(self, filename: str):
        buf = self.buffer
        write_lines(filename, buf.lines)
        buf.filename = filename
        buf.unsaved = False
        self.message(f"{filename} saved.")

    def switch_buffer(self, step: int):
        if step > 0:
            self.buffers.next()
        else:
            self.buffers.previous()
        self.goal_column = None
        self.view.set_box(self.box())

    def show_help(self):
        """Show the help buffer, creating it on first use."""
        view = self.buffers.find_by_filename(EditorConstants.HELP_BUFFER_NAME)
        if view is None:
            view = self.new_buffer(HELP_TEXT.splitlines(), EditorConstants.HELP_BUFFER_NAME)
        else:
            self.buffers.select(view)
            view.set_box(self.box())
        self.goal_column = None

    # --- display ---

    def statusline(self) -> str:
        buf = self.buffer
        sel = f"{buf.si},{buf.sj}" if buf.si is not None else "nil"
        parts = [f"cur={buf.ci},{buf.cj}", f"sel={sel}"]
        if buf.filename:
            parts.append(buf.filename)
        if buf.unsaved:
            parts.append("(*)")
        if self.macro.recording:
            parts.append("REC")
        parts.append(f"-- {EditorConstants.INITIAL_MESSAGE}")
        return " ".join(parts)

    def message(self, text: str):
        """Show text on the message line, leaving the cursor where it was."""
        term = self.terminal
        view = self.view
        term.move(self.message_row, 1)
        term.clear_eol()
        term.set_style('message')
        term.write(text)
        term.set_style('normal')
        if view is not None:
            term.move(view.cursor_row, view.cursor_col)
        term.flush()

    def redisplay(self) -> bool:
        return self.view.redisplay(self.statusline())

    def full_redisplay(self) -> bool:
        self.terminal.clear_screen()
        self.view.set_box(self.box())
        return self.view.full_redisplay(self.statusline())

    # --- prompts ---

    def _prompt(self, text: str):
        term = self.terminal
        term.move(self.message_row, 1)
        term.clear_eol()
        term.set_style('message')
        term.write(text)
        term.set_style('normal')
        term.flush()

    def read_string(self, prompt: str) -> Optional[str]:
        """Read a line of text on the message line.

        Returns None if the user aborts with ^G or input ends.
        """
        chars: List[str] = []
        while True:
            self._prompt(prompt + "".join(chars))
            code = self.decoder.next_key()
            if code is None or code == BEL:
                return None
            if code == CR:
                return "".join(chars)
            if code in (BACKSPACE, DEL):
                if chars:
                    chars.pop()
            elif code >= 32 and is_self_inserting(code):
                chars.append(chr(code))

    def read_char(self, prompt: str, pattern: str) -> Optional[str]:
        """Ask a one-key question; keys not matching pattern are ignored.

        Returns None if the user aborts with ^G or input ends.
        """
        self._prompt(prompt)
        while True:
            code = self.decoder.next_key()
            if code is None or code == BEL:
                return None
            if code < SPECIAL_BASE and re.fullmatch(pattern, chr(code)):
                return chr(code)

    # --- key dispatch ---

    def _read_command(self, key: int) -> Tuple[Optional[EditorCommand], str]:
        """Resolve key, reading a second key after a prefix."""
        registry = self.command_registry
        name = key_name(key)
        if registry.is_prefix(key):
            self.message(name)
            second = self.decoder.next_key()
            if second is None:
                return None, name
            name = f"{name}-{key_name(second)}" if key == ESC else name + key_name(second)
            return registry.get_command((key, second)), name
        command = registry.get_command(key)
        if command is None and is_self_inserting(key):
            return InsertCharCommand(key), name
        return command, name

    def run_command(self, command: EditorCommand, key: Optional[int]):
        """Execute command, turning editor failures into messages."""
        self.macro.record(command, key)
        try:
            command.execute(self, key)
        except (EditorError, OSError) as e:
            logger.info("Command %s failed: %s", type(command).__name__, e)
            self.message(str(e))
        self.last_command = command

    def handle_key(self, key: int):
        """Process one key (and its second key after a prefix)."""
        command, name = self._read_command(key)
        if command is None:
            self.message(f"{name} not bound")
            self.last_command = None
            return
        if not isinstance(command, InsertCharCommand):
            self.message(name)
        self.run_command(command, key)

    # --- main loop ---

    def main_loop(self):
        """Read and execute keys until quit or end of input."""
        self.full_redisplay()
        self.message(EditorConstants.INITIAL_MESSAGE)
        while not self.quit:
            key = self.decoder.next_key()
            if key is None:
                break
            self.handle_key(key)
            if not self.quit:
                self.redisplay()

    def run(self, filenames: Optional[List[str]] = None):
        """Run the editor on a terminal session; the terminal is always restored."""
        for filename in filenames or []:
            self.load_file(filename)
        if not len(self.buffers):
            self.new_buffer()
        elif len(self.buffers) > 1:
            self.buffers.index = 0
        with self.terminal.session():
            self.main_loop()
