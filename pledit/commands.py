"""Command pattern implementation for editor actions."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, TYPE_CHECKING, Tuple, Union

from .errors import InvalidEncoding
from .keyboard import CR, DEL, ESC, Key, TAB
from .model import MAX, TextBuffer
from .storage import read_lines
from .view import display_column

if TYPE_CHECKING:
    from .editor import Editor

logger = logging.getLogger(__name__)

KeyBinding = Union[int, Tuple[int, int]]

CTRL_X = 0x18


def ctrl(letter: str) -> int:
    """Return the code of Ctrl-<letter>."""
    return ord(letter.upper()) - 64


class EditorCommand(ABC):
    """Base class for editor commands."""

    # Macro control commands are not themselves recorded
    recordable = True

    @abstractmethod
    def execute(self, editor: 'Editor', key: Optional[int]) -> bool:
        """Execute the command.

        Args:
            editor: Editor instance
            key: The key that triggered this command (None on macro replay)

        Returns:
            True if the command modified the document
        """


class MovementCommand(EditorCommand):
    """Base class for cursor movement commands."""

    def execute(self, editor: 'Editor', key: Optional[int]) -> bool:
        """Movement commands don't modify the document."""
        self._move(editor, editor.buffer)
        editor.goal_column = None
        return False

    @abstractmethod
    def _move(self, editor: 'Editor', buf: TextBuffer):
        """Perform the movement."""


class VerticalMovementCommand(MovementCommand):
    """Moves across lines, trying to stay in the remembered column."""

    def execute(self, editor: 'Editor', key: Optional[int]) -> bool:
        buf = editor.buffer
        if editor.goal_column is None:
            editor.goal_column = buf.cj
        self._move(editor, buf)
        return False

    def _step(self, editor: 'Editor', buf: TextBuffer, di: int) -> bool:
        if (di < 0 and buf.at_first()) or (di > 0 and buf.at_last()):
            return False
        buf.set_cursor(buf.ci + di, editor.goal_column)
        return True


def go_right(buf: TextBuffer) -> bool:
    """Move one character right, to the next line at end of line."""
    if not buf.at_eol():
        return buf.move_cursor(0, 1)
    if not buf.at_last():
        return buf.set_cursor(buf.ci + 1, 1)
    return False


def go_left(buf: TextBuffer) -> bool:
    """Move one character left, to the end of the previous line at bol."""
    if not buf.at_bol():
        return buf.move_cursor(0, -1)
    if not buf.at_first():
        return buf.set_cursor(buf.ci - 1, MAX)
    return False


def delete_char(buf: TextBuffer) -> bool:
    """Delete the character at the cursor, joining lines at end of line."""
    if buf.at_eot():
        return False
    if buf.at_eol():
        return buf.delete(buf.ci + 1, 1)
    return buf.delete(buf.ci, buf.cj + 1)


class LeftCharCommand(MovementCommand):
    def _move(self, editor, buf):
        go_left(buf)


class RightCharCommand(MovementCommand):
    def _move(self, editor, buf):
        go_right(buf)


class UpLineCommand(VerticalMovementCommand):
    def _move(self, editor, buf):
        self._step(editor, buf, -1)


class DownLineCommand(VerticalMovementCommand):
    def _move(self, editor, buf):
        self._step(editor, buf, 1)


class PageUpCommand(VerticalMovementCommand):
    def _move(self, editor, buf):
        for _ in range(editor.view.page_size()):
            if not self._step(editor, buf, -1):
                break


class PageDownCommand(VerticalMovementCommand):
    def _move(self, editor, buf):
        for _ in range(editor.view.page_size()):
            if not self._step(editor, buf, 1):
                break


class BeginningOfLineCommand(MovementCommand):
    def _move(self, editor, buf):
        buf.set_cursor(None, 1)


class EndOfLineCommand(MovementCommand):
    def _move(self, editor, buf):
        buf.set_cursor(None, MAX)


class BeginningOfBufferCommand(MovementCommand):
    def _move(self, editor, buf):
        buf.set_cursor(1, 1)


class EndOfBufferCommand(MovementCommand):
    def _move(self, editor, buf):
        buf.set_cursor(MAX, MAX)


class EditCommand(EditorCommand):
    """Base class for editing commands."""

    def execute(self, editor: 'Editor', key: Optional[int]) -> bool:
        """Editing commands modify the document."""
        editor.goal_column = None
        return bool(self._edit(editor, editor.buffer, key))

    @abstractmethod
    def _edit(self, editor: 'Editor', buf: TextBuffer, key: Optional[int]):
        """Perform the edit."""


class InsertNewlineCommand(EditCommand):
    def _edit(self, editor, buf, key):
        return buf.insert(["", ""])


class InsertCharCommand(EditCommand):
    """Inserts the character given by the key code."""

    def __init__(self, code: Optional[int] = None):
        self.code = code

    def _edit(self, editor, buf, key):
        code = self.code if self.code is not None else key
        return buf.insert([chr(code)])


class TabCommand(EditCommand):
    def _edit(self, editor, buf, key):
        tabspaces = editor.config.tabspaces
        if not tabspaces:
            return buf.insert(["\t"])
        # Pad to the next tab stop
        col = display_column(buf.get_line(), buf.cj, editor.config.tab_width)
        return buf.insert([" " * (tabspaces - col % tabspaces)])


class DeleteCharCommand(EditCommand):
    def _edit(self, editor, buf, key):
        return delete_char(buf)


class BackspaceCommand(EditCommand):
    def _edit(self, editor, buf, key):
        return go_left(buf) and delete_char(buf)


class KillCommand(EditCommand):
    """Cut from the cursor to the end of line; at eol, join the next line."""

    def _edit(self, editor, buf, key):
        if buf.at_eol():
            return delete_char(buf)
        di, dj = buf.end_of_line()
        editor.kill_lines = buf.get_lines(di, dj)
        return buf.delete(di, dj)


class KillLineCommand(EditCommand):
    """Cut from the cursor to the beginning of the next line.

    Repeated kills append to the kill buffer.
    """

    def _edit(self, editor, buf, key):
        if buf.at_eot():
            return False
        if not isinstance(editor.last_command, KillLineCommand) or not editor.kill_lines:
            # Start with a fresh kill buffer
            editor.kill_lines = [""]
        # Last item is the empty line following the newline: replace it
        editor.kill_lines.pop()
        di, dj = buf.end_of_line()
        editor.kill_lines.append(buf.get_lines(di, dj)[0])
        if buf.at_last():
            # No newline to take on the last line
            return buf.delete(di, dj)
        editor.kill_lines.append("")
        return buf.delete(di + 1, 1)


class WipeCommand(EditCommand):
    """Cut the selection into the kill buffer."""

    def _edit(self, editor, buf, key):
        if buf.mark is None:
            editor.message("No selection.")
            return False
        # Make sure the cursor is at the beginning of the selection
        if buf.mark_before_cursor():
            buf.exchange_mark()
        editor.kill_lines = buf.selected_lines()
        buf.delete(buf.si, buf.sj)
        buf.clear_mark()
        return True


class YankCommand(EditCommand):
    def _edit(self, editor, buf, key):
        if not editor.kill_lines:
            editor.message("nothing to yank!")
            return False
        return buf.insert(editor.kill_lines)


class UndoCommand(EditCommand):
    def _edit(self, editor, buf, key):
        return buf.undo()


class RedoCommand(EditCommand):
    def _edit(self, editor, buf, key):
        return buf.redo()


class SystemCommand(EditorCommand):
    """Base class for commands that do not edit text directly."""

    def execute(self, editor: 'Editor', key: Optional[int]) -> bool:
        self._execute_system(editor, key)
        return False

    @abstractmethod
    def _execute_system(self, editor: 'Editor', key: Optional[int]):
        """Perform the system action."""


class SetMarkCommand(SystemCommand):
    def _execute_system(self, editor, key):
        editor.buffer.set_mark()
        editor.message("Mark set.")


class ExchangeMarkCommand(SystemCommand):
    def _execute_system(self, editor, key):
        editor.buffer.exchange_mark()


class CancelCommand(SystemCommand):
    """Do nothing, but cancel the selection if any."""

    def _execute_system(self, editor, key):
        editor.buffer.clear_mark()


class RedisplayCommand(SystemCommand):
    def _execute_system(self, editor, key):
        editor.full_redisplay()


def find_in_buffer(buf: TextBuffer, pattern: str, skip: int = 1) -> bool:
    """Move the cursor to the next occurrence of pattern (plain, case sensitive).

    The search starts ``skip`` characters after the cursor. The cursor is
    left unchanged if the pattern is not found.
    """
    start = buf.cj - 1 + skip
    for i in range(buf.ci, buf.line_count + 1):
        j = buf.get_line(i).find(pattern, start)
        if j >= 0:
            buf.set_cursor(i, j + 1)
            return True
        start = 0
    return False


class SearchCommand(SystemCommand):
    def _execute_system(self, editor, key):
        pattern = editor.read_string("Search: ")
        if not pattern:
            editor.message("aborted.")
            return
        editor.pattern = pattern
        SearchAgainCommand().execute(editor, key)


class SearchAgainCommand(SystemCommand):
    def _execute_system(self, editor, key):
        if not editor.pattern:
            editor.message("no string to search")
            return
        if find_in_buffer(editor.buffer, editor.pattern):
            editor.message("found!")
        else:
            editor.message("not found")


class ReplaceAgainCommand(EditCommand):
    """Replace occurrences of editor.pattern, asking for each one."""

    def _edit(self, editor, buf, key):
        if not editor.pattern:
            editor.message("no string to search")
            return False
        pattern, replacement = editor.pattern, editor.replacement or ""
        count = 0
        replace_all = False
        skip = 0 if buf.get_line()[buf.cj - 1:].startswith(pattern) else 1
        while find_in_buffer(buf, pattern, skip):
            if not replace_all:
                editor.redisplay()
                ch = editor.read_char("replace? (q)uit (y)es (n)o (a)ll (^G) ", "[anqy]")
                if ch is None or ch == "q":
                    break
                if ch == "n":
                    skip = 1
                    continue
                replace_all = ch == "a"
            buf.delete(buf.ci, buf.cj + len(pattern))
            if replacement:
                buf.insert([replacement])
            count += 1
            skip = 0
        editor.message(f"replaced {count} instance(s)")
        return count > 0


class ReplaceCommand(SystemCommand):
    def _execute_system(self, editor, key):
        pattern = editor.read_string("Search: ")
        if not pattern:
            editor.message("aborted.")
            return
        replacement = editor.read_string("Replace with: ")
        if replacement is None:
            editor.message("aborted.")
            return
        editor.pattern, editor.replacement = pattern, replacement
        ReplaceAgainCommand().execute(editor, key)


class QuitCommand(SystemCommand):
    def _execute_system(self, editor, key):
        editor.quit = True


class ExitCommand(SystemCommand):
    """Quit, asking for confirmation if some buffers are not saved."""

    def _execute_system(self, editor, key):
        if editor.buffers.any_unsaved():
            ch = editor.read_char("Some buffers not saved. Quit? ", "[YNQynq\r\n]")
            if ch not in ("y", "Y"):
                editor.message("aborted.")
                return
        editor.quit = True
        editor.message("exiting.")


class NewBufferCommand(SystemCommand):
    def _execute_system(self, editor, key):
        editor.new_buffer()


class NextBufferCommand(SystemCommand):
    def _execute_system(self, editor, key):
        editor.switch_buffer(1)


class PreviousBufferCommand(SystemCommand):
    def _execute_system(self, editor, key):
        editor.switch_buffer(-1)


class FindFileCommand(SystemCommand):
    def _execute_system(self, editor, key):
        filename = editor.read_string("Open file: ")
        if not filename:
            editor.message("")
            return
        try:
            lines = read_lines(filename)
        except (OSError, InvalidEncoding) as e:
            logger.warning(f"Could not open {filename}: {e}")
            editor.message(str(e))
            return
        editor.new_buffer(lines, filename)


class WriteFileCommand(SystemCommand):
    def _execute_system(self, editor, key):
        filename = editor.read_string("Write to file: ")
        if not filename:
            editor.message("Aborted.")
            return
        editor.write_buffer(filename)


class SaveFileCommand(SystemCommand):
    def _execute_system(self, editor, key):
        if editor.buffer.filename:
            editor.write_buffer(editor.buffer.filename)
        else:
            WriteFileCommand().execute(editor, key)


class MacroStartCommand(SystemCommand):
    recordable = False

    def _execute_system(self, editor, key):
        editor.macro.start()
        editor.message("Recording macro.")


class MacroStopCommand(SystemCommand):
    recordable = False

    def _execute_system(self, editor, key):
        editor.macro.stop()


class MacroPlayCommand(SystemCommand):
    recordable = False

    def _execute_system(self, editor, key):
        macro = editor.macro
        if not macro.steps:
            editor.message("no macro defined!")
            return
        if macro.recording:
            macro.reset()
            editor.message("Cannot play while recording. Aborted.")
            return
        for command, step_key in list(macro.steps):
            command.execute(editor, step_key)
            editor.last_command = command


class HelpCommand(SystemCommand):
    def _execute_system(self, editor, key):
        editor.show_help()


class CommandRegistry:
    """Registry for mapping keys and prefix key sequences to commands."""

    PREFIX_KEYS = (CTRL_X, ESC)

    def __init__(self):
        self._commands: Dict[KeyBinding, EditorCommand] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default command mappings."""
        # Movement commands
        self.register(ctrl('a'), BeginningOfLineCommand())
        self.register(Key.HOME, BeginningOfLineCommand())
        self.register(ctrl('e'), EndOfLineCommand())
        self.register(Key.END, EndOfLineCommand())
        self.register(ctrl('b'), LeftCharCommand())
        self.register(Key.LEFT, LeftCharCommand())
        self.register(ctrl('f'), RightCharCommand())
        self.register(Key.RIGHT, RightCharCommand())
        self.register(ctrl('p'), UpLineCommand())
        self.register(Key.UP, UpLineCommand())
        self.register(ctrl('n'), DownLineCommand())
        self.register(Key.DOWN, DownLineCommand())
        self.register(Key.PAGE_UP, PageUpCommand())
        self.register(Key.PAGE_DOWN, PageDownCommand())
        self.register((ESC, ord('<')), BeginningOfBufferCommand())
        self.register((ESC, ord('>')), EndOfBufferCommand())

        # Selection
        self.register(0, SetMarkCommand())  # ^@ / ^space
        self.register(ctrl('g'), CancelCommand())
        self.register((ESC, ctrl('g')), CancelCommand())
        self.register((CTRL_X, ctrl('g')), CancelCommand())
        self.register((CTRL_X, ctrl('x')), ExchangeMarkCommand())

        # Editing commands
        self.register(CR, InsertNewlineCommand())
        self.register(ctrl('j'), InsertNewlineCommand())
        self.register(TAB, TabCommand())
        self.register(ctrl('d'), DeleteCharCommand())
        self.register(Key.DELETE, DeleteCharCommand())
        self.register(ctrl('h'), BackspaceCommand())
        self.register(DEL, BackspaceCommand())
        self.register(ctrl('k'), KillCommand())
        self.register((ESC, ord('k')), KillLineCommand())
        self.register(ctrl('w'), WipeCommand())
        self.register(ctrl('y'), YankCommand())
        self.register(ctrl('z'), UndoCommand())
        self.register((ESC, ord('z')), RedoCommand())

        # Search and replace
        self.register(ctrl('s'), SearchCommand())
        self.register(ctrl('r'), SearchAgainCommand())
        self.register((ESC, ord('5')), ReplaceCommand())
        self.register((ESC, ord('7')), ReplaceAgainCommand())

        # Files and buffers
        self.register((CTRL_X, ctrl('f')), FindFileCommand())
        self.register((CTRL_X, ctrl('w')), WriteFileCommand())
        self.register((CTRL_X, ctrl('s')), SaveFileCommand())
        self.register((CTRL_X, ctrl('b')), NewBufferCommand())
        self.register((CTRL_X, ctrl('n')), NextBufferCommand())
        self.register((CTRL_X, ctrl('p')), PreviousBufferCommand())

        # Macros
        self.register((CTRL_X, ord('(')), MacroStartCommand())
        self.register((CTRL_X, ord(')')), MacroStopCommand())
        self.register((CTRL_X, ord('e')), MacroPlayCommand())
        self.register(0x1D, MacroPlayCommand())  # ^]
        self.register(ctrl('o'), MacroPlayCommand())

        # System commands
        self.register(ctrl('q'), QuitCommand())
        self.register((CTRL_X, ctrl('c')), ExitCommand())
        self.register(ctrl('l'), RedisplayCommand())
        self.register(Key.F1, HelpCommand())
        self.register((CTRL_X, ctrl('h')), HelpCommand())
        self.register((ESC, ord('1')), HelpCommand())

    def register(self, key: KeyBinding, command: EditorCommand):
        """Register a command for a key or a (prefix, key) sequence."""
        self._commands[key] = command

    def is_prefix(self, key: int) -> bool:
        return key in self.PREFIX_KEYS

    def get_command(self, key: KeyBinding) -> Optional[EditorCommand]:
        """Get the command bound to a key or key sequence."""
        return self._commands.get(key)
