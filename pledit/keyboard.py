"""Keyboard input decoding from a raw terminal byte stream."""

from enum import Enum, IntEnum
from typing import Callable, Iterator, Optional

ESC = 0x1B
DEL = 0x7F  # sent by the Backspace key on most terminals
TAB = 0x09
CR = 0x0D

_LBR = ord("[")
_LETO = ord("O")
_TIL = ord("~")

# First code above the Unicode range; special keys never collide with text
SPECIAL_BASE = 0x110000


class Key(IntEnum):
    """Codes for non-character keys, all outside the Unicode codepoint range."""
    UNKNOWN = SPECIAL_BASE
    F1 = SPECIAL_BASE + 1
    F2 = SPECIAL_BASE + 2
    F3 = SPECIAL_BASE + 3
    F4 = SPECIAL_BASE + 4
    F5 = SPECIAL_BASE + 5
    F6 = SPECIAL_BASE + 6
    F7 = SPECIAL_BASE + 7
    F8 = SPECIAL_BASE + 8
    F9 = SPECIAL_BASE + 9
    F10 = SPECIAL_BASE + 10
    F11 = SPECIAL_BASE + 11
    F12 = SPECIAL_BASE + 12
    INSERT = SPECIAL_BASE + 13
    DELETE = SPECIAL_BASE + 14
    HOME = SPECIAL_BASE + 15
    END = SPECIAL_BASE + 16
    PAGE_UP = SPECIAL_BASE + 17
    PAGE_DOWN = SPECIAL_BASE + 18
    UP = SPECIAL_BASE + 19
    DOWN = SPECIAL_BASE + 20
    LEFT = SPECIAL_BASE + 21
    RIGHT = SPECIAL_BASE + 22


class KeyType(Enum):
    """Types of key codes."""
    REGULAR = "regular"
    CTRL = "ctrl"
    SPECIAL = "special"


# Escape sequences, without the leading ESC
SEQUENCES: dict[bytes, Key] = {
    b"[A": Key.UP,
    b"[B": Key.DOWN,
    b"[C": Key.RIGHT,
    b"[D": Key.LEFT,
    b"OA": Key.UP,  # application mode
    b"OB": Key.DOWN,
    b"OC": Key.RIGHT,
    b"OD": Key.LEFT,

    b"[2~": Key.INSERT,
    b"[3~": Key.DELETE,
    b"[5~": Key.PAGE_UP,
    b"[6~": Key.PAGE_DOWN,
    b"[7~": Key.HOME,  # rxvt
    b"[8~": Key.END,  # rxvt
    b"[1~": Key.HOME,  # linux
    b"[4~": Key.END,  # linux
    b"[11~": Key.F1,
    b"[12~": Key.F2,
    b"[13~": Key.F3,
    b"[14~": Key.F4,
    b"[15~": Key.F5,
    b"[17~": Key.F6,
    b"[18~": Key.F7,
    b"[19~": Key.F8,
    b"[20~": Key.F9,
    b"[21~": Key.F10,
    b"[23~": Key.F11,
    b"[24~": Key.F12,

    b"OP": Key.F1,  # xterm
    b"OQ": Key.F2,
    b"OR": Key.F3,
    b"OS": Key.F4,
    b"[H": Key.HOME,  # xterm
    b"[F": Key.END,
    b"OH": Key.HOME,  # application mode
    b"OF": Key.END,

    b"[[A": Key.F1,  # linux console
    b"[[B": Key.F2,
    b"[[C": Key.F3,
    b"[[D": Key.F4,
    b"[[E": Key.F5,
}


def _is_param(c: int) -> bool:
    """Return True for a digit or ';'."""
    return 0x30 <= c <= 0x39 or c == 0x3B


def _utf8_length(lead: int) -> int:
    """Return the byte length announced by a UTF-8 lead byte (0 if invalid)."""
    if lead < 0x80:
        return 1
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


class KeyDecoder:
    """Turns a blocking byte source into a stream of key codes.

    ``read_byte`` returns one byte as an int, or None at end of input.
    Iterating the decoder yields plain codepoints for characters (0-31 are
    control keys, 127 is the Backspace key) and ``Key`` members for special
    keys. Bytes that do not form a known sequence are re-emitted one by one;
    nothing is ever dropped.
    """

    def __init__(self, read_byte: Callable[[], Optional[int]]):
        self._read_byte = read_byte
        self._pending: list[int] = []
        self._keys = self._decode()

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        return next(self._keys)

    def next_key(self) -> Optional[int]:
        """Block until the next key is decoded; None once input is exhausted."""
        return next(self._keys, None)

    def _read(self) -> Optional[int]:
        if self._pending:
            return self._pending.pop(0)
        return self._read_byte()

    def _unread(self, c: int):
        self._pending.insert(0, c)

    def _char(self, lead: int) -> Iterator[int]:
        """Decode one character starting with lead, reading continuation bytes."""
        n = _utf8_length(lead)
        if n == 1:
            yield lead
            return
        if n == 0:
            # Stray continuation or invalid lead byte
            yield lead
            return
        seq = [lead]
        while len(seq) < n:
            c = self._read()
            if c is None:
                yield from seq
                return
            if c & 0xC0 != 0x80:
                # Truncated character; rescan the offending byte as new input
                self._unread(c)
                yield from seq
                return
            seq.append(c)
        try:
            yield ord(bytes(seq).decode("utf-8"))
        except UnicodeDecodeError:
            # Overlong forms and surrogates
            yield from seq

    def _decode(self) -> Iterator[int]:
        while True:
            c = self._read()
            if c is None:
                return
            if c != ESC:
                yield from self._char(c)
                continue
            c1 = self._read()
            if c1 is None:
                yield ESC
                return
            if c1 == ESC:
                # esc esc [ ... sequence
                yield ESC
                c1 = self._read()
                if c1 is None:
                    yield ESC
                    return
            if c1 != _LBR and c1 != _LETO:
                yield ESC
                yield from self._char(c1)
                continue
            s = bytearray([c1])
            c2 = self._read()
            if c2 is None:
                yield ESC
                yield from s
                return
            s.append(c2)
            if c2 == _LBR:
                # esc [ [ x sequences (F1-F5 in linux console)
                c3 = self._read()
                if c3 is None:
                    yield ESC
                    yield from s
                    return
                s.append(c3)
            key = SEQUENCES.get(bytes(s))
            if key is not None:
                yield key
                continue
            if not _is_param(c2):
                yield ESC
                yield from s
                continue
            while True:
                ci = self._read()
                if ci is None:
                    yield ESC
                    yield from s
                    return
                s.append(ci)
                if ci == _TIL:
                    # Valid sequence; report it even if we do not know it
                    yield SEQUENCES.get(bytes(s), Key.UNKNOWN)
                    break
                if not _is_param(ci):
                    # Not a valid sequence: return all the bytes
                    yield ESC
                    yield from s
                    break


def key_type(code: int) -> KeyType:
    """Classify a key code."""
    if code >= SPECIAL_BASE:
        return KeyType.SPECIAL
    if code < 32 or code == DEL:
        return KeyType.CTRL
    return KeyType.REGULAR


def key_name(code: int) -> str:
    """Return a short printable name for a key code."""
    if code >= SPECIAL_BASE:
        try:
            return Key(code).name.lower()
        except ValueError:
            return hex(code)
    if code == ESC:
        return "esc"
    if code == DEL:
        return "del"
    if code < 32:
        return "^" + chr(code + 64)
    return chr(code)


def create_key_decoder(terminal_interface) -> KeyDecoder:
    """Factory function to create a decoder reading from a terminal.

    Args:
        terminal_interface: TerminalInterface instance

    Returns:
        KeyDecoder instance
    """
    return KeyDecoder(terminal_interface.read_byte)
