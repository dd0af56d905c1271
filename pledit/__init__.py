"""pledit - A small terminal text editor."""

from .errors import EditorError, InvalidEncoding, NothingToRedo, NothingToUndo
from .keyboard import Key, KeyDecoder
from .model import CursorPosition, TextBuffer
from .view import Box, Viewport

__all__ = [
    'TextBuffer',
    'CursorPosition',
    'KeyDecoder',
    'Key',
    'Viewport',
    'Box',
    'EditorError',
    'InvalidEncoding',
    'NothingToUndo',
    'NothingToRedo',
]
