"""Exceptions raised by the text buffer and the file layer."""


class EditorError(Exception):
    """Base class for recoverable editor failures.

    The action layer catches these and shows the message on the
    message line; the buffer is left unchanged.
    """


class InvalidEncoding(EditorError, ValueError):
    """A text fragment or a file line is not valid UTF-8."""


class NothingToUndo(EditorError):
    """The undo pointer is already at the start of the log."""

    def __init__(self, message: str = "nothing to undo!"):
        super().__init__(message)


class NothingToRedo(EditorError):
    """The undo pointer is already at the end of the log."""

    def __init__(self, message: str = "nothing to redo!"):
        super().__init__(message)


class PreconditionViolation(AssertionError):
    """A caller broke an operation contract (e.g. deleting backwards).

    This is a programming error in the calling layer. It is not an
    EditorError and is never turned into a user message.
    """
