"""Reading and writing documents.

A document is stored as UTF-8 text with a newline after every line,
including the last one.
"""

import logging
import os
import tempfile

from .constants import EditorConstants
from .errors import InvalidEncoding

logger = logging.getLogger(__name__)


def decode_lines(data: bytes, name: str = "<input>") -> list[str]:
    """Split raw file content into a list of lines.

    Raises InvalidEncoding naming the offending line if data is not UTF-8.
    An empty input gives a single empty line.
    """
    try:
        text = data.decode('utf-8')
    except UnicodeDecodeError as e:
        line_no = data.count(b'\n', 0, e.start) + 1
        raise InvalidEncoding(f"{name}: invalid UTF-8 sequence at line {line_no}") from e
    lines = text.split('\n')
    # The newline after the last line does not start a new line
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith('\r') else line for line in lines]


def read_lines(filename: str) -> list[str]:
    """Read a file as a list of lines.

    Args:
        filename: Path to the file.

    Returns:
        List of lines without newline characters.

    Raises:
        InvalidEncoding: if the file is not valid UTF-8.
        OSError: if the file cannot be read (FileNotFoundError for a new file).
    """
    with open(filename, 'rb') as f:
        data = f.read()
    lines = decode_lines(data, filename)
    logger.info("Read %d lines from %s", len(lines), filename)
    return lines


def encode_lines(lines: list[str]) -> bytes:
    return "".join(line + "\n" for line in lines).encode('utf-8')


def write_lines(filename: str, lines: list[str]) -> None:
    """Write lines to a file atomically.

    Args:
        filename: Path to the file.
        lines: Lines to write; each is followed by a newline.

    Raises:
        OSError: if the file cannot be written. The original file, if any,
        is left untouched.
    """
    dir_name = os.path.dirname(filename) or '.'
    # Write to a temporary file in the same directory so the rename is atomic
    with tempfile.NamedTemporaryFile(mode='wb', dir=dir_name,
                                     suffix=EditorConstants.ATOMIC_SAVE_SUFFIX,
                                     delete=False) as temp_file:
        temp_filename = temp_file.name
    try:
        with open(temp_filename, 'wb') as f:
            f.write(encode_lines(lines))
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_filename, filename)
    except OSError:
        logger.warning("Could not save %s", filename, exc_info=True)
        try:
            os.remove(temp_filename)
        except OSError:
            pass
        raise
    logger.info("Wrote %d lines to %s", len(lines), filename)
