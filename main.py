#!/usr/bin/env python3
"""pledit - A small terminal text editor.

Usage:
    python main.py [filename ...]

Controls:
    F1, ^X^H or esc-1: Help buffer
    ^X^S: Save file
    ^X^C: Exit (asks if buffers are not saved)
    ^Q: Quit immediately
    Type to insert text
"""

import sys

from pledit.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
