"""pledit CLI entry point.

Allows running via `python -m pledit` and provides the console script
defined in `pyproject.toml`.

Usage: pledit [--version] [--keytest] [--log-file PATH] [FILE...]
"""

from __future__ import annotations

import logging
import sys
import traceback

from .version import get_version_string

USAGE = "usage: pledit [--version] [--keytest] [--log-file PATH] [FILE...]"

CTRL_Q = 0x11


def run_keyboard_test() -> None:
    """Print the codes produced by the key decoder, one per line.

    The tty is in raw mode, so ^C and ^S arrive as keys. Quit with ^Q.
    """
    from .keyboard import create_key_decoder, key_name, key_type
    from .terminal import TerminalInterface

    print("Keyboard test mode: press keys to see decoded codes.")
    print("Quit with ^Q.")

    term = TerminalInterface()
    decoder = create_key_decoder(term)
    with term.raw():
        for code in decoder:
            # Raw mode: no output post-processing, so return explicitly
            print(f"code={code:#x} type={key_type(code).value} name={key_name(code)}", end="\r\n")
            sys.stdout.flush()
            if code == CTRL_Q:
                break
    print("Exiting keyboard test.")


def parse_args(args: list[str]) -> tuple[dict, list[str]]:
    """Parse the command line into options and file names.

    Raises ValueError on a bad option.
    """
    options = {"version": False, "keytest": False, "log_file": None}
    files = []
    it = iter(args)
    for arg in it:
        if arg in ("--version", "-V"):
            options["version"] = True
        elif arg in ("--keytest", "--keyboard-test"):
            options["keytest"] = True
        elif arg == "--log-file":
            options["log_file"] = next(it, None)
            if options["log_file"] is None:
                raise ValueError("--log-file needs a path")
        elif arg.startswith("--log-file="):
            options["log_file"] = arg.split("=", 1)[1]
        elif arg == "--":
            files.extend(it)
        elif arg.startswith("-") and arg != "-":
            raise ValueError(f"unknown option {arg}")
        else:
            files.append(arg)
    return options, files


def setup_logging(log_file: str | None) -> None:
    """Send log records to log_file, or nowhere (the screen belongs to the editor)."""
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger("pledit").addHandler(logging.NullHandler())


def main() -> int:
    try:
        options, files = parse_args(sys.argv[1:])
    except ValueError as e:
        print(f"pledit: {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 2
    if options["version"]:
        print(get_version_string())
        return 0

    # Lazy imports to avoid loading the terminal stack for --version
    from .config import load_config
    from .errors import EditorError

    config = load_config()
    setup_logging(options["log_file"] or config.log_file)
    if options["keytest"]:
        run_keyboard_test()
        return 0

    from .editor import Editor

    editor = Editor(config=config)
    try:
        editor.run(files)
    except (EditorError, OSError) as e:
        # Files named on the command line could not be opened
        print(f"pledit: {e}", file=sys.stderr)
        return 1
    except Exception:
        # The terminal has been restored by the session; show the crash
        logging.getLogger("pledit").exception("Editor crashed")
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
