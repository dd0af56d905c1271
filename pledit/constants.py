"""Constants and configuration for the pledit editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    # Display
    TAB_WIDTH = 8  # Tab stops every 8 columns
    HSCROLL_STEP = 40  # Horizontal scroll moves by whole pages of this many columns
    EOL_MARKER = "»"  # », more undisplayed characters on this line
    NDC_MARKER = "·"  # ·, stands in for a non-displayable character
    EOT_MARKER = "~"  # Row past the end of the text

    # Screen layout: status line on top, message line at the bottom
    STATUS_ROW = 1
    BOX_FIRST_ROW = 2
    MIN_BOX_HEIGHT = 3

    # Paging keeps this many lines of context
    PAGE_OVERLAP = 2

    # Help
    HELP_BUFFER_NAME = "*HELP*"
    INITIAL_MESSAGE = "Help: F1 or ^X^H or esc-1"

    # File operations
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files

    # Configuration
    CONFIG_ENV_VAR = "PLEDIT_CONFIG"
    LOCAL_CONFIG_NAME = "pledit.json"
    CONFIG_FILE_NAME = "config.json"
