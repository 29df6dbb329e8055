"""Configuration constants and defaults for twotone."""

import os

# Default Theme Pair, used when no config file is given.
# Override via TWOTONE_LIGHT_THEME / TWOTONE_DARK_THEME / TWOTONE_DEFAULT_COLOR
DEFAULT_LIGHT_THEME = os.getenv("TWOTONE_LIGHT_THEME", "default")
DEFAULT_DARK_THEME = os.getenv("TWOTONE_DARK_THEME", "github-dark")
DEFAULT_COLOR = os.getenv("TWOTONE_DEFAULT_COLOR", "light")

# Worker bound for the highlight stage
MAX_WORKERS = max(1, int(os.getenv("TWOTONE_WORKERS", str(os.cpu_count() or 4))))

# Development builds skip the highlight stage entirely
DEV_MODE = os.getenv("TWOTONE_DEV", "").strip().lower() in {"1", "true", "yes"}

# Files the post-processor rewrites
HTML_SUFFIXES = (".html", ".htm")

# Attribute stamped on processed <pre>/<code> elements
MARKER_ATTR = "data-twotone"

# Class added to processed <pre> elements
PRE_CLASS = "twotone"

# Root-level class selecting the dark palette
MARKER_CLASS = "dark"

# localStorage key for the persisted color-scheme preference
STORAGE_KEY = "twotone-color-scheme"

# Language tags that mean "do not highlight" (no warning)
PLAIN_LANGUAGES = frozenset({"text", "plain", "plaintext", "txt", "nohighlight", "none"})

# Stylesheet written by the compile-styles stage
STYLESHEET_NAME = "styles.css"
