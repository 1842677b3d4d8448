"""Generate Homebrew casks and formulas for Linux from GitHub releases."""

__version__ = "0.1.0"
