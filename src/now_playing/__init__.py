"""Now playing panel for terminal music players."""

__version__ = "0.1.0"
