"""gitwork — named Git workflows on top of the git and gh command lines."""

__version__ = "0.1.0"
