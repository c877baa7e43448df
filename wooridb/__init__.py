"""Log lines, data files, result shaping and set relations for a time-travel document database."""

__version__ = "0.1.0"