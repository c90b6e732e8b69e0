"""Convert structured log records into newline-delimited JSON."""

__version__ = "0.1.0"
