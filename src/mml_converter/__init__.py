"""MML markup parser with HTML and Word renderers."""

__version__ = "0.1.0"
