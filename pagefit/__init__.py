"""pagefit - HTML to PDF/PNG rendering that fits content to paper."""

__version__ = "0.1.0"
