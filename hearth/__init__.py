"""hearth: resident command launcher."""

__version__ = "0.1.0"
