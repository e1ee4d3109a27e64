"""ATS resume optimizer backend."""

__version__ = "1.0.0"
