"""Portal core: user directory, in-memory sessions, configuration and logging."""

__version__ = "1.0.0"
