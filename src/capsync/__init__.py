"""capsync - capture-to-sync orchestration for a single device."""

__version__ = "0.1.0"
