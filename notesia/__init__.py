"""Timer list persistence and keypad time entry."""

__version__ = "0.1.0"
