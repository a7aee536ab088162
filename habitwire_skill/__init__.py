"""HabitWire habit tracker CLI with lean JSON output."""

__version__ = "0.1.0"
