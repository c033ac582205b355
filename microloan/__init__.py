"""Microloan accounting: calendar, schedules, consolidation and payments."""

__version__ = "0.1.0"
