"""Output sinks for exporting generated portfolios."""

from microloan.sinks.console import ConsoleSink
from microloan.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "JsonFileSink"]
