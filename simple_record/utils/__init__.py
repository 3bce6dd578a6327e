"""
Utilities package for SimpleRecord.

Exports shared helpers for logging and naming. Keep this package lightweight
and free of database concerns.
"""

from simple_record.utils.inflector import short_name, tableize
from simple_record.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "short_name",
    "tableize",
]
