"""
Naming helpers for deriving table names from class names.
"""

from __future__ import annotations

import re

_UPPER_AFTER_WORD = re.compile(r"(?<=\w)([A-Z])")


def short_name(type_name: str) -> str:
    """Strip module qualification: ``"app.models.BlogPost"`` -> ``"BlogPost"``."""
    return type_name.rsplit(".", 1)[-1]


def tableize(word: str) -> str:
    """
    Convert a CamelCase class name to a lower snake_case table name.

    No pluralization happens: ``BlogPost`` becomes ``blog_post``. Every
    uppercase letter that follows a word character gets its own underscore,
    so acronyms are split letter by letter (``HTTPLog`` -> ``h_t_t_p_log``).
    """
    return _UPPER_AFTER_WORD.sub(r"_\1", word).lower()


__all__ = ["short_name", "tableize"]
