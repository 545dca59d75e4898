"""
Utility modules for script results and HTTP header handling.

This package contains helpers for unescaping evaluation results,
formatting cookie headers and parsing header arguments.
"""

from .http import format_cookie_header, parse_header
from .script import OUTER_HTML_SCRIPT, unescape_script_result

__all__ = [
    "OUTER_HTML_SCRIPT",
    "unescape_script_result",
    "format_cookie_header",
    "parse_header",
]
