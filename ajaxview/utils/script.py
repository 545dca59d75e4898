#!/usr/bin/env python3
"""
Script evaluation result handling.

Engines hand back evaluation results JSON-encoded, the way a browser
bridge transports them. The helpers here turn that transport form back
into the plain string the page produced.
"""

import json
import re

# Serializes the full rendered document
OUTER_HTML_SCRIPT = "document.documentElement.outerHTML"

_ESCAPE_RE = re.compile(r'\\(u[0-9a-fA-F]{4}|["\\/bfnrt])')

_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def _replace_escape(match):
    seq = match.group(1)
    if seq.startswith("u"):
        return chr(int(seq[1:], 16))
    return _SIMPLE_ESCAPES[seq]


def unescape_script_result(raw):
    """
    Undo the string-literal escaping added by the evaluation transport.

    Args:
        raw: Result as returned by the engine

    Returns:
        str: The unescaped string ("" for null/undefined results)
    """
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raw = str(raw)

    text = raw.strip()
    if text in ("null", "undefined"):
        return ""

    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        try:
            decoded = json.loads(text)
        except ValueError:
            decoded = None
        if isinstance(decoded, str):
            return decoded
        # Not valid JSON, unescape what is inside the quotes
        raw = text[1:-1]

    return _ESCAPE_RE.sub(_replace_escape, raw)
