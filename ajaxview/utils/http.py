#!/usr/bin/env python3
"""
HTTP helpers for headers and cookies.

This module contains functions for turning engine cookie jars into raw
Cookie header values and for parsing header arguments.
"""


def format_cookie_header(cookies):
    """
    Build a Cookie header value from a list of cookie records.

    Args:
        cookies: Iterable of dicts with 'name' and 'value' keys

    Returns:
        str: "name=value; name2=value2", or None if there are no cookies
    """
    pairs = [
        f"{cookie['name']}={cookie['value']}"
        for cookie in cookies
        if cookie.get("name")
    ]
    if not pairs:
        return None
    return "; ".join(pairs)


def parse_header(header):
    """
    Split a "Name: Value" header string.

    Args:
        header: Header line

    Returns:
        tuple: (name, value)

    Raises:
        ValueError: If the line has no colon or an empty name
    """
    name, sep, value = header.partition(":")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"Invalid header {header!r}, expected 'Name: Value'")
    return name, value.strip()
