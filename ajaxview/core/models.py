#!/usr/bin/env python3
"""
Request and outcome models.

RequestParameters describes a single fetch and never changes after it
is built. Success and Failure are the two terminal outcomes a request
can produce.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class RequestMethod(Enum):
    GET = "GET"
    POST = "POST"


@dataclass(frozen=True)
class RequestParameters:
    """
    Description of one page fetch.

    A non-empty ``sniff_pattern`` selects sniff mode: the request succeeds
    with the first resource URL that fully matches the pattern. Without it
    the request succeeds with the rendered document HTML.

    Attributes:
        tag: Identifier used as the cookie store key
        url: URL to load
        method: GET or POST
        post_body: Body sent with POST requests
        headers: Extra request headers, in order
        cookie_sink: Optional store receiving the page cookies after load
        sniff_pattern: Regular expression matched against resource URLs
        post_load_script: Script run once after the first page load (sniff mode)
    """

    tag: str
    url: str
    method: RequestMethod = RequestMethod.GET
    post_body: Optional[bytes] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    cookie_sink: Optional[Any] = None
    sniff_pattern: Optional[str] = None
    post_load_script: Optional[str] = None

    def __post_init__(self):
        if not self.url:
            raise ValueError("A URL is required")
        if isinstance(self.method, str):
            object.__setattr__(self, "method", RequestMethod(self.method.upper()))
        if self.method is RequestMethod.POST and self.post_body is None:
            raise ValueError("POST requests need a post_body")
        if isinstance(self.post_body, str):
            object.__setattr__(self, "post_body", self.post_body.encode("utf-8"))
        # Copy so later changes to the caller's mapping are not seen
        object.__setattr__(self, "headers", dict(self.headers or {}))
        if self.sniff_pattern:
            try:
                object.__setattr__(self, "_regex", re.compile(self.sniff_pattern))
            except re.error as e:
                raise ValueError(f"Invalid sniff pattern {self.sniff_pattern!r}: {e}")

    @property
    def user_agent(self) -> Optional[str]:
        for name, value in self.headers.items():
            if name.lower() == "user-agent":
                return value
        return None

    @property
    def is_sniff(self) -> bool:
        return bool(self.sniff_pattern)

    @property
    def has_script(self) -> bool:
        return bool(self.post_load_script)

    def matches(self, url: str) -> bool:
        """Return True if the whole of ``url`` matches the sniff pattern."""
        if not self.is_sniff:
            return False
        return self._regex.fullmatch(url) is not None

    def set_cookie(self, cookie: Optional[str]) -> bool:
        """
        Forward a cookie header value to the configured sink.

        Returns:
            bool: True if a sink was configured and received the cookie
        """
        if self.cookie_sink is None or not cookie:
            return False
        self.cookie_sink.set_cookie(self.tag, cookie)
        return True


@dataclass(frozen=True)
class Success:
    """Terminal outcome carrying the page HTML or the matched URL."""

    payload: str


@dataclass(frozen=True)
class Failure:
    """Terminal outcome carrying the error that ended the request."""

    error: BaseException
