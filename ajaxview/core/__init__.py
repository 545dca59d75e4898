"""
Core module containing the session machinery.

This package contains the request models, the dispatcher that
serializes engine events, the page observers and the public session.
"""

from .config import SessionConfig
from .dispatcher import Dispatcher, RequestState
from .handle import BrowserHandle
from .models import Failure, RequestMethod, RequestParameters, Success
from .observers import PageLoadObserver, ResourceSniffObserver
from .session import AjaxSession, Callback, fetch

__all__ = [
    "AjaxSession",
    "BrowserHandle",
    "Callback",
    "Dispatcher",
    "Failure",
    "PageLoadObserver",
    "RequestMethod",
    "RequestParameters",
    "RequestState",
    "ResourceSniffObserver",
    "SessionConfig",
    "Success",
    "fetch",
]
