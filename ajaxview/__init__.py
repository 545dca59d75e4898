"""
ajaxview package.

This package drives a headless browser to retrieve dynamically rendered
page content, or to sniff the URL of a resource the page requests, and
reports exactly one result per load.
"""

__version__ = "1.0.0"

from .core.config import SessionConfig
from .core.models import Failure, RequestMethod, RequestParameters, Success
from .core.session import AjaxSession, Callback, fetch
from .exceptions import (AjaxViewError, ConfigurationError, EngineCreationError,
                         EngineLoadError, ScriptEvaluationError,
                         SessionClosedError, SniffTimeoutError)

__all__ = [
    "AjaxSession",
    "Callback",
    "fetch",
    "SessionConfig",
    "RequestMethod",
    "RequestParameters",
    "Success",
    "Failure",
    "AjaxViewError",
    "ConfigurationError",
    "EngineCreationError",
    "EngineLoadError",
    "ScriptEvaluationError",
    "SessionClosedError",
    "SniffTimeoutError",
]
