"""
Exception hierarchy for ajaxview.

Every error delivered to a session callback is an instance of
AjaxViewError, so callers can tell engine failures apart from bugs
in their own code.
"""


class AjaxViewError(Exception):
    """Base exception for all ajaxview errors."""


class EngineLoadError(AjaxViewError):
    """
    Navigation or network failure reported by the rendering engine.

    Attributes:
        description: Engine-provided description (e.g. "net::ERR_TIMED_OUT")
        url: URL that failed to load, if known
    """

    def __init__(self, description, url=None):
        self.description = description
        self.url = url
        super().__init__(description)


class EngineCreationError(AjaxViewError):
    """Raised when a browser view could not be constructed."""


class ScriptEvaluationError(AjaxViewError):
    """Raised when the rendered document could not be serialized."""


class ConfigurationError(AjaxViewError):
    """Raised for invalid session configuration values."""


class SessionClosedError(AjaxViewError):
    """Raised when a closed session is asked to load a request."""


class SniffTimeoutError(AjaxViewError):
    """Raised when no resource matched the sniff pattern in time."""
