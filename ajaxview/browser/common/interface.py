#!/usr/bin/env python3
"""
Rendering engine interface definition module.

This module defines the abstract base classes and protocols that
standardize the interface between the session core and the rendering
engine that actually loads pages (Playwright, or a fake in tests).

The engine is treated as an opaque capability: it can create views,
load URLs into them, evaluate scripts and report what happens through
a WebViewClient. Client callbacks may be invoked on any thread.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Protocol


class MixedContentPolicy(Enum):
    """How a view treats insecure sub-resources on secure pages."""

    ALWAYS_ALLOW = "always_allow"
    NEVER_ALLOW = "never_allow"


@dataclass(frozen=True)
class ViewSettings:
    """Settings applied to a view when it is created."""

    user_agent: Optional[str] = None
    scripting_enabled: bool = True
    dom_storage_enabled: bool = True
    image_loading_disabled: bool = True
    mixed_content_policy: MixedContentPolicy = MixedContentPolicy.ALWAYS_ALLOW
    ignore_certificate_errors: bool = True
    page_load_timeout: int = 30000


class CookieSink(Protocol):
    """Protocol for the external cookie store fed after each page load."""

    def set_cookie(self, tag: str, cookie: str) -> None:
        """Store the raw Cookie header value collected for ``tag``."""
        ...


class CertificateWarning(ABC):
    """A certificate validation problem awaiting a decision."""

    def __init__(self, url: str, description: str = ""):
        self.url = url
        self.description = description

    @abstractmethod
    def proceed(self) -> None:
        """Continue loading despite the warning."""
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Abort the load that raised the warning."""
        pass


class WebViewClient:
    """
    Receiver of raw engine events for one view.

    All methods default to no-ops; engines may call them from their own
    threads.
    """

    def on_load_finished(self, url: str) -> None:
        pass

    def on_load_error(self, description: str, url: Optional[str] = None) -> None:
        pass

    def on_resource(self, url: str) -> None:
        pass

    def on_certificate_warning(self, warning: CertificateWarning) -> None:
        warning.cancel()


class WebView(ABC):
    """Abstract base class for a single rendering engine instance."""

    @abstractmethod
    def load_url(self, url: str, headers: Mapping[str, str]) -> None:
        """Start a GET navigation to ``url`` with extra request headers."""
        pass

    @abstractmethod
    def post_url(self, url: str, body: bytes) -> None:
        """Start a POST navigation to ``url`` sending ``body``."""
        pass

    @abstractmethod
    def evaluate_script(self, script: str) -> "Future[str]":
        """Evaluate JavaScript in the page; the future holds the JSON-encoded result."""
        pass

    @abstractmethod
    def get_cookie(self, url: str) -> Optional[str]:
        """Return the Cookie header value the view would send to ``url``."""
        pass

    @abstractmethod
    def destroy(self) -> None:
        """Close the view and release its resources."""
        pass


class Engine(ABC):
    """Abstract base class for rendering engines."""

    @abstractmethod
    def create_view(self, settings: ViewSettings, client: WebViewClient) -> WebView:
        """
        Create a new view reporting its events to ``client``.

        Raises:
            EngineCreationError: If the view could not be constructed
        """
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """Release everything the engine still holds."""
        pass


class EngineFactory:
    """Factory class for creating engine instances."""

    @staticmethod
    def create(
        engine: str = "playwright",
        headless: bool = True,
        type: str = "chromium",
        **kwargs: Any
    ) -> Engine:
        """
        Create a rendering engine of the specified kind.

        Args:
            engine: Engine to use (only 'playwright' is available)
            headless: Whether to run in headless mode
            type: Browser type to use ('chromium', 'chrome', 'webkit', 'firefox')
            **kwargs: Additional engine-specific options

        Returns:
            Engine: An instance implementing the Engine interface
        """
        if engine.lower() == "playwright":
            from ..playwright.driver import PlaywrightEngine
            return PlaywrightEngine(headless=headless, browser_type=type, **kwargs)
        raise ValueError(f"Unsupported engine: {engine}")
