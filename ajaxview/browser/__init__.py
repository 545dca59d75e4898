"""
Browser module for rendering engine abstractions and implementations.

This package contains the engine interface the session core talks to
and the Playwright implementation of it.
"""

from .common.interface import (CertificateWarning, Engine, EngineFactory,
                               MixedContentPolicy, ViewSettings, WebView,
                               WebViewClient)

# Export the factory function for creating engines
create_engine = EngineFactory.create

__all__ = [
    "Engine",              # Abstract engine interface
    "WebView",             # Abstract view interface
    "WebViewClient",       # Receiver of view events
    "CertificateWarning",  # Certificate problem awaiting a decision
    "ViewSettings",        # Settings for new views
    "MixedContentPolicy",
    "create_engine",       # Factory function to create engines
]
