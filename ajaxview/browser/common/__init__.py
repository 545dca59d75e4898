"""
Common rendering engine interfaces.

This package contains the interfaces shared by all engine
implementations.
"""

from .interface import (CertificateWarning, CookieSink, Engine, EngineFactory,
                        MixedContentPolicy, ViewSettings, WebView,
                        WebViewClient)

__all__ = [
    "CertificateWarning",
    "CookieSink",
    "Engine",
    "EngineFactory",
    "MixedContentPolicy",
    "ViewSettings",
    "WebView",
    "WebViewClient",
]
