#!/usr/bin/env python3
"""
Session configuration module.

This module holds the tunables of a session: timing heuristics, the
certificate trust policy and the settings applied to every browser view.
"""

from dataclasses import asdict, dataclass
from typing import Optional

from ..browser.common.interface import MixedContentPolicy, ViewSettings
from ..browser.utils import get_random_user_agent
from ..exceptions import ConfigurationError

CERTIFICATE_POLICIES = ("proceed", "reject")
BROWSER_TYPES = ("chromium", "chrome", "firefox", "webkit")

NUMBER_FIELDS = ("settle_delay", "sniff_timeout", "page_load_timeout", "cookie_timeout")
STRING_FIELDS = ("certificate_policy", "engine", "browser_type", "user_agent")
FLAG_FIELDS = ("headless", "javascript_enabled", "dom_storage_enabled", "block_images", "allow_mixed_content")
OPTIONAL_FIELDS = ("sniff_timeout", "user_agent")


@dataclass
class SessionConfig:
    """
    Configuration class for ajaxview sessions.

    ``certificate_policy`` defaults to "proceed": pages with invalid
    certificates are still loaded. This is a deliberate trust trade-off for
    read-only content retrieval; use "reject" to fail such loads instead.
    """
    # Timing
    settle_delay: float = 1.0  # seconds between page load and extraction
    sniff_timeout: Optional[float] = 60.0  # seconds, None waits forever
    page_load_timeout: int = 30000  # milliseconds
    cookie_timeout: float = 5.0  # seconds

    # Trust
    certificate_policy: str = "proceed"

    # Browser configuration
    engine: str = "playwright"
    browser_type: str = "chromium"
    headless: bool = True
    user_agent: Optional[str] = None

    # View settings
    javascript_enabled: bool = True
    dom_storage_enabled: bool = True
    block_images: bool = True
    allow_mixed_content: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._check_types()

        if self.settle_delay < 0:
            raise ConfigurationError(f"settle_delay must be >= 0, got {self.settle_delay}")

        if self.sniff_timeout is not None and self.sniff_timeout <= 0:
            raise ConfigurationError(f"sniff_timeout must be positive, got {self.sniff_timeout}")

        if self.page_load_timeout <= 0:
            raise ConfigurationError(f"page_load_timeout must be positive, got {self.page_load_timeout}")

        if self.cookie_timeout <= 0:
            raise ConfigurationError(f"cookie_timeout must be positive, got {self.cookie_timeout}")

        self.certificate_policy = self.certificate_policy.lower()
        if self.certificate_policy not in CERTIFICATE_POLICIES:
            raise ConfigurationError(
                f"certificate_policy must be one of {CERTIFICATE_POLICIES}, got {self.certificate_policy!r}"
            )

        if self.browser_type not in BROWSER_TYPES:
            raise ConfigurationError(
                f"browser_type must be one of {BROWSER_TYPES}, got {self.browser_type!r}"
            )

    def _check_types(self):
        for name in NUMBER_FIELDS + STRING_FIELDS + FLAG_FIELDS:
            value = getattr(self, name)
            if value is None and name in OPTIONAL_FIELDS:
                continue
            if name in NUMBER_FIELDS:
                # bool is an int subclass but never a valid duration
                valid = isinstance(value, (int, float)) and not isinstance(value, bool)
                expected = "a number"
            elif name in STRING_FIELDS:
                valid = isinstance(value, str)
                expected = "a string"
            else:
                valid = isinstance(value, bool)
                expected = "true or false"
            if not valid:
                raise ConfigurationError(f"{name} must be {expected}, got {value!r}")

    @property
    def proceed_on_certificate_error(self):
        return self.certificate_policy == "proceed"

    def to_view_settings(self, user_agent=None):
        """
        Build the settings for a new browser view.

        Args:
            user_agent: User agent taken from the request headers, if any

        Returns:
            ViewSettings: Settings for the engine
        """
        return ViewSettings(
            user_agent=user_agent or self.user_agent or get_random_user_agent(),
            scripting_enabled=self.javascript_enabled,
            dom_storage_enabled=self.dom_storage_enabled,
            image_loading_disabled=self.block_images,
            mixed_content_policy=(
                MixedContentPolicy.ALWAYS_ALLOW
                if self.allow_mixed_content
                else MixedContentPolicy.NEVER_ALLOW
            ),
            ignore_certificate_errors=self.proceed_on_certificate_error,
            page_load_timeout=self.page_load_timeout,
        )

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict):
        """
        Create a SessionConfig instance from a dictionary.

        Unknown keys are rejected so typos in configuration files surface.

        Args:
            config_dict: Dictionary containing configuration parameters

        Returns:
            SessionConfig: Configuration instance
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(config_dict) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**config_dict)
