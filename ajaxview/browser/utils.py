#!/usr/bin/env python3
"""
Browser setup helpers shared by engine implementations.
"""

import random

from .common.interface import MixedContentPolicy


def get_random_user_agent():
    """
    Generate a random user-agent string.

    Returns:
        str: Random user agent string
    """
    user_agents = [
        # Chrome on Windows
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
        # Chrome on macOS
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
        # Chrome on Linux
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
        # Firefox
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:123.0) Gecko/20100101 Firefox/123.0",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:122.0) Gecko/20100101 Firefox/122.0",
        # Safari
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    ]

    return random.choice(user_agents)


def build_browser_args(headless=True, mixed_content_policy=MixedContentPolicy.ALWAYS_ALLOW):
    """
    Build Chromium launch arguments for a view.

    Args:
        headless: Whether the browser runs headless
        mixed_content_policy: Policy for insecure content on secure pages

    Returns:
        list: Command-line switches for the browser process
    """
    args = []
    if not headless:
        args.append("--start-maximized")

    args.extend([
        "--no-sandbox",
        "--disable-dev-shm-usage",
        "--disable-extensions",
        "--disable-notifications",
        "--disable-popup-blocking",
        "--disable-background-networking",
    ])

    if mixed_content_policy is MixedContentPolicy.ALWAYS_ALLOW:
        args.append("--allow-running-insecure-content")

    return args
