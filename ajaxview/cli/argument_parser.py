#!/usr/bin/env python3
"""
Command-line argument parsing module.

This module provides functions for setting up and parsing command-line
arguments for ajaxview.
"""

import argparse
from urllib.parse import urlparse

from ..core.config import BROWSER_TYPES
from ..utils.http import parse_header


def create_parser():
    """
    Create the command-line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description='Load a page in a headless browser and print its rendered HTML or a sniffed resource URL'
    )

    # Required arguments
    parser.add_argument('url', type=str,
                        help='URL to load')

    # Request options
    request_group = parser.add_argument_group('Request Options')
    request_group.add_argument('--sniff', type=str, default=None, metavar='REGEX',
                        help='Print the first resource URL fully matching REGEX instead of the HTML')
    request_group.add_argument('--script', type=str, default=None, metavar='JS',
                        help='Script to run once after the page loads (sniff mode)')
    request_group.add_argument('--post', type=str, default=None, metavar='DATA',
                        help='Send a POST request with DATA as the body')
    request_group.add_argument('-H', '--header', action='append', default=[], dest='headers',
                        help='Extra request header as "Name: Value" (repeatable)')
    request_group.add_argument('--tag', type=str, default=None,
                        help='Identifier for the request (default: the URL host)')
    request_group.add_argument('--timeout', type=float, default=120.0,
                        help='Seconds to wait for a result (default: 120)')

    # Browser options
    browser_group = parser.add_argument_group('Browser Options')
    browser_group.add_argument('--settle-delay', type=float, default=None,
                        help='Seconds to wait after page load before extracting (default: 1.0)')
    browser_group.add_argument('--reject-certificates', action='store_true',
                        help='Fail on invalid TLS certificates instead of proceeding')
    browser_group.add_argument('--visible', action='store_true',
                        help='Run in visible browser mode instead of headless (default: headless)')
    browser_group.add_argument('--browser-type', type=str, default=None, choices=BROWSER_TYPES,
                        help='Browser to launch (default: chromium)')

    # Configuration file options
    config_group = parser.add_argument_group('Configuration Options')
    config_group.add_argument('--config', type=str, default=None,
                        help='Path to configuration file (JSON)')
    config_group.add_argument('--save-config', type=str, default=None,
                        help='Save current settings to configuration file')
    config_group.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    return parser


def parse_args(args=None):
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments to parse (uses sys.argv if None)

    Returns:
        argparse.Namespace: Parsed arguments, with ``headers`` as a dict

    Raises:
        SystemExit: If required arguments are missing or invalid
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    parsed_url = urlparse(parsed_args.url)
    if not parsed_url.scheme or not parsed_url.netloc:
        parser.error("Invalid URL. Please provide a valid URL (e.g., https://example.com)")

    headers = {}
    for header in parsed_args.headers:
        try:
            name, value = parse_header(header)
        except ValueError as e:
            parser.error(str(e))
        headers[name] = value
    parsed_args.headers = headers

    if parsed_args.tag is None:
        parsed_args.tag = parsed_url.netloc

    if parsed_args.settle_delay is not None and parsed_args.settle_delay < 0:
        parser.error("--settle-delay must be >= 0")

    if parsed_args.timeout <= 0:
        parser.error("--timeout must be positive")

    return parsed_args
