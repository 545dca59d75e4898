#!/usr/bin/env python3
"""
Main entry point for ajaxview.

This module provides the main entry point for loading a page from the
command line and printing the result.
"""

import logging
import sys

from .cli.argument_parser import parse_args
from .cli.config import load_config_from_args, save_config
from .core.models import RequestMethod, RequestParameters
from .core.session import fetch
from .exceptions import AjaxViewError


def main(argv=None, engine=None):
    """
    Run a single load from the command line.

    Args:
        argv: Command-line arguments (uses sys.argv if None)
        engine: Engine to use instead of the configured one

    Returns:
        int: Process exit code
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config_from_args(args)
    except (OSError, ValueError, AjaxViewError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if args.save_config:
        save_config(config, args.save_config)

    try:
        params = RequestParameters(
            tag=args.tag,
            url=args.url,
            method=RequestMethod.POST if args.post is not None else RequestMethod.GET,
            post_body=args.post,
            headers=args.headers,
            sniff_pattern=args.sniff,
            post_load_script=args.script,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        result = fetch(params, config=config, engine=engine, timeout=args.timeout)
    except (AjaxViewError, TimeoutError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
