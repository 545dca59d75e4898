#!/usr/bin/env python3
"""
Configuration file management module.

This module provides functionality for loading and saving session
configuration files and for merging them with command-line arguments.
"""

import json
import logging
import os

from ..core.config import SessionConfig

logger = logging.getLogger(__name__)


def load_config(config_file: str) -> SessionConfig:
    """
    Load configuration from a JSON file.

    Args:
        config_file: Path to the configuration file

    Returns:
        SessionConfig: Configuration instance

    Raises:
        FileNotFoundError: If the configuration file does not exist
        json.JSONDecodeError: If the configuration file is not valid JSON
        ConfigurationError: If the file holds unknown keys or invalid values
    """
    if not os.path.exists(config_file):
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    with open(config_file, 'r') as f:
        config_dict = json.load(f)

    return SessionConfig.from_dict(config_dict)


def save_config(config: SessionConfig, config_file: str) -> None:
    """
    Save configuration to a JSON file.

    Args:
        config: SessionConfig instance
        config_file: Path to the configuration file
    """
    directory = os.path.dirname(os.path.abspath(config_file))
    if directory and not os.path.exists(directory):
        os.makedirs(directory)

    with open(config_file, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    logger.info("Configuration saved to %s", config_file)


def load_config_from_args(args):
    """
    Build the session configuration from a config file and arguments.

    Options given explicitly on the command line win over the file.

    Args:
        args: Parsed command-line arguments

    Returns:
        SessionConfig: Configuration instance
    """
    if args.config:
        config = load_config(args.config)
        logger.info("Loaded configuration from %s", args.config)
    else:
        config = SessionConfig()

    return _override_config_from_args(config, args)


def _override_config_from_args(config, args):
    """
    Override configuration with explicitly specified command-line arguments.

    Args:
        config: Existing configuration
        args: Parsed command-line arguments

    Returns:
        SessionConfig: Updated configuration
    """
    overrides = config.to_dict()

    if args.settle_delay is not None:
        overrides['settle_delay'] = args.settle_delay
    if args.reject_certificates:
        overrides['certificate_policy'] = 'reject'
    if args.visible:
        overrides['headless'] = False
    if args.browser_type is not None:
        overrides['browser_type'] = args.browser_type

    # Rebuild so the new values are validated
    return SessionConfig.from_dict(overrides)
