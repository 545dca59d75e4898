"""
Command-line interface module for ajaxview.

This package contains modules for parsing command-line arguments
and managing configuration files.
"""

from .argument_parser import create_parser, parse_args
from .config import load_config, load_config_from_args, save_config

__all__ = ["create_parser", "parse_args", "load_config", "load_config_from_args", "save_config"]
