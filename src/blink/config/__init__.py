"""
Configuration management package for blink-search.

This package provides configuration parsing and location resolution.
"""

from .parser import (
    ConfigParser,
    ConfigParseResult,
    config_dir,
    create_config_template,
    default_config_path,
    example_config,
    load_config,
    validate_config_file
)
from .resolver import find_matches, resolve_location

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'config_dir',
    'create_config_template',
    'default_config_path',
    'example_config',
    'find_matches',
    'load_config',
    'resolve_location',
    'validate_config_file'
]
