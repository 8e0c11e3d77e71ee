"""
blink-search - Core Package

A fuzzy finder that locates files or folders in a list of configured
locations, with cached path lists for slow or remote mounts.
"""

__version__ = "0.2.1"
__author__ = "blink-search contributors"
