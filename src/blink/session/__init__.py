"""
Candidate caching and the interactive selection session.
"""

from .cache import PathCache, read_cache_file, write_cache_file
from .controller import SelectionSession, location_label

__all__ = [
    'PathCache',
    'SelectionSession',
    'location_label',
    'read_cache_file',
    'write_cache_file',
]
