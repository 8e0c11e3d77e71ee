"""
External tool adapters for blink-search.

This package wraps the traversal tools (fd and a built-in walker), the fzf
selector and the platform file opener.
"""
