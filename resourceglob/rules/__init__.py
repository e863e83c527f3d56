"""resourceglob Rules System.

This module provides the matching rules used during resolution:
- GlobMatcher: Ant-style "/"-segment pattern matching
- LocationGrammar: Splitting expressions into prefix, root and sub-pattern
"""

from .locations import LocationGrammar, ParsedLocation, split_prefix
from .patterns import GlobMatcher, normalize_separators, tokenize

__all__ = [
    # Pattern matching
    "GlobMatcher",
    "normalize_separators",
    "tokenize",
    # Location grammar
    "LocationGrammar",
    "ParsedLocation",
    "split_prefix",
]
