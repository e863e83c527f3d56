#!/usr/bin/env python3
"""Ant-style glob matching for "/"-delimited resource paths.

This module provides the pattern primitive used by every resolution strategy:
- ``?`` matches exactly one character within a segment
- ``*`` matches zero or more characters within a segment
- ``**`` matches zero or more whole path segments
- Prefix matching (``match_start``) to prune directory descent early
- Case-sensitive and case-insensitive modes

Example:
    >>> matcher = GlobMatcher()
    >>> matcher.match("conf/**/*.yaml", "conf/app/db.yaml")
    True
    >>> matcher.match_start("conf/*/db.yaml", "conf/")
    True
"""

import re
from functools import lru_cache
from typing import List, Pattern

from resourceglob.core.constants import PATH_SEPARATOR

DOUBLE_WILDCARD = "**"
_WILDCARD_CHARS = ("*", "?")


@lru_cache(maxsize=1024)
def _compile_segment(token: str, case_sensitive: bool) -> Pattern:
    """Compile a single wildcard segment into an anchored regex."""
    parts = []
    for char in token:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    return re.compile("".join(parts) + r"\Z", flags)


def normalize_separators(path: str) -> str:
    """Convert Windows separators to forward slashes."""
    return path.replace("\\", PATH_SEPARATOR)


def tokenize(path: str) -> List[str]:
    """Split a path into its non-empty segments."""
    return [segment for segment in path.split(PATH_SEPARATOR) if segment]


class GlobMatcher:
    """Stateless Ant-style path matcher.

    Instances only hold the case-sensitivity setting, so one matcher can be
    shared freely between threads and resolvers.
    """

    def __init__(self, case_sensitive: bool = True):
        """Initialize matcher.

        Args:
            case_sensitive: Whether segment comparison is case-sensitive
        """
        self._case_sensitive = case_sensitive

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    def is_pattern(self, path: str) -> bool:
        """Check whether a string contains wildcard tokens.

        Args:
            path: Location fragment to check

        Returns:
            True if ``path`` contains ``*``, ``?`` or a ``**`` segment
        """
        return any(char in path for char in _WILDCARD_CHARS)

    def match(self, pattern: str, path: str) -> bool:
        """Match a full path against a pattern.

        Args:
            pattern: Ant-style pattern
            path: Candidate path

        Returns:
            True if the whole path is matched by the pattern
        """
        return self._do_match(pattern, path, full_match=True)

    def match_start(self, pattern: str, path: str) -> bool:
        """Match a path prefix against a pattern.

        Args:
            pattern: Ant-style pattern
            path: Partial path, usually a directory ending with "/"

        Returns:
            True if some continuation of ``path`` could be matched by the pattern
        """
        return self._do_match(pattern, path, full_match=False)

    def match_segment(self, token: str, segment: str) -> bool:
        """Match a single path segment against a single pattern token."""
        if not self.is_pattern(token):
            if self._case_sensitive:
                return token == segment
            return token.lower() == segment.lower()
        return _compile_segment(token, self._case_sensitive).match(segment) is not None

    def _do_match(self, pattern: str, path: str, full_match: bool) -> bool:
        pattern = normalize_separators(pattern)
        path = normalize_separators(path)

        pattern_tokens = tokenize(pattern)
        path_tokens = tokenize(path)

        # Absolute patterns only match absolute paths
        if pattern.startswith(PATH_SEPARATOR) != path.startswith(PATH_SEPARATOR):
            return False

        trailing = (pattern.endswith(PATH_SEPARATOR), path.endswith(PATH_SEPARATOR))
        return self._match_tokens(pattern_tokens, 0, path_tokens, 0, full_match, trailing)

    def _match_tokens(
        self,
        pattern_tokens: List[str],
        pattern_idx: int,
        path_tokens: List[str],
        path_idx: int,
        full_match: bool,
        trailing: tuple,
    ) -> bool:
        while pattern_idx < len(pattern_tokens):
            token = pattern_tokens[pattern_idx]

            if token == DOUBLE_WILDCARD:
                # Consecutive "**" segments behave like one
                while (
                    pattern_idx + 1 < len(pattern_tokens)
                    and pattern_tokens[pattern_idx + 1] == DOUBLE_WILDCARD
                ):
                    pattern_idx += 1
                if pattern_idx == len(pattern_tokens) - 1:
                    return True

                # Backtrack over how many segments "**" consumes
                for consumed in range(path_idx, len(path_tokens) + 1):
                    if self._match_tokens(
                        pattern_tokens, pattern_idx + 1, path_tokens, consumed, full_match, trailing
                    ):
                        return True
                return False

            if path_idx >= len(path_tokens):
                # Path exhausted with pattern left over
                if not full_match:
                    return True
                return all(t == DOUBLE_WILDCARD for t in pattern_tokens[pattern_idx:])

            if not self.match_segment(token, path_tokens[path_idx]):
                return False

            pattern_idx += 1
            path_idx += 1

        if path_idx < len(path_tokens):
            return False

        pattern_trailing, path_trailing = trailing
        return pattern_trailing == path_trailing
