#!/usr/bin/env python3
"""Location expression grammar.

A location expression is ``[prefix ":"] path`` where the path may contain
Ant-style wildcards. Parsing splits it into:
- the prefix kind (none, search-all-providers, or an opaque scheme)
- the root literal: the longest wildcard-free leading directory
- the sub-pattern: the wildcard-bearing remainder

Example:
    >>> LocationGrammar().parse("classpath-all:META-INF/*-beans.xml").root
    'classpath-all:META-INF/'
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from resourceglob.core.constants import PATH_SEPARATOR, Prefix, PrefixKind
from resourceglob.rules.patterns import GlobMatcher

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")


@dataclass(frozen=True)
class ParsedLocation:
    """A location expression split into prefix, root literal and sub-pattern.

    Attributes:
        expression: The original expression
        prefix_kind: Kind of prefix found
        prefix: The prefix including its colon, or "" when there is none
        root: Wildcard-free leading part, including the prefix
        sub_pattern: Remainder to be matched, "" when no wildcard was found
    """

    expression: str
    prefix_kind: PrefixKind
    prefix: str
    root: str
    sub_pattern: str

    @property
    def has_pattern(self) -> bool:
        return bool(self.sub_pattern)

    @property
    def path(self) -> str:
        """The expression without its prefix."""
        return self.expression[len(self.prefix):]

    @property
    def root_path(self) -> str:
        """The root literal without its prefix."""
        return self.root[len(self.prefix):]


def split_prefix(expression: str) -> Tuple[Optional[str], str]:
    """Split ``scheme:`` off the head of an expression.

    Returns:
        Tuple of (prefix including colon or None, remainder)
    """
    match = _SCHEME_RE.match(expression)
    if match is None:
        return None, expression
    prefix = match.group(0)
    return prefix, expression[len(prefix):]


class LocationGrammar:
    """Parser for location expressions."""

    def __init__(self, matcher: Optional[GlobMatcher] = None):
        """Initialize grammar.

        Args:
            matcher: Matcher used to detect wildcard tokens
        """
        self._matcher = matcher or GlobMatcher()

    def prefix_of(self, expression: str) -> Tuple[PrefixKind, str]:
        """Classify the prefix of an expression.

        Returns:
            Tuple of (prefix kind, prefix including colon or "")
        """
        prefix, _ = split_prefix(expression)
        if prefix is None:
            return PrefixKind.NONE, ""
        if prefix == Prefix.MULTI_PROVIDER_ALL:
            return PrefixKind.MULTI_PROVIDER_ALL, prefix
        return PrefixKind.SCHEME, prefix

    def determine_root(self, expression: str) -> str:
        """Determine the wildcard-free root of an expression.

        Will return "/WEB-INF/" for "/WEB-INF/*.xml", and the bare prefix
        when no wildcard-free directory precedes the first wildcard.

        Args:
            expression: Location expression

        Returns:
            Leading part of the expression that denotes the root directory
        """
        _, prefix = self.prefix_of(expression)
        prefix_end = len(prefix)
        root_end = len(expression)

        while root_end > prefix_end and self._matcher.is_pattern(expression[prefix_end:root_end]):
            root_end = expression.rfind(PATH_SEPARATOR, 0, root_end - 1) + 1

        if root_end <= prefix_end:
            root_end = prefix_end

        return expression[:root_end]

    def parse(self, expression: str) -> ParsedLocation:
        """Parse a location expression.

        Args:
            expression: Location expression

        Returns:
            ParsedLocation whose ``root + sub_pattern`` equals ``expression``
        """
        prefix_kind, prefix = self.prefix_of(expression)

        if not self._matcher.is_pattern(expression[len(prefix):]):
            root = expression
        else:
            root = self.determine_root(expression)

        return ParsedLocation(
            expression=expression,
            prefix_kind=prefix_kind,
            prefix=prefix,
            root=root,
            sub_pattern=expression[len(root):],
        )
