"""
Utility functions for common patterns across the XML dictionary mapping engine.
"""

import re
from typing import Any

from lxml import etree


class NodeUtils:
    """Utility methods for reading matched nodes and XPath results."""

    @staticmethod
    def is_node(value: Any) -> bool:
        """
        Check whether a match is a tree node rather than a scalar XPath result.

        Args:
            value: Matched item

        Returns:
            True for elements, comments and processing instructions
        """
        return isinstance(value, etree._Element)

    @staticmethod
    def node_text(value: Any) -> str:
        """
        Text content of a matched item.

        Elements yield the concatenated text of all descendants, comments and
        processing instructions their own text, XPath string results themselves.
        Booleans render as XPath does (``true``/``false``) and integral numbers
        without a trailing ``.0``.

        Args:
            value: Matched node or scalar XPath result

        Returns:
            Text as a plain string
        """
        if value is None:
            return ''
        if isinstance(value, (etree._Comment, etree._ProcessingInstruction, etree._Entity)):
            return value.text or ''
        if isinstance(value, etree._Element):
            return ''.join(value.itertext())
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    @staticmethod
    def trimmed_text(value: Any) -> str:
        """Text content of a matched item with surrounding whitespace removed."""
        return NodeUtils.node_text(value).strip()

    @staticmethod
    def scalar_value(value: Any) -> Any:
        """
        Plain Python value of a single match.

        Nodes become their trimmed text; lxml smart strings become plain strings;
        numbers and booleans are returned unchanged.
        """
        if NodeUtils.is_node(value):
            return NodeUtils.trimmed_text(value)
        if isinstance(value, str):
            return str(value)
        return value

    @staticmethod
    def describe(value: Any) -> str:
        """Short type description of a match for log messages."""
        if NodeUtils.is_node(value):
            return f"node <{value.tag}>"
        return type(value).__name__


class StringUtils:
    """Utility methods for string validation and processing."""

    # Cached regex patterns for performance
    _regex_cache = {
        'leading_control': re.compile(r'^[\x00-\x08\x0b\x0c\x0e-\x1f]+'),
    }

    @staticmethod
    def safe_string_check(value: Any) -> bool:
        """
        Standardized string validation.

        Args:
            value: Value to check

        Returns:
            True if value is a non-empty string after stripping whitespace
        """
        return value is not None and str(value).strip() != ''

    @staticmethod
    def strip_leading_control_characters(value: str) -> str:
        """Remove non-whitespace control characters from the start of a string."""
        return StringUtils._regex_cache['leading_control'].sub('', value)
