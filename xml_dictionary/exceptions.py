"""
Custom exceptions for the XML dictionary mapping engine.

This module defines specific exception types for the different error conditions
that can occur while loading XML, resolving selectors and transforming matched nodes.
"""


class XMLDictionaryError(Exception):
    """Base exception for all XML dictionary mapping errors."""

    def __init__(self, message: str, entry_key: str = None):
        """
        Initialize XML dictionary error.

        Args:
            message: Error description
            entry_key: Optional dictionary key of the entry being processed when the error occurred
        """
        super().__init__(message)
        self.entry_key = entry_key


class XMLParsingError(XMLDictionaryError):
    """Exception raised when XML content cannot be loaded into a document tree."""

    def __init__(self, message: str, xml_content: str = None, entry_key: str = None):
        """
        Initialize XML parsing error.

        Args:
            message: Error description
            xml_content: Optional XML content that failed to parse (truncated for logging)
            entry_key: Optional dictionary key
        """
        super().__init__(message, entry_key)
        # Store truncated XML content for debugging (first 500 chars)
        self.xml_content = xml_content[:500] + "..." if xml_content and len(xml_content) > 500 else xml_content


class MalformedSelectorError(XMLDictionaryError):
    """Exception raised when an XPath selector is syntactically invalid."""

    def __init__(self, message: str, expression: str = None, entry_key: str = None):
        super().__init__(message, entry_key)
        self.expression = expression


class DateParseError(XMLDictionaryError):
    """Exception raised when text under a datetime transform is not a recognizable date."""

    def __init__(self, message: str, source_value: str = None, entry_key: str = None):
        """
        Initialize date parse error.

        Args:
            message: Error description
            source_value: Text that failed to parse
            entry_key: Optional dictionary key
        """
        super().__init__(message, entry_key)
        self.source_value = source_value


class UnexpectedMatchTypeError(XMLDictionaryError):
    """
    Condition reported when a parse transform meets a match that is not a node.

    The engine logs this as a warning and continues; it is never raised out of a parse call.
    """

    def __init__(self, message: str, match_type: str = None, entry_key: str = None):
        super().__init__(message, entry_key)
        self.match_type = match_type


class UnknownTransformError(XMLDictionaryError):
    """Exception raised for an unrecognized transform when the strict policy is active."""

    def __init__(self, message: str, transform_name: str = None, entry_key: str = None):
        super().__init__(message, entry_key)
        self.transform_name = transform_name


class DictionaryError(XMLDictionaryError):
    """Exception raised when a dictionary entry cannot be built from its definition."""
    pass


class ConfigurationError(XMLDictionaryError):
    """Exception raised when configuration is invalid or missing."""
    pass
