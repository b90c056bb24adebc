"""
Abstract interfaces and base classes for the XML dictionary mapping engine.

This module defines the contracts that the engine components implement
to ensure consistent behavior and enable dependency injection.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from lxml import etree

from .models import DictionaryEntry, MatchSet, ParserConfig, Callback


class XMLLoaderInterface(ABC):
    """Abstract interface for components turning XML text into a document tree."""

    @abstractmethod
    def load(self, xml_content: str) -> etree._ElementTree:
        """
        Parse XML content into a document tree.

        Args:
            xml_content: Raw XML content as string

        Returns:
            Parsed document tree

        Raises:
            XMLParsingError: If XML is malformed or cannot be parsed
        """
        pass

    @abstractmethod
    def validate_xml_structure(self, xml_content: str) -> bool:
        """
        Check that XML content is well-formed.

        Args:
            xml_content: Raw XML content to validate

        Returns:
            True if XML is valid, False otherwise
        """
        pass


class NodeResolverInterface(ABC):
    """Abstract interface for node selection components."""

    @abstractmethod
    def resolve(self, document: Any, entry: DictionaryEntry, context: Any = None) -> MatchSet:
        """
        Resolve the selector of a dictionary entry.

        Args:
            document: Document tree (or its root element)
            entry: Dictionary entry carrying the selector
            context: Optional node scoping XPath evaluation

        Returns:
            MatchSet tagged as a single node or a node list

        Raises:
            MalformedSelectorError: If the XPath expression is syntactically invalid
        """
        pass


class TransformDispatcherInterface(ABC):
    """Abstract interface for value transform components."""

    @abstractmethod
    def dispatch(self, document: Any, match_set: MatchSet, entry: DictionaryEntry,
                 callbacks: Dict[str, Callback], entry_key: Optional[str] = None) -> Any:
        """
        Produce a value from matched nodes.

        Args:
            document: Document tree the nodes belong to (needed for sub-parsing)
            match_set: Result of selector resolution
            entry: Dictionary entry carrying the transform and optional sub-dictionary
            callbacks: Registered callback table, consulted before the built-ins
            entry_key: Dictionary key being processed (for logging and errors)

        Returns:
            Derived value
        """
        pass


class DictionaryParserInterface(ABC):
    """Abstract interface for the dictionary-driven extraction engine."""

    @abstractmethod
    def parse(self, document: Any, context: Any = None,
              dictionary: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Apply a dictionary to a document.

        Args:
            document: Document tree (or its root element)
            context: Optional node used as the evaluation root for XPath selectors
            dictionary: Optional dictionary overriding the parser's own for this call

        Returns:
            Mapping of dictionary keys to extracted values
        """
        pass

    @abstractmethod
    def register_callback(self, name: str, fn: Any, convention: Any = None) -> "DictionaryParserInterface":
        """
        Register a named transform usable from dictionary entries.

        Args:
            name: Transform name
            fn: Callable or Callback
            convention: Optional explicit CallbackConvention

        Returns:
            The parser itself, for chaining
        """
        pass


class ConfigurationManagerInterface(ABC):
    """Abstract interface for configuration management components."""

    @abstractmethod
    def load_dictionary(self, dictionary_path: Optional[str] = None) -> Dict[str, DictionaryEntry]:
        """
        Load a dictionary from file.

        Args:
            dictionary_path: Path to a JSON or YAML dictionary file

        Returns:
            Loaded dictionary
        """
        pass

    @abstractmethod
    def get_parser_config(self, namespaces: Optional[Dict[str, str]] = None) -> ParserConfig:
        """
        Get parser configuration.

        Args:
            namespaces: Optional prefix to URI mapping for XPath selectors

        Returns:
            Parser configuration object
        """
        pass
