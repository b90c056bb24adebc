"""
XML Dictionary Mapping Engine

A declarative, dictionary-driven tool for converting XML documents into nested
dictionaries: each dictionary entry selects nodes with XPath or a tag name and
turns them into a value with built-in transforms, user callbacks or recursive
sub-dictionaries.
"""

__version__ = "1.0.0"

# Import core models and interfaces for easy access
from .models import (
    DictionaryEntry,
    BuiltinTransform,
    Callback,
    CallbackConvention,
    InlineTransform,
    NamedTransform,
    MatchKind,
    MatchSet,
    ParserConfig,
    PerNodePolicy,
    UnknownTransformPolicy,
    build_dictionary,
    per_node,
    whole_set
)

from .interfaces import (
    XMLLoaderInterface,
    NodeResolverInterface,
    TransformDispatcherInterface,
    DictionaryParserInterface,
    ConfigurationManagerInterface
)

from .exceptions import (
    XMLDictionaryError,
    XMLParsingError,
    MalformedSelectorError,
    DateParseError,
    UnexpectedMatchTypeError,
    UnknownTransformError,
    DictionaryError,
    ConfigurationError
)

from .parsing import XMLDocumentLoader, NodeResolver
from .mapping import XmlDictionaryParser, TransformDispatcher, flatten, parse

__all__ = [
    # Core models
    "DictionaryEntry",
    "BuiltinTransform",
    "Callback",
    "CallbackConvention",
    "InlineTransform",
    "NamedTransform",
    "MatchKind",
    "MatchSet",
    "ParserConfig",
    "PerNodePolicy",
    "UnknownTransformPolicy",
    "build_dictionary",
    "per_node",
    "whole_set",

    # Interfaces
    "XMLLoaderInterface",
    "NodeResolverInterface",
    "TransformDispatcherInterface",
    "DictionaryParserInterface",
    "ConfigurationManagerInterface",

    # Components
    "XMLDocumentLoader",
    "NodeResolver",
    "TransformDispatcher",
    "XmlDictionaryParser",
    "flatten",
    "parse",

    # Exceptions
    "XMLDictionaryError",
    "XMLParsingError",
    "MalformedSelectorError",
    "DateParseError",
    "UnexpectedMatchTypeError",
    "UnknownTransformError",
    "DictionaryError",
    "ConfigurationError"
]
