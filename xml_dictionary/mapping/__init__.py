"""Transform dispatch, normalization and dictionary parsing components."""

from .flattener import flatten, flatten_mapping
from .transform_dispatcher import TransformDispatcher, parse_datetime
from .dictionary_parser import XmlDictionaryParser, parse

__all__ = ['flatten', 'flatten_mapping', 'TransformDispatcher', 'parse_datetime', 'XmlDictionaryParser', 'parse']
