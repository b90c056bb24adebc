"""
Dictionary Parser - Declarative XML to Dictionary Extraction Engine

This module implements the orchestration engine that applies a dictionary (a mapping of
output keys to extraction rules) to an XML document and returns a nested, loosely typed
result built of strings, booleans, datetimes, lists and dicts.

Processing of each dictionary entry, in dictionary order:
1. Resolve the entry's selector (XPath or tag name) into a match set
2. With a transform: dispatch it (callbacks, built-ins, recursive sub-parsing),
   then normalize the value unless the entry sets flatten to False
3. Without a transform: collect the trimmed text of every matched node, or take a
   single XPath result as is
4. After the last entry, normalize the whole result once more

Example:
    dictionary = {
        'type': {'xpath': '/document/type/@class'},
        'main_author': {
            'xpath': "//authors/author[@role='main']",
            'transform': 'parse',
            'dictionary': {
                'givenname': {'xpath': './first'},
                'surname': {'xpath': './last'},
            },
        },
    }
    XmlDictionaryParser(dictionary).parse(document)
    # {'type': 'article', 'main_author': {'givenname': 'Firstname', 'surname': 'Lastname'}}

Error handling:
- MalformedSelectorError, DateParseError, XPath evaluation errors and callback errors
  abort the parse call
- a parse transform over a non-node match logs a warning and yields None for that key
"""

import logging

from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..interfaces import DictionaryParserInterface
from ..exceptions import MalformedSelectorError
from ..models import (
    Callback,
    CallbackConvention,
    DictionaryEntry,
    ParserConfig,
    build_dictionary,
)
from ..parsing.node_resolver import NodeResolver
from ..parsing.xml_loader import XMLDocumentLoader
from ..utils import NodeUtils
from ..config.config_manager import ConfigManager, get_config_manager
from .flattener import flatten, flatten_mapping
from .transform_dispatcher import TransformDispatcher


class XmlDictionaryParser(DictionaryParserInterface):
    """
    Applies a dictionary to XML documents.

    A parser instance owns its dictionary, its configuration and a table of named
    callbacks. The callback table persists across parse calls and can be extended
    at any time with register_callback; sub-dictionaries are applied by fresh parser
    instances that share the configuration but not the callback table.

    Instances hold no per-call state, so parsing the same document twice gives the
    same result. Use one instance per thread when callbacks are registered concurrently.
    """

    def __init__(self, dictionary: Optional[Mapping[str, Any]] = None,
                 config: Optional[ParserConfig] = None,
                 callbacks: Optional[Mapping[str, Any]] = None):
        """
        Initialize the parser.

        Args:
            dictionary: Mapping of output keys to DictionaryEntry objects or plain entry mappings
            config: Parser configuration (policies, XPath namespaces); defaults to ParserConfig()
            callbacks: Optional named callbacks to register up front

        Raises:
            DictionaryError: If the dictionary is malformed
        """
        self.logger = logging.getLogger(__name__)
        self.config = config or ParserConfig()
        self.dictionary: Dict[str, DictionaryEntry] = build_dictionary(dictionary or {})
        self.callbacks: Dict[str, Callback] = {}

        self.resolver = NodeResolver(self.config.namespaces)
        self.loader = XMLDocumentLoader()
        self.dispatcher = TransformDispatcher(self.config, self._sub_parse)

        for name, fn in (callbacks or {}).items():
            self.register_callback(name, fn)

    @classmethod
    def from_config(cls, dictionary_path: Optional[str] = None,
                    config_manager: Optional[ConfigManager] = None) -> 'XmlDictionaryParser':
        """
        Build a parser from a dictionary file and environment-configured policies.

        Args:
            dictionary_path: Dictionary file relative to the configuration base path;
                             defaults to the configured dictionary path
            config_manager: Configuration manager; defaults to the global instance

        Returns:
            Configured parser
        """
        config_manager = config_manager or get_config_manager()
        dictionary = config_manager.load_dictionary(dictionary_path)
        parser = cls(dictionary, config=config_manager.get_parser_config())
        parser.loader = XMLDocumentLoader(recover=config_manager.get_settings().recover)
        parser.logger.info(f"XmlDictionaryParser initialized with {len(dictionary)} dictionary entries")
        return parser

    def get_dictionary(self) -> Dict[str, DictionaryEntry]:
        return self.dictionary

    def set_dictionary(self, dictionary: Mapping[str, Any]) -> 'XmlDictionaryParser':
        self.dictionary = build_dictionary(dictionary)
        return self

    def register_callback(self, name: str, fn: Union[Callable[[Any], Any], Callback],
                          convention: Optional[CallbackConvention] = None) -> 'XmlDictionaryParser':
        """
        Register (or replace) a named transform.

        Args:
            name: Name used in the transform field of dictionary entries
            fn: Callable or Callback
            convention: Explicit calling convention; when omitted a Callback keeps its own,
                        and a bare callable is inspected (first parameter named 'nodes'
                        means whole set, anything else per node)

        Returns:
            The parser itself, for chaining
        """
        if isinstance(fn, Callback):
            callback = fn if convention is None else Callback(fn.fn, convention)
        else:
            callback = Callback(fn, convention)

        self.callbacks[name] = callback
        self.logger.debug(f"Registered callback '{name}' ({callback.convention.value})")
        return self

    add_callback = register_callback

    def parse(self, document: Any, context: Any = None,
              dictionary: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Apply the dictionary to a document.

        Args:
            document: lxml document tree or element
            context: Optional node used as the evaluation root for XPath selectors
            dictionary: Optional dictionary used for this call instead of the parser's own

        Returns:
            Mapping of dictionary keys to extracted values; keys whose value came out
            empty are absent

        Raises:
            MalformedSelectorError: If an XPath selector is invalid
            DateParseError: If a datetime transform meets unparseable text
            UnknownTransformError: If a transform is unknown under the strict policy
        """
        entries = self.dictionary if dictionary is None else build_dictionary(dictionary)

        result = {}
        raw_keys = set()
        for key, entry in entries.items():
            result[key] = self._process_entry(document, key, entry, context)
            if not entry.flatten:
                raw_keys.add(key)

        # sub-parser mappings are already normalized
        return flatten_mapping(result, keep_raw=raw_keys, descend_mappings=False)

    def parse_string(self, xml_content: Union[str, bytes],
                     loader: Optional[XMLDocumentLoader] = None) -> Dict[str, Any]:
        """
        Load XML text and apply the dictionary to it.

        Raises:
            XMLParsingError: If the XML cannot be parsed
        """
        loader = loader or self.loader
        return self.parse(loader.load(xml_content))

    def parse_file(self, path: Union[str, Path],
                   loader: Optional[XMLDocumentLoader] = None) -> Dict[str, Any]:
        """Load an XML file and apply the dictionary to it."""
        loader = loader or self.loader
        return self.parse(loader.load_file(path))

    def _process_entry(self, document: Any, key: str, entry: DictionaryEntry, context: Any) -> Any:
        try:
            match_set = self.resolver.resolve(document, entry, context)
        except MalformedSelectorError as e:
            if e.entry_key is None:
                e.entry_key = key
            raise

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"Entry '{key}': {match_set.kind.value} with {len(match_set)} item(s)")

        if entry.transform is not None:
            value = self.dispatcher.dispatch(document, match_set, entry, self.callbacks, key)
            if entry.flatten:
                value = flatten(value, descend_mappings=False)
            return value

        if match_set.is_node_list:
            return [NodeUtils.trimmed_text(node) for node in match_set.value]
        return NodeUtils.scalar_value(match_set.value)

    def _sub_parse(self, document: Any, dictionary: Dict[str, DictionaryEntry], context: Any) -> Dict[str, Any]:
        return XmlDictionaryParser(dictionary, config=self.config).parse(document, context)


def parse(document: Any, dictionary: Mapping[str, Any], context: Any = None,
          callbacks: Optional[Mapping[str, Any]] = None,
          config: Optional[ParserConfig] = None) -> Dict[str, Any]:
    """
    Apply a dictionary to a document with a throwaway parser.

    Args:
        document: lxml document tree or element
        dictionary: Mapping of output keys to entries
        context: Optional node used as the evaluation root for XPath selectors
        callbacks: Optional named callbacks
        config: Optional parser configuration

    Returns:
        Mapping of dictionary keys to extracted values
    """
    return XmlDictionaryParser(dictionary, config=config, callbacks=callbacks).parse(document, context)
