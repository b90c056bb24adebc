"""
Node selection for dictionary entries.

Resolves an entry's selector (an XPath expression, or a tag name with an optional
namespace URI) against an lxml document and tags the result as a single node or
a node list.
"""

import logging

from typing import Any, Dict, Optional

from lxml import etree

from ..interfaces import NodeResolverInterface
from ..exceptions import MalformedSelectorError
from ..models import DictionaryEntry, MatchSet

ANY_TAG = "*"


class NodeResolver(NodeResolverInterface):
    """
    Resolves dictionary entry selectors with lxml.

    XPath results keep the type XPath gives them: node-set queries (elements,
    attributes, text nodes) yield a node list, computed scalars such as
    ``count(...)`` or ``string(...)`` yield a single value. Tag-name lookups
    always yield a node list drawn from the whole document.

    Compiled XPath expressions are cached per resolver instance.
    """

    def __init__(self, namespaces: Optional[Dict[str, str]] = None):
        """
        Initialize the resolver.

        Args:
            namespaces: Prefix to namespace URI mapping available to XPath expressions
        """
        self.namespaces = dict(namespaces or {})
        self.logger = logging.getLogger(__name__)
        self._compiled_xpaths: Dict[str, etree.XPath] = {}

    def resolve(self, document: Any, entry: DictionaryEntry, context: Any = None) -> MatchSet:
        if entry.uses_xpath:
            return self.query_by_xpath(document, entry.xpath, context)
        return self.query_by_tag_name(document, entry.tag_name, entry.namespace)

    def compile_xpath(self, expression: str) -> etree.XPath:
        """
        Compile an XPath expression, reusing earlier compilations.

        Raises:
            MalformedSelectorError: If the expression is syntactically invalid
        """
        compiled = self._compiled_xpaths.get(expression)
        if compiled is None:
            try:
                compiled = etree.XPath(expression, namespaces=self.namespaces or None)
            except etree.XPathSyntaxError as e:
                raise MalformedSelectorError(f"Invalid XPath expression '{expression}': {e}", expression=expression)
            self._compiled_xpaths[expression] = compiled
        return compiled

    def query_by_xpath(self, document: Any, expression: str, context: Any = None) -> MatchSet:
        """
        Evaluate an XPath expression, scoped to ``context`` when given.

        Evaluation errors raised by lxml (unknown functions, undefined prefixes)
        are not caught here.

        Args:
            document: Document tree or element
            expression: XPath expression
            context: Optional node relative paths are evaluated from

        Returns:
            NODE_LIST for node-set results, SINGLE_NODE for scalar results
        """
        compiled = self.compile_xpath(expression)
        result = compiled(context if context is not None else document)

        if isinstance(result, list):
            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug(f"XPath '{expression}' matched {len(result)} node(s)")
            return MatchSet.node_list(result)

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"XPath '{expression}' evaluated to {type(result).__name__} {result!r}")
        return MatchSet.single(result)

    def query_by_tag_name(self, document: Any, tag_name: str, namespace: Optional[str] = None) -> MatchSet:
        """
        Find all elements of the document with the given name, in document order.

        Without a namespace, the name is compared with each element's qualified
        name (``prefix:local`` or ``local``). With a namespace URI, the local name
        must match within that namespace. ``*`` matches any name.

        Args:
            document: Document tree or any element of it
            tag_name: Element name
            namespace: Optional namespace URI

        Returns:
            NODE_LIST, possibly empty
        """
        root = self._document_root(document)

        if namespace:
            matches = list(root.iter(f"{{{namespace}}}{tag_name}"))
        elif tag_name == ANY_TAG:
            matches = list(root.iter(etree.Element))
        else:
            matches = [element for element in root.iter(etree.Element)
                       if self._qualified_name(element) == tag_name]

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"Tag '{tag_name}' (namespace={namespace}) matched {len(matches)} element(s)")
        return MatchSet.node_list(matches)

    @staticmethod
    def _document_root(document: Any):
        if isinstance(document, etree._ElementTree):
            return document.getroot()
        return document.getroottree().getroot()

    @staticmethod
    def _qualified_name(element) -> str:
        local_name = etree.QName(element).localname
        if element.prefix:
            return f"{element.prefix}:{local_name}"
        return local_name
