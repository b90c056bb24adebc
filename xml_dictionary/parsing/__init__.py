"""XML loading and node selection components."""

from .xml_loader import XMLDocumentLoader
from .node_resolver import NodeResolver

__all__ = ['XMLDocumentLoader', 'NodeResolver']
