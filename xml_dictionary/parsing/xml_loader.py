"""
XML document loading for dictionary parsing.

This module turns raw XML text into lxml document trees that the dictionary
parser can query with XPath and tag-name selectors.
"""

import logging

from pathlib import Path
from typing import Optional, Union

from lxml import etree

from ..interfaces import XMLLoaderInterface
from ..exceptions import XMLParsingError
from ..config.parser_defaults import ParserDefaults
from ..utils import StringUtils


class XMLDocumentLoader(XMLLoaderInterface):
    """
    Loads XML text into an lxml document tree.

    Features:
    - BOM and stray control character removal before parsing
    - Entity resolution and network access disabled
    - Optional lxml recover mode for slightly broken input
    - Detailed error logging with a load counter as record identifier
    """

    def __init__(self, recover: bool = ParserDefaults.RECOVER):
        """
        Initialize the loader.

        Args:
            recover: Let lxml attempt to recover from malformed XML instead of failing
        """
        self.recover = recover
        self.logger = logging.getLogger(__name__)
        self.load_count = 0

    def _build_parser(self, recover: bool) -> etree.XMLParser:
        return etree.XMLParser(
            recover=recover,
            strip_cdata=False,  # Preserve CDATA sections
            resolve_entities=ParserDefaults.RESOLVE_ENTITIES,
            no_network=ParserDefaults.NO_NETWORK
        )

    def load(self, xml_content: Union[str, bytes]) -> etree._ElementTree:
        """
        Parse XML content into a document tree.

        Args:
            xml_content: Raw XML content as string or bytes

        Returns:
            Parsed document tree

        Raises:
            XMLParsingError: If XML is empty, malformed or cannot be parsed
        """
        if not xml_content or not xml_content.strip():
            raise XMLParsingError("XML content is empty or None")

        self.load_count += 1
        record_id = f"load_{self.load_count}"

        if isinstance(xml_content, bytes):
            # lxml reads the BOM and encoding declaration of raw bytes itself
            source = xml_content.lstrip()
            error_content = xml_content.decode('utf-8', errors='replace')
        else:
            source = self._clean_xml_content(xml_content).encode('utf-8')
            error_content = xml_content

        try:
            root = etree.fromstring(source, self._build_parser(self.recover))
        except etree.XMLSyntaxError as e:
            error_msg = f"XML syntax error: {e}"
            self.logger.error(f"{error_msg} (Record ID: {record_id})")
            raise XMLParsingError(error_msg, error_content)

        if root is None:
            # recover mode can give up without raising
            raise XMLParsingError("XML content could not be recovered into a document", error_content)

        return root.getroottree()

    def load_file(self, path: Union[str, Path]) -> etree._ElementTree:
        """
        Read and parse an XML file.

        Args:
            path: Path to the XML file

        Returns:
            Parsed document tree

        Raises:
            XMLParsingError: If the file cannot be read or parsed
        """
        try:
            content = Path(path).read_bytes()
        except OSError as e:
            raise XMLParsingError(f"Failed to read XML file {path}: {e}")
        self.logger.debug(f"Loaded XML file: {path}")
        return self.load(content)

    def _clean_xml_content(self, xml_content: str) -> str:
        """
        Clean and normalize XML content for parsing.

        Args:
            xml_content: Raw XML content

        Returns:
            Cleaned XML content
        """
        # Remove BOM if present
        if xml_content.startswith('\ufeff'):
            xml_content = xml_content[1:]
            self.logger.debug("Removed UTF-8 BOM from XML content")

        # Handle BOM that might appear as visible characters
        if xml_content.startswith('ï»¿'):
            xml_content = xml_content[3:]
            self.logger.debug("Removed visible UTF-8 BOM characters from XML content")

        xml_content = StringUtils.strip_leading_control_characters(xml_content)

        # Normalize line endings
        xml_content = xml_content.replace('\r\n', '\n').replace('\r', '\n')

        return xml_content.strip()

    def validate_xml_structure(self, xml_content: Optional[str]) -> bool:
        """
        Check that XML content is well-formed.

        Args:
            xml_content: Raw XML content to validate

        Returns:
            True if XML is well-formed, False otherwise
        """
        if not StringUtils.safe_string_check(xml_content):
            self.logger.warning("XML content is empty")
            return False

        try:
            etree.fromstring(self._clean_xml_content(xml_content).encode('utf-8'), self._build_parser(False))
        except etree.XMLSyntaxError as e:
            self.logger.warning(f"XML well-formedness validation failed: {e}")
            return False

        self.logger.debug("XML validation passed")
        return True
