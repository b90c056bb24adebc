"""Shared fixtures for the xml_dictionary test suite."""

import pytest

from xml_dictionary.config.config_manager import reset_config_manager
from xml_dictionary.parsing.xml_loader import XMLDocumentLoader


ARTICLE_XML = """
<document>
    <type class="article" />
    <published>10 March 2016</published>
    <title lang="en">A simple title</title>
    <title lang="de">Ein einfacher Title</title>
    <authors>
        <author role="main">
            <first>Firstname</first>
            <last>Lastname</last>
        </author>
        <author role="secondary">
            <first>Firstname 2</first>
            <last>Lastname 2</last>
        </author>
    </authors>
    <body>
        This is the body of the article.
    </body>
</document>
"""

NAMESPACED_XML = """
<record xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>Namespaced title</dc:title>
    <title>Plain title</title>
    <dc:creator>Creator A</dc:creator>
    <dc:creator>Creator B</dc:creator>
</record>
"""

FLAGS_XML = """
<flags>
    <flag>true</flag>
    <flag>1</flag>
    <flag>TRUE</flag>
    <flag>no</flag>
</flags>
"""


@pytest.fixture
def loader():
    return XMLDocumentLoader()


@pytest.fixture
def article_xml():
    return ARTICLE_XML


@pytest.fixture
def article(loader):
    return loader.load(ARTICLE_XML)


@pytest.fixture
def namespaced(loader):
    return loader.load(NAMESPACED_XML)


@pytest.fixture
def flags(loader):
    return loader.load(FLAGS_XML)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate tests from XML_DICTIONARY_* variables and the global config manager."""
    for var in [
        'XML_DICTIONARY_UNKNOWN_TRANSFORM',
        'XML_DICTIONARY_PER_NODE_POLICY',
        'XML_DICTIONARY_LOG_LEVEL',
        'XML_DICTIONARY_RECOVER',
        'XML_DICTIONARY_CONFIG_PATH',
        'XML_DICTIONARY_DICTIONARY_PATH',
    ]:
        monkeypatch.delenv(var, raising=False)
    reset_config_manager()
    yield
    reset_config_manager()
