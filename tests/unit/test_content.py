from ulid import ULID

from contour import InMemoryContentNode
from contour.content import accepts_content_node


def test_nodes_get_an_id():
    node = InMemoryContentNode(type_alias="article")
    assert isinstance(node.id, ULID)


def test_alias_lookup_is_case_insensitive(article_node):
    assert article_node.get_property("TITLE") == "Hello"
    assert article_node.get_property("bodytext") == "<p>Hi there</p>"


def test_culture_variants(article_node):
    assert article_node.get_property("title", "FR-fr") == "Bonjour"
    assert article_node.get_property("wordCount", "fr-FR") == "42"
    assert article_node.get_property("title", "da-DK") == "Hello"


def test_missing_property(article_node):
    assert article_node.get_property("subtitle", "fr-FR") is None


def test_accepts_content_node():
    assert accepts_content_node(InMemoryContentNode)
    assert not accepts_content_node(str)
    assert not accepts_content_node("ContentNode")
