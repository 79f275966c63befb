"""Unit tests for adf traversal, equality and URL helpers."""

from src.adf.adf_equal import adf_equal
from src.adf.adf_models import get_text_content
from src.adf.traverse import find_nodes, traverse
from src.adf.url_utils import clean_up_url_if_confluence, is_safe_url, page_url
from tests.fixtures.adf_fixtures import (
    create_adf_doc,
    create_heading,
    create_paragraph,
    create_text,
)


class TestTraverse:
    """Test cases for traverse."""

    def test_input_is_not_modified(self):
        adf = create_adf_doc([create_paragraph("hello")])

        def upper(node, parent):
            node["text"] = node["text"].upper()

        result = traverse(adf, {"text": upper})

        assert result["content"][0]["content"][0]["text"] == "HELLO"
        assert adf["content"][0]["content"][0]["text"] == "hello"

    def test_false_removes_node(self):
        adf = create_adf_doc([create_heading("A"), create_paragraph("b")])

        result = traverse(adf, {"heading": lambda node, parent: False})

        assert [node["type"] for node in result["content"]] == ["paragraph"]

    def test_list_splices_nodes(self):
        adf = create_adf_doc([create_paragraph("x")])
        replacement = [create_heading("one"), create_heading("two")]

        result = traverse(adf, {"paragraph": lambda node, parent: replacement})

        assert [get_text_content(node) for node in result["content"]] == ["one", "two"]

    def test_replacement_children_are_visited(self):
        adf = create_adf_doc([create_paragraph("x")])
        seen = []

        def swap(node, parent):
            return create_heading("inner")

        def record(node, parent):
            seen.append((node["text"], parent.node["type"]))

        traverse(adf, {"paragraph": swap, "text": record})

        assert seen == [("inner", "heading")]

    def test_find_nodes_in_document_order(self):
        adf = create_adf_doc([create_heading("a"), create_paragraph("b"), create_heading("c")])

        assert [get_text_content(n) for n in find_nodes(adf, "heading")] == ["a", "c"]


class TestAdfEqual:
    """Test cases for adf_equal."""

    def test_mark_order_is_ignored(self):
        first = create_adf_doc([{"type": "paragraph", "content": [
            create_text("x", [{"type": "strong"}, {"type": "em"}])]}])
        second = create_adf_doc([{"type": "paragraph", "content": [
            create_text("x", [{"type": "em"}, {"type": "strong"}])]}])

        assert adf_equal(first, second)

    def test_text_difference_is_detected(self):
        assert not adf_equal(
            create_adf_doc([create_paragraph("a")]),
            create_adf_doc([create_paragraph("b")]),
        )


class TestUrlUtils:
    """Test cases for url_utils helpers."""

    def test_safe_schemes(self):
        assert is_safe_url("https://a.b")
        assert is_safe_url("tel:123")
        assert not is_safe_url("javascript:alert(1)")

    def test_tracking_parameters_removed_for_same_site(self):
        url = "https://example.atlassian.net/wiki/x?atlOrigin=abc&a=1"

        cleaned = clean_up_url_if_confluence(url, "https://example.atlassian.net")

        assert cleaned == "https://example.atlassian.net/wiki/x?a=1"

    def test_other_sites_untouched(self):
        url = "https://other.com/x?atlOrigin=abc"

        assert clean_up_url_if_confluence(url, "https://example.atlassian.net") == url

    def test_non_http_url_cannot_be_embedded(self):
        assert clean_up_url_if_confluence("ftp://a.b", "https://example.atlassian.net") == "#"

    def test_page_url(self):
        assert page_url("https://e.net/wiki", "42", "T") == "https://e.net/wiki/spaces/T/pages/42"
        assert page_url("https://e.net", "42") == "https://e.net/wiki/pages/viewpage.action?pageId=42"
