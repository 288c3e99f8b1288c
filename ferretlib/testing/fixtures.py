"""Test fixtures for ferretlib consumers.

These fixtures provide small in-memory documents and a helper for checking
AnalysisResult invariants, so downstream test suites do not need to reach
into the accumulator or parse trees themselves.
"""

from typing import Any, Dict, Iterator, List, Optional

from ..core.adapter import DocumentAdapter
from ..core.model import AnalysisResult
from ..core.node import AttributePairs, MarkupNode


# Documents every strategy must agree on. Each one is well formed: every
# non-void element is closed and void elements are written consistently.
SAMPLE_DOCUMENTS: Dict[str, str] = {
    'empty': "",
    'text_only': "just some text, no tags",
    'repeated_class': (
        '<div class="a"></div><div class="b"></div>'
        '<div class="a"></div><div class="c"></div>'
    ),
    'deep_nesting': "<a><b><c><d></d></c></b></a>",
    'siblings': "<ul><li>one</li><li>two</li><li>three</li></ul>",
    'valueless_attribute': '<input disabled><input disabled="">',
    'comments_and_text': (
        "<!DOCTYPE html><html><!-- note --><body>"
        "<p>Hello <b>world</b></p></body></html>"
    ),
    'mixed_case': (
        '<Catalog><Book ID="b1" Lang="en"><Name>A</Name></Book>'
        '<book id="b2"><name>B</name></book></Catalog>'
    ),
    'page': (
        "<!DOCTYPE html>\n"
        "<html lang=\"en\">\n"
        "<head>\n"
        "  <meta charset=\"utf-8\">\n"
        "  <title>Sample</title>\n"
        "  <link rel=\"stylesheet\" href=\"site.css\">\n"
        "</head>\n"
        "<body>\n"
        "  <div id=\"main\" class=\"container\">\n"
        "    <h1 class=\"title\">Heading</h1>\n"
        "    <p class=\"lead\">Intro <a href=\"/one\">one</a> and <a href=\"/two\">two</a></p>\n"
        "    <img src=\"logo.png\" alt=\"\">\n"
        "    <br>\n"
        "    <div class=\"container\"><span>nested</span></div>\n"
        "  </div>\n"
        "</body>\n"
        "</html>\n"
    ),
}


class DictNode(MarkupNode):
    """Hand-built node for synthetic trees.

    A node with a ``name`` is an element; one without is a text node.

    Example:
        >>> tree = DictNode("div", [("class", "a")], [
        ...     DictNode("p"),
        ...     DictNode(text="hello"),
        ... ])
    """

    def __init__(self,
                 name: Optional[str] = None,
                 attributes: Optional[AttributePairs] = None,
                 children: Optional[List['DictNode']] = None,
                 text: Optional[str] = None):
        self.name = name
        self._attributes = list(attributes or [])
        self._children = list(children or [])
        self.text = text

    def is_element(self) -> bool:
        return self.name is not None

    def element_name(self) -> Optional[str]:
        return self.name

    def attributes(self) -> AttributePairs:
        return list(self._attributes) if self.is_element() else []

    def children(self) -> Iterator['DictNode']:
        return iter(self._children)


class DictAdapter(DocumentAdapter):
    """Adapter over a list of DictNode roots."""

    def __init__(self, roots: List[DictNode]):
        self.roots = list(roots)

    def get_roots(self) -> List[MarkupNode]:
        return list(self.roots)

    def get_children(self, node: MarkupNode) -> Iterator[MarkupNode]:
        return node.children()


def nested_document(depth: int, tag: str = "div") -> str:
    """``depth`` nested ``tag`` elements, innermost containing text."""
    return f"<{tag}>" * depth + "x" + f"</{tag}>" * depth


class ResultTestHelper:
    """Public test fixture for AnalysisResult verification.

    Example:
        result = analyze_string(html)
        helper = ResultTestHelper(result)
        assert helper.check_invariants() == []
        assert helper.tag_counts() == {"div": 2}
    """

    def __init__(self, result: AnalysisResult):
        self.result = result

    def tag_counts(self) -> Dict[str, int]:
        return {name: tag.count for name, tag in self.result.tags.items()}

    def attribute_counts(self, tag: str) -> Dict[str, int]:
        return {
            name: attr.count
            for name, attr in self.result.tags[tag].attributes.items()
        }

    def value_counts(self, tag: str, attribute: str) -> Dict[str, int]:
        return self.result.tags[tag].attributes[attribute].value_counts.to_dict()

    def check_invariants(self, value_limit: Optional[int] = None) -> List[str]:
        """Check the structural invariants every finished result must satisfy.

        Args:
            value_limit: If given, also check no histogram exceeds it

        Returns:
            List of violations (empty if the result is consistent)
        """
        problems = []
        result = self.result

        if result.max_depth < 0:
            problems.append(f"max_depth is negative: {result.max_depth}")
        if result.files_analyzed != 1:
            problems.append(f"files_analyzed is {result.files_analyzed}, expected 1")

        for name, tag in result.tags.items():
            if tag.name != name:
                problems.append(f"tag key {name!r} holds stats for {tag.name!r}")
            if tag.count < 1:
                problems.append(f"tag {name!r} has count {tag.count}")
            for key, attr in tag.attributes.items():
                label = f"{name}@{key}"
                if attr.name != key:
                    problems.append(f"attribute key {label!r} holds stats for {attr.name!r}")
                if attr.count > tag.count:
                    problems.append(f"{label} counted {attr.count} times on {tag.count} elements")
                tracked = attr.value_counts.total()
                if attr.count < tracked:
                    problems.append(f"{label} count {attr.count} < tracked values {tracked}")
                if value_limit is not None and len(attr.value_counts) > value_limit:
                    problems.append(
                        f"{label} tracks {len(attr.value_counts)} values, limit {value_limit}"
                    )
        return problems

    def get_summary(self) -> Dict[str, Any]:
        """High-level numbers for quick assertions."""
        return {
            'distinct_tags': len(self.result.tags),
            'total_elements': self.result.total_elements(),
            'max_depth': self.result.max_depth,
            'files_analyzed': self.result.files_analyzed,
        }
