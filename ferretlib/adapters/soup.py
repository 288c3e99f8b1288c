"""BeautifulSoup adapter for ferretlib.

Builds a materialized tree with ``beautifulsoup4`` and its ``html.parser``
builder, and exposes it through the MarkupNode/DocumentAdapter abstractions
so TreeWalker can walk it.

Using the same underlying tokenizer as the streaming path keeps the two
strategies in agreement. The builder folds names to lower case, so
:meth:`SoupAdapter.from_markup` re-reads each start tag at the position bs4
recorded for it and restores the names as written. Names that are not names
at all (``"oops"``) go to the fragment policy, as they do when streaming.
"""

import logging
import re
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup, Tag
from bs4.element import PageElement

from ..core.adapter import DocumentAdapter
from ..core.node import AttributePairs, MarkupNode
from ..error_policies import FragmentPolicy, SkipFragmentPolicy
from ..errors import MalformedFragmentError
from .names import is_valid_name, restore_names, written_start_tag

logger = logging.getLogger(__name__)


class SoupNode(MarkupNode):
    """Concrete node wrapping a bs4 PageElement.

    Tags are elements; strings, comments, doctypes and processing
    instructions are non-element nodes.
    """

    def __init__(self, element: PageElement):
        self.element = element

    def is_element(self) -> bool:
        return isinstance(self.element, Tag)

    def element_name(self) -> Optional[str]:
        if isinstance(self.element, Tag):
            return self.element.name
        return None

    def attributes(self) -> AttributePairs:
        if not isinstance(self.element, Tag):
            return []
        pairs: AttributePairs = []
        for key, value in self.element.attrs.items():
            # multi_valued_attributes is disabled, but a caller-built soup may
            # still hold list values such as class=["a", "b"]
            if isinstance(value, (list, tuple)):
                value = " ".join(value)
            # bs4 may hand back str subclasses (e.g. for <meta charset>)
            pairs.append((key, str(value)))
        return pairs

    def children(self) -> Iterator['SoupNode']:
        if not isinstance(self.element, Tag):
            return iter([])
        return (SoupNode(child) for child in self.element.contents)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SoupNode):
            return NotImplemented
        return self.element is other.element

    def __hash__(self) -> int:
        return id(self.element)


class SoupAdapter(DocumentAdapter):
    """Adapter for trees parsed by BeautifulSoup.

    Example:
        >>> adapter = SoupAdapter.from_markup('<div class="a"><p>Hi</p></div>')
        >>> [n.element_name() for n in adapter.get_roots()]
        ['div']
    """

    PARSER = "html.parser"

    def __init__(self, soup: BeautifulSoup):
        """Initialize adapter around an already-parsed document.

        Args:
            soup: Parsed BeautifulSoup document
        """
        self.soup = soup

    @classmethod
    def from_markup(cls,
                    markup: str,
                    policy: Optional[FragmentPolicy] = None) -> 'SoupAdapter':
        """Parse markup into a tree.

        Attribute values are kept as the literal strings from the document.
        bs4 would otherwise split ``class`` and friends into lists. Tag and
        attribute names keep the spelling they have in ``markup``.

        Args:
            markup: Document text
            policy: Malformed-fragment policy (default: skip and log)

        Returns:
            SoupAdapter over the parsed document

        Raises:
            MalformedFragmentError: If the policy fails on an invalid name
        """
        soup = BeautifulSoup(markup, cls.PARSER, multi_valued_attributes=None)
        _restore_written_names(soup, markup, policy or SkipFragmentPolicy())
        logger.debug("Parsed document: %d top-level nodes", len(soup.contents))
        return cls(soup)

    def get_roots(self) -> List[MarkupNode]:
        return [SoupNode(child) for child in self.soup.contents]

    def get_children(self, node: MarkupNode) -> Iterator[MarkupNode]:
        if not isinstance(node, SoupNode):
            return iter([])
        return node.children()

    def is_leaf(self, node: MarkupNode) -> bool:
        element = node.element if isinstance(node, SoupNode) else None
        return not (isinstance(element, Tag) and element.contents)


def _restore_written_names(soup: BeautifulSoup, markup: str, policy: FragmentPolicy) -> None:
    """Rename every tag and attribute key back to its source spelling.

    bs4 records the (line, column) of each start tag. Lines are counted on
    ``\\n`` the same way html.parser counts them. A tag whose name is invalid
    is unwrapped so its children take its place, matching a stream scan that
    skips the tag.
    """
    line_starts = [0] + [m.end() for m in re.finditer("\n", markup)]

    for tag in soup.find_all(True):
        written = None
        line, column = tag.sourceline, tag.sourcepos
        if line is not None and column is not None and 0 < line <= len(line_starts):
            written = written_start_tag(markup, line_starts[line - 1] + column)
        name, keys = restore_names(tag.name, list(tag.attrs), written)

        if not is_valid_name(name):
            policy.handle(MalformedFragmentError(
                f"Invalid tag name {name!r}", fragment=name, position=(line, column)
            ))
            tag.unwrap()
            continue

        attrs = {}
        for key, value in zip(keys, tag.attrs.values()):
            if not is_valid_name(key):
                policy.handle(MalformedFragmentError(
                    f"Invalid attribute name {key!r} on <{name}>",
                    fragment=key, position=(line, column),
                ))
                continue
            attrs[key] = value
        tag.name = name
        tag.attrs = attrs
