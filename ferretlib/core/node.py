"""MarkupNode abstraction for ferretlib.

A MarkupNode is a read-only view of one piece of a markup document. It answers
three questions: is this an element, what is its tag name, and which attributes
does it carry. How to get from a node to its children is the job of the
DocumentAdapter. Materialized nodes also offer ``children()`` directly. Stream
tokens have no children at all and rely on the scanner's nesting counter.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple


# (key, value) pairs in document order. A key written without "=value" has
# a value of None.
AttributePairs = List[Tuple[str, Optional[str]]]


class MarkupNode(ABC):
    """Abstract base class for any node handed to a traversal.

    Implementations must be cheap to create: traversals wrap parser objects
    on demand and drop them as soon as they have been visited.
    """

    @abstractmethod
    def is_element(self) -> bool:
        """Check if this node is an element (as opposed to text, comments, etc.).

        Returns:
            bool: True for tagged element nodes
        """
        pass

    @abstractmethod
    def element_name(self) -> Optional[str]:
        """Return the tag name, or None for non-element nodes."""
        pass

    @abstractmethod
    def attributes(self) -> AttributePairs:
        """Return the ordered attribute list of this node.

        Malformed attributes are never an error: a key with no value is
        reported as ``(key, None)``. Non-element nodes return an empty list.

        Returns:
            List of (key, value-or-None) tuples in document order
        """
        pass

    def children(self) -> Iterator['MarkupNode']:
        """Child nodes in document order, for nodes that have them.

        Raises:
            TypeError: For node kinds without children (stream tokens)
        """
        raise TypeError(f"{self.__class__.__name__} has no children")

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        if self.is_element():
            return f"{self.__class__.__name__}(<{self.element_name()}>)"
        return f"{self.__class__.__name__}(#non-element)"


class ElementVisit(NamedTuple):
    """One element visit, the unit both traversal strategies produce.

    ``depth`` follows the element-nesting convention: a top-level element is
    at depth 1, its element children at depth 2, and so on.
    """
    tag_name: str
    attributes: AttributePairs
    depth: int


class TokenKind(Enum):
    """Kinds of token a streaming tokenizer emits."""
    START = "start"   # <div ...>
    EMPTY = "empty"   # <img ... /> or a void element
    END = "end"       # </div>


class TokenEvent(NamedTuple):
    """A single tokenizer event. ``attributes`` is empty for END events."""
    kind: TokenKind
    name: str
    attributes: Sequence[Tuple[str, Optional[str]]] = ()
