"""DocumentAdapter abstraction for ferretlib.

The adapter owns the navigation logic for one kind of materialized document.
MarkupNode stays a plain read-only view, and the adapter knows how to get
from a node to its children. This keeps the tree walk independent of the
parser that built the tree.
"""

from abc import ABC, abstractmethod
from typing import Iterator, List

from .node import MarkupNode


class DocumentAdapter(ABC):
    """Abstract adapter for navigating a materialized markup tree."""

    @abstractmethod
    def get_roots(self) -> List[MarkupNode]:
        """Return the document's top-level nodes in document order.

        Returns:
            List of top-level MarkupNode instances (possibly empty)
        """
        pass

    @abstractmethod
    def get_children(self, node: MarkupNode) -> Iterator[MarkupNode]:
        """Get an iterator of child nodes in original document order.

        Non-element nodes have no children and yield nothing.

        Args:
            node: The parent node

        Returns:
            Iterator yielding child MarkupNode instances
        """
        pass

    def is_leaf(self, node: MarkupNode) -> bool:
        """Check if a node has no children.

        Default implementation asks get_children; adapters can override
        with something cheaper.
        """
        for _ in self.get_children(node):
            return False
        return True

    def supports_random_access(self) -> bool:
        """Check if the adapter can revisit arbitrary nodes.

        Materialized trees can; forward-only token streams cannot, which is
        why they are scanned instead of walked.
        """
        return True
