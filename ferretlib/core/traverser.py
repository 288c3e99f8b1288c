"""Traversal strategies for ferretlib.

Two traversals feed the same accumulator contract:

- TreeWalker walks a materialized tree in depth-first pre-order and offers
  every node kind together with its node depth.
- StreamScanner consumes a forward-only sequence of token events and rebuilds
  element nesting depth from a single counter.

Both are explicit-state external iterators rather than recursive generators.
All progress lives in the object, so a caller can pull a few items, go do
something else, and resume later with nothing lost.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import (Any, Deque, FrozenSet, Iterable, Iterator, List,
                    Optional, Tuple)

from .adapter import DocumentAdapter
from .node import ElementVisit, MarkupNode, TokenEvent, TokenKind

logger = logging.getLogger(__name__)


class Traversal(ABC):
    """Abstract base class for pausable traversals.

    A traversal is an iterator. ``next()`` produces exactly one unit of work
    and raises StopIteration once the source is exhausted. :meth:`pull` batches
    several units for chunked processing.
    """

    def __iter__(self) -> 'Traversal':
        return self

    @abstractmethod
    def __next__(self) -> Any:
        """Produce the next unit, or raise StopIteration when exhausted."""
        pass

    @property
    @abstractmethod
    def exhausted(self) -> bool:
        """True once the traversal has nothing left to produce."""
        pass

    def pull(self, limit: int) -> List[Any]:
        """Pull up to ``limit`` units.

        Args:
            limit: Maximum number of units to return

        Returns:
            List of units; shorter than limit only when exhausted
        """
        if limit < 0:
            raise ValueError(f"limit cannot be negative: {limit}")
        batch = []
        while len(batch) < limit:
            try:
                batch.append(next(self))
            except StopIteration:
                break
        return batch

    def close(self) -> None:
        """Release anything the traversal holds. Safe to call repeatedly."""
        pass

    def __enter__(self) -> 'Traversal':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class TreeWalker(Traversal):
    """Depth-first pre-order walk over a materialized tree.

    The work queue holds (node, depth) pairs and starts with the top-level
    nodes at depth 0. Each pull pops the front node and pushes its children
    onto the front in reverse order, so the leftmost child comes next. This is
    recursive pre-order DFS with an explicit queue instead of a call stack.

    Every node kind is offered, so text and comment nodes are visible to the
    caller. The caller decides what to record (see StatsAccumulator.visit).

    Example:
        >>> walker = TreeWalker(adapter)
        >>> for node, depth in walker.pull(100):
        ...     accumulator.visit(node, depth)
    """

    def __init__(self,
                 adapter: DocumentAdapter,
                 roots: Optional[Iterable[MarkupNode]] = None):
        """Initialize the walk.

        Args:
            adapter: DocumentAdapter that knows how to reach children
            roots: Top-level nodes to start from (default: adapter.get_roots())
        """
        self.adapter = adapter
        if roots is None:
            roots = adapter.get_roots()
        self._queue: Deque[Tuple[MarkupNode, int]] = deque(
            (root, 0) for root in roots
        )
        self.nodes_visited = 0

    @property
    def pending(self) -> int:
        """Number of nodes currently queued (not the remaining total)."""
        return len(self._queue)

    @property
    def exhausted(self) -> bool:
        return not self._queue

    def __next__(self) -> Tuple[MarkupNode, int]:
        if not self._queue:
            raise StopIteration
        node, depth = self._queue.popleft()

        children = list(self.adapter.get_children(node))
        for child in reversed(children):
            self._queue.appendleft((child, depth + 1))

        self.nodes_visited += 1
        return node, depth

    def close(self) -> None:
        self._queue.clear()


class StreamScanner(Traversal):
    """Element visits rebuilt from a forward-only token stream.

    Only one integer is kept for structure, the nesting counter. No stack
    of names is kept, so mismatched open/close pairs are not detected:

    - START increments the counter and yields a visit at the new value;
    - EMPTY yields a visit at the current value and leaves it alone;
    - END decrements the counter unless it is already zero. A stray close
      below zero is a no-op.

    Names listed in ``void_elements`` are HTML elements that never have
    content (``<br>``, ``<img>``). They match regardless of case. A START for
    one of them is handled as EMPTY, and an END for one of them is ignored.

    Example:
        >>> scanner = StreamScanner(TokenStream("<div><img/></div>"))
        >>> [(v.tag_name, v.depth) for v in scanner]
        [('div', 1), ('img', 1)]
    """

    def __init__(self,
                 events: Iterable[TokenEvent],
                 void_elements: FrozenSet[str] = frozenset()):
        """Initialize the scanner.

        Args:
            events: Token events in document order, consumed lazily
            void_elements: Element names that never open a nesting level
        """
        self._source = events
        self._events: Iterator[TokenEvent] = iter(events)
        self.void_elements = frozenset(name.lower() for name in void_elements)
        self.depth = 0
        self.max_depth = 0
        self.tokens_seen = 0
        self.stray_closes = 0
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def __next__(self) -> ElementVisit:
        if self._exhausted:
            raise StopIteration
        while True:
            try:
                event = next(self._events)
            except StopIteration:
                self._exhausted = True
                logger.debug(
                    "Stream scan finished: %d tokens, max depth %d, %d stray closes",
                    self.tokens_seen, self.max_depth, self.stray_closes,
                )
                self.close()
                raise

            self.tokens_seen += 1
            kind = event.kind
            is_void = event.name.lower() in self.void_elements
            if kind is TokenKind.START and is_void:
                kind = TokenKind.EMPTY

            if kind is TokenKind.START:
                self.depth += 1
                if self.depth > self.max_depth:
                    self.max_depth = self.depth
                return ElementVisit(event.name, list(event.attributes), self.depth)

            if kind is TokenKind.EMPTY:
                return ElementVisit(event.name, list(event.attributes), self.depth)

            # TokenKind.END
            if is_void:
                continue
            if self.depth > 0:
                self.depth -= 1
            else:
                self.stray_closes += 1

    def close(self) -> None:
        close = getattr(self._source, 'close', None)
        if close is not None:
            close()
