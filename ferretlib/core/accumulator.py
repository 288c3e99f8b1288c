"""Statistics accumulation for ferretlib.

The StatsAccumulator is the single point where both traversal strategies
meet. Whatever produced an element visit, a tree walk or a token scan, it is
folded in with one call to :meth:`StatsAccumulator.record`.
"""

import copy
import logging
from typing import Iterable, Optional, Tuple

from .histogram import BoundedValueHistogram
from .model import AnalysisResult, AttributeStats, TagStats
from .node import MarkupNode
from ..errors import AccumulatorClosedError

logger = logging.getLogger(__name__)


class StatsAccumulator:
    """Owns the AnalysisResult of one traversal and mutates it per visit.

    Each traversal gets its own accumulator. Nothing else holds a mutable
    reference to the result until :meth:`finish` hands it over. Calls only
    ever add: counts grow and entries are created, never removed.

    Example:
        >>> acc = StatsAccumulator(value_limit=10)
        >>> acc.record("div", [("class", "a")], depth=1)
        >>> acc.finish().tags["div"].count
        1
    """

    def __init__(self, value_limit: int = 10):
        """Create an accumulator with an empty result.

        Args:
            value_limit: Admission limit for every attribute-value histogram.
                Fixed for the lifetime of the accumulator.

        Raises:
            ValueError: If value_limit is negative
        """
        if value_limit < 0:
            raise ValueError(f"value_limit cannot be negative: {value_limit}")
        self._value_limit = value_limit
        self._result = AnalysisResult(files_analyzed=1)
        self._closed = False
        self.nodes_recorded = 0
        self.values_dropped = 0

    @property
    def value_limit(self) -> int:
        return self._value_limit

    @property
    def closed(self) -> bool:
        return self._closed

    def record(self,
               tag_name: str,
               attribute_pairs: Iterable[Tuple[str, Optional[str]]],
               depth: int) -> None:
        """Fold one element visit into the result.

        Args:
            tag_name: Element name
            attribute_pairs: (key, value-or-None) pairs; None counts as ""
            depth: Nesting depth of the element

        Raises:
            AccumulatorClosedError: If finish() was already called
            ValueError: If depth is negative
        """
        if self._closed:
            raise AccumulatorClosedError("Cannot record into a finished accumulator")
        if depth < 0:
            raise ValueError(f"depth cannot be negative: {depth}")

        result = self._result
        if depth > result.max_depth:
            result.max_depth = depth

        tag_stats = result.tags.get(tag_name)
        if tag_stats is None:
            tag_stats = result.tags[tag_name] = TagStats(name=tag_name)
        tag_stats.count += 1

        for key, value in attribute_pairs:
            attr_stats = tag_stats.attributes.get(key)
            if attr_stats is None:
                attr_stats = tag_stats.attributes[key] = AttributeStats(
                    name=key,
                    value_counts=BoundedValueHistogram(self._value_limit),
                )
            attr_stats.count += 1
            if not attr_stats.value_counts.add(value or ""):
                self.values_dropped += 1

        self.nodes_recorded += 1

    def visit(self, node: MarkupNode, node_depth: int) -> bool:
        """Record a materialized node offered by a tree walk.

        Tree walks number every node kind from 0 at the top level. An element
        at node depth ``d`` has exactly ``d`` enclosing elements, so it is
        recorded at nesting depth ``d + 1``. That matches the streaming
        counter. Text, comments and other non-element nodes are skipped and
        never affect ``max_depth``.

        Returns:
            True if the node was recorded
        """
        if not node.is_element():
            return False
        self.record(node.element_name(), node.attributes(), node_depth + 1)
        return True

    def result(self) -> AnalysisResult:
        """Return an independent snapshot of the current result."""
        return copy.deepcopy(self._result)

    def finish(self) -> AnalysisResult:
        """Close the accumulator and hand over the owned result."""
        if not self._closed:
            self._closed = True
            logger.debug(
                "Accumulator finished: %d elements, %d tags, max depth %d, %d values dropped",
                self.nodes_recorded, len(self._result.tags),
                self._result.max_depth, self.values_dropped,
            )
        return self._result
