"""Bounded value histogram for attribute values.

Attribute values can have unbounded cardinality (ids, hrefs, inline styles),
so each attribute tracks its values in a counted set with a fixed admission
limit. The policy is first-seen wins:

- a value that is already tracked is always incremented, exactly;
- a new value is admitted only while fewer than ``limit`` values are tracked;
- any other new value is dropped without a trace. It is not counted and not
  folded into another entry.

The tracked set is therefore the first ``limit`` distinct values in visiting
order, frozen once the histogram is full.
"""

from collections.abc import Mapping
from typing import Dict, Iterator, List, Optional, Tuple


class BoundedValueHistogram(Mapping):
    """Counted set of at most ``limit`` distinct string values.

    Reads behave like a ``Dict[str, int]``; the only way to write is
    :meth:`add`.

    Example:
        >>> hist = BoundedValueHistogram(limit=2)
        >>> for value in ["a", "b", "c", "a"]:
        ...     _ = hist.add(value)
        >>> dict(hist)
        {'a': 2, 'b': 1}
    """

    def __init__(self, limit: int):
        """Create an empty histogram.

        Args:
            limit: Maximum number of distinct values to track (0 = none)

        Raises:
            ValueError: If limit is negative
        """
        if limit < 0:
            raise ValueError(f"histogram limit cannot be negative: {limit}")
        self._limit = limit
        self._counts: Dict[str, int] = {}

    @classmethod
    def from_counts(cls, counts: Dict[str, int],
                    limit: Optional[int] = None) -> 'BoundedValueHistogram':
        """Rebuild a histogram from previously exported counts.

        The original limit is not part of the exported data. Without an
        explicit ``limit`` the histogram is frozen at its stored size, so no
        new values are admitted after a round trip.

        Args:
            counts: Mapping of value to count
            limit: Admission limit to restore, if known

        Returns:
            BoundedValueHistogram holding the given counts
        """
        size = len(counts)
        hist = cls(size if limit is None else max(limit, size))
        for value, count in counts.items():
            if count < 0:
                raise ValueError(f"negative count for value {value!r}: {count}")
            hist._counts[str(value)] = int(count)
        return hist

    @property
    def limit(self) -> int:
        """Admission limit this histogram was built with."""
        return self._limit

    @property
    def is_full(self) -> bool:
        """True once no new distinct value can be admitted."""
        return len(self._counts) >= self._limit

    def add(self, value: str) -> bool:
        """Apply the admission policy to one occurrence of ``value``.

        Returns:
            True if the occurrence was counted, False if it was dropped
        """
        counts = self._counts
        if value in counts:
            counts[value] += 1
            return True
        if len(counts) < self._limit:
            counts[value] = 1
            return True
        return False

    def total(self) -> int:
        """Sum of all tracked counts."""
        return sum(self._counts.values())

    def most_common(self, n: Optional[int] = None) -> List[Tuple[str, int]]:
        """Tracked values sorted by count, highest first.

        Ties keep first-seen order.
        """
        ranked = sorted(self._counts.items(), key=lambda item: -item[1])
        return ranked if n is None else ranked[:n]

    def to_dict(self) -> Dict[str, int]:
        """Plain dict copy of the tracked counts."""
        return dict(self._counts)

    def __getitem__(self, value: str) -> int:
        return self._counts[value]

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other: object) -> bool:
        # Compares counts only, so a histogram equals the plain dict it exports.
        if isinstance(other, BoundedValueHistogram):
            return self._counts == other._counts
        if isinstance(other, Mapping):
            return self._counts == dict(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"BoundedValueHistogram(limit={self._limit}, counts={self._counts!r})"
