"""Configuration system for ferretlib.

This module defines how callers specify an analysis run: which traversal
strategy to use, how many distinct attribute values to keep, how the source
is read and decoded, and what to do with malformed fragments.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Union

from .error_policies import FailFastPolicy, FragmentPolicy, SkipFragmentPolicy


# Elements that never have content in HTML, including the obsolete ones the
# tree builder also closes immediately. The streaming scanner treats an
# unslashed open tag for one of these as self-closing.
HTML_VOID_ELEMENTS: FrozenSet[str] = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "keygen",
    "link", "menuitem", "meta", "param", "source", "track", "wbr",
    "basefont", "bgsound", "command", "frame", "image", "isindex", "nextid",
    "spacer",
})

DEFAULT_VALUE_LIMIT = 10
DEFAULT_CHUNK_SIZE = 64 * 1024


class TraversalStrategy(Enum):
    """How to traverse the document.

    TREE parses the whole document into memory and walks it. STREAM scans
    tokens forward-only with memory bounded by nesting depth, and is the one
    to use for large documents.
    """
    TREE = "tree"
    STREAM = "stream"


def parse_strategy(strategy: Union[TraversalStrategy, str]) -> TraversalStrategy:
    """Parse strategy from string or enum.

    Args:
        strategy: Strategy as enum or string ("tree", "dom", "stream", ...)

    Returns:
        TraversalStrategy enum value

    Raises:
        ValueError: If strategy name is not recognized
    """
    if isinstance(strategy, TraversalStrategy):
        return strategy

    strategy_map = {
        'tree': TraversalStrategy.TREE,
        'dom': TraversalStrategy.TREE,
        'materialized': TraversalStrategy.TREE,
        'stream': TraversalStrategy.STREAM,
        'streaming': TraversalStrategy.STREAM,
        'scan': TraversalStrategy.STREAM,
    }

    strategy_lower = strategy.lower() if isinstance(strategy, str) else str(strategy)
    if strategy_lower in strategy_map:
        return strategy_map[strategy_lower]

    raise ValueError(
        f"Unknown traversal strategy: {strategy}. "
        f"Choose from: {', '.join(strategy_map.keys())}"
    )


@dataclass
class AnalysisConfig:
    """Complete configuration for one analysis run.

    The value limit is fixed for the run: it is handed to the accumulator at
    construction and never read from global state.
    """

    # Traversal
    strategy: TraversalStrategy = TraversalStrategy.TREE

    # Bounded histograms
    value_limit: int = DEFAULT_VALUE_LIMIT

    # Source reading
    chunk_size: int = DEFAULT_CHUNK_SIZE      # characters/bytes per read
    encoding: str = "utf-8"
    encoding_errors: str = "replace"          # "strict" turns bad bytes into SourceUnreadableError

    # Streaming structure
    void_elements: FrozenSet[str] = HTML_VOID_ELEMENTS

    # Error handling
    fragment_policy: FragmentPolicy = field(default_factory=SkipFragmentPolicy)

    # Progress reporting
    progress_callback: Optional[Callable[[int], None]] = None
    progress_interval: int = 1000  # Report every N units

    @classmethod
    def large_document(cls, value_limit: int = DEFAULT_VALUE_LIMIT,
                       chunk_size: int = 256 * 1024) -> 'AnalysisConfig':
        """Create config for documents too large to hold as a tree.

        Args:
            value_limit: Distinct values kept per attribute
            chunk_size: Bytes read per step

        Returns:
            AnalysisConfig using the streaming strategy
        """
        return cls(
            strategy=TraversalStrategy.STREAM,
            value_limit=value_limit,
            chunk_size=chunk_size,
        )

    @classmethod
    def strict(cls, **kwargs) -> 'AnalysisConfig':
        """Create config that fails on bad bytes and malformed fragments."""
        kwargs.setdefault('encoding_errors', 'strict')
        kwargs.setdefault('fragment_policy', FailFastPolicy())
        return cls(**kwargs)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.strategy, TraversalStrategy):
            errors.append(f"strategy must be a TraversalStrategy, got {self.strategy!r}")

        if not isinstance(self.value_limit, int) or self.value_limit < 0:
            errors.append("value_limit must be a non-negative integer")

        if self.chunk_size <= 0:
            errors.append("chunk_size must be positive")

        if self.progress_interval <= 0:
            errors.append("progress_interval must be positive")

        if self.encoding_errors not in ("strict", "replace", "ignore"):
            errors.append("encoding_errors must be one of: strict, replace, ignore")

        try:
            "".encode(self.encoding)
        except LookupError:
            errors.append(f"unknown encoding: {self.encoding}")

        if not isinstance(self.fragment_policy, FragmentPolicy):
            errors.append("fragment_policy must be a FragmentPolicy instance")

        return errors
