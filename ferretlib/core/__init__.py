"""Core abstractions for ferretlib.

This package holds the parser-independent pieces: the node and adapter
abstractions, the bounded histogram, the result model, the accumulator, and
the two traversal strategies.
"""

from .node import MarkupNode, ElementVisit, TokenKind, TokenEvent
from .adapter import DocumentAdapter
from .histogram import BoundedValueHistogram
from .model import AnalysisResult, TagStats, AttributeStats
from .accumulator import StatsAccumulator
from .traverser import Traversal, TreeWalker, StreamScanner

__all__ = [
    "MarkupNode",
    "ElementVisit",
    "TokenKind",
    "TokenEvent",
    "DocumentAdapter",
    "BoundedValueHistogram",
    "AnalysisResult",
    "TagStats",
    "AttributeStats",
    "StatsAccumulator",
    "Traversal",
    "TreeWalker",
    "StreamScanner",
]
