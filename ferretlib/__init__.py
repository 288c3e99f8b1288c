"""ferretlib - Structural statistics for markup documents.

ferretlib counts tags, attribute keys and attribute values, and finds the
maximum nesting depth of an HTML/XML document. Attribute-value histograms
are bounded, so memory stays flat however many distinct values a document
holds.

Choose your traversal:
━━━━━━━━━━━━━━━━━━━━━━━━━━
Materialized tree (small and medium documents):
    from ferretlib import analyze_string
    result = analyze_string(html)

Streaming scan (large files, bounded memory):
    from ferretlib import analyze_file
    result = analyze_file("page.html")

Chunked, resumable:
    session = open_session(Path("page.html"))
    while session.step(1000):
        ...
━━━━━━━━━━━━━━━━━━━━━━━━━━

Both strategies feed the same accumulator and produce the same
AnalysisResult shape.
"""

__version__ = "0.1.0"

from .api import (
    analyze_file,
    analyze_stream,
    analyze_string,
    analyze_tree,
    iter_element_visits,
    open_session,
)
from .config import AnalysisConfig, TraversalStrategy
from .core import (
    AnalysisResult,
    AttributeStats,
    BoundedValueHistogram,
    ElementVisit,
    StatsAccumulator,
    StreamScanner,
    TagStats,
    TreeWalker,
)
from .errors import (
    AccumulatorClosedError,
    ConfigurationError,
    FerretError,
    MalformedFragmentError,
    SourceUnreadableError,
)
from .planning import ExecutionPlan
from .session import AnalysisSession, SessionProgress

__all__ = [
    "__version__",
    # API
    "analyze_file",
    "analyze_stream",
    "analyze_string",
    "analyze_tree",
    "iter_element_visits",
    "open_session",
    # Configuration and execution
    "AnalysisConfig",
    "TraversalStrategy",
    "ExecutionPlan",
    "AnalysisSession",
    "SessionProgress",
    # Model and engine
    "AnalysisResult",
    "AttributeStats",
    "BoundedValueHistogram",
    "ElementVisit",
    "StatsAccumulator",
    "StreamScanner",
    "TagStats",
    "TreeWalker",
    # Errors
    "AccumulatorClosedError",
    "ConfigurationError",
    "FerretError",
    "MalformedFragmentError",
    "SourceUnreadableError",
]
