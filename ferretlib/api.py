"""High-level API for ferretlib.

This module provides simple, functional interfaces for common analysis
operations. These functions wrap ExecutionPlan and AnalysisSession for ease
of use in simple cases.
"""

import dataclasses
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from .adapters.stream import StreamSource
from .config import AnalysisConfig, TraversalStrategy, parse_strategy
from .core.adapter import DocumentAdapter
from .core.model import AnalysisResult
from .core.node import ElementVisit, MarkupNode
from .core.traverser import TreeWalker
from .errors import ConfigurationError
from .planning import AnalysisSource, ExecutionPlan
from .session import AnalysisSession

logger = logging.getLogger(__name__)


def analyze_string(
    markup: Union[str, bytes],
    value_limit: Optional[int] = None,
    strategy: Union[TraversalStrategy, str, None] = None,
    config: Optional[AnalysisConfig] = None,
    **kwargs
) -> AnalysisResult:
    """Analyze a document held in memory.

    Args:
        markup: Document text, or bytes in the configured encoding
        value_limit: Distinct values kept per attribute (default 10)
        strategy: "tree" (default unless config says otherwise) or "stream"
        config: Full configuration; keyword options override its fields
        **kwargs: Additional AnalysisConfig fields

    Returns:
        AnalysisResult for the document

    Example:
        >>> result = analyze_string('<a href="x"></a><a href="x"></a>')
        >>> result.tags["a"].attributes["href"].value_counts["x"]
        2
    """
    plan = ExecutionPlan(_build_config(config, strategy, value_limit,
                                       default=TraversalStrategy.TREE, **kwargs))
    result = plan.execute(markup)
    _log_result("string", plan, result)
    return result


def analyze_file(
    path: Union[str, os.PathLike],
    value_limit: Optional[int] = None,
    strategy: Union[TraversalStrategy, str, None] = None,
    config: Optional[AnalysisConfig] = None,
    **kwargs
) -> AnalysisResult:
    """Analyze a document on disk.

    Files default to the streaming strategy so memory stays bounded by
    nesting depth regardless of file size.

    Raises:
        SourceUnreadableError: If the file is missing or unreadable
    """
    path = Path(path)
    plan = ExecutionPlan(_build_config(config, strategy, value_limit,
                                       default=TraversalStrategy.STREAM, **kwargs))
    result = plan.execute(path)
    _log_result(str(path), plan, result)
    return result


def analyze_stream(
    source: StreamSource,
    value_limit: Optional[int] = None,
    config: Optional[AnalysisConfig] = None,
    **kwargs
) -> AnalysisResult:
    """Analyze a file object or an iterable of chunks with the streaming strategy."""
    plan = ExecutionPlan(
        _build_config(config, TraversalStrategy.STREAM, value_limit, **kwargs)
    )
    result = plan.execute(source)
    _log_result(type(source).__name__, plan, result)
    return result


def analyze_tree(
    adapter: DocumentAdapter,
    value_limit: Optional[int] = None,
    roots: Optional[Iterable[MarkupNode]] = None,
) -> AnalysisResult:
    """Analyze an already-materialized tree.

    Args:
        adapter: Adapter over the parsed document
        value_limit: Distinct values kept per attribute (default 10)
        roots: Start from these nodes instead of the adapter's roots
    """
    plan = ExecutionPlan(
        _build_config(None, TraversalStrategy.TREE, value_limit)
    )
    session = AnalysisSession(TreeWalker(adapter, roots), plan.new_accumulator())
    result = session.run()
    _log_result(type(adapter).__name__, plan, result)
    return result


def open_session(
    source: AnalysisSource,
    value_limit: Optional[int] = None,
    strategy: Union[TraversalStrategy, str, None] = None,
    config: Optional[AnalysisConfig] = None,
    **kwargs
) -> AnalysisSession:
    """Prepare a chunked session without running it.

    Paths default to the streaming strategy, everything else to the tree
    strategy. A ``str`` is always markup here; wrap file names in Path.

    Example:
        >>> session = open_session(Path("big.html"))
        >>> while session.step(1000):
        ...     print(session.progress().units_processed)
        >>> result = session.result()
    """
    default = (TraversalStrategy.STREAM if isinstance(source, os.PathLike)
               else TraversalStrategy.TREE)
    plan = ExecutionPlan(_build_config(config, strategy, value_limit,
                                       default=default, **kwargs))
    return plan.session(source)


def iter_element_visits(
    source: AnalysisSource,
    strategy: Union[TraversalStrategy, str] = TraversalStrategy.TREE,
    config: Optional[AnalysisConfig] = None,
    **kwargs
) -> Iterator[ElementVisit]:
    """Yield every element visit of a document without accumulating.

    Both strategies yield the same ElementVisit shape. Tree walks skip
    non-element nodes and report element nesting depth.
    """
    plan = ExecutionPlan(_build_config(config, strategy, None, **kwargs))
    with plan.build_traversal(source) as traversal:
        if isinstance(traversal, TreeWalker):
            for node, depth in traversal:
                if node.is_element():
                    yield ElementVisit(node.element_name(), node.attributes(), depth + 1)
        else:
            yield from traversal


def _build_config(config: Optional[AnalysisConfig],
                  strategy: Union[TraversalStrategy, str, None],
                  value_limit: Optional[int],
                  default: Optional[TraversalStrategy] = None,
                  **kwargs) -> AnalysisConfig:
    """Build AnalysisConfig from a base config and keyword arguments.

    Args:
        config: Base configuration (default: AnalysisConfig())
        strategy: Strategy override, or None to keep the base one
        value_limit: Value limit override, or None to keep the base one
        default: Strategy to use when neither strategy nor config is given
        **kwargs: Other AnalysisConfig fields

    Returns:
        AnalysisConfig instance

    Raises:
        ConfigurationError: If the strategy name is not recognized
        TypeError: If a keyword is not an AnalysisConfig field
    """
    if strategy is None and config is None:
        strategy = default
    config = config or AnalysisConfig()
    overrides = dict(kwargs)
    if strategy is not None:
        try:
            overrides['strategy'] = parse_strategy(strategy)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
    if value_limit is not None:
        overrides['value_limit'] = value_limit

    if not overrides:
        return config
    return dataclasses.replace(config, **overrides)


def _log_result(label: str, plan: ExecutionPlan, result: AnalysisResult) -> None:
    logger.info(
        "Analyzed %s (%s): %d elements, %d distinct tags, max depth %d",
        label, plan.strategy.value, result.total_elements(),
        len(result.tags), result.max_depth,
    )
