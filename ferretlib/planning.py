"""Execution planning for ferretlib.

The ExecutionPlan validates an AnalysisConfig once and assembles the pieces
of a run from it: a fresh accumulator, and the traversal that suits both the
configured strategy and the source being analyzed.
"""

import logging
import os
from typing import Optional, Union

from .adapters.soup import SoupAdapter
from .adapters.stream import StreamSource, TokenStream, read_markup
from .config import AnalysisConfig, TraversalStrategy
from .core.accumulator import StatsAccumulator
from .core.adapter import DocumentAdapter
from .core.model import AnalysisResult
from .core.traverser import StreamScanner, Traversal, TreeWalker
from .errors import ConfigurationError
from .session import AnalysisSession

logger = logging.getLogger(__name__)

AnalysisSource = Union[StreamSource, os.PathLike, DocumentAdapter]


class ExecutionPlan:
    """Validated plan for analyzing documents.

    The plan is the bridge between what the caller asked for
    (AnalysisConfig) and the objects that do the work. Configuration
    problems surface here, before any source is opened.

    One plan can run any number of analyses. Each call builds its own
    traversal and accumulator, so runs never share mutable state.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """Create and validate an execution plan.

        Args:
            config: Analysis configuration (default: AnalysisConfig())

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self.config = config or AnalysisConfig()

        config_errors = self.config.validate()
        if config_errors:
            raise ConfigurationError(
                f"Invalid configuration: {'; '.join(config_errors)}"
            )

    @property
    def strategy(self) -> TraversalStrategy:
        return self.config.strategy

    def new_accumulator(self) -> StatsAccumulator:
        return StatsAccumulator(value_limit=self.config.value_limit)

    def build_traversal(self, source: AnalysisSource) -> Traversal:
        """Build the traversal for one source.

        A DocumentAdapter is walked as-is. Anything else is read according
        to the configured strategy: parsed whole into a tree for TREE, or
        tokenized lazily for STREAM.

        Raises:
            ConfigurationError: If a parsed tree is given to the streaming
                strategy
            SourceUnreadableError: If the source cannot be opened or read
        """
        config = self.config

        if isinstance(source, DocumentAdapter):
            if config.strategy is TraversalStrategy.STREAM:
                raise ConfigurationError(
                    "Streaming strategy needs a byte or character source, not a parsed tree"
                )
            return TreeWalker(source)

        if config.strategy is TraversalStrategy.TREE:
            markup = read_markup(
                source,
                encoding=config.encoding,
                encoding_errors=config.encoding_errors,
                chunk_size=config.chunk_size,
            )
            return TreeWalker(SoupAdapter.from_markup(markup, policy=config.fragment_policy))

        stream_kwargs = dict(
            chunk_size=config.chunk_size,
            encoding=config.encoding,
            encoding_errors=config.encoding_errors,
            policy=config.fragment_policy,
        )
        if isinstance(source, os.PathLike):
            stream = TokenStream.from_path(source, **stream_kwargs)
        else:
            stream = TokenStream(source, **stream_kwargs)
        return StreamScanner(stream, void_elements=config.void_elements)

    def session(self, source: AnalysisSource) -> AnalysisSession:
        """Prepare a chunked session over ``source`` without running it."""
        return AnalysisSession(
            self.build_traversal(source),
            self.new_accumulator(),
            progress_callback=self.config.progress_callback,
            progress_interval=self.config.progress_interval,
        )

    def execute(self, source: AnalysisSource) -> AnalysisResult:
        """Run a complete analysis of ``source``.

        Returns:
            The AnalysisResult for the source, with files_analyzed == 1
        """
        with self.session(source) as session:
            result = session.run()
        logger.debug(
            "Executed %s plan: %d tags, max depth %d",
            self.strategy.value, len(result.tags), result.max_depth,
        )
        return result
