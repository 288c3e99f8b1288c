"""Chunked, resumable analysis sessions.

An AnalysisSession couples one traversal with one accumulator and advances
them in caller-sized chunks: "process up to N units, report progress, give
control back, resume later". It keeps no scheduling machinery of its own.
The caller's loop decides when to call :meth:`AnalysisSession.step` again,
or stops calling it to cancel.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .core.accumulator import StatsAccumulator
from .core.model import AnalysisResult
from .core.traverser import Traversal, TreeWalker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionProgress:
    """Snapshot of how far a session has got."""
    units_processed: int
    elements_recorded: int
    complete: bool
    cancelled: bool = False


class AnalysisSession:
    """Drive a traversal into an accumulator a chunk at a time.

    For a tree walk a unit is one node of any kind. For a stream scan it is
    one element visit.

    Example:
        >>> session = open_session(html)
        >>> while session.step(500):
        ...     report(session.progress())
        >>> result = session.result()
    """

    def __init__(self,
                 traversal: Traversal,
                 accumulator: StatsAccumulator,
                 progress_callback: Optional[Callable[[int], None]] = None,
                 progress_interval: int = 1000):
        """Create a session.

        Args:
            traversal: TreeWalker or StreamScanner to pull from
            accumulator: Accumulator owned by this session from now on
            progress_callback: Called with units processed so far
            progress_interval: Units between progress callbacks
        """
        self.traversal = traversal
        self.accumulator = accumulator
        self.progress_callback = progress_callback
        self.progress_interval = progress_interval
        self.units_processed = 0
        self._next_report = progress_interval
        self._last_reported = 0
        self._complete = False
        self._cancelled = False
        self._tree_mode = isinstance(traversal, TreeWalker)

    @property
    def complete(self) -> bool:
        return self._complete

    def step(self, chunk_size: int = 100) -> bool:
        """Process up to ``chunk_size`` units.

        Args:
            chunk_size: Maximum units to process in this call

        Returns:
            True if more work may remain, False once the traversal is
            exhausted (or the session was cancelled)

        Raises:
            SourceUnreadableError: If the source fails mid-read. The session
                is closed and cannot be resumed.
        """
        if self._complete or self._cancelled:
            return False
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive: {chunk_size}")

        try:
            units = self.traversal.pull(chunk_size)
        except Exception:
            self.cancel()
            raise

        for unit in units:
            if self._tree_mode:
                node, depth = unit
                self.accumulator.visit(node, depth)
            else:
                self.accumulator.record(unit.tag_name, unit.attributes, unit.depth)
        self.units_processed += len(units)
        self._report_progress()

        if len(units) < chunk_size or self.traversal.exhausted:
            self._finish()
            return False
        return True

    def run(self, chunk_size: int = 1000) -> AnalysisResult:
        """Step until done and return the final result."""
        while self.step(chunk_size):
            pass
        return self.result()

    def _report_progress(self) -> None:
        if self.progress_callback is None:
            return
        if self.units_processed >= self._next_report:
            self._notify()
            while self._next_report <= self.units_processed:
                self._next_report += self.progress_interval

    def _notify(self) -> None:
        self._last_reported = self.units_processed
        self.progress_callback(self.units_processed)

    def _finish(self) -> None:
        self._complete = True
        self.traversal.close()
        self.accumulator.finish()
        if self.progress_callback is not None and self._last_reported != self.units_processed:
            self._notify()
        logger.debug("Session complete after %d units", self.units_processed)

    def progress(self) -> SessionProgress:
        return SessionProgress(
            units_processed=self.units_processed,
            elements_recorded=self.accumulator.nodes_recorded,
            complete=self._complete,
            cancelled=self._cancelled,
        )

    def partial_result(self) -> AnalysisResult:
        """Independent snapshot of the statistics so far.

        ``files_analyzed`` stays 0 until the document has been fully
        traversed.
        """
        snapshot = self.accumulator.result()
        if not self._complete:
            snapshot.files_analyzed = 0
        return snapshot

    def result(self) -> AnalysisResult:
        """The final result of a completed session.

        Raises:
            RuntimeError: If the traversal has not finished yet
        """
        if not self._complete:
            raise RuntimeError("Analysis is not complete; call step() until it returns False")
        return self.accumulator.finish()

    def cancel(self) -> None:
        """Stop the session and release the traversal. Idempotent."""
        if not self._complete and not self._cancelled:
            self._cancelled = True
            self.traversal.close()
            logger.debug("Session cancelled after %d units", self.units_processed)

    close = cancel

    def __enter__(self) -> 'AnalysisSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cancel()
