"""Exception types for ferretlib.

Only two kinds of failure ever reach a caller of the high-level API:

- SourceUnreadableError: the document could not be opened, read or decoded.
  The whole analysis fails and no result is returned.
- ConfigurationError: the requested analysis cannot be set up.

Malformed fragments inside a readable document are recovered locally by the
configured fragment policy (see :mod:`ferretlib.error_policies`). A value
arriving at a full histogram is never an error.
"""

from typing import Optional


class FerretError(Exception):
    """Base class for all ferretlib errors."""
    pass


class SourceUnreadableError(FerretError):
    """Raised when a document source cannot be opened, read or decoded."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class ConfigurationError(FerretError):
    """Raised when an AnalysisConfig is invalid."""
    pass


class MalformedFragmentError(FerretError):
    """A single token or attribute that could not be used.

    Fragment policies receive these. Under the default policy they are
    logged and skipped, so callers only see one when they opt into
    FailFastPolicy.
    """

    def __init__(self, message: str, fragment: Optional[str] = None,
                 position: Optional[tuple] = None):
        super().__init__(message)
        self.fragment = fragment
        self.position = position


class AccumulatorClosedError(FerretError):
    """Raised when recording into an accumulator that has been finished."""
    pass
