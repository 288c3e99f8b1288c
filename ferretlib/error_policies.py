"""
Fragment error policies for ferretlib.

A streaming scan favours resilience over strictness: a token or attribute
that cannot be used is a malformed fragment, not a failed analysis. The
policy decides what happens to such a fragment. Skipping is the default.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from .errors import MalformedFragmentError

logger = logging.getLogger(__name__)


class FragmentPolicy(ABC):
    """
    Base class for malformed-fragment policies.

    Subclasses decide whether a fragment is skipped quietly, kept for later
    inspection, or turned into a hard failure.
    """

    @abstractmethod
    def handle(self, error: MalformedFragmentError) -> None:
        """
        Handle one malformed fragment.

        Args:
            error: Description of the fragment that was skipped

        Raises:
            MalformedFragmentError: If the policy refuses to continue
        """
        pass


class SkipFragmentPolicy(FragmentPolicy):
    """
    Policy that logs each fragment at debug level and continues.

    This is the default behavior. Only a count is kept, so memory stays
    flat on badly broken documents.
    """

    def __init__(self):
        self.skipped = 0

    def handle(self, error: MalformedFragmentError) -> None:
        self.skipped += 1
        logger.debug("Skipping malformed fragment at %s: %s", error.position, error)


class CollectFragmentsPolicy(FragmentPolicy):
    """
    Policy that keeps every skipped fragment for later inspection.

    Useful in tests and diagnostics; on large broken inputs the error list
    grows with the number of fragments.
    """

    def __init__(self):
        self.errors: List[MalformedFragmentError] = []

    def handle(self, error: MalformedFragmentError) -> None:
        self.errors.append(error)
        logger.debug("Collected malformed fragment at %s: %s", error.position, error)

    @property
    def skipped(self) -> int:
        return len(self.errors)

    def get_summary(self) -> str:
        """One-line summary of what was skipped."""
        if not self.errors:
            return "No malformed fragments"
        return f"{len(self.errors)} malformed fragment(s) skipped"


class FailFastPolicy(FragmentPolicy):
    """
    Policy that re-raises the first malformed fragment, stopping the scan.

    Opt-in only; useful when a document is expected to be clean.
    """

    def handle(self, error: MalformedFragmentError) -> None:
        raise error


def create_policy(strict: bool = False) -> FragmentPolicy:
    """
    Convenience function for the two common choices.

    Args:
        strict: If True, use FailFastPolicy; otherwise SkipFragmentPolicy

    Returns:
        A new FragmentPolicy instance
    """
    return FailFastPolicy() if strict else SkipFragmentPolicy()
