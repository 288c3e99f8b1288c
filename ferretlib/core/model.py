"""Result model for ferretlib.

The model is append/increment-only: entries are created lazily the first
time a tag or attribute key is seen and are never removed. Serialization uses
stable key names (``tags``, ``name``, ``count``, ``attributes``,
``value_counts``, ``files_analyzed``, ``max_depth``) so exporters and remote
callers can consume a result without re-running the analysis.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .histogram import BoundedValueHistogram


@dataclass
class AttributeStats:
    """Statistics for one attribute key under one tag.

    ``count`` counts every element that carried the key, whatever its value,
    so it is always >= ``value_counts.total()``. The two are equal only if
    the histogram never dropped a value.
    """
    name: str
    value_counts: BoundedValueHistogram
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'count': self.count,
            'value_counts': self.value_counts.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any],
                  value_limit: Optional[int] = None) -> 'AttributeStats':
        return cls(
            name=data['name'],
            count=int(data['count']),
            value_counts=BoundedValueHistogram.from_counts(
                data.get('value_counts', {}), value_limit
            ),
        )


@dataclass
class TagStats:
    """Statistics for one distinct tag name."""
    name: str
    count: int = 0
    attributes: Dict[str, AttributeStats] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'count': self.count,
            'attributes': {
                key: attr.to_dict() for key, attr in self.attributes.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any],
                  value_limit: Optional[int] = None) -> 'TagStats':
        return cls(
            name=data['name'],
            count=int(data['count']),
            attributes={
                key: AttributeStats.from_dict(attr, value_limit)
                for key, attr in data.get('attributes', {}).items()
            },
        )


@dataclass
class AnalysisResult:
    """Aggregate statistics for one analysed document.

    ``files_analyzed`` is 1 for every completed single-document run. Results
    are never merged, so it never goes higher. A partial snapshot taken from
    an unfinished session reports 0.
    """
    tags: Dict[str, TagStats] = field(default_factory=dict)
    files_analyzed: int = 0
    max_depth: int = 0

    def total_elements(self) -> int:
        """Number of element visits folded into this result."""
        return sum(tag.count for tag in self.tags.values())

    def sorted_tags(self):
        """TagStats ordered by count (descending), then name."""
        return sorted(self.tags.values(), key=lambda t: (-t.count, t.name))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain, JSON-compatible data."""
        return {
            'tags': {name: tag.to_dict() for name, tag in self.tags.items()},
            'files_analyzed': self.files_analyzed,
            'max_depth': self.max_depth,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any],
                  value_limit: Optional[int] = None) -> 'AnalysisResult':
        """Rebuild a result from :meth:`to_dict` output.

        Args:
            data: Previously exported result
            value_limit: Admission limit the result was built with, if known.
                Without it every histogram is frozen at its stored size.

        Returns:
            AnalysisResult equal in keys and counts to the exported one

        Raises:
            ValueError: If required keys are missing or malformed
        """
        try:
            return cls(
                tags={
                    name: TagStats.from_dict(tag, value_limit)
                    for name, tag in data['tags'].items()
                },
                files_analyzed=int(data['files_analyzed']),
                max_depth=int(data['max_depth']),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed analysis result data: {e!r}") from e

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str,
                  value_limit: Optional[int] = None) -> 'AnalysisResult':
        return cls.from_dict(json.loads(text), value_limit)
