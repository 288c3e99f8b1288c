"""Testing utilities for ferretlib consumers."""

from .fixtures import (SAMPLE_DOCUMENTS, DictAdapter, DictNode,
                       ResultTestHelper, nested_document)

__all__ = [
    'SAMPLE_DOCUMENTS',
    'DictAdapter',
    'DictNode',
    'ResultTestHelper',
    'nested_document',
]
