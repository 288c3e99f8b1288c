"""Document adapters for ferretlib."""

from .soup import SoupAdapter, SoupNode
from .stream import MarkupTokenizer, StreamToken, TokenStream, read_markup

__all__ = [
    'SoupAdapter',
    'SoupNode',
    'MarkupTokenizer',
    'StreamToken',
    'TokenStream',
    'read_markup',
]
