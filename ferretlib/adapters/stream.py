"""Streaming token source for ferretlib.

Turns a byte or character source into a flat, lazy sequence of TokenEvents
(START / EMPTY / END) using the standard library's HTMLParser as the
tokenizer. Nothing is materialized: text is read in chunks, decoded
incrementally, tokenized and handed on one event at a time.

HTMLParser folds tag and attribute names to lower case. The tokenizer puts
the source spelling back (see :mod:`ferretlib.adapters.names`).
"""

import codecs
import logging
import os
from collections.abc import Iterable as IterableABC
from html.parser import HTMLParser
from pathlib import Path
from typing import IO, Any, Iterable, Iterator, List, Optional, Tuple, Union

from ..config import DEFAULT_CHUNK_SIZE
from ..core.node import AttributePairs, MarkupNode, TokenEvent, TokenKind
from ..error_policies import FragmentPolicy, SkipFragmentPolicy
from ..errors import MalformedFragmentError, SourceUnreadableError
from .names import is_valid_name, restore_names, written_end_tag, written_start_tag

logger = logging.getLogger(__name__)

StreamSource = Union[str, bytes, bytearray, IO[Any], Iterable[Union[str, bytes]]]


class StreamToken(MarkupNode):
    """Read-only view of one open or self-closing tag event.

    A stream token has a name and attributes but no children. Structure is
    rebuilt outside the token by the scanner's nesting counter.
    """

    def __init__(self, event: TokenEvent):
        if event.kind is TokenKind.END:
            raise ValueError("END events do not describe an element")
        self.event = event

    def is_element(self) -> bool:
        return True

    def element_name(self) -> str:
        return self.event.name

    def attributes(self) -> AttributePairs:
        return list(self.event.attributes)

    @property
    def self_closing(self) -> bool:
        return self.event.kind is TokenKind.EMPTY


class MarkupTokenizer(HTMLParser):
    """HTMLParser subclass that records tag events instead of handling them.

    Text, comments, doctypes and processing instructions are ignored; they
    carry no tag or attribute statistics. Tag and attribute names keep the
    spelling they have in the source, so ``<Item>`` and ``<item>`` stay
    distinct.
    """

    def __init__(self, policy: Optional[FragmentPolicy] = None):
        super().__init__(convert_charrefs=True)
        self.policy = policy or SkipFragmentPolicy()
        self._pending: List[TokenEvent] = []
        self._endtag_pos: Optional[int] = None

    def handle_starttag(self, tag, attrs):
        self._emit(TokenKind.START, *self._written_names(tag, attrs))

    def handle_startendtag(self, tag, attrs):
        self._emit(TokenKind.EMPTY, *self._written_names(tag, attrs))

    def parse_endtag(self, i):
        self._endtag_pos = i
        try:
            return super().parse_endtag(i)
        finally:
            self._endtag_pos = None

    def handle_endtag(self, tag):
        if self._endtag_pos is not None:
            written = written_end_tag(self.rawdata, self._endtag_pos)
            if written is not None and written.lower() == tag.lower():
                tag = written
        self._emit(TokenKind.END, tag, [])

    def _written_names(self, tag, attrs) -> Tuple[str, AttributePairs]:
        text = self.get_starttag_text()
        written = written_start_tag(text) if text else None
        tag, keys = restore_names(tag, [key for key, _ in attrs], written)
        return tag, [(key, value) for key, (_, value) in zip(keys, attrs)]

    def _emit(self, kind: TokenKind, tag: str, attrs) -> None:
        if not is_valid_name(tag):
            self._fragment(f"Invalid tag name {tag!r}", tag)
            return

        clean: AttributePairs = []
        for key, value in attrs:
            if not is_valid_name(key):
                self._fragment(f"Invalid attribute name {key!r} on <{tag}>", key)
                continue
            clean.append((key, value))

        self._pending.append(TokenEvent(kind, tag, clean))

    def _fragment(self, message: str, fragment: Optional[str]) -> None:
        self.policy.handle(
            MalformedFragmentError(message, fragment=fragment, position=self.getpos())
        )

    def tokenize(self, text: str) -> List[TokenEvent]:
        """Feed a chunk of text and return the events it completed.

        A chunk the tokenizer chokes on is reported to the policy. The
        tokenizer is then reset and scanning resumes with the next chunk.
        """
        try:
            self.feed(text)
        except MalformedFragmentError:
            raise
        except Exception as e:
            position = self.getpos()
            self.reset()
            self.policy.handle(MalformedFragmentError(
                f"Tokenizer failed on chunk: {e}", fragment=text[:80], position=position
            ))
        return self._drain()

    def finish(self) -> List[TokenEvent]:
        """Flush buffered input at end of stream and return the last events."""
        try:
            self.close()
        except MalformedFragmentError:
            raise
        except Exception as e:
            self.policy.handle(MalformedFragmentError(
                f"Tokenizer failed at end of input: {e}", position=self.getpos()
            ))
        return self._drain()

    def _drain(self) -> List[TokenEvent]:
        events, self._pending = self._pending, []
        return events


class TokenStream:
    """Lazy iterator of TokenEvents read from a document source.

    Accepted sources: a ``str`` of markup, ``bytes``, a binary or text file
    object, or any iterable of str/bytes chunks. Use :meth:`from_path` for
    files on disk; the stream then owns the file and closes it when it is
    exhausted or closed.

    Example:
        >>> with TokenStream.from_path("page.html") as events:
        ...     for event in events:
        ...         print(event.kind, event.name)
    """

    def __init__(self,
                 source: StreamSource,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 encoding: str = "utf-8",
                 encoding_errors: str = "replace",
                 policy: Optional[FragmentPolicy] = None,
                 name: Optional[str] = None):
        """Initialize the stream.

        Args:
            source: Markup text, bytes, a file object or an iterable of chunks
            chunk_size: Characters/bytes per read
            encoding: Encoding used for byte input
            encoding_errors: Codec error handler ("strict" fails the run)
            policy: Malformed-fragment policy for the tokenizer
            name: Label for log and error messages

        Raises:
            SourceUnreadableError: If the source type is not supported
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive: {chunk_size}")
        self.name = name or type(source).__name__
        self.chunk_size = chunk_size
        self.encoding = encoding
        self.encoding_errors = encoding_errors
        self.tokenizer = MarkupTokenizer(policy)
        self._owned_file: Optional[IO[Any]] = None
        self._chunks = self._chunk_source(source)
        self._events = self._generate()
        self.closed = False

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike], **kwargs) -> 'TokenStream':
        """Open a file and stream it.

        Raises:
            SourceUnreadableError: If the file cannot be opened
        """
        path = Path(path)
        try:
            handle = open(path, "rb")
        except OSError as e:
            raise SourceUnreadableError(f"Cannot open {path}: {e}", source=str(path)) from e
        kwargs.setdefault('name', str(path))
        try:
            stream = cls(handle, **kwargs)
        except Exception:
            handle.close()
            raise
        stream._owned_file = handle
        return stream

    def _chunk_source(self, source: StreamSource) -> Iterator[Union[str, bytes]]:
        size = self.chunk_size
        if isinstance(source, str):
            return (source[i:i + size] for i in range(0, len(source), size))
        if isinstance(source, (bytes, bytearray, memoryview)):
            data = bytes(source)
            return (data[i:i + size] for i in range(0, len(data), size))
        if hasattr(source, 'read'):
            return self._read_file(source)
        if isinstance(source, IterableABC):
            return iter(source)
        raise SourceUnreadableError(
            f"Unsupported source type: {type(source).__name__}", source=self.name
        )

    def _read_file(self, handle: IO[Any]) -> Iterator[Union[str, bytes]]:
        while True:
            try:
                chunk = handle.read(self.chunk_size)
            except OSError as e:
                raise SourceUnreadableError(f"Cannot read {self.name}: {e}", source=self.name) from e
            if not chunk:
                return
            yield chunk

    def _generate(self) -> Iterator[TokenEvent]:
        decoder = codecs.getincrementaldecoder(self.encoding)(errors=self.encoding_errors)
        logger.debug("Streaming tokens from %s", self.name)
        try:
            for chunk in self._chunks:
                if isinstance(chunk, (bytes, bytearray)):
                    text = decoder.decode(bytes(chunk))
                elif isinstance(chunk, str):
                    text = chunk
                else:
                    raise SourceUnreadableError(
                        f"Unsupported chunk type: {type(chunk).__name__}", source=self.name
                    )
                if text:
                    yield from self.tokenizer.tokenize(text)

            tail = decoder.decode(b"", final=True)
            if tail:
                yield from self.tokenizer.tokenize(tail)
            yield from self.tokenizer.finish()
        except UnicodeDecodeError as e:
            raise SourceUnreadableError(
                f"Cannot decode {self.name} as {self.encoding}: {e}", source=self.name
            ) from e
        finally:
            self._release()

    def element_tokens(self) -> Iterator[StreamToken]:
        """Open and self-closing tags only, as MarkupNode views."""
        for event in self:
            if event.kind is not TokenKind.END:
                yield StreamToken(event)

    def __iter__(self) -> 'TokenStream':
        return self

    def __next__(self) -> TokenEvent:
        return next(self._events)

    def close(self) -> None:
        """Stop streaming and release the underlying file, if owned."""
        if not self.closed:
            self._events.close()
            self._release()

    def _release(self) -> None:
        self.closed = True
        if self._owned_file is not None:
            self._owned_file.close()
            self._owned_file = None

    def __enter__(self) -> 'TokenStream':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def read_markup(source: StreamSource,
                encoding: str = "utf-8",
                encoding_errors: str = "replace",
                chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Read a whole source into one string, for building a tree.

    Accepts the same sources as TokenStream plus filesystem paths.

    Raises:
        SourceUnreadableError: If the source cannot be opened, read or decoded
    """
    if isinstance(source, os.PathLike):
        path = Path(source)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise SourceUnreadableError(f"Cannot read {path}: {e}", source=str(path)) from e
        return _decode(data, encoding, encoding_errors, str(path))

    if isinstance(source, str):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        return _decode(bytes(source), encoding, encoding_errors, "bytes")

    if hasattr(source, 'read'):
        try:
            data = source.read()
        except OSError as e:
            raise SourceUnreadableError(f"Cannot read source: {e}") from e
    elif isinstance(source, IterableABC):
        parts = list(source)
        if all(isinstance(part, str) for part in parts):
            return "".join(parts)
        try:
            data = b"".join(parts)
        except TypeError as e:
            raise SourceUnreadableError(f"Mixed or unsupported chunk types: {e}") from e
    else:
        raise SourceUnreadableError(f"Unsupported source type: {type(source).__name__}")

    if isinstance(data, str):
        return data
    return _decode(data, encoding, encoding_errors, "source")


def _decode(data: bytes, encoding: str, errors: str, label: str) -> str:
    try:
        return data.decode(encoding, errors=errors)
    except UnicodeDecodeError as e:
        raise SourceUnreadableError(f"Cannot decode {label} as {encoding}: {e}", source=label) from e
