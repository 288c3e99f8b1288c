"""Tests for the streaming token scan and its nesting counter."""

import pytest

from ferretlib.adapters.stream import TokenStream
from ferretlib.config import HTML_VOID_ELEMENTS
from ferretlib.core.node import ElementVisit, TokenEvent, TokenKind
from ferretlib.core.traverser import StreamScanner

START, EMPTY, END = TokenKind.START, TokenKind.EMPTY, TokenKind.END


def visits(scanner):
    return [(v.tag_name, v.depth) for v in scanner]


class TestNestingCounter:
    """Depth is rebuilt from START/EMPTY/END alone."""

    def test_start_increments_then_records(self):
        events = [
            TokenEvent(START, "a"), TokenEvent(START, "b"), TokenEvent(START, "c"),
            TokenEvent(START, "d"), TokenEvent(END, "d"), TokenEvent(END, "c"),
            TokenEvent(END, "b"), TokenEvent(END, "a"),
        ]
        scanner = StreamScanner(events)
        assert visits(scanner) == [("a", 1), ("b", 2), ("c", 3), ("d", 4)]
        assert scanner.max_depth == 4
        assert scanner.depth == 0

    def test_empty_records_at_current_depth(self):
        events = [
            TokenEvent(START, "div"),
            TokenEvent(EMPTY, "img", [("src", "a.png")]),
            TokenEvent(END, "div"),
            TokenEvent(EMPTY, "br"),
        ]
        scanner = StreamScanner(events)
        result = list(scanner)

        assert result == [
            ElementVisit("div", [], 1),
            ElementVisit("img", [("src", "a.png")], 1),
            ElementVisit("br", [], 0),
        ]

    def test_stray_close_at_zero_is_a_noop(self):
        events = [
            TokenEvent(END, "span"), TokenEvent(END, "div"),
            TokenEvent(START, "p"), TokenEvent(END, "p"),
        ]
        scanner = StreamScanner(events)
        assert visits(scanner) == [("p", 1)]
        assert scanner.stray_closes == 2
        assert scanner.depth == 0

    def test_mismatched_names_are_not_checked(self):
        events = [TokenEvent(START, "a"), TokenEvent(END, "zzz"), TokenEvent(START, "b")]
        assert visits(StreamScanner(events)) == [("a", 1), ("b", 1)]

    def test_void_start_is_treated_as_empty(self):
        events = [
            TokenEvent(START, "p"), TokenEvent(START, "br"), TokenEvent(START, "span"),
            TokenEvent(END, "br"),
        ]
        scanner = StreamScanner(events, void_elements=frozenset({"br"}))
        assert visits(scanner) == [("p", 1), ("br", 1), ("span", 2)]
        # </br> was ignored, not treated as closing span
        assert scanner.depth == 2

    def test_without_void_set_every_start_nests(self):
        events = [TokenEvent(START, "br"), TokenEvent(START, "span")]
        assert visits(StreamScanner(events)) == [("br", 1), ("span", 2)]

    def test_void_names_match_any_case(self):
        events = [TokenEvent(START, "BR"), TokenEvent(START, "Span"), TokenEvent(END, "Br")]
        scanner = StreamScanner(events, void_elements=frozenset({"br"}))
        assert visits(scanner) == [("BR", 0), ("Span", 1)]
        assert scanner.depth == 1

    def test_visits_do_not_share_attribute_lists(self):
        event = TokenEvent(EMPTY, "br")
        first, second = StreamScanner([event, event])

        first.attributes.append(("class", "x"))
        assert second.attributes == []
        assert event.attributes == ()
        assert TokenEvent(END, "p").attributes == ()


def test_pull_resumes_where_it_stopped():
    events = [TokenEvent(START, name) for name in "abcde"]
    scanner = StreamScanner(events)

    assert [v.tag_name for v in scanner.pull(2)] == ["a", "b"]
    assert not scanner.exhausted
    assert [v.tag_name for v in scanner.pull(2)] == ["c", "d"]
    assert [v.tag_name for v in scanner.pull(2)] == ["e"]
    assert scanner.exhausted
    assert scanner.pull(2) == []


def test_scanner_over_token_stream():
    stream = TokenStream("<div><p>hi</p><img src='x'><br/></div>")
    scanner = StreamScanner(stream, void_elements=HTML_VOID_ELEMENTS)

    assert visits(scanner) == [("div", 1), ("p", 2), ("img", 1), ("br", 1)]
    assert stream.closed


def test_exhaustion_closes_owned_file(tmp_path):
    path = tmp_path / "doc.html"
    path.write_text("<a><b></b></a>", encoding="utf-8")

    stream = TokenStream.from_path(path)
    scanner = StreamScanner(stream)
    list(scanner)

    assert stream.closed
    assert stream._owned_file is None


def test_close_before_exhaustion_releases_file(tmp_path):
    path = tmp_path / "doc.html"
    path.write_text("<a><b></b></a>" * 100, encoding="utf-8")

    stream = TokenStream.from_path(path, chunk_size=16)
    with StreamScanner(stream) as scanner:
        scanner.pull(3)
    assert stream.closed


def test_state_is_independent_of_document_length():
    # Flat document: counter never exceeds 1 however long the input
    markup = "<li>x</li>" * 5000
    scanner = StreamScanner(TokenStream(markup, chunk_size=1024))
    count = sum(1 for _ in scanner)
    assert count == 5000
    assert scanner.max_depth == 1


@pytest.mark.slow
def test_large_generated_stream():
    def chunks():
        yield "<html><body>"
        for i in range(200000):
            yield f'<div class="c{i % 50}"><span>{i}</span></div>'
        yield "</body></html>"

    scanner = StreamScanner(TokenStream(chunks()))
    total = sum(1 for _ in scanner)
    assert total == 2 + 200000 * 2
    assert scanner.max_depth == 4
