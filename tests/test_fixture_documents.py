"""Integration tests over the documents in tests/fixtures."""

import pytest

from ferretlib import analyze_file, analyze_string
from ferretlib.error_policies import CollectFragmentsPolicy
from ferretlib.testing import ResultTestHelper

STRATEGIES = ["tree", "stream"]


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_attributes_fixture(fixture_path, strategy):
    result = analyze_file(fixture_path("attributes.html"), strategy=strategy)
    helper = ResultTestHelper(result)

    assert helper.tag_counts()["input"] == 2
    assert helper.tag_counts()["a"] == 3
    assert helper.value_counts("input", "type") == {"text": 1, "checkbox": 1}
    assert helper.value_counts("input", "disabled") == {"": 1}
    assert helper.value_counts("input", "checked") == {"": 1}
    assert helper.value_counts("a", "href") == {"/a": 2, "/b": 1}
    assert helper.attribute_counts("a") == {"href": 3, "class": 2}
    assert result.max_depth == 3


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_broken_tags_fixture_recovers(fixture_path, strategy):
    result = analyze_file(fixture_path("broken_tags.html"), strategy=strategy)
    helper = ResultTestHelper(result)

    assert result.files_analyzed == 1
    assert helper.tag_counts() == {"html": 1, "body": 1, "div": 2, "p": 1, "span": 1}
    assert helper.check_invariants() == []


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_deeply_nested_fixture(fixture_path, strategy):
    result = analyze_file(fixture_path("deeply_nested.html"), strategy=strategy)

    assert result.max_depth > 10
    assert result.max_depth == 14
    assert result.tags["div"].count == 12
    assert result.tags["div"].attributes["class"].value_counts.to_dict() == {"level": 12}


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_malformed_fixture_is_resilient(fixture_path, strategy):
    result = analyze_file(fixture_path("malformed.html"), strategy=strategy)

    assert result.files_analyzed == 1
    assert result.tags["div"].count == 2
    assert result.tags["p"].count == 2
    assert result.tags["div"].attributes["id"].value_counts.to_dict() == {"single": 1}


def test_malformed_fixture_with_collecting_policy(fixture_path):
    policy = CollectFragmentsPolicy()
    result = analyze_file(fixture_path("malformed.html"), fragment_policy=policy)

    assert result.tags["div"].count == 2
    assert all(error.position is not None for error in policy.errors)


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_realistic_sample(fixture_path, strategy):
    result = analyze_file(fixture_path("realistic_sample.html"), strategy=strategy)

    assert len(result.tags) > 5
    assert "div" in result.tags
    assert "link" in result.tags
    assert result.tags["link"].attributes["rel"].value_counts.to_dict() == {
        "stylesheet": 1, "icon": 1,
    }
    assert result.tags["li"].count == 3
    assert result.tags["a"].attributes["class"].value_counts.to_dict() == {"nav": 3}
    assert result.max_depth == 7


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_realistic_sample_limited_values(fixture_path, strategy):
    result = analyze_file(fixture_path("realistic_sample.html"), strategy=strategy, value_limit=1)

    href = result.tags["a"].attributes["href"]
    assert href.count == 3
    assert href.value_counts.to_dict() == {"/": 1}


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_xml_fixture(fixture_path, strategy):
    result = analyze_file(fixture_path("realistic_sample.xml"), strategy=strategy)
    helper = ResultTestHelper(result)

    assert helper.tag_counts() == {"catalog": 1, "book": 2, "author": 2, "name": 2, "cover": 1}
    assert helper.value_counts("book", "id") == {"bk101": 1, "bk102": 1}
    assert helper.value_counts("book", "lang") == {"en": 2}
    assert result.max_depth == 3


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_script_and_style_content_is_not_markup(fixture_path, strategy):
    result = analyze_file(fixture_path("script_style.html"), strategy=strategy)

    assert "script" in result.tags
    assert "style" in result.tags
    assert "span" not in result.tags
    assert result.tags["div"].attributes["class"].value_counts.to_dict() == {"real": 1}


@pytest.mark.parametrize("strategy", STRATEGIES)
@pytest.mark.parametrize("chunk_size", [1, 5, 4096])
def test_unicode_fixture(fixture_path, strategy, chunk_size):
    result = analyze_file(fixture_path("unicode.html"), strategy=strategy, chunk_size=chunk_size)

    assert result.tags["p"].attributes["title"].value_counts.to_dict() == {
        "café": 2, "日本語": 1,
    }


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_multiple_attributes_on_one_element(strategy):
    markup = '<div id="test" class="container" data-value="123">Content</div>'
    result = analyze_string(markup, strategy=strategy)
    div = result.tags["div"]

    assert len(div.attributes) == 3
    assert div.attributes["id"].value_counts.to_dict() == {"test": 1}
    assert div.attributes["data-value"].value_counts.to_dict() == {"123": 1}


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_tag_counts_accumulate(strategy):
    markup = "<div></div><div></div><div></div><span></span><span></span>"
    result = analyze_string(markup, strategy=strategy)

    assert ResultTestHelper(result).tag_counts() == {"div": 3, "span": 2}


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_self_closing_elements(strategy):
    markup = '<img src="test.jpg" /><br /><input type="text" />'
    result = analyze_string(markup, strategy=strategy)

    assert {"img", "br", "input"} <= set(result.tags)
    assert "src" in result.tags["img"].attributes
    assert result.max_depth == (1 if strategy == "tree" else 0)
