"""Unit tests for the HTML word annotator."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from vocasync.alignment.html import annotate_html, render_spans_html, resolve_slug
from vocasync.alignment.matcher import TimedSpan, VerbatimSpan


def _word_spans(html: str, prefix: str = "vocasync") -> list:
    soup = BeautifulSoup(html, "html.parser")
    return soup.find_all("span", class_=f"{prefix}-word")


def test_annotates_words_across_nodes_in_document_order(make_track) -> None:
    """One cursor runs through headings, paragraphs and inline markup."""
    html = "<h1>Hello world</h1><p>This is <em>really</em> nice.</p>"
    track = make_track("hello", "world", "this", "is", "really", "nice")

    out = annotate_html(html, track)
    spans = _word_spans(out)

    assert [s.get_text() for s in spans] == ["Hello", "world", "This", "is", "really", "nice"]
    assert [s["data-word-index"] for s in spans] == ["0", "1", "2", "3", "4", "5"]
    assert spans[1]["data-start"] == "0.500"
    assert spans[1]["data-end"] == "1.000"
    assert BeautifulSoup(out, "html.parser").get_text() == "Hello worldThis is really nice."


def test_non_narrated_containers_are_untouched(make_track) -> None:
    """Code, scripts and math never consume alignment entries."""
    html = (
        "<p>Run it</p>"
        "<pre><code>run it now</code></pre>"
        '<span class="katex">now x</span>'
        "<script>var now = 1;</script>"
        "<p>now</p>"
    )
    track = make_track("run", "it", "now")

    out = annotate_html(html, track)
    soup = BeautifulSoup(out, "html.parser")

    assert soup.find("pre").decode_contents() == "<code>run it now</code>"
    assert soup.find("span", class_="katex").get_text() == "now x"
    assert soup.find("script").string == "var now = 1;"
    spans = _word_spans(out)
    assert [s.get_text() for s in spans] == ["Run", "it", "now"]
    assert spans[-1]["data-word-index"] == "2"


def test_document_head_is_not_narrated(make_track) -> None:
    """Title text is left as-is and the body still starts at entry zero."""
    html = "<html><head><title>Hello</title></head><body><p>Hello world</p></body></html>"

    out = annotate_html(html, make_track("hello", "world"))
    soup = BeautifulSoup(out, "html.parser")

    assert soup.title.find("span") is None
    assert soup.title.get_text() == "Hello"
    spans = _word_spans(out)
    assert [s.get_text() for s in spans] == ["Hello", "world"]
    assert [s["data-word-index"] for s in spans] == ["0", "1"]


def test_form_fields_and_noscript_are_not_narrated(make_track) -> None:
    """Textarea and noscript contents keep their raw text."""
    html = (
        "<p>one</p>"
        "<textarea>two three</textarea>"
        "<noscript>two</noscript>"
        "<p>two</p>"
    )

    out = annotate_html(html, make_track("one", "two"))
    soup = BeautifulSoup(out, "html.parser")

    assert soup.find("textarea").find("span") is None
    assert soup.find("noscript").find("span") is None
    spans = _word_spans(out)
    assert [s.get_text() for s in spans] == ["one", "two"]
    assert spans[-1]["data-word-index"] == "1"


def test_comments_are_not_annotated(make_track) -> None:
    """Comment nodes are skipped."""
    out = annotate_html("<p>hi<!-- hi --></p>", make_track("hi", "hi"))
    assert "<!-- hi -->" in out
    assert len(_word_spans(out)) == 1


def test_empty_track_returns_input_unchanged() -> None:
    """Without alignment data the HTML is returned as-is."""
    html = "<p>Hello   <b>world</b></p>"
    assert annotate_html(html, []) == html


def test_unmatched_nodes_are_left_alone(make_track) -> None:
    """Nodes without any timed span are not rewritten."""
    out = annotate_html("<p>alpha</p><p>beta &amp; gamma</p>", make_track("beta"))

    assert "<p>alpha</p>" in out
    assert len(_word_spans(out)) == 1
    assert "&amp; gamma" in out


def test_custom_class_prefix(make_track) -> None:
    """The span class follows the configured prefix."""
    out = annotate_html("<p>hey</p>", make_track("hey"), class_prefix="narr")
    assert len(_word_spans(out, "narr")) == 1


def test_render_spans_html_escapes_text() -> None:
    """Verbatim text is escaped; timed spans carry timing attributes."""
    spans = [
        TimedSpan("Tom", 0.0, 0.25, 0),
        VerbatimSpan(" & <Jerry>"),
    ]

    out = render_spans_html(spans, "vs")

    assert out == (
        '<span class="vs-word" data-word-index="0" data-start="0.000" '
        'data-end="0.250">Tom</span> &amp; &lt;Jerry&gt;'
    )


@pytest.mark.parametrize(
    ("path", "collection", "expected"),
    [
        ("/site/src/content/articles/my-post.md", "articles", "my-post"),
        ("C:\\site\\src\\content\\blog\\post.mdx", "blog", "post"),
        ("/elsewhere/notes/draft.md", "articles", "draft"),
        ("/site/src/content/articles/image.png", "articles", None),
    ],
)
def test_resolve_slug(path: str, collection: str, expected: str | None) -> None:
    """Slugs come from the collection path or fall back to the file stem."""
    assert resolve_slug(path, collection) == expected
