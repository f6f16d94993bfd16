from typing import Any, Dict, List

from bs4 import BeautifulSoup  # type: ignore[import-untyped]

from prismkit.documents.document import parse_document
from prismkit.documents.fragments import DocumentLink, ImageView
from prismkit.documents.structured_text import (
    Em,
    ImageBlock,
    Paragraph,
    Strong,
    StructuredText,
    parse_structured_text,
)
from prismkit.renderers.html_renderer import HtmlRenderer, render_structured_text


def resolver(link: DocumentLink) -> str:
    return f"http://localhost/{link.type}/{link.id}"


GANACHE_HTML = "\n\n".join(
    [
        "<h1>Get the right approach to ganache</h1>",
        "<p>A lot of people touch base with us.</p>",
        "<h2>How to approach ganache</h2>",
        '<p class="block-img"><img alt="" src="https://images.example.com/ganache.jpg" width="640" height="425" /></p>',
        "<ul>",
        "<li><strong>working from the top down</strong>: start thick</li>",
        "<li><strong>working from the bottom up</strong>: start liquid</li>",
        "</ul>",
        "<h2>Ganache at <em>Les Bonnes Choses</em></h2>",
        '<div data-oembed="http://www.youtube.com/watch?v=Ye78F3-CuXY" data-oembed-type="video"'
        ' data-oembed-provider="youtube"><iframe width="459" height="344"'
        ' src="http://www.youtube.com/embed/Ye78F3-CuXY?feature=oembed" frameborder="0"'
        " allowfullscreen></iframe></div>",
    ]
)


# ---------- Default rendering ----------


def test_structured_text_as_html_matches_fixture(blog_post_json: Dict[str, Any]) -> None:
    doc = parse_document(blog_post_json)
    body = doc.get_structured_text("blog-post.body")
    assert body is not None
    assert body.as_html(resolver) == GANACHE_HTML


def test_rendered_html_structure(ganache_body: List[Dict[str, Any]]) -> None:
    html = render_structured_text(parse_structured_text(ganache_body), resolver)
    soup = BeautifulSoup(html, "html.parser")
    assert [h.get_text() for h in soup.find_all(["h1", "h2"])] == [
        "Get the right approach to ganache",
        "How to approach ganache",
        "Ganache at Les Bonnes Choses",
    ]
    lists = soup.find_all("ul")
    assert len(lists) == 1
    assert len(lists[0].find_all("li")) == 2


def test_list_groups_split_by_kind_and_interruptions() -> None:
    st = parse_structured_text(
        [
            {"type": "o-list-item", "text": "a", "spans": []},
            {"type": "o-list-item", "text": "b", "spans": []},
            {"type": "list-item", "text": "c", "spans": []},
            {"type": "paragraph", "text": "p", "spans": []},
            {"type": "list-item", "text": "d", "spans": []},
        ]
    )
    assert st.as_html(resolver) == "\n\n".join(
        [
            "<ol>", "<li>a</li>", "<li>b</li>", "</ol>",
            "<ul>", "<li>c</li>", "</ul>",
            "<p>p</p>",
            "<ul>", "<li>d</li>", "</ul>",
        ]
    )


def test_document_hyperlink_is_resolved() -> None:
    st = parse_structured_text(
        [
            {
                "type": "paragraph",
                "text": "Visit our shop today",
                "spans": [
                    {
                        "start": 10,
                        "end": 14,
                        "type": "hyperlink",
                        "data": {
                            "type": "Link.document",
                            "value": {
                                "document": {
                                    "id": "UlfoxUnM0wkXYXbO",
                                    "type": "product",
                                    "slug": "cool-coconut-macaron",
                                }
                            },
                        },
                    }
                ],
            }
        ]
    )
    assert st.as_html(resolver) == (
        '<p>Visit our <a href="http://localhost/product/UlfoxUnM0wkXYXbO">shop</a> today</p>'
    )


def test_nested_spans() -> None:
    st = parse_structured_text(
        [
            {
                "type": "paragraph",
                "text": "bold and link",
                "spans": [
                    {
                        "start": 9,
                        "end": 13,
                        "type": "hyperlink",
                        "data": {"type": "Link.web", "value": {"url": "https://x.io/?a=1&b=2"}},
                    },
                    {"start": 0, "end": 13, "type": "strong"},
                ],
            }
        ]
    )
    assert st.as_html(resolver) == (
        '<p><strong>bold and <a href="https://x.io/?a=1&amp;b=2">link</a></strong></p>'
    )


def test_span_offsets_after_astral_characters() -> None:
    st = parse_structured_text(
        [
            {"type": "paragraph", "text": "😀 bold", "spans": [{"start": 3, "end": 7, "type": "strong"}]},
            # "🍫🍫" is four UTF-16 units; the em end is past the text and gets clamped
            {
                "type": "paragraph",
                "text": "🍫🍫 dark",
                "spans": [
                    {"start": 0, "end": 4, "type": "strong"},
                    {"start": 5, "end": 40, "type": "em"},
                ],
            },
        ]
    )
    assert st.as_html(resolver) == "\n\n".join(
        [
            "<p>😀 <strong>bold</strong></p>",
            "<p><strong>🍫🍫</strong> <em>dark</em></p>",
        ]
    )


def test_text_is_escaped_and_newlines_become_breaks() -> None:
    st = parse_structured_text(
        [{"type": "preformatted", "text": "a < b & c\nnext", "spans": [], "label": "code"}]
    )
    assert st.as_html(resolver) == '<pre class="code">a &lt; b &amp; c<br />next</pre>'


def test_label_span_and_offsets_out_of_range_are_clamped() -> None:
    st = parse_structured_text(
        [
            {
                "type": "paragraph",
                "text": "hello world",
                "spans": [
                    {"start": 6, "end": 99, "type": "label", "data": {"label": "big"}},
                    {"start": 3, "end": 3, "type": "em"},
                ],
            }
        ]
    )
    assert st.as_html(resolver) == '<p>hello <span class="big">world</span></p>'


def test_image_block_with_link_and_label() -> None:
    st = StructuredText(
        blocks=(
            ImageBlock(
                view=ImageView(url="https://images.example.com/a.png", width=10, height=20, alt='say "hi"'),
                link_to=DocumentLink(id="D1", type="page"),
                label="wide",
            ),
        )
    )
    assert st.as_html(resolver) == (
        '<p class="block-img wide"><a href="http://localhost/page/D1">'
        '<img alt="say &quot;hi&quot;" src="https://images.example.com/a.png" width="10" height="20" />'
        "</a></p>"
    )


# ---------- Serializer overrides ----------


def test_custom_serializer_applies_to_every_matching_variant(blog_post_json: Dict[str, Any]) -> None:
    blocks = list(blog_post_json["data"]["blog-post"]["body"]["value"])
    blocks.append(
        {
            "type": "paragraph",
            "text": "Made by Les Bonnes Choses, for Les Bonnes Choses",
            "spans": [{"start": 8, "end": 25, "type": "em"}, {"start": 31, "end": 48, "type": "em"}],
        }
    )
    serializer = {
        # Don't wrap images in a <p> tag
        "image": lambda block, content: content,
        # Add a class to em tags
        "em": lambda span, content: f"<em class='italic'>{content}</em>",
    }
    html = parse_structured_text(blocks).as_html(resolver, serializer)
    parts = html.split("\n\n")

    assert parts[3] == (
        '<img alt="" src="https://images.example.com/ganache.jpg" width="640" height="425" />'
    )
    assert parts[8] == "<h2>Ganache at <em class='italic'>Les Bonnes Choses</em></h2>"
    assert parts[-1] == (
        "<p>Made by <em class='italic'>Les Bonnes Choses</em>, "
        "for <em class='italic'>Les Bonnes Choses</em></p>"
    )
    # everything else falls back to the defaults
    assert parts[0] == "<h1>Get the right approach to ganache</h1>"
    assert parts[5] == "<li><strong>working from the top down</strong>: start thick</li>"
    assert "<em>" not in html


def test_serializer_returning_none_falls_back_to_default() -> None:
    st = StructuredText(
        blocks=(
            Paragraph(text="one", spans=(Strong(0, 3),)),
            Paragraph(text="two", spans=(Em(0, 3),), label="skip"),
        )
    )
    serializer = {
        "paragraph": lambda block, content: None if block.label else f"<div>{content}</div>",
    }
    assert HtmlRenderer(resolver, serializer).render(st) == (
        '<div><strong>one</strong></div>\n\n<p class="skip"><em>two</em></p>'
    )


def test_heading_override_is_per_level() -> None:
    st = parse_structured_text(
        [
            {"type": "heading1", "text": "Title", "spans": []},
            {"type": "heading2", "text": "Sub", "spans": []},
        ]
    )
    html = st.as_html(resolver, {"heading2": lambda b, c: f"<h3>{c}</h3>"})
    assert html == "<h1>Title</h1>\n\n<h3>Sub</h3>"


# ---------- Unknown variants ----------


def test_unknown_variants_render_raw_text_or_nothing() -> None:
    st = parse_structured_text(
        [
            {"type": "paragraph", "text": "before", "spans": []},
            {"type": "quote", "text": "Hi <there>", "spans": [{"start": 0, "end": 2, "type": "underline"}]},
            {"type": "divider"},
            {"type": "paragraph", "text": "after", "spans": [{"start": 0, "end": 5, "type": "sparkle"}]},
        ]
    )
    assert st.as_html(resolver) == "<p>before</p>\n\nHi &lt;there&gt;\n\n<p>after</p>"


def test_unknown_variants_can_be_serialized_by_tag() -> None:
    st = parse_structured_text(
        [{"type": "quote", "text": "Hi", "spans": [{"start": 0, "end": 2, "type": "underline"}]}]
    )
    serializer = {
        "quote": lambda block, content: f"<blockquote>{content}</blockquote>",
        "underline": lambda span, content: f"<u>{content}</u>",
    }
    assert st.as_html(resolver, serializer) == "<blockquote><u>Hi</u></blockquote>"


def test_document_without_exotic_variants_is_unaffected(ganache_body: List[Dict[str, Any]]) -> None:
    plain = parse_structured_text(ganache_body).as_html(resolver)
    with_exotic = parse_structured_text(ganache_body + [{"type": "divider"}]).as_html(resolver)
    assert plain == with_exotic == GANACHE_HTML


def test_empty_structured_text_renders_empty_string() -> None:
    assert StructuredText().as_html(resolver) == ""
