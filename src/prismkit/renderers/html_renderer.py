"""HTML rendering for structured text and other fragments.

Rendering is table driven: every block and span `kind` maps to a default
renderer. A caller may pass an `HtmlSerializer`, a mapping from `kind` to a
function `(element, content) -> str | None`, to override the default for that
kind. `content` is the already-rendered inner HTML of the element (spans
rendered inside a text block, the `<img>` of an image block, the oEmbed markup
of an embed). Returning None from an override falls back to the default.

Unknown variants: an unknown span passes its content through unwrapped; an
unknown block renders its escaped text with no wrapper and is left out when it
has no text.
"""

from __future__ import annotations

import html
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from prismkit.documents.fragments import (
    Color,
    Date,
    DocumentLink,
    Embed,
    FileLink,
    GeoPoint,
    Group,
    Image,
    ImageLink,
    Link,
    Number,
    Text,
    Timestamp,
    WebLink,
)
from prismkit.documents.structured_text import (
    Block,
    EmbedBlock,
    Hyperlink,
    ImageBlock,
    ListItem,
    Span,
    StructuredText,
    TextBlock,
)

Element = Union[Block, Span]
LinkResolver = Callable[[DocumentLink], str]
SerializerFn = Callable[[Element, str], Optional[str]]
HtmlSerializer = Mapping[str, SerializerFn]


def escape_text(text: str) -> str:
    return html.escape(text, quote=False).replace("\n", "<br />")


def _class_attr(label: Optional[str]) -> str:
    return f' class="{html.escape(label)}"' if label else ""


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(value)


class HtmlRenderer:
    """Render fragments to HTML with a link resolver and optional overrides."""

    def __init__(self, link_resolver: LinkResolver, serializer: Optional[HtmlSerializer] = None) -> None:
        self.link_resolver = link_resolver
        self.serializer: Dict[str, SerializerFn] = dict(serializer or {})
        self._defaults: Dict[str, Callable[..., str]] = {
            "paragraph": self._text_block("p"),
            "preformatted": self._text_block("pre"),
            "list-item": self._text_block("li"),
            "o-list-item": self._text_block("li"),
            "image": self._image,
            "embed": lambda block, content: content,
            "strong": lambda span, content: f"<strong>{content}</strong>",
            "em": lambda span, content: f"<em>{content}</em>",
            "hyperlink": self._hyperlink,
            "label": lambda span, content: f"<span{_class_attr(span.label)}>{content}</span>",
        }
        for level in range(1, 7):
            self._defaults[f"heading{level}"] = self._text_block(f"h{level}")

    # ----- Links -----

    def link_url(self, link: Link) -> str:
        if isinstance(link, DocumentLink):
            return self.link_resolver(link)
        return link.url

    # ----- Dispatch -----

    def _serialize(self, element: Element, content: str) -> Optional[str]:
        custom = self.serializer.get(element.kind)
        if custom is not None:
            out = custom(element, content)
            if out is not None:
                return out
        default = self._defaults.get(element.kind)
        if default is not None:
            return default(element, content)
        if isinstance(element, Span):
            return content
        return content or None

    # ----- Defaults -----

    @staticmethod
    def _text_block(tag: str) -> Callable[[TextBlock, str], str]:
        def render(block: TextBlock, content: str) -> str:
            return f"<{tag}{_class_attr(block.label)}>{content}</{tag}>"

        return render

    def _image(self, block: ImageBlock, content: str) -> str:
        if block.link_to is not None:
            content = f'<a href="{html.escape(self.link_url(block.link_to))}">{content}</a>'
        cls = f"block-img {block.label}" if block.label else "block-img"
        return f'<p class="{html.escape(cls)}">{content}</p>'

    def _hyperlink(self, span: Hyperlink, content: str) -> str:
        if span.link is None:
            return content
        return f'<a href="{html.escape(self.link_url(span.link))}">{content}</a>'

    # ----- Structured text -----

    def render(self, structured_text: StructuredText) -> str:
        parts: List[str] = []
        for list_tag, blocks in _group_blocks(structured_text.blocks):
            rendered = [b for b in (self.render_block(block) for block in blocks) if b is not None]
            if list_tag:
                parts.append(f"<{list_tag}>")
                parts.extend(rendered)
                parts.append(f"</{list_tag}>")
            else:
                parts.extend(rendered)
        return "\n\n".join(parts)

    def render_block(self, block: Block) -> Optional[str]:
        if isinstance(block, TextBlock):
            content = self.render_spans(block.text, block.spans)
        elif isinstance(block, ImageBlock):
            content = block.view.as_html() if block.view else ""
        elif isinstance(block, EmbedBlock):
            content = block.embed.as_html() if block.embed else ""
        else:
            content = ""
        return self._serialize(block, content)

    def render_spans(self, text: str, spans: Sequence[Span]) -> str:
        ordered = sorted(spans, key=lambda s: (s.start, -s.end))
        return self._render_range(text, 0, len(text), ordered)

    def _render_range(self, text: str, start: int, end: int, spans: Sequence[Span]) -> str:
        out: List[str] = []
        cursor = start
        i = 0
        while i < len(spans):
            span = spans[i]
            # Spans opening inside this one render nested within it
            j = i + 1
            while j < len(spans) and spans[j].start < span.end:
                j += 1
            s, e = max(span.start, cursor), min(span.end, end)
            if s < e:
                out.append(escape_text(text[cursor:s]))
                inner = self._render_range(text, s, e, spans[i + 1 : j])
                out.append(self._serialize(span, inner) or "")
                cursor = e
            i = j
        out.append(escape_text(text[cursor:end]))
        return "".join(out)

    # ----- Other fragments -----

    def render_fragment(self, fragment: object) -> str:
        if isinstance(fragment, StructuredText):
            return self.render(fragment)
        if isinstance(fragment, Text):
            return f'<span class="text">{escape_text(fragment.value)}</span>'
        if isinstance(fragment, Number):
            return f'<span class="number">{_format_number(fragment.value)}</span>'
        if isinstance(fragment, (Date, Timestamp)):
            return f"<time>{fragment.value.isoformat()}</time>"
        if isinstance(fragment, Color):
            return f'<span class="color">{html.escape(fragment.value)}</span>'
        if isinstance(fragment, GeoPoint):
            return (
                '<div class="geopoint">'
                f'<span class="latitude">{fragment.latitude}</span>'
                f'<span class="longitude">{fragment.longitude}</span>'
                "</div>"
            )
        if isinstance(fragment, Embed):
            return fragment.as_html()
        if isinstance(fragment, Image):
            return fragment.main.as_html()
        if isinstance(fragment, DocumentLink):
            url = html.escape(self.link_url(fragment))
            return f'<a href="{url}">{escape_text(fragment.slug or fragment.id)}</a>'
        if isinstance(fragment, (WebLink, FileLink, ImageLink)):
            url = html.escape(fragment.url)
            return f'<a href="{url}">{url}</a>'
        if isinstance(fragment, Group):
            return "\n".join(self.render_fields(item) for item in fragment.items)
        return ""

    def render_fields(self, fields: Mapping[str, object]) -> str:
        return "\n".join(
            f'<section data-field="{html.escape(name)}">{self.render_fragment(frag)}</section>'
            for name, frag in fields.items()
        )


def _group_blocks(blocks: Iterable[Block]) -> List[Tuple[Optional[str], List[Block]]]:
    """Group consecutive list items of the same kind; other blocks stand alone."""
    groups: List[Tuple[Optional[str], List[Block]]] = []
    for block in blocks:
        tag = None
        if isinstance(block, ListItem):
            tag = "ol" if block.ordered else "ul"
        if tag and groups and groups[-1][0] == tag:
            groups[-1][1].append(block)
        else:
            groups.append((tag, [block]))
    return groups


def render_structured_text(
    structured_text: StructuredText,
    link_resolver: LinkResolver,
    serializer: Optional[HtmlSerializer] = None,
) -> str:
    return HtmlRenderer(link_resolver, serializer).render(structured_text)
