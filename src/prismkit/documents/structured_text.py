"""Structured text: ordered blocks carrying inline spans.

Blocks and spans are frozen dataclasses. Each exposes `kind`, the wire type tag
(`paragraph`, `heading2`, `list-item`, `strong`, `hyperlink`, ...) used by HTML
serializers to pick a rendering. Variants the parser does not know are kept as
`UnknownBlock` / `UnknownSpan` so renderers can decide what to do with them.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Iterable, List, Optional, Tuple

from prismkit.documents.fragments import (
    Embed,
    ImageView,
    Link,
    parse_embed,
    parse_image_view,
    parse_link,
    require_dict,
)

if TYPE_CHECKING:
    from prismkit.renderers.html_renderer import HtmlSerializer, LinkResolver

logger = logging.getLogger(__name__)


# ----- Spans -----


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    tag: ClassVar[str] = ""

    @property
    def kind(self) -> str:
        return self.tag


@dataclass(frozen=True)
class Strong(Span):
    tag: ClassVar[str] = "strong"


@dataclass(frozen=True)
class Em(Span):
    tag: ClassVar[str] = "em"


@dataclass(frozen=True)
class Hyperlink(Span):
    link: Optional[Link] = None

    tag: ClassVar[str] = "hyperlink"


@dataclass(frozen=True)
class LabelSpan(Span):
    label: str = ""

    tag: ClassVar[str] = "label"


@dataclass(frozen=True)
class UnknownSpan(Span):
    type: str = ""

    @property
    def kind(self) -> str:
        return self.type


# ----- Blocks -----


@dataclass(frozen=True)
class Block:
    tag: ClassVar[str] = ""

    @property
    def kind(self) -> str:
        return self.tag


@dataclass(frozen=True)
class TextBlock(Block):
    text: str = ""
    spans: Tuple[Span, ...] = ()
    label: Optional[str] = None


@dataclass(frozen=True)
class Heading(TextBlock):
    level: int = 1

    @property
    def kind(self) -> str:
        return f"heading{self.level}"


@dataclass(frozen=True)
class Paragraph(TextBlock):
    tag: ClassVar[str] = "paragraph"


@dataclass(frozen=True)
class Preformatted(TextBlock):
    tag: ClassVar[str] = "preformatted"


@dataclass(frozen=True)
class ListItem(TextBlock):
    ordered: bool = False

    @property
    def kind(self) -> str:
        return "o-list-item" if self.ordered else "list-item"


@dataclass(frozen=True)
class ImageBlock(Block):
    view: Optional[ImageView] = None
    link_to: Optional[Link] = None
    label: Optional[str] = None

    tag: ClassVar[str] = "image"


@dataclass(frozen=True)
class EmbedBlock(Block):
    embed: Optional[Embed] = None
    label: Optional[str] = None

    tag: ClassVar[str] = "embed"


@dataclass(frozen=True)
class UnknownBlock(TextBlock):
    type: str = ""

    @property
    def kind(self) -> str:
        return self.type


@dataclass(frozen=True)
class StructuredText:
    blocks: Tuple[Block, ...] = ()

    def __iter__(self):
        return iter(self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)

    def as_text(self) -> str:
        """Plain text of all text blocks, one per line."""
        return "\n".join(b.text for b in self.blocks if isinstance(b, TextBlock) and b.text)

    def first_heading(self) -> Optional[Heading]:
        return next((b for b in self.blocks if isinstance(b, Heading)), None)

    def first_paragraph(self) -> Optional[Paragraph]:
        return next((b for b in self.blocks if isinstance(b, Paragraph)), None)

    def first_image(self) -> Optional[ImageView]:
        return next((b.view for b in self.blocks if isinstance(b, ImageBlock)), None)

    def as_html(
        self, link_resolver: "LinkResolver", serializer: Optional["HtmlSerializer"] = None
    ) -> str:
        from prismkit.renderers.html_renderer import HtmlRenderer

        return HtmlRenderer(link_resolver, serializer).render(self)


# ----- Parsing -----


_SIMPLE_SPANS = {"strong": Strong, "em": Em}


def _utf16_offsets(text: str) -> List[int]:
    """UTF-16 offset of every code point boundary in `text`, ending with its UTF-16 length."""
    offsets = [0]
    for ch in text:
        offsets.append(offsets[-1] + (2 if ord(ch) > 0xFFFF else 1))
    return offsets


def parse_spans(items: Iterable[Dict[str, Any]], text: str) -> Tuple[Span, ...]:
    """Parse spans, clamping offsets to the text and sorting them by position.

    Wire offsets count UTF-16 code units; they are converted to indices into
    `text`. An offset falling inside a surrogate pair moves to the end of that
    character. Spans that end up empty after clamping are dropped. Spans sharing
    a start offset are ordered longest first so that the outer one encloses the
    rest.
    """
    offsets = _utf16_offsets(text)
    limit = offsets[-1]

    def to_index(raw: Any) -> int:
        return bisect.bisect_left(offsets, max(0, min(int(raw), limit)))

    spans: List[Span] = []
    for item in items or ():
        item = require_dict(item, "span")
        start = to_index(item["start"])
        end = to_index(item["end"])
        if start >= end:
            continue
        kind = item.get("type", "")
        data = require_dict(item.get("data") or {}, "span data")
        span: Span
        if kind in _SIMPLE_SPANS:
            span = _SIMPLE_SPANS[kind](start=start, end=end)
        elif kind == "hyperlink":
            span = Hyperlink(start=start, end=end, link=parse_link(data))
        elif kind == "label":
            span = LabelSpan(start=start, end=end, label=str(data.get("label", "")))
        else:
            span = UnknownSpan(start=start, end=end, type=str(kind))
        spans.append(span)
    spans.sort(key=lambda s: (s.start, -s.end))
    return tuple(spans)


def parse_block(data: Dict[str, Any]) -> Block:
    data = require_dict(data, "structured text block")
    kind = str(data.get("type", ""))
    label = data.get("label")
    if kind == "image":
        link_to = parse_link(data["linkTo"]) if data.get("linkTo") else None
        return ImageBlock(view=parse_image_view(data), link_to=link_to, label=label)
    if kind == "embed":
        return EmbedBlock(embed=parse_embed(data), label=label)

    text = str(data.get("text") or "")
    spans = parse_spans(data.get("spans") or (), text)
    if kind.startswith("heading") and kind[len("heading"):].isdigit():
        level = int(kind[len("heading"):])
        if 1 <= level <= 6:
            return Heading(text=text, spans=spans, label=label, level=level)
    if kind == "paragraph":
        return Paragraph(text=text, spans=spans, label=label)
    if kind == "preformatted":
        return Preformatted(text=text, spans=spans, label=label)
    if kind in ("list-item", "o-list-item"):
        return ListItem(text=text, spans=spans, label=label, ordered=kind == "o-list-item")
    logger.debug("Keeping unknown structured text block type %r", kind)
    return UnknownBlock(text=text, spans=spans, label=label, type=kind)


def parse_structured_text(value: Iterable[Dict[str, Any]]) -> StructuredText:
    return StructuredText(blocks=tuple(parse_block(b) for b in value))
