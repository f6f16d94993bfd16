"""Documents returned by search forms, with typed fragment accessors.

Fields are addressed as `"<type>.<field>"` (e.g. `"blog-post.body"`); a bare
field name is looked up under the document's own type. Every `get_*`
accessor returns None when the field is absent or holds another fragment
variant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union

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
    parse_embed,
    parse_image,
    parse_link,
    require_dict,
)
from prismkit.documents.structured_text import StructuredText, parse_structured_text

if TYPE_CHECKING:
    from prismkit.renderers.html_renderer import HtmlSerializer, LinkResolver

logger = logging.getLogger(__name__)

Fragment = Union[
    Text,
    Number,
    Date,
    Timestamp,
    Color,
    GeoPoint,
    Embed,
    Image,
    WebLink,
    FileLink,
    ImageLink,
    DocumentLink,
    StructuredText,
    Group,
]

F = TypeVar("F")


@dataclass(frozen=True)
class Document:
    id: str
    type: str
    fragments: Mapping[str, Fragment] = field(default_factory=lambda: MappingProxyType({}))
    uid: Optional[str] = None
    href: Optional[str] = None
    tags: Tuple[str, ...] = ()
    slugs: Tuple[str, ...] = ()

    @property
    def slug(self) -> str:
        return self.slugs[0] if self.slugs else "-"

    def as_link(self) -> DocumentLink:
        """A link to this document, suitable for passing to a link resolver."""
        return DocumentLink(id=self.id, type=self.type, slug=self.slug, uid=self.uid, tags=self.tags)

    def _path(self, name: str) -> str:
        return name if "." in name else f"{self.type}.{name}"

    def get(self, name: str) -> Optional[Fragment]:
        return self.fragments.get(self._path(name))

    def _typed(self, name: str, cls: Type[F]) -> Optional[F]:
        frag = self.get(name)
        return frag if isinstance(frag, cls) else None

    def get_text(self, name: str) -> Optional[str]:
        frag = self._typed(name, Text)
        return frag.value if frag else None

    def get_number(self, name: str) -> Optional[float]:
        frag = self._typed(name, Number)
        return frag.value if frag else None

    def get_date(self, name: str) -> Optional[date]:
        frag = self._typed(name, Date)
        return frag.value if frag else None

    def get_timestamp(self, name: str) -> Optional[datetime]:
        frag = self._typed(name, Timestamp)
        return frag.value if frag else None

    def get_color(self, name: str) -> Optional[str]:
        frag = self._typed(name, Color)
        return frag.value if frag else None

    def get_structured_text(self, name: str) -> Optional[StructuredText]:
        return self._typed(name, StructuredText)

    def get_image(self, name: str) -> Optional[Image]:
        return self._typed(name, Image)

    def get_embed(self, name: str) -> Optional[Embed]:
        return self._typed(name, Embed)

    def get_geo_point(self, name: str) -> Optional[GeoPoint]:
        return self._typed(name, GeoPoint)

    def get_group(self, name: str) -> Optional[Group]:
        return self._typed(name, Group)

    def get_link(self, name: str) -> Optional[Link]:
        frag = self.get(name)
        return frag if isinstance(frag, (WebLink, FileLink, ImageLink, DocumentLink)) else None

    def get_html(
        self,
        name: str,
        link_resolver: "LinkResolver",
        serializer: Optional["HtmlSerializer"] = None,
    ) -> Optional[str]:
        from prismkit.renderers.html_renderer import HtmlRenderer

        frag = self.get(name)
        if frag is None:
            return None
        return HtmlRenderer(link_resolver, serializer).render_fragment(frag)

    def as_html(
        self, link_resolver: "LinkResolver", serializer: Optional["HtmlSerializer"] = None
    ) -> str:
        """Render every fragment inside a `<section data-field="...">` wrapper."""
        from prismkit.renderers.html_renderer import HtmlRenderer

        return HtmlRenderer(link_resolver, serializer).render_fields(self.fragments)


# ----- Parsing -----


def _parse_timestamp(value: str) -> datetime:
    # The API sends "+0000" style offsets; fall back to ISO 8601 for anything else
    try:
        return datetime.strptime(value, "%Y-%m-%dT%H:%M:%S%z")
    except ValueError:
        return datetime.fromisoformat(value)


def _parse_group(value: Any) -> Group:
    items = []
    for item in value or ():
        fields: Dict[str, Fragment] = {}
        for name, data in require_dict(item, "group item").items():
            frag = parse_fragment(data)
            if frag is not None:
                fields[name] = frag
        items.append(MappingProxyType(fields))
    return Group(items=tuple(items))


_PARSERS: Dict[str, Callable[[Any], Fragment]] = {
    "Text": lambda v: Text(str(v)),
    "Select": lambda v: Text(str(v)),
    "Number": lambda v: Number(float(v)),
    "Date": lambda v: Date(date.fromisoformat(v)),
    "Timestamp": lambda v: Timestamp(_parse_timestamp(v)),
    "Color": lambda v: Color(str(v)),
    "GeoPoint": lambda v: GeoPoint(latitude=float(v["latitude"]), longitude=float(v["longitude"])),
    "Embed": parse_embed,
    "Image": parse_image,
    "StructuredText": parse_structured_text,
    "Group": _parse_group,
}


def parse_fragment(data: Any) -> Optional[Fragment]:
    """Parse one `{"type": ..., "value": ...}` object; None if the type is unknown."""
    if not isinstance(data, dict):
        return None
    kind = data.get("type")
    if isinstance(kind, str) and kind.startswith("Link."):
        return parse_link(data)
    parser = _PARSERS.get(kind)  # type: ignore[arg-type]
    if parser is None:
        return None
    return parser(data.get("value"))


def parse_document(data: Dict[str, Any]) -> Document:
    """Build a Document from one entry of a search response's `results`.

    Fragments that cannot be parsed are left out and logged.
    """
    doc_type = data["type"]
    fields: Dict[str, Fragment] = {}
    raw_fields = (data.get("data") or {}).get(doc_type) or {}
    for name, raw in raw_fields.items():
        # Repeated fields come back as a list; keep the first value
        if isinstance(raw, list):
            raw = raw[0] if raw else None
        try:
            frag = parse_fragment(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Dropping malformed fragment %s.%s: %s", doc_type, name, exc)
            continue
        if frag is None:
            logger.warning("Dropping fragment %s.%s of unsupported type", doc_type, name)
            continue
        fields[f"{doc_type}.{name}"] = frag
    return Document(
        id=data["id"],
        type=doc_type,
        fragments=MappingProxyType(fields),
        uid=data.get("uid"),
        href=data.get("href"),
        tags=tuple(data.get("tags") or ()),
        slugs=tuple(data.get("slugs") or ()),
    )
