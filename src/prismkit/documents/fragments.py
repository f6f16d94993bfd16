"""Typed fragment values found in document fields.

Each fragment is a frozen dataclass built from the `{"type": ..., "value": ...}`
JSON shape returned by the content API. Structured text lives in
`prismkit.documents.structured_text`; the dispatch from wire type to parser is
in `prismkit.documents.document`.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Date:
    value: date


@dataclass(frozen=True)
class Timestamp:
    value: datetime


@dataclass(frozen=True)
class Color:
    """Hex color, e.g. `#ffcc00`."""

    value: str


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Embed:
    """oEmbed payload (video, rich content) as stored by the API."""

    type: str
    provider: Optional[str]
    url: str
    html: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def as_html(self) -> str:
        provider = f' data-oembed-provider="{self.provider.lower()}"' if self.provider else ""
        return (
            f'<div data-oembed="{html.escape(self.url)}"'
            f' data-oembed-type="{self.type.lower()}"{provider}>{self.html or ""}</div>'
        )


@dataclass(frozen=True)
class ImageView:
    url: str
    width: Optional[int] = None
    height: Optional[int] = None
    alt: Optional[str] = None
    copyright: Optional[str] = None

    def as_html(self) -> str:
        size = ""
        if self.width is not None:
            size += f' width="{self.width}"'
        if self.height is not None:
            size += f' height="{self.height}"'
        return f'<img alt="{html.escape(self.alt or "")}" src="{html.escape(self.url)}"{size} />'


@dataclass(frozen=True)
class Image:
    main: ImageView
    views: Mapping[str, ImageView] = field(default_factory=dict)

    def get_view(self, name: str) -> Optional[ImageView]:
        if name == "main":
            return self.main
        return self.views.get(name)


# ----- Links -----


@dataclass(frozen=True)
class WebLink:
    url: str
    content_type: Optional[str] = None


@dataclass(frozen=True)
class FileLink:
    url: str
    kind: Optional[str] = None
    size: Optional[int] = None
    filename: Optional[str] = None


@dataclass(frozen=True)
class ImageLink:
    url: str
    size: Optional[int] = None
    filename: Optional[str] = None


@dataclass(frozen=True)
class DocumentLink:
    """Link to another document; turned into a URL by a link resolver."""

    id: str
    type: str
    slug: Optional[str] = None
    uid: Optional[str] = None
    tags: Tuple[str, ...] = ()
    is_broken: bool = False


Link = Union[WebLink, FileLink, ImageLink, DocumentLink]


@dataclass(frozen=True)
class Group:
    """Repeatable group of fields; each item maps field name to fragment."""

    items: Tuple[Mapping[str, Any], ...] = ()

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


# ----- Parsing helpers -----


def _opt_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def require_dict(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be an object, got {type(value).__name__}")
    return value


def parse_image_view(data: Dict[str, Any]) -> ImageView:
    data = require_dict(data, "image view")
    dims = require_dict(data.get("dimensions") or {}, "image dimensions")
    return ImageView(
        url=data["url"],
        width=_opt_int(dims.get("width")),
        height=_opt_int(dims.get("height")),
        alt=data.get("alt"),
        copyright=data.get("copyright"),
    )


def parse_image(value: Dict[str, Any]) -> Image:
    value = require_dict(value, "image")
    views_data = require_dict(value.get("views") or {}, "image views")
    views = {name: parse_image_view(v) for name, v in views_data.items()}
    return Image(main=parse_image_view(value["main"]), views=views)


def parse_embed(value: Dict[str, Any]) -> Embed:
    value = require_dict(value, "embed")
    oembed = require_dict(value.get("oembed", value), "oembed")
    return Embed(
        type=str(oembed["type"]),
        provider=oembed.get("provider_name"),
        url=oembed["embed_url"],
        html=oembed.get("html"),
        width=_opt_int(oembed.get("width")),
        height=_opt_int(oembed.get("height")),
    )


def parse_link(data: Dict[str, Any]) -> Optional[Link]:
    """Parse a `{"type": "Link.*", "value": {...}}` object, or None for unknown kinds."""
    data = require_dict(data, "link")
    kind = data.get("type")
    value = require_dict(data.get("value") or {}, "link value")
    if kind == "Link.web":
        return WebLink(url=value["url"], content_type=value.get("content_type"))
    if kind == "Link.document":
        doc = value["document"]
        return DocumentLink(
            id=doc["id"],
            type=doc["type"],
            slug=doc.get("slug"),
            uid=doc.get("uid"),
            tags=tuple(doc.get("tags") or ()),
            is_broken=bool(value.get("isBroken", False)),
        )
    if kind == "Link.file":
        f = value["file"]
        return FileLink(
            url=f["url"], kind=f.get("kind"), size=_opt_int(f.get("size")), filename=f.get("name")
        )
    if kind == "Link.image":
        img = value["image"]
        return ImageLink(url=img["url"], size=_opt_int(img.get("size")), filename=img.get("name"))
    return None
