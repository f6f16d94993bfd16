"""Entry point of the client: the API descriptor of a content repository.

    api = await Api.get("https://lesbonneschoses.prismic.io/api")
    response = await (
        api.form("everything")
        .ref(api.master)
        .query(Predicate.at("document.type", "product"))
        .page_size(100)
        .submit()
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from prismkit.connectors.base_connector import BaseConnector
from prismkit.connectors.prismic import PrismicConnector
from prismkit.exceptions import RequestFailedError, UnknownFormError
from prismkit.search.form import SearchForm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ref:
    """A release (version) of the repository content to query against."""

    id: str
    ref: str
    label: str
    is_master: bool = False
    scheduled_at: Optional[datetime] = None


@dataclass(frozen=True)
class Field:
    type: str
    multiple: bool = False
    default: Optional[str] = None


@dataclass(frozen=True)
class Form:
    action: str
    name: Optional[str] = None
    method: str = "GET"
    rel: Optional[str] = None
    enctype: Optional[str] = None
    fields: Mapping[str, Field] = field(default_factory=dict)


def _parse_ref(data: Dict[str, Any]) -> Ref:
    scheduled = data.get("scheduledAt")
    return Ref(
        id=str(data.get("id", "")),
        ref=data["ref"],
        label=data["label"],
        is_master=bool(data.get("isMasterRef", False)),
        scheduled_at=(
            datetime.fromtimestamp(int(scheduled) / 1000, tz=timezone.utc) if scheduled else None
        ),
    )


def _parse_form(data: Dict[str, Any]) -> Form:
    fields = {}
    for name, f in (data.get("fields") or {}).items():
        default = f.get("default")
        fields[name] = Field(
            type=str(f.get("type", "String")),
            multiple=bool(f.get("multiple", False)),
            default=str(default) if default is not None else None,
        )
    return Form(
        action=data["action"],
        name=data.get("name"),
        method=str(data.get("method", "GET")),
        rel=data.get("rel"),
        enctype=data.get("enctype"),
        fields=MappingProxyType(fields),
    )


@dataclass(frozen=True)
class Api:
    refs: Mapping[str, Ref]
    forms: Mapping[str, Form]
    bookmarks: Mapping[str, str] = field(default_factory=dict)
    types: Mapping[str, str] = field(default_factory=dict)
    tags: Tuple[str, ...] = ()
    access_token: Optional[str] = None
    connector: BaseConnector = field(default_factory=PrismicConnector, repr=False, compare=False)

    @classmethod
    async def get(
        cls,
        endpoint: str,
        access_token: Optional[str] = None,
        *,
        connector: Optional[BaseConnector] = None,
    ) -> "Api":
        """Fetch and parse the API descriptor at `endpoint`.

        Raises `RequestFailedError` when the request fails, including an
        invalid access token on a private repository.
        """
        connector = connector or PrismicConnector()
        params = [("access_token", access_token)] if access_token else None
        data = await connector.get_json(endpoint, params=params)
        try:
            api = cls.from_json(data, access_token=access_token, connector=connector)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise RequestFailedError(f"Malformed API descriptor from {endpoint}: {exc}", url=endpoint) from exc
        logger.debug("Loaded API %s with %d refs and %d forms", endpoint, len(api.refs), len(api.forms))
        return api

    @classmethod
    def from_json(
        cls,
        data: Dict[str, Any],
        *,
        access_token: Optional[str] = None,
        connector: Optional[BaseConnector] = None,
    ) -> "Api":
        refs = {r.label: r for r in (_parse_ref(item) for item in data["refs"])}
        if not any(r.is_master for r in refs.values()):
            raise ValueError("no master ref")
        forms = {name: _parse_form(f) for name, f in (data.get("forms") or {}).items()}
        return cls(
            refs=MappingProxyType(refs),
            forms=MappingProxyType(forms),
            bookmarks=MappingProxyType(dict(data.get("bookmarks") or {})),
            types=MappingProxyType(dict(data.get("types") or {})),
            tags=tuple(data.get("tags") or ()),
            access_token=access_token,
            connector=connector or PrismicConnector(),
        )

    @property
    def master(self) -> Ref:
        return next(r for r in self.refs.values() if r.is_master)

    def ref_by_label(self, label: str) -> Optional[Ref]:
        return self.refs.get(label)

    def bookmark(self, name: str) -> Optional[str]:
        """Document id registered under a bookmark name."""
        return self.bookmarks.get(name)

    def form(self, name: str) -> SearchForm:
        """A new search form, pre-filled with the form's field defaults."""
        try:
            form = self.forms[name]
        except KeyError:
            known = ", ".join(sorted(self.forms))
            raise UnknownFormError(f"Unknown form '{name}'. Available: {known}") from None
        return SearchForm.create(self, form)
