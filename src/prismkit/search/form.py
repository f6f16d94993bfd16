"""Search form submission.

A `SearchForm` is an immutable builder over one form of the API descriptor:
each setter returns a new form, and `submit()` performs a single GET to the
form's action URL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, List, Mapping, Tuple, Union

from prismkit.exceptions import RequestFailedError, UnknownFieldError
from prismkit.predicates import Predicate
from prismkit.search.response import Response

if TYPE_CHECKING:
    from prismkit.api import Api, Form, Ref

logger = logging.getLogger(__name__)


def _positive_int(value: object, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be an integer, got {value!r}")
    if value < 1:
        raise ValueError(f"{what} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class SearchForm:
    api: "Api"
    form: "Form"
    data: Mapping[str, Tuple[str, ...]]

    @classmethod
    def create(cls, api: "Api", form: "Form") -> "SearchForm":
        defaults = {name: (f.default,) for name, f in form.fields.items() if f.default is not None}
        return cls(api=api, form=form, data=MappingProxyType(defaults))

    def set(self, field: str, value: Union[str, int]) -> "SearchForm":
        """Set a form field. Multiple-valued fields accumulate, others are replaced."""
        desc = self.form.fields.get(field)
        if desc is None:
            raise UnknownFieldError(f"Unknown field '{field}' for form '{self.form.name}'")
        previous = self.data.get(field, ()) if desc.multiple else ()
        data = dict(self.data)
        data[field] = previous + (str(value),)
        return replace(self, data=MappingProxyType(data))

    def ref(self, ref: Union["Ref", str]) -> "SearchForm":
        return self.set("ref", ref if isinstance(ref, str) else ref.ref)

    def query(self, *predicates: Union[Predicate, str]) -> "SearchForm":
        """Add predicates; they are sent together as one `[...]` query."""
        if not predicates:
            return self
        q = "".join(p.q if isinstance(p, Predicate) else str(p) for p in predicates)
        return self.set("q", f"[{q}]")

    def page_size(self, size: int) -> "SearchForm":
        return self.set("pageSize", _positive_int(size, "page size"))

    def page(self, page: int) -> "SearchForm":
        return self.set("page", _positive_int(page, "page"))

    def orderings(self, orderings: str) -> "SearchForm":
        """Sort order, e.g. `"[my.product.price desc]"`."""
        return self.set("orderings", orderings)

    def params(self) -> List[Tuple[str, str]]:
        out = [(name, value) for name, values in self.data.items() for value in values]
        if self.api.access_token and "access_token" not in self.data:
            out.append(("access_token", self.api.access_token))
        return out

    async def submit(self) -> Response:
        url = self.form.action
        data = await self.api.connector.get_json(url, params=self.params())
        try:
            response = Response.from_json(data)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise RequestFailedError(f"Malformed search response from {url}: {exc}", url=url) from exc
        logger.debug(
            "Form %s returned %d of %d results", self.form.name, len(response), response.total_results_size
        )
        return response
