"""Content API tools for FastMCP.

Query a repository and render documents to HTML. Nothing is cached; every
tool call fetches the API descriptor, then submits one search form.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP

from prismkit.api import Api
from prismkit.connectors.prismic import PrismicConnector
from prismkit.documents.document import Document
from prismkit.documents.fragments import DocumentLink
from prismkit.exceptions import ConfigError
from prismkit.predicates import Predicate


def _default_link_resolver(link: DocumentLink) -> str:
    return f"/{link.type}/{link.id}/{link.slug or '-'}"


def _serialize_document(doc: Document) -> Dict[str, Any]:
    return {
        "id": doc.id,
        "uid": doc.uid,
        "type": doc.type,
        "href": doc.href,
        "tags": list(doc.tags),
        "slugs": list(doc.slugs),
        "fields": sorted(doc.fragments),
    }


async def load_api(state_obj: Any) -> Api:
    """Fetch the API descriptor using the connection settings held by `state_obj`."""
    settings = getattr(state_obj, "settings", None)
    pcfg = getattr(settings, "prismic", None)
    endpoint = getattr(pcfg, "endpoint", None)
    if not endpoint:
        raise ConfigError("Content API is not configured. Set PRISMKIT_PRISMIC__ENDPOINT.")
    connector = PrismicConnector(
        timeout=float(getattr(pcfg, "timeout", 30.0)),
        verify_ssl=bool(getattr(pcfg, "verify_ssl", True)),
    )
    return await Api.get(endpoint, getattr(pcfg, "access_token", None), connector=connector)


def register_prismic_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register content API tools on the given FastMCP instance.

    Reads config from state.settings.prismic (endpoint, access_token, timeout, verify_ssl).
    """

    def _resolve_ref(api: Api, ref: Optional[str]) -> str:
        if not ref:
            return api.master.ref
        by_label = api.ref_by_label(ref)
        return by_label.ref if by_label else ref

    @mcp.tool
    async def prismic_refs() -> List[Dict[str, Any]]:
        """List the repository's refs (releases), master first."""
        api = await load_api(get_state())
        refs = sorted(api.refs.values(), key=lambda r: (not r.is_master, r.label))
        return [
            {
                "id": r.id,
                "ref": r.ref,
                "label": r.label,
                "is_master": r.is_master,
                "scheduled_at": r.scheduled_at.isoformat() if r.scheduled_at else None,
            }
            for r in refs
        ]

    @mcp.tool
    async def prismic_search(
        *,
        document_type: Optional[str] = None,
        fulltext: Optional[str] = None,
        predicates: Optional[List[str]] = None,
        ref: Optional[str] = None,
        form: str = "everything",
        page: int = 1,
        page_size: Optional[int] = None,
        orderings: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Search documents.

        Parameters
        ----------
        document_type: str | None
            Restrict to one custom type (e.g., "blog-post").
        fulltext: str | None
            Fulltext search across the whole document.
        predicates: list[str] | None
            Raw predicates such as '[:d = at(document.tags, ["featured"])]'.
        ref: str | None
            Ref token or ref label; defaults to the master ref.
        page, page_size, orderings:
            Pagination and sort order (e.g., "[my.product.price desc]").
        """
        state = get_state()
        api = await load_api(state)
        built: List[Any] = []
        if document_type:
            built.append(Predicate.at("document.type", document_type))
        if fulltext:
            built.append(Predicate.fulltext("document", fulltext))
        built.extend(predicates or [])

        search = api.form(form).ref(_resolve_ref(api, ref)).query(*built).page(page)
        size = page_size or getattr(getattr(state.settings, "prismic", None), "default_page_size", None)
        if size:
            search = search.page_size(size)
        if orderings:
            search = search.orderings(orderings)
        response = await search.submit()
        return {
            "page": response.page,
            "results_per_page": response.results_per_page,
            "total_results_size": response.total_results_size,
            "total_pages": response.total_pages,
            "results": [_serialize_document(d) for d in response.results],
        }

    @mcp.tool
    async def prismic_document_html(
        document_id: str, *, field: Optional[str] = None, ref: Optional[str] = None
    ) -> Dict[str, Any]:
        """Render a document (or one of its fields, e.g. "blog-post.body") to HTML."""
        api = await load_api(get_state())
        response = await (
            api.form("everything")
            .ref(_resolve_ref(api, ref))
            .query(Predicate.at("document.id", document_id))
            .submit()
        )
        if not response.results:
            raise LookupError(f"Document not found: '{document_id}'")
        doc = response.results[0]
        if field:
            html = doc.get_html(field, _default_link_resolver)
            if html is None:
                raise LookupError(f"Field '{field}' not found on document '{document_id}'")
        else:
            html = doc.as_html(_default_link_resolver)
        return {"id": doc.id, "type": doc.type, "field": field, "html": html}
