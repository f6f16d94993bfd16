from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from prismkit.documents.document import Document, parse_document


@dataclass(frozen=True)
class Response:
    """One page of search results plus pagination metadata."""

    results: Tuple[Document, ...]
    page: int
    results_per_page: int
    results_size: int
    total_results_size: int
    total_pages: int
    next_page: Optional[str] = None
    prev_page: Optional[str] = None

    def __iter__(self) -> Iterator[Document]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Response":
        results = tuple(parse_document(d) for d in data["results"])
        return cls(
            results=results,
            page=int(data["page"]),
            results_per_page=int(data["results_per_page"]),
            results_size=int(data.get("results_size", len(results))),
            total_results_size=int(data["total_results_size"]),
            total_pages=int(data["total_pages"]),
            next_page=data.get("next_page"),
            prev_page=data.get("prev_page"),
        )
