"""Base interface for the HTTP transport used by the API client.

Connectors should be safe to construct without side effects and should not
perform network calls until methods are invoked.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, Tuple

QueryParams = Sequence[Tuple[str, str]]


class BaseConnector(ABC):
    """Abstract connector interface."""

    @abstractmethod
    async def get_json(self, url: str, *, params: Optional[QueryParams] = None) -> Any:
        """GET `url` with the given query parameters and return the decoded JSON body.

        Implementations should raise `prismkit.exceptions.RequestFailedError`
        for any transport, HTTP status or decoding failure.
        """
        raise NotImplementedError
