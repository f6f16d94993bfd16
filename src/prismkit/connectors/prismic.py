"""httpx-based connector for the content API.

Every call opens a short-lived `httpx.AsyncClient`; there is no retry logic.
All failures are reported as `RequestFailedError` with the original exception
chained.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from prismkit.connectors.base_connector import BaseConnector, QueryParams
from prismkit.exceptions import RequestFailedError

logger = logging.getLogger(__name__)


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        detail = data.get("error") or data.get("message")
        if isinstance(detail, str):
            return f": {detail}"
    return ""


class PrismicConnector(BaseConnector):
    def __init__(
        self,
        *,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        user_agent: str = "prismkit/0.1",
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            verify=self.verify_ssl,
            follow_redirects=True,
            headers={"Accept": "application/json", "User-Agent": self.user_agent},
        )

    async def get_json(self, url: str, *, params: Optional[QueryParams] = None) -> Any:
        logger.debug("GET %s params=%s", url, list(params or []))
        try:
            async with self._client() as client:
                resp = await client.get(url, params=list(params or []))
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise RequestFailedError(
                f"GET {url} returned HTTP {status}{_error_detail(exc.response)}",
                url=url,
                status_code=status,
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RequestFailedError(f"GET {url} failed: {exc}", url=url) from exc
        except ValueError as exc:
            # json.JSONDecodeError
            raise RequestFailedError(f"GET {url} returned malformed JSON: {exc}", url=url) from exc
