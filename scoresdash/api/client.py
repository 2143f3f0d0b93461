"""Async httpx wrapper for ESPN's public JSON endpoints."""

from __future__ import annotations

from typing import Any

import httpx

from scoresdash.errors import ProviderError

SCOREBOARD_URL = "https://site.api.espn.com/apis/site/v2/sports"
CORE_URL = "https://sports.core.api.espn.com/v2/sports"


class ESPNClient:
    """Async HTTP client for the scoreboard and odds endpoints."""

    def __init__(
        self,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {
            "timeout": timeout,
            "headers": {"User-Agent": "scoresdash/0.1"},
        }
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**kwargs)

    async def close(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET a URL and return decoded JSON.

        Any transport failure, non-2xx status or undecodable body is raised
        as ProviderError so callers only need to handle one type.
        """
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"API request failed with status: {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"failed to fetch data: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(f"failed to parse JSON: {exc}") from exc
