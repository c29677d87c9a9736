from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

SET_PATH = "/set/{kind}"
SHOULD_REFRESH_PATH = "/should_refresh"
REFRESH_TOKEN = "refresh"


def build_base_url(address: str) -> str:
    trimmed = address.strip().rstrip("/")
    if not trimmed:
        return ""
    parsed = urlparse(trimmed)
    if parsed.scheme in {"http", "https"}:
        return trimmed
    return f"http://{trimmed}"


class HostClient:
    """Async client for the host's two control endpoints.

    Only transport failures are surfaced (as `httpx.TransportError`); response
    status codes are never inspected.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 3.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("missing host base url")
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_s,
            transport=transport,
        )

    async def post_update(self, kind: str, key: str, value: Any) -> None:
        response = await self._client.post(
            SET_PATH.format(kind=kind),
            json={"key": key, "value": value},
        )
        logger.debug(
            "update sent",
            extra={"key": key, "kind": kind, "status": response.status_code},
        )

    async def should_refresh(self) -> str:
        response = await self._client.get(SHOULD_REFRESH_PATH)
        return response.text

    async def aclose(self) -> None:
        await self._client.aclose()
