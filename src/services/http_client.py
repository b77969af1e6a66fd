import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from src.services.errors import ApiUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    status: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def message(self) -> str | None:
        if isinstance(self.data, dict):
            return self.data.get("message")
        return None


class ApiTransport:
    """HTTP-клиент REST API расходов поверх одной aiohttp-сессии."""

    def __init__(self, base_url: str, timeout: float = 15.0):
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout, connect=5)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def request(
        self,
        method: str,
        path: str,
        payload: dict | None = None,
        access_token: str | None = None,
    ) -> ApiResponse:
        headers = {}
        if access_token is not None:
            headers["Authorization"] = f"Bearer {access_token}"

        url = f"{self.base_url}{path}"
        try:
            async with self._get_session().request(
                method, url, json=payload, headers=headers
            ) as response:
                data = _decode_body(await response.text())
                logger.debug(f"[API] {method} {path} -> {response.status}")
                return ApiResponse(response.status, data)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"[API] {method} {path} failed: {e!r}")
            raise ApiUnavailable(str(e) or type(e).__name__) from e

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("[API] HTTP session closed")


def _decode_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text
