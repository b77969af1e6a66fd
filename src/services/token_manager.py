import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from pydantic import ValidationError

from src.models.user import TokenPair
from src.services.errors import ApiUnavailable, RequestFailed, SessionExpired

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizedResponse:
    data: Any
    tokens: TokenPair


def parse_tokens(data: Any) -> TokenPair:
    """Достаёт пару токенов из ответа /auth/login или /auth/refresh."""
    try:
        return TokenPair.model_validate(data)
    except ValidationError as e:
        raise SessionExpired(f"Malformed token response: {e.error_count()} errors") from e


class TokenManager:
    """Выполняет запросы с bearer-токеном и один раз обновляет его при 401.

    Между вызовами ничего не хранит: пара токенов приходит аргументом
    и возвращается вместе с результатом, сохранить её должен вызывающий.
    """

    def __init__(self, transport):
        self._transport = transport

    async def refresh(self, refresh_token: str) -> TokenPair:
        response = await self._transport.request(
            "POST", "/auth/refresh", payload={"refreshToken": refresh_token}
        )
        if not response.ok:
            logger.warning(f"Token refresh rejected: {response.status}")
            raise SessionExpired("Refresh token истёк")
        return parse_tokens(response.data)

    async def call_with_auth(
        self,
        method: str,
        path: str,
        tokens: TokenPair,
        payload: dict | None = None,
    ) -> AuthorizedResponse:
        response = await self._transport.request(
            method, path, payload=payload, access_token=tokens.access_token
        )

        if response.status == HTTPStatus.UNAUTHORIZED:
            if not tokens.refresh_token:
                raise SessionExpired("No refresh token")

            tokens = await self.refresh(tokens.refresh_token)
            logger.info(f"Access token refreshed, retrying {method} {path}")

            try:
                response = await self._transport.request(
                    method, path, payload=payload, access_token=tokens.access_token
                )
            except ApiUnavailable as e:
                e.tokens = tokens
                raise
            if response.status == HTTPStatus.UNAUTHORIZED:
                logger.warning(f"{method} {path} still unauthorized after refresh")
                raise SessionExpired("Unauthorized after refresh")

        if not response.ok:
            raise RequestFailed(response.status, response.message, tokens=tokens)

        return AuthorizedResponse(response.data, tokens)
