# board_meetings/services/directory_client.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from board_meetings.core.config import get_settings
from board_meetings.core.exceptions import DirectoryClientError, NotFoundError
from board_meetings.schemas.board import Board
from board_meetings.schemas.participant import Actor, Participant
from board_meetings.services.directory import DirectoryProvider

logger = logging.getLogger(__name__)


@dataclass
class _TokenState:
    access_token: str
    expires_at: datetime


class HttpDirectoryClient(DirectoryProvider):
    """
    Directory provider backed by the governance platform's REST API.

    Responsibilities
    ----------------
    - Fetch and cache an access token using the OAuth2 client-credentials flow.
    - Map `/boards/{id}`, `/boards/{id}/participants` and `/users/{id}`
      responses onto the engine's Board / Participant / Actor schemas.
    - Keep HTTP details out of the scheduler.

    Notes
    -----
    - Token caching is in-memory for this process only.
    - A small safety margin is applied when calculating token expiry to avoid
      edge cases near expiration.
    - Rosters are never cached: guest status may change between calls.
    """

    def __init__(
        self,
        base_url: str,
        token_url: str,
        client_id: str,
        client_secret: str,
        scope: Optional[str] = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        if not base_url or not token_url or not client_id or not client_secret:
            raise ValueError("base_url, token_url, client_id and client_secret are required")

        self._base_url = base_url.rstrip("/")
        self._token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._scope = scope
        self._timeout_seconds = timeout_seconds

        self._token_state: Optional[_TokenState] = None

    async def _fetch_token(self) -> _TokenState:
        data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "grant_type": "client_credentials",
        }
        if self._scope:
            data["scope"] = self._scope

        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            resp = await client.post(self._token_url, data=data)

        if resp.status_code != HTTPStatus.OK:
            raise DirectoryClientError(
                f"Failed to obtain directory token (status={resp.status_code}): {resp.text}"
            )

        payload = resp.json()
        access_token = payload.get("access_token")
        expires_in = payload.get("expires_in")

        if not access_token or not isinstance(expires_in, (int, float)):
            raise DirectoryClientError(
                "Invalid token response (missing access_token/expires_in)"
            )

        # Refresh slightly before real expiry.
        now = datetime.now(tz=timezone.utc)
        safety_margin = 60  # seconds
        expires_at = now + timedelta(seconds=float(expires_in) - safety_margin)

        return _TokenState(access_token=access_token, expires_at=expires_at)

    async def get_access_token(self) -> str:
        """
        Return a valid access token, using the cached one while it is still valid.
        """
        now = datetime.now(tz=timezone.utc)
        if self._token_state and self._token_state.expires_at > now:
            return self._token_state.access_token

        self._token_state = await self._fetch_token()
        return self._token_state.access_token

    async def get_json(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Authenticated GET against the directory API.

        Raises
        ------
        NotFoundError
            On 404, so callers get the same error as from the in-memory directory.
        DirectoryClientError
            On any other non-2xx response or transport failure.
        """
        token = await self.get_access_token()
        url = f"{self._base_url}/{path.lstrip('/')}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                resp = await client.request(
                    method="GET",
                    url=url,
                    headers=headers,
                    params=params,
                    json=None,
                )
        except httpx.HTTPError as exc:
            raise DirectoryClientError(f"Directory request to {url} failed: {exc}") from exc

        if resp.status_code == HTTPStatus.NOT_FOUND:
            raise NotFoundError(f"Directory resource {path} not found.", path=path)
        if resp.status_code // 100 != 2:
            raise DirectoryClientError(
                f"Directory GET failed (status={resp.status_code}): {resp.text}"
            )
        return resp.json()

    async def get_board(self, board_id: str) -> Board:
        data = await self.get_json(f"/boards/{board_id}")
        try:
            return Board.model_validate(data)
        except PydanticValidationError as exc:
            raise DirectoryClientError(f"Malformed board payload for {board_id}: {exc}") from exc

    async def list_participants(self, board_id: str) -> list[Participant]:
        data = await self.get_json(f"/boards/{board_id}/participants")
        items = data.get("items", []) if isinstance(data, dict) else data
        try:
            return [Participant.model_validate(item) for item in items]
        except PydanticValidationError as exc:
            raise DirectoryClientError(
                f"Malformed participant roster for {board_id}: {exc}"
            ) from exc

    async def get_actor(self, user_id: str) -> Actor:
        data = await self.get_json(f"/users/{user_id}")
        try:
            return Actor.model_validate(data)
        except PydanticValidationError as exc:
            raise DirectoryClientError(f"Malformed user payload for {user_id}: {exc}") from exc


# Simple singleton-style accessor wired to app settings
_directory_client_instance: Optional[HttpDirectoryClient] = None


def get_directory_client() -> HttpDirectoryClient:
    """
    Lazily construct an HttpDirectoryClient using application settings.
    """
    global _directory_client_instance
    if _directory_client_instance is None:
        settings = get_settings()
        if (
            not settings.DIRECTORY_BASE_URL
            or not settings.DIRECTORY_TOKEN_URL
            or not settings.DIRECTORY_CLIENT_ID
            or not settings.DIRECTORY_CLIENT_SECRET
        ):
            raise DirectoryClientError(
                "DIRECTORY_BASE_URL, DIRECTORY_TOKEN_URL, DIRECTORY_CLIENT_ID and "
                "DIRECTORY_CLIENT_SECRET must be configured to use the directory service."
            )
        _directory_client_instance = HttpDirectoryClient(
            base_url=str(settings.DIRECTORY_BASE_URL),
            token_url=str(settings.DIRECTORY_TOKEN_URL),
            client_id=settings.DIRECTORY_CLIENT_ID,
            client_secret=settings.DIRECTORY_CLIENT_SECRET,
            scope=settings.DIRECTORY_SCOPE,
        )
        logger.info("Directory client configured for %s", settings.DIRECTORY_BASE_URL)
    return _directory_client_instance
