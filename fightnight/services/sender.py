"""Outbound side effects: channel messages and guild scheduled events.

``ChannelSender`` is the contract the notifier depends on. ``DiscordSender``
implements it against the Discord REST API with httpx; neither call is
retried.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx

from fightnight.config import settings
from fightnight.errors import SendError

logger = logging.getLogger(__name__)

# Guild scheduled event constants (Discord API)
_PRIVACY_GUILD_ONLY = 2
_ENTITY_EXTERNAL = 3


class ChannelSender(Protocol):
    async def send_message(self, channel_id: str, content: str, embed: dict | None = None) -> str:
        """Post a message; return its id or raise SendError."""
        ...

    async def create_reminder(
        self, guild_id: str, title: str, start: datetime, end: datetime, location: str = ""
    ) -> str:
        """Create a guild scheduled event; return its id or raise SendError."""
        ...


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class DiscordSender:
    """ChannelSender backed by the Discord REST API."""

    def __init__(
        self,
        token: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token if token is not None else settings.discord_token
        self.api_base = (api_base or settings.discord_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout
        self._transport = transport

    def _make_client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {
            "timeout": self.timeout,
            "headers": {
                "Authorization": f"Bot {self.token}",
                "User-Agent": settings.user_agent,
            },
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def _post(self, path: str, payload: dict) -> dict:
        url = f"{self.api_base}{path}"
        try:
            async with self._make_client() as client:
                resp = await client.post(url, json=payload)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as e:
            raise SendError(f"Discord {e.response.status_code} for {path}: {e.response.text[:200]}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise SendError(f"Discord request failed for {path}: {e}") from e

    async def send_message(self, channel_id: str, content: str, embed: dict | None = None) -> str:
        payload: dict[str, Any] = {"content": content}
        if embed:
            payload["embeds"] = [embed]
        data = await self._post(f"/channels/{channel_id}/messages", payload)
        return str(data.get("id", ""))

    async def create_reminder(
        self, guild_id: str, title: str, start: datetime, end: datetime, location: str = ""
    ) -> str:
        payload = {
            "name": title[:100],
            "privacy_level": _PRIVACY_GUILD_ONLY,
            "entity_type": _ENTITY_EXTERNAL,
            "scheduled_start_time": _iso(start),
            "scheduled_end_time": _iso(end),
            "entity_metadata": {"location": (location or "TBA")[:100]},
        }
        data = await self._post(f"/guilds/{guild_id}/scheduled-events", payload)
        return str(data.get("id", ""))
