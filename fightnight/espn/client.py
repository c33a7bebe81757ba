"""Thin async client for the public ESPN MMA endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from fightnight.config import DEFAULT_USER_AGENT
from fightnight.errors import UpstreamError
from fightnight.espn.schemas import CoreBout, ESPNEvent, Scoreboard

logger = logging.getLogger(__name__)

SCOREBOARD_URL = "https://site.api.espn.com/apis/site/v2/sports/mma/{league}/scoreboard"
CORE_COMPETITIONS_URL = (
    "https://sports.core.api.espn.com/v2/sports/mma/leagues/{league}/events/{event_id}/competitions"
)


class ESPNClient:
    """Async context manager wrapping a single httpx.AsyncClient.

    Every request carries its own timeout; there is no retry, the next
    scheduler tick is the retry.

        async with ESPNClient(user_agent=...) as espn:
            board = await espn.fetch_scoreboard("2025")
    """

    def __init__(
        self,
        league: str = "ufc",
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 12.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.league = league
        self.user_agent = user_agent
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ESPNClient:
        kwargs: dict[str, Any] = {
            "follow_redirects": True,
            "timeout": self.timeout,
            "headers": {"User-Agent": self.user_agent, "Accept": "application/json"},
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        self._client = httpx.AsyncClient(**kwargs)
        return self

    async def __aexit__(self, *exc) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, url: str, **kw) -> Any:
        """GET *url* and return parsed JSON, mapping failures to UpstreamError."""
        if self._client is None:
            raise RuntimeError("ESPNClient used outside 'async with'")
        try:
            resp = await self._client.get(url, **kw)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200]
            raise UpstreamError(
                f"ESPN {e.response.status_code} for {url}: {body}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"ESPN request failed for {url}: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"ESPN returned invalid JSON for {url}: {e}") from e

    async def fetch_scoreboard(self, dates: str) -> Scoreboard:
        """Fetch the scoreboard document for an ESPN ``dates`` value (usually a year)."""
        url = SCOREBOARD_URL.format(league=self.league)
        data = await self._get_json(url, params={"dates": dates})
        try:
            return Scoreboard.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(f"Unexpected scoreboard shape for dates={dates}: {e}") from e

    async def fetch_scoreboards(self, years: list[int]) -> Scoreboard:
        """Fetch and merge the scoreboards for several years, in order."""
        combined = Scoreboard()
        for year in years:
            board = await self.fetch_scoreboard(str(year))
            logger.debug(
                "Scoreboard %d: %d calendar entries, %d events",
                year, len(board.calendar), len(board.events),
            )
            combined = combined.merge(board)
        return combined

    async def fetch_event(self, ref: str) -> ESPNEvent:
        """Fetch a single event record by its ``$ref`` URL."""
        data = await self._get_json(ref)
        try:
            return ESPNEvent.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(f"Unexpected event shape at {ref}: {e}") from e

    async def fetch_card_for_event(self, event_id: str) -> list[CoreBout]:
        """Build a minimal bout list from the core competitions API.

        The core API only hands out references, so this resolves each
        competition and then each athlete's display name. Records and
        winners are not available on this path.
        """
        if not event_id or not event_id.strip():
            raise ValueError("event_id is required")

        listing = await self._get_json(
            CORE_COMPETITIONS_URL.format(league=self.league, event_id=event_id.strip())
        )

        bouts: list[CoreBout] = []
        for item in _as_list(_field(listing, "items")):
            ref = _field(item, "$ref")
            if not ref or not isinstance(ref, str):
                continue
            comp = await self._get_json(ref)
            if not isinstance(comp, dict):
                continue
            names: list[str] = []
            for competitor in _as_list(comp.get("competitors")):
                athlete_ref = _field(_field(competitor, "athlete"), "$ref")
                if not athlete_ref or not isinstance(athlete_ref, str):
                    continue
                name = _field(await self._get_json(athlete_ref), "displayName")
                if name and isinstance(name, str):
                    names.append(name)
            weight_class = _field(comp.get("type"), "text")
            bouts.append(CoreBout(
                fighter1=names[0] if names else "",
                fighter2=names[1] if len(names) > 1 else "",
                weight_class=weight_class if isinstance(weight_class, str) else "",
            ))
        logger.info("Core API card for event %s: %d bouts", event_id, len(bouts))
        return bouts


def _field(obj: Any, key: str) -> Any:
    """``obj[key]`` for JSON objects; None for anything else the core API sends."""
    return obj.get(key) if isinstance(obj, dict) else None


def _as_list(obj: Any) -> list:
    return obj if isinstance(obj, list) else []
