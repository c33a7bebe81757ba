from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from fightnight.errors import FightNightError
from fightnight.providers.base import ProviderOptions
from fightnight.providers.registry import get_provider, list_provider_keys
from fightnight.schemas import CardOut, NextEventOut
from fightnight.services.card import build_card
from fightnight.services.formatting import format_countdown

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orgs", tags=["orgs"])


@router.get("", response_model=list[str])
async def list_orgs():
    return list_provider_keys()


@router.get("/{org}/next-event", response_model=NextEventOut)
async def next_event(org: str, ignore_contender_series: bool = True):
    provider = get_provider(org)
    if provider is None:
        raise HTTPException(404, f"Unsupported organization: {org}")
    try:
        event = await provider.next_event(
            ProviderOptions(flags={"ignore_contender_series": ignore_contender_series})
        )
    except FightNightError as e:
        logger.warning("next-event for %s failed: %s", org, e)
        raise HTTPException(502, "Error fetching events. Please try again later.")
    if event is None:
        return NextEventOut(event=None)
    card = build_card(event)
    return NextEventOut(
        event=event,
        card=CardOut(main_card=card.main_card, prelims=card.prelims),
        countdown=format_countdown(event.start, datetime.now(timezone.utc)),
    )
