from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from fightnight.auth import require_api_key
from fightnight.config import settings
from fightnight.dependencies import get_notifier, get_store
from fightnight.providers.registry import has_provider, list_provider_keys
from fightnight.schemas import RESET_RUN_HOUR, GuildStatusOut, GuildUpdate, NotifyOutcomeOut
from fightnight.services.notifier import Notifier
from fightnight.services.store import GuildSnapshot, GuildStore
from fightnight.timeutil import is_valid_zone, resolve_zone, target_hour

router = APIRouter(prefix="/api/guilds", tags=["guilds"])


def _status(snap: GuildSnapshot) -> GuildStatusOut:
    choice = resolve_zone(snap.timezone, settings.tz)
    valid_hour = snap.run_hour is not None and 0 <= snap.run_hour <= 23
    return GuildStatusOut(
        guild_id=snap.guild_id,
        channel_id=snap.channel_id or None,
        timezone=choice.name,
        org=snap.org,
        notifications=snap.enabled,
        reminders=snap.reminders_enabled,
        run_hour=target_hour(snap.run_hour, settings.run_at),
        run_hour_source="guild" if valid_hour else "default",
        ufc_ignore_contender=snap.ufc_ignore_contender,
        last_posted=snap.last_posted,
    )


@router.get("", response_model=list[GuildStatusOut])
async def list_guilds(store: GuildStore = Depends(get_store)):
    return [_status(await store.get_guild_settings(gid)) for gid in await store.list_guild_ids()]


@router.get("/{guild_id}", response_model=GuildStatusOut)
async def get_guild(guild_id: str, store: GuildStore = Depends(get_store)):
    if guild_id not in await store.list_guild_ids():
        raise HTTPException(404, "Guild not found")
    return _status(await store.get_guild_settings(guild_id))


@router.put("/{guild_id}", response_model=GuildStatusOut, dependencies=[Depends(require_api_key)])
async def update_guild(guild_id: str, data: GuildUpdate, store: GuildStore = Depends(get_store)):
    if data.timezone and data.timezone.strip() and not is_valid_zone(data.timezone):
        raise HTTPException(422, "Invalid timezone. Example: America/Los_Angeles")
    if data.org is not None and not has_provider(data.org):
        raise HTTPException(
            422, f"Unsupported org. Available: {', '.join(list_provider_keys())}"
        )
    if data.enabled:
        current = await store.get_guild_settings(guild_id)
        if not (data.org or current.org):
            raise HTTPException(422, "Set an organization before enabling notifications.")

    if data.channel_id is not None:
        await store.update_channel(guild_id, data.channel_id)
    if data.timezone is not None:
        await store.update_timezone(guild_id, data.timezone.strip() or None)
    if data.org is not None:
        await store.update_org(guild_id, data.org)
    if data.enabled is not None:
        await store.update_enabled(guild_id, data.enabled)
    if data.run_hour is not None:
        await store.update_run_hour(guild_id, None if data.run_hour == RESET_RUN_HOUR else data.run_hour)
    if data.reminders_enabled is not None:
        await store.update_reminders_enabled(guild_id, data.reminders_enabled)
    if data.ufc_ignore_contender is not None:
        await store.update_ufc_ignore_contender(guild_id, data.ufc_ignore_contender)
    return _status(await store.get_guild_settings(guild_id))


@router.post(
    "/{guild_id}/preview",
    response_model=NotifyOutcomeOut,
    dependencies=[Depends(require_api_key)],
)
async def preview(guild_id: str, notifier: Notifier = Depends(get_notifier)):
    """Post the current event now, ignoring the hour, day and dedup gates."""
    outcome = await notifier.notify_guild(guild_id, datetime.now(timezone.utc), force=True)
    return NotifyOutcomeOut(**vars(outcome))
