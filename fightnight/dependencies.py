from __future__ import annotations

from fightnight.database import async_session
from fightnight.services.notifier import Notifier
from fightnight.services.sender import DiscordSender
from fightnight.services.store import GuildStore


def get_store() -> GuildStore:
    return GuildStore(async_session)


def get_notifier() -> Notifier:
    return Notifier(store=get_store(), sender=DiscordSender())
