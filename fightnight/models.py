from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from fightnight.database import Base


class GuildSettings(Base):
    __tablename__ = "guild_settings"

    guild_id: Mapped[str] = mapped_column(Text, primary_key=True)
    channel_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timezone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # NULL means "never configured": notifications and reminders default to off
    enabled: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    org: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    run_hour: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 0-23, NULL = global RUN_AT
    reminders_enabled: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    ufc_ignore_contender: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)


class LastPosted(Base):
    __tablename__ = "last_posted"

    guild_id: Mapped[str] = mapped_column(Text, primary_key=True)
    org: Mapped[str] = mapped_column(Text, primary_key=True)
    last_date: Mapped[str] = mapped_column(Text, nullable=False)  # YYYY-MM-DD, guild-local


class ScheduledReminder(Base):
    __tablename__ = "scheduled_reminders"

    guild_id: Mapped[str] = mapped_column(Text, primary_key=True)
    org: Mapped[str] = mapped_column(Text, primary_key=True)
    event_date: Mapped[str] = mapped_column(Text, primary_key=True)  # YYYY-MM-DD, guild-local
    reminder_id: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
