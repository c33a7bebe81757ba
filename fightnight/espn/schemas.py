"""Subset of the ESPN MMA payloads the notifier relies on.

Every field is optional with a harmless default: ESPN drops keys between
seasons (no end date, no competitions on calendar-only views), and an absent
field must never fail the whole document.
"""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        # ESPN sends explicit nulls as often as it omits keys
        if v is None:
            return copy.deepcopy(cls.model_fields[info.field_name].get_default(call_default_factory=True))
        return v


class Ref(_Payload):
    ref: str = Field(default="", alias="$ref")


class CalendarEntry(_Payload):
    """One labeled date range from a league calendar."""
    label: str = ""
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    event: Ref = Ref()


class League(_Payload):
    calendar: list[CalendarEntry] = []


class CompType(_Payload):
    id: str = ""
    abbreviation: str = ""
    text: str = ""


class Athlete(_Payload):
    full_name: str = Field(default="", alias="fullName")
    display_name: str = Field(default="", alias="displayName")
    short_name: str = Field(default="", alias="shortName")

    @property
    def best_name(self) -> str:
        for name in (self.full_name, self.display_name, self.short_name):
            if name and name.strip():
                return name
        return ""


class Record(_Payload):
    summary: str = ""


class Competitor(_Payload):
    order: int = 0
    winner: bool = False
    athlete: Athlete = Athlete()
    records: list[Record] = []


class StatusType(_Payload):
    state: str = ""


class Status(_Payload):
    type: StatusType = StatusType()


class Competition(_Payload):
    """A single bout on an event's card."""
    id: str = ""
    date: str = ""
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    type: CompType = CompType()
    competitors: list[Competitor] = []
    status: Status = Status()


class EventLink(_Payload):
    href: str = ""
    text: str = ""
    short_text: str = Field(default="", alias="shortText")
    rel: list[str] = []


class Logo(_Payload):
    href: str = ""


class ESPNEvent(_Payload):
    """A full event record as embedded in the scoreboard or fetched by $ref."""
    id: str = ""
    name: str = ""
    short_name: str = Field(default="", alias="shortName")
    date: str = ""
    competitions: list[Competition] = []
    links: list[EventLink] = []
    logos: list[Logo] = []


class Scoreboard(_Payload):
    leagues: list[League] = []
    events: list[ESPNEvent] = []

    def merge(self, other: Scoreboard) -> Scoreboard:
        """Concatenate calendars (into a single league) and events."""
        calendar = [entry for lg in self.leagues for entry in lg.calendar]
        calendar += [entry for lg in other.leagues for entry in lg.calendar]
        leagues = [League(calendar=calendar)] if (self.leagues or other.leagues) else []
        return Scoreboard(leagues=leagues, events=[*self.events, *other.events])

    @property
    def calendar(self) -> list[CalendarEntry]:
        return [entry for lg in self.leagues for entry in lg.calendar]


class CoreBout(BaseModel):
    """Bout adapted from the core competitions API: names and weight class only."""
    fighter1: str = ""
    fighter2: str = ""
    weight_class: str = ""
