from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

from fightnight.schemas import Event


@dataclass(frozen=True)
class ProviderOptions:
    """Per-call behaviour flags for a provider.

    ``flags`` is an opaque mapping so one provider instance can serve guilds
    with different preferences. Providers ignore keys they do not know.
    """
    flags: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.flags.get(key, default)


class BaseProvider(ABC):
    """Base class for organization adapters.

    A provider hides everything organization-specific (upstream documents,
    calendar quirks, card shapes) behind the normalized ``Event``.
    """

    org: str = ""

    @abstractmethod
    async def next_event(self, options: ProviderOptions | None = None) -> Event | None:
        """Return the ongoing or next event, or None when nothing is scheduled.

        Raises UpstreamError when the upstream cannot be reached and
        ResolutionFailed when a selected entry cannot be turned into an event.
        """
        ...
