# Import all providers to trigger registration with the registry.
from fightnight.providers import ufc  # noqa: F401
