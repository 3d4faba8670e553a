"""Resource store implementations."""

from capspine.adapters.memory import InMemoryResourceStore

__all__ = ["InMemoryResourceStore"]
