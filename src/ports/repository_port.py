"""Repository ports — abstract persistence for templates and tasks.

Core modules depend on these protocols, never on a specific store.
Each repository reads and writes its whole collection at once.
"""

from __future__ import annotations

from typing import Protocol

from src.data.models import Instance, Template


class StorageError(Exception):
    """Raised when the backing store is unavailable or holds corrupt data."""


class TemplateRepository(Protocol):
    """Ordered collection of templates."""

    def load(self) -> list[Template]: ...

    def save(self, templates: list[Template]) -> None: ...


class InstanceRepository(Protocol):
    """Ordered collection of daily task instances."""

    def load(self) -> list[Instance]: ...

    def save(self, instances: list[Instance]) -> None: ...
