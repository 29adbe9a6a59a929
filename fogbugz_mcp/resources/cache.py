"""In-memory cache for FogBugz reference data.

One ResourceCache is owned by each orchestrator and handed to its resources
by reference; there is no module-level singleton, so tests build isolated
instances. Contents live for the lifetime of the process only.

Writes are not locked. The only writer for a given kind is that kind's
resource initializer, and the orchestrator never runs two initializers at
once; reads never mutate.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .models import Area, Milestone, Person, Priority, Project, Tag

LIST_KINDS = ("users", "projects", "tags", "priorities")
MAP_KINDS = ("areas", "milestones")


class ResourceCache:
    """Per-kind storage: flat lists, or maps keyed by the owning id.

    Areas and milestones are keyed by project id because they are fetched
    per project. Categories and statuses are always read live and have no
    slot here.
    """

    def __init__(self) -> None:
        self.users: list[Person] = []
        self.projects: list[Project] = []
        self.tags: list[Tag] = []
        self.priorities: list[Priority] = []
        self.areas: dict[int, list[Area]] = {}
        self.milestones: dict[int, list[Milestone]] = {}

    def _check_kind(self, kind: str) -> None:
        if kind not in LIST_KINDS and kind not in MAP_KINDS:
            raise KeyError(f"Unknown cache kind: {kind}")

    def replace(self, kind: str, value: Iterable[Any] | dict[Any, list[Any]]) -> None:
        """Replace a kind's contents wholesale (no partial merge).

        Args:
            kind: Cache attribute name (``projects``, ``areas`` ...)
            value: A list for flat kinds, a mapping of lists for keyed kinds
        """
        self._check_kind(kind)
        if kind in MAP_KINDS:
            setattr(self, kind, {key: list(items) for key, items in dict(value).items()})
        else:
            setattr(self, kind, list(value))

    def store(self, kind: str, key: Any, items: Iterable[Any]) -> None:
        """Set the list stored under ``key`` for a keyed kind."""
        if kind not in MAP_KINDS:
            raise KeyError(f"Cache kind {kind} is not keyed")
        getattr(self, kind)[key] = list(items)

    def is_populated(self, kind: str) -> bool:
        self._check_kind(kind)
        return bool(getattr(self, kind))

    def clear(self) -> int:
        """Empty every kind.

        Returns:
            Number of records removed
        """
        removed = sum(self.stats["records"].values())
        for kind in LIST_KINDS:
            setattr(self, kind, [])
        for kind in MAP_KINDS:
            setattr(self, kind, {})
        return removed

    @property
    def stats(self) -> dict[str, Any]:
        """Record counts per kind, plus key counts for keyed kinds."""
        records: dict[str, int] = {}
        for kind in LIST_KINDS:
            records[kind] = len(getattr(self, kind))
        for kind in MAP_KINDS:
            records[kind] = sum(len(items) for items in getattr(self, kind).values())
        return {
            "records": records,
            "keys": {kind: len(getattr(self, kind)) for kind in MAP_KINDS},
        }
