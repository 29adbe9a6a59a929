"""Normalized records for FogBugz reference data.

The service names fields with Hungarian prefixes (``ixProject``,
``sProject``, ``fDeleted`` ...). Each record here carries a fixed core
(``id``, ``name`` and a few kind-specific fields) plus ``extra``, a read-only
mapping of every raw field the core did not consume, so nothing the service
returned is lost.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

EMPTY_EXTRA: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class Record:
    """Common core of every normalized record."""

    id: int
    name: str
    extra: Mapping[str, Any] = field(
        default_factory=lambda: EMPTY_EXTRA, repr=False, hash=False
    )

    def get(self, key: str, default: Any = None) -> Any:
        """Read a raw passthrough field."""
        return self.extra.get(key, default)

    def _core(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    def to_dict(self) -> dict[str, Any]:
        """Raw fields merged with the normalized ones."""
        return {**self.extra, **self._core()}


@dataclass(frozen=True)
class Project(Record):
    """A project; the root entity other records reference."""


@dataclass(frozen=True)
class Area(Record):
    """An area. Always belongs to exactly one project."""

    project_id: int = 0

    def _core(self) -> dict[str, Any]:
        return {**super()._core(), "projectId": self.project_id}


@dataclass(frozen=True)
class Milestone(Record):
    """A milestone (FixFor). ``project_id`` is None for shared milestones."""

    project_id: int | None = None

    @property
    def is_shared(self) -> bool:
        return self.project_id is None

    def _core(self) -> dict[str, Any]:
        return {**super()._core(), "projectId": self.project_id}


@dataclass(frozen=True)
class Person(Record):
    full_name: str = ""
    email: str = ""

    def _core(self) -> dict[str, Any]:
        return {**super()._core(), "fullName": self.full_name, "email": self.email}


@dataclass(frozen=True)
class Priority(Record):
    is_default: bool = False

    def _core(self) -> dict[str, Any]:
        return {**super()._core(), "isDefault": self.is_default}


@dataclass(frozen=True)
class Category(Record):
    plural_name: str = ""
    default_status_id: int | None = None

    def _core(self) -> dict[str, Any]:
        return {
            **super()._core(),
            "pluralName": self.plural_name,
            "defaultStatusId": self.default_status_id,
        }


@dataclass(frozen=True)
class Status(Record):
    category_id: int | None = None
    is_resolved: bool = False
    is_work_done: bool = False
    is_duplicate: bool = False

    def _core(self) -> dict[str, Any]:
        return {
            **super()._core(),
            "categoryId": self.category_id,
            "isResolved": self.is_resolved,
            "isWorkDone": self.is_work_done,
            "isDuplicate": self.is_duplicate,
        }


@dataclass(frozen=True)
class Tag(Record):
    """A case tag."""
