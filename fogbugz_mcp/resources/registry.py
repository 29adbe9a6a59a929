"""Named FogBugz resources backed by a shared ResourceCache.

Each resource has an optional initialization step that fetches and caches
its data, and a ``fetch`` accessor that serves callers. Resources declare the
resources they require; :class:`~.orchestrator.ResourceOrchestrator` uses
those declarations to run initializers in dependency order, and each
dependent initializer also checks its prerequisites itself so that calling
it out of order fails fast instead of silently fetching nothing.
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..errors import DependencyOrderError, FogBugzError, ValidationWarning
from ..fogbugz_logging import get_logger
from .cache import ResourceCache
from .models import Area, Category, Milestone, Person, Priority, Project, Record, Status, Tag
from .normalizers import (
    normalize_areas,
    normalize_categories,
    normalize_milestones,
    normalize_people,
    normalize_priorities,
    normalize_projects,
    normalize_statuses,
    normalize_tags,
    split_valid,
)

if TYPE_CHECKING:
    from ..api.client import FogBugzClient

logger = get_logger()

R = TypeVar("R", bound=Record)


class ResourceState(Enum):
    """Lifecycle of a resource's cached data."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class Resource(Generic[R]):
    """Base class for a named, independently fetchable resource.

    Subclasses that cache data override :meth:`_load`; those that always
    fetch live leave it alone and have no initializer.
    """

    name: str = ""
    requires: tuple[str, ...] = ()

    def __init__(self, client: FogBugzClient, cache: ResourceCache):
        self.client = client
        self.cache = cache
        self.state = ResourceState.UNINITIALIZED

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} state={self.state.value}>"

    @property
    def has_initializer(self) -> bool:
        return type(self)._load is not Resource._load

    @property
    def ready(self) -> bool:
        return self.state is ResourceState.READY

    def check_dependencies(self) -> None:
        """Raise DependencyOrderError unless every required cache is populated."""
        missing = [dep for dep in self.requires if not self.cache.is_populated(dep)]
        if missing:
            raise DependencyOrderError(
                f"{', '.join(m.capitalize() for m in missing)} must be initialized "
                f"before initializing {self.name}"
            )

    def initialize(self) -> None:
        """Fetch and cache this resource's data.

        Re-running replaces the cached contents entirely.

        Raises:
            DependencyOrderError: If a required resource has no data yet
            NotImplementedError: If the resource has no initializer
        """
        if not self.has_initializer:
            raise NotImplementedError(f"Resource {self.name} has no initializer")

        self.check_dependencies()

        logger.info(f"Initializing {self.name} resource...")
        self.state = ResourceState.INITIALIZING
        try:
            partial = self._load()
        except Exception:
            self.state = ResourceState.FAILED
            raise
        self.state = ResourceState.FAILED if partial else ResourceState.READY

    def refresh(self) -> None:
        self.initialize()

    def _load(self) -> bool:
        """Populate the cache.

        Returns:
            True when only part of the data could be loaded
        """
        raise NotImplementedError

    def fetch(self, *args: Any, **kwargs: Any) -> list[R]:
        raise NotImplementedError


class ListResource(Resource[R]):
    """A flat-list resource cached under its own name.

    ``fetch`` serves the cache once the resource is ready and runs the
    initializer first otherwise.
    """

    def _fetch_raw(self) -> list[dict[str, Any]]:
        raise NotImplementedError

    def _normalize(self, records: list[Mapping[str, Any]]) -> list[R]:
        raise NotImplementedError

    def _load(self) -> bool:
        self.cache.replace(self.name, self._normalize(self._fetch_raw()))
        return False

    def fetch(self) -> list[R]:
        if not self.ready:
            self.initialize()
        return list(getattr(self.cache, self.name))


class ValidatedListResource(ListResource[R]):
    """A flat-list resource whose initializer drops records missing an id or
    name before caching them. ``skipped_count`` reports how many were
    dropped by the last initialization.
    """

    id_key: str = ""
    name_key: str = ""

    def __init__(self, client: FogBugzClient, cache: ResourceCache):
        super().__init__(client, cache)
        self.skipped_count = 0

    def _load(self) -> bool:
        raw = self._fetch_raw()
        if not raw:
            logger.warning(f"No {self.name} found during initialization.")

        valid, invalid = split_valid(raw or [], self.id_key, self.name_key)
        self.skipped_count = len(invalid)
        if invalid:
            message = (
                f"{len(invalid)} of {len(raw)} {self.name} skipped due to missing "
                f"{self.id_key} or {self.name_key}"
            )
            logger.warning(message)
            warnings.warn(message, ValidationWarning, stacklevel=4)

        records = self._normalize(valid)
        self.cache.replace(self.name, records)
        logger.info(f"{self.name.capitalize()} initialized: {len(records)} valid records")
        return False


class UsersResource(ListResource[Person]):
    name = "users"

    def _fetch_raw(self) -> list[dict[str, Any]]:
        return self.client.list_people()

    def _normalize(self, records: list[Mapping[str, Any]]) -> list[Person]:
        return normalize_people(records)


class ProjectsResource(ValidatedListResource[Project]):
    name = "projects"
    id_key = "ixProject"
    name_key = "sProject"

    def _fetch_raw(self) -> list[dict[str, Any]]:
        return self.client.list_projects()

    def _normalize(self, records: list[Mapping[str, Any]]) -> list[Project]:
        return normalize_projects(records)


class TagsResource(ListResource[Tag]):
    name = "tags"

    def _fetch_raw(self) -> list[dict[str, Any]]:
        return self.client.list_tags()

    def _normalize(self, records: list[Mapping[str, Any]]) -> list[Tag]:
        return normalize_tags(records)


class PerProjectResource(Resource[R]):
    """A resource fetched once per cached project and stored by project id.

    Projects are visited one at a time. A service failure for one project is
    logged and recorded in ``failed_projects``; the remaining projects are
    still fetched and whatever was stored is kept.
    """

    requires = ("projects",)

    def __init__(self, client: FogBugzClient, cache: ResourceCache):
        super().__init__(client, cache)
        self.failed_projects: list[int] = []

    def _fetch_raw(self, project_id: int) -> list[dict[str, Any]]:
        raise NotImplementedError

    def _normalize(self, records: list[dict[str, Any]], project_id: int) -> list[R]:
        raise NotImplementedError

    def _load(self) -> bool:
        self.failed_projects = []
        self.cache.replace(self.name, {})

        for project in list(self.cache.projects):
            try:
                raw = self._fetch_raw(project.id)
            except FogBugzError as e:
                logger.error(
                    f"Failed to fetch {self.name} for project ID {project.id}: {e}"
                )
                self.failed_projects.append(project.id)
                continue
            self.cache.store(self.name, project.id, self._normalize(raw, project.id))

        return bool(self.failed_projects)

    def fetch(self, project_id: int | None = None) -> list[R]:
        """Return cached records, for one project or for all of them.

        Records appearing under several projects (shared milestones) are
        returned once, in first-seen project order.

        Runs the initializer first unless the resource is ready, which also
        retries projects that failed last time.

        Raises:
            DependencyOrderError: If projects have not been initialized
        """
        if not self.ready:
            self.initialize()
        by_project: dict[int, list[R]] = getattr(self.cache, self.name)
        if project_id is not None:
            return list(by_project.get(project_id, []))

        result: list[R] = []
        seen: set[int] = set()
        for records in by_project.values():
            for record in records:
                if record.id not in seen:
                    seen.add(record.id)
                    result.append(record)
        return result


class MilestonesResource(PerProjectResource[Milestone]):
    name = "milestones"

    def _fetch_raw(self, project_id: int) -> list[dict[str, Any]]:
        return self.client.list_milestones(project_id)

    def _normalize(self, records: list[dict[str, Any]], project_id: int) -> list[Milestone]:
        return normalize_milestones(records, project_id)


class AreasResource(PerProjectResource[Area]):
    name = "areas"

    def _fetch_raw(self, project_id: int) -> list[dict[str, Any]]:
        return self.client.list_areas(project_id)

    def _normalize(self, records: list[dict[str, Any]], project_id: int) -> list[Area]:
        return normalize_areas(records, project_id)


class PrioritiesResource(ValidatedListResource[Priority]):
    """Priorities are cached at startup; before that, ``fetch`` reads live
    through the same normalization path without storing the result.
    """

    name = "priorities"
    id_key = "ixPriority"
    name_key = "sPriority"

    def _fetch_raw(self) -> list[dict[str, Any]]:
        return self.client.list_priorities()

    def _normalize(self, records: list[Mapping[str, Any]]) -> list[Priority]:
        return normalize_priorities(records)

    def fetch(self) -> list[Priority]:
        if self.state is ResourceState.READY:
            return list(self.cache.priorities)
        valid, _ = split_valid(self._fetch_raw(), self.id_key, self.name_key)
        return self._normalize(valid)


class CategoriesResource(Resource[Category]):
    """Always fetched live; categories are cheap and rarely needed."""

    name = "categories"

    def fetch(self) -> list[Category]:
        return normalize_categories(self.client.list_categories())


class StatusesResource(Resource[Status]):
    """Always fetched live, optionally limited to one category."""

    name = "statuses"

    def fetch(self, category_id: int | None = None) -> list[Status]:
        return normalize_statuses(self.client.list_statuses(category_id))

DEFAULT_RESOURCES: tuple[type[Resource], ...] = (
    UsersResource,
    ProjectsResource,
    TagsResource,
    MilestonesResource,
    AreasResource,
    PrioritiesResource,
    CategoriesResource,
    StatusesResource,
)
