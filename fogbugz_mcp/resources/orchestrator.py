"""Startup initialization of FogBugz resources in dependency order."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..errors import DependencyOrderError
from ..fogbugz_logging import get_logger
from .cache import ResourceCache
from .registry import DEFAULT_RESOURCES, Resource

if TYPE_CHECKING:
    from ..api.client import FogBugzClient

logger = get_logger()


def resolve_order(resources: Iterable[Resource]) -> list[Resource]:
    """Order resources so every resource follows the ones it requires.

    Depth-first over registration order, so registration order breaks ties
    and a graph with no constraints keeps its original order.

    Raises:
        DependencyOrderError: On an unknown dependency or a cycle
    """
    by_name: dict[str, Resource] = {}
    for resource in resources:
        if resource.name in by_name:
            raise DependencyOrderError(f"Duplicate resource name: {resource.name}")
        by_name[resource.name] = resource

    ordered: list[Resource] = []
    done: set[str] = set()
    visiting: list[str] = []

    def visit(name: str) -> None:
        if name in done:
            return
        if name in visiting:
            cycle = " -> ".join([*visiting[visiting.index(name):], name])
            raise DependencyOrderError(f"Dependency cycle between resources: {cycle}")

        visiting.append(name)
        for dep in by_name[name].requires:
            if dep not in by_name:
                raise DependencyOrderError(
                    f"Resource {name} requires unknown resource {dep}"
                )
            visit(dep)
        visiting.pop()

        done.add(name)
        ordered.append(by_name[name])

    for name in by_name:
        visit(name)
    return ordered


class ResourceOrchestrator:
    """Runs every resource initializer once, sequentially, in dependency order.

    A failure aborts the pass and propagates to the caller. Resources that
    were already initialized keep their data; nothing is rolled back.
    """

    def __init__(self, resources: Iterable[Resource]):
        resources = list(resources)
        self._order = resolve_order(resources)
        self._resources: dict[str, Resource] = {r.name: r for r in resources}
        self._initialized = False

    @classmethod
    def build_default(
        cls,
        client: FogBugzClient,
        cache: ResourceCache | None = None,
    ) -> ResourceOrchestrator:
        """Register the standard FogBugz resources around one shared cache."""
        cache = cache if cache is not None else ResourceCache()
        return cls(resource_cls(client, cache) for resource_cls in DEFAULT_RESOURCES)

    def __getitem__(self, name: str) -> Resource:
        return self._resources[name]

    def __contains__(self, name: object) -> bool:
        return name in self._resources

    def get(self, name: str) -> Resource | None:
        return self._resources.get(name)

    @property
    def resources(self) -> dict[str, Resource]:
        return dict(self._resources)

    @property
    def initialized(self) -> bool:
        """True once a full initialization pass has run to the end."""
        return self._initialized

    @property
    def ready(self) -> bool:
        """True once a pass has completed and every initialized resource is ready."""
        return self._initialized and all(
            r.ready for r in self._order if r.has_initializer
        )

    def initialization_order(self) -> list[str]:
        """Names of the resources that have an initializer, in run order."""
        return [r.name for r in self._order if r.has_initializer]

    def initialize_all(self, force: bool = False) -> None:
        """Initialize every resource that has an initializer.

        Runs at most once per orchestrator; later calls return immediately
        unless ``force`` is set, in which case every resource is reloaded.

        Raises:
            Exception: The first initializer failure, unchanged
        """
        if self._initialized and not force:
            logger.debug("Resources already initialized; skipping")
            return

        self._initialized = False
        logger.info("Initializing all resources...")
        for resource in self._order:
            if not resource.has_initializer:
                continue
            resource.initialize()
        self._initialized = True

        failed = [
            r.name for r in self._order if r.has_initializer and not r.ready
        ]
        if failed:
            logger.warning(
                f"Resource initialization finished with failures: {', '.join(failed)}"
            )
        else:
            logger.info("All resources initialized.")

    def status(self) -> dict[str, str]:
        return {name: r.state.value for name, r in self._resources.items()}
