"""Tests for dependency-ordered initialization."""

from unittest.mock import MagicMock

import pytest

from fogbugz_mcp.errors import DependencyOrderError, TransportError
from fogbugz_mcp.resources.cache import ResourceCache
from fogbugz_mcp.resources.orchestrator import ResourceOrchestrator, resolve_order
from fogbugz_mcp.resources.registry import Resource, ResourceState


class RecordingResource(Resource):
    """Resource that records its initialization order."""

    def __init__(self, name, requires=(), log=None, fail=False):
        super().__init__(client=MagicMock(), cache=ResourceCache())
        self.name = name
        self.requires = tuple(requires)
        self.log = log if log is not None else []
        self.fail = fail

    def check_dependencies(self) -> None:
        pass

    def _load(self) -> bool:
        if self.fail:
            raise TransportError([f"{self.name} failed"])
        self.log.append(self.name)
        return False

    def fetch(self):
        return []


def make_client() -> MagicMock:
    client = MagicMock()
    client.list_people.return_value = [{"ixPerson": 1, "sFullName": "Ada"}]
    client.list_projects.return_value = [{"ixProject": 1, "sProject": "A"}]
    client.list_tags.return_value = [{"ixTag": 1, "sTag": "ui"}]
    client.list_milestones.return_value = [{"ixFixFor": 1, "sFixFor": "1.0", "ixProject": 1}]
    client.list_areas.return_value = [{"ixArea": 1, "sArea": "Code"}]
    client.list_priorities.return_value = [{"ixPriority": 1, "sPriority": "High"}]
    return client


class TestResolveOrder:
    """Test the topological ordering."""

    def test_keeps_registration_order_without_constraints(self):
        """Test independent resources keep their order."""
        resources = [RecordingResource(n) for n in ("a", "b", "c")]
        assert [r.name for r in resolve_order(resources)] == ["a", "b", "c"]

    def test_dependencies_come_first(self):
        """Test a resource registered before its dependency is moved after it."""
        resources = [
            RecordingResource("areas", requires=["projects"]),
            RecordingResource("users"),
            RecordingResource("projects"),
        ]
        assert [r.name for r in resolve_order(resources)] == ["projects", "areas", "users"]

    def test_unknown_dependency(self):
        """Test an undeclared dependency is rejected."""
        with pytest.raises(DependencyOrderError, match="unknown resource projects"):
            resolve_order([RecordingResource("areas", requires=["projects"])])

    def test_cycle(self):
        """Test cycles are rejected with the cycle path."""
        resources = [
            RecordingResource("a", requires=["b"]),
            RecordingResource("b", requires=["a"]),
        ]
        with pytest.raises(DependencyOrderError, match="a -> b -> a"):
            resolve_order(resources)

    def test_duplicate_names(self):
        """Test two resources cannot share a name."""
        with pytest.raises(DependencyOrderError, match="Duplicate"):
            resolve_order([RecordingResource("a"), RecordingResource("a")])


class TestResourceOrchestrator:
    """Test initialize_all behavior."""

    def test_default_order(self):
        """Test the standard resources initialize in dependency order."""
        orchestrator = ResourceOrchestrator.build_default(make_client())

        assert orchestrator.initialization_order() == [
            "users",
            "projects",
            "tags",
            "milestones",
            "areas",
            "priorities",
        ]

    def test_initialize_all_runs_each_once(self):
        """Test a second call does not fetch again."""
        client = make_client()
        orchestrator = ResourceOrchestrator.build_default(client)

        orchestrator.initialize_all()
        orchestrator.initialize_all()

        assert orchestrator.ready
        assert client.list_projects.call_count == 1
        assert client.list_areas.call_count == 1
        assert orchestrator.status()["projects"] == "ready"
        assert orchestrator.status()["categories"] == "uninitialized"

    def test_force_reinitializes(self):
        """Test force=True runs a full pass again."""
        client = make_client()
        orchestrator = ResourceOrchestrator.build_default(client)

        orchestrator.initialize_all()
        orchestrator.initialize_all(force=True)

        assert client.list_projects.call_count == 2

    def test_failure_aborts_and_propagates(self):
        """Test the first failure stops the pass without rolling back."""
        log: list[str] = []
        resources = [
            RecordingResource("users", log=log),
            RecordingResource("projects", log=log, fail=True),
            RecordingResource("tags", log=log),
        ]
        orchestrator = ResourceOrchestrator(resources)

        with pytest.raises(TransportError, match="projects failed"):
            orchestrator.initialize_all()

        assert log == ["users"]
        assert not orchestrator.ready
        assert orchestrator["users"].state is ResourceState.READY
        assert orchestrator["projects"].state is ResourceState.FAILED
        assert orchestrator["tags"].state is ResourceState.UNINITIALIZED

    def test_partial_failure_is_not_ready(self, caplog):
        """Test a completed pass with a failed per-project load is not ready."""
        client = make_client()
        client.list_milestones.side_effect = TransportError(["Project not found"])
        orchestrator = ResourceOrchestrator.build_default(client)

        orchestrator.initialize_all()

        assert orchestrator.initialized
        assert not orchestrator.ready
        assert orchestrator.status()["milestones"] == "failed"
        assert orchestrator.status()["areas"] == "ready"
        assert "finished with failures: milestones" in caplog.text

    def test_shared_cache(self):
        """Test all default resources share the supplied cache."""
        cache = ResourceCache()
        orchestrator = ResourceOrchestrator.build_default(make_client(), cache)

        orchestrator.initialize_all()

        assert [p.id for p in cache.projects] == [1]
        assert list(cache.areas) == [1]
        assert orchestrator["milestones"].cache is cache

    def test_lookup(self):
        """Test resource lookup by name."""
        orchestrator = ResourceOrchestrator.build_default(make_client())

        assert "areas" in orchestrator
        assert orchestrator.get("wikis") is None
        assert orchestrator["statuses"].name == "statuses"
