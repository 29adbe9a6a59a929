"""Cached, dependency-ordered FogBugz reference data."""

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
)
from .orchestrator import ResourceOrchestrator, resolve_order
from .registry import (
    AreasResource,
    CategoriesResource,
    MilestonesResource,
    PrioritiesResource,
    ProjectsResource,
    Resource,
    ResourceState,
    StatusesResource,
    TagsResource,
    UsersResource,
)

__all__ = [
    # Cache and orchestration
    "ResourceCache",
    "ResourceOrchestrator",
    "resolve_order",
    # Resources
    "Resource",
    "ResourceState",
    "UsersResource",
    "ProjectsResource",
    "TagsResource",
    "MilestonesResource",
    "AreasResource",
    "PrioritiesResource",
    "CategoriesResource",
    "StatusesResource",
    # Models
    "Record",
    "Project",
    "Area",
    "Milestone",
    "Person",
    "Priority",
    "Category",
    "Status",
    "Tag",
    # Normalizers
    "normalize_projects",
    "normalize_areas",
    "normalize_milestones",
    "normalize_people",
    "normalize_priorities",
    "normalize_categories",
    "normalize_statuses",
    "normalize_tags",
]
