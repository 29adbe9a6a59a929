"""Normalizers from raw FogBugz records to the models in :mod:`.models`.

Every function here is pure: it takes the list of raw records from one API
response, never mutates it, never touches the network, and returns a new
list. ``ix<Entity>`` becomes ``id`` and ``s<Entity>`` becomes ``name``; all
other raw fields are kept in the record's ``extra`` mapping.

Records without an id cannot satisfy the non-null unique id invariant, so
they are dropped (as are repeated ids and entries that are not objects at
all) and a ValidationWarning is issued.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from ..errors import ValidationWarning
from ..fogbugz_logging import get_logger
from .models import Area, Category, Milestone, Person, Priority, Project, Record, Status, Tag

logger = get_logger()

R = TypeVar("R", bound=Record)

SHARED_PROJECT_REF = 0


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def as_bool(value: Any) -> bool:
    """Interpret the service's boolean encodings (true/false, 1/0, "true")."""
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def as_int(value: Any) -> Any:
    """Convert numeric strings to int; leave anything else untouched."""
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return value


def _optional_int(value: Any) -> int | None:
    return None if _is_missing(value) else as_int(value)


def split_valid(
    records: Iterable[Mapping[str, Any]], *required: str
) -> tuple[list[Mapping[str, Any]], list[Mapping[str, Any]]]:
    """Partition raw records by whether all ``required`` fields are present.

    Returns:
        Tuple of (valid, invalid) lists, both in input order
    """
    valid: list[Mapping[str, Any]] = []
    invalid: list[Mapping[str, Any]] = []
    for record in records:
        if not isinstance(record, Mapping) or any(
            _is_missing(record.get(key)) for key in required
        ):
            invalid.append(record)
        else:
            valid.append(record)
    return valid, invalid


def _normalize(
    records: Iterable[Mapping[str, Any]],
    id_key: str,
    name_key: str,
    build: Callable[[int, str, Mapping[str, Any], Mapping[str, Any]], R],
) -> list[R]:
    result: list[R] = []
    seen: set[Any] = set()
    dropped = 0

    for raw in records:
        if not isinstance(raw, Mapping):
            dropped += 1
            continue
        record_id = as_int(raw.get(id_key))
        if _is_missing(record_id) or record_id in seen:
            dropped += 1
            continue
        seen.add(record_id)

        name = raw.get(name_key)
        extra = MappingProxyType(
            {k: v for k, v in raw.items() if k not in (id_key, name_key)}
        )
        result.append(build(record_id, "" if name is None else str(name), extra, raw))

    if dropped:
        message = (
            f"Dropped {dropped} record(s) that were malformed or had a missing "
            f"or duplicate {id_key}"
        )
        logger.warning(message)
        warnings.warn(message, ValidationWarning, stacklevel=3)

    return result


def normalize_projects(records: Iterable[Mapping[str, Any]]) -> list[Project]:
    return _normalize(
        records,
        "ixProject",
        "sProject",
        lambda id_, name, extra, raw: Project(id=id_, name=name, extra=extra),
    )


def normalize_areas(
    records: Iterable[Mapping[str, Any]], project_id: int
) -> list[Area]:
    """Normalize areas fetched for ``project_id``.

    Areas are never shared, so every record belongs to the project the
    fetch was performed under.
    """
    return _normalize(
        records,
        "ixArea",
        "sArea",
        lambda id_, name, extra, raw: Area(
            id=id_, name=name, project_id=project_id, extra=extra
        ),
    )


def normalize_milestones(
    records: Iterable[Mapping[str, Any]], project_id: int
) -> list[Milestone]:
    """Normalize milestones (FixFors) fetched for ``project_id``.

    A raw project reference of 0 marks a shared milestone and yields
    ``project_id=None``. Any other reference yields the ``project_id``
    argument; the raw ``ixProject`` stays available in ``extra``.
    """

    def build(id_: int, name: str, extra: Mapping[str, Any], raw: Mapping[str, Any]):
        shared = as_int(raw.get("ixProject")) == SHARED_PROJECT_REF
        return Milestone(
            id=id_,
            name=name,
            project_id=None if shared else project_id,
            extra=extra,
        )

    return _normalize(records, "ixFixFor", "sFixFor", build)


def normalize_people(records: Iterable[Mapping[str, Any]]) -> list[Person]:
    def build(id_: int, name: str, extra: Mapping[str, Any], raw: Mapping[str, Any]):
        full_name = raw.get("sFullName") or ""
        return Person(
            id=id_,
            name=name or full_name,
            full_name=full_name or name,
            email=raw.get("sEmail") or "",
            extra=extra,
        )

    return _normalize(records, "ixPerson", "sPerson", build)


def normalize_priorities(records: Iterable[Mapping[str, Any]]) -> list[Priority]:
    return _normalize(
        records,
        "ixPriority",
        "sPriority",
        lambda id_, name, extra, raw: Priority(
            id=id_, name=name, is_default=as_bool(raw.get("fDefault")), extra=extra
        ),
    )


def normalize_categories(records: Iterable[Mapping[str, Any]]) -> list[Category]:
    return _normalize(
        records,
        "ixCategory",
        "sCategory",
        lambda id_, name, extra, raw: Category(
            id=id_,
            name=name,
            plural_name=raw.get("sPlural") or name,
            default_status_id=_optional_int(raw.get("ixStatusDefault")),
            extra=extra,
        ),
    )


def normalize_statuses(records: Iterable[Mapping[str, Any]]) -> list[Status]:
    return _normalize(
        records,
        "ixStatus",
        "sStatus",
        lambda id_, name, extra, raw: Status(
            id=id_,
            name=name,
            category_id=_optional_int(raw.get("ixCategory")),
            is_resolved=as_bool(raw.get("fResolved")),
            is_work_done=as_bool(raw.get("fWorkDone")),
            is_duplicate=as_bool(raw.get("fDuplicate")),
            extra=extra,
        ),
    )


def normalize_tags(records: Iterable[Mapping[str, Any]]) -> list[Tag]:
    return _normalize(
        records,
        "ixTag",
        "sTag",
        lambda id_, name, extra, raw: Tag(id=id_, name=name, extra=extra),
    )
