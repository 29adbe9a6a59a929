"""FogBugz API client.

Thin, typed helpers over :class:`FogBugzTransport`. Every helper sends one
command through the retrying base client and unwraps the top-level key that
names the returned entity (``projects``, ``areas``, ``fixfors`` ...). Records
are returned exactly as the service sent them; normalization happens in
:mod:`fogbugz_mcp.resources.normalizers`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import requests

from ..config import FogBugzConfig, load_config
from ..errors import TransportError
from ..fogbugz_logging import get_logger
from .base import IntegrationClient
from .transport import AttachmentLike, FogBugzTransport

logger = get_logger()


class FogBugzClient(IntegrationClient):
    """Client for the FogBugz JSON API with retry on transport failures."""

    def __init__(
        self,
        config: FogBugzConfig | None = None,
        session: requests.Session | None = None,
        transport: FogBugzTransport | None = None,
    ):
        """Initialize the FogBugz client.

        Args:
            config: Connection settings (defaults to :func:`load_config`)
            session: Optional requests session handed to the transport
            transport: Optional pre-built transport (overrides session)
        """
        config = config or load_config()
        super().__init__(max_retries=config.max_retries, retry_delay=config.retry_delay)
        self.config = config
        self.transport = transport or FogBugzTransport(config, session=session)

    def request(
        self,
        command: str,
        params: Mapping[str, Any] | None = None,
        attachments: Iterable[AttachmentLike] = (),
    ) -> Any:
        """Send any command and return the unwrapped ``data`` payload.

        Used directly for the parts of the command set that have no
        dedicated helper (wikis, discussions, time tracking, BugzScout).
        """
        attachments = list(attachments)
        return self._execute_with_retry(self.transport.send, command, params, attachments)

    def _request_key(
        self,
        command: str,
        key: str,
        params: Mapping[str, Any] | None = None,
        attachments: Iterable[AttachmentLike] = (),
    ) -> Any:
        data = self.request(command, params, attachments)
        if not isinstance(data, Mapping) or data.get(key) is None:
            raise TransportError(
                [f"Invalid response structure for {command}: missing '{key}'"],
                command=command,
            )
        return data[key]

    def _request_list(
        self, command: str, key: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        records = self._request_key(command, key, params)
        if not isinstance(records, list):
            raise TransportError(
                [f"Invalid response structure for {command}: '{key}' is not a list"],
                command=command,
            )
        return records

    # People

    def list_people(self) -> list[dict[str, Any]]:
        return self._request_list("listPeople", "people")

    def view_person(self, ix_person: int | None = None) -> dict[str, Any]:
        """Get a person; the user owning the API token when ``ix_person`` is None."""
        params = {"ixPerson": ix_person} if ix_person is not None else None
        return self._request_key("viewPerson", "person", params)

    # Reference data

    def list_projects(self) -> list[dict[str, Any]]:
        return self._request_list("listProjects", "projects")

    def list_areas(self, project_id: int | None = None) -> list[dict[str, Any]]:
        params = {"ixProject": project_id} if project_id is not None else None
        return self._request_list("listAreas", "areas", params)

    def list_milestones(self, project_id: int | None = None) -> list[dict[str, Any]]:
        """List milestones (FixFors), including shared ones."""
        params = {"ixProject": project_id} if project_id is not None else None
        return self._request_list("listFixFors", "fixfors", params)

    def list_tags(self) -> list[dict[str, Any]]:
        return self._request_list("listTags", "tags")

    def list_priorities(self) -> list[dict[str, Any]]:
        return self._request_list("listPriorities", "priorities")

    def list_categories(self) -> list[dict[str, Any]]:
        return self._request_list("listCategories", "categories")

    def list_statuses(self, category_id: int | None = None) -> list[dict[str, Any]]:
        params = {"ixCategory": category_id} if category_id is not None else None
        return self._request_list("listStatuses", "statuses", params)

    # Cases

    def create_case(
        self,
        params: Mapping[str, Any],
        attachments: Iterable[AttachmentLike] = (),
    ) -> dict[str, Any]:
        """Create a new case.

        Args:
            params: Case fields (``sTitle`` is required by the service)
            attachments: Files to attach to the opening event

        Returns:
            The created case record
        """
        return self._request_key("new", "case", params, attachments)

    def update_case(
        self,
        params: Mapping[str, Any],
        attachments: Iterable[AttachmentLike] = (),
    ) -> dict[str, Any]:
        """Edit an existing case identified by ``ixBug``."""
        if "ixBug" not in params:
            raise ValueError("update_case requires an 'ixBug' parameter")
        return self._request_key("edit", "case", params, attachments)

    def assign_case(self, case_id: int, person_name: str) -> dict[str, Any]:
        return self._request_key(
            "assign", "case", {"ixBug": case_id, "sPersonAssignedTo": person_name}
        )

    def search_cases(
        self,
        query: str,
        cols: list[str] | str | None = None,
        max_results: int | None = None,
    ) -> list[dict[str, Any]]:
        """Search cases with the service's query syntax.

        Args:
            query: Search string (``q``)
            cols: Columns to return, as a list or comma-joined string
            max_results: Maximum number of cases (``max``)
        """
        params: dict[str, Any] = {"q": query}
        if cols is not None:
            params["cols"] = cols
        if max_results is not None:
            params["max"] = max_results
        return self._request_list("search", "cases", params)

    def get_case_link(self, case_id: int) -> str:
        return f"{self.config.root_url}/default.asp?{case_id}"

    # Projects

    def create_project(
        self,
        name: str,
        primary_contact: int | None = None,
        inbox: bool | None = None,
        allow_public_submit: bool | None = None,
    ) -> dict[str, Any]:
        """Create a project. Booleans are sent as 1/0 as the service expects."""
        params: dict[str, Any] = {"sProject": name}
        if primary_contact is not None:
            params["ixPersonPrimaryContact"] = primary_contact
        if inbox is not None:
            params["fInbox"] = 1 if inbox else 0
        if allow_public_submit is not None:
            params["fAllowPublicSubmit"] = 1 if allow_public_submit else 0
        return self._request_key("newProject", "project", params)
