"""HTTP transport for the FogBugz JSON API.

Every command is a POST to a single endpoint. Plain commands are sent as a
JSON body; commands with file attachments are sent as multipart/form-data
with the command payload serialized into a ``json`` form field and one form
field per file.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from ..config import FogBugzConfig
from ..errors import TransportError
from ..fogbugz_logging import get_logger

logger = get_logger()


@dataclass(frozen=True)
class FileAttachment:
    """A file to upload with a command.

    When ``field_name`` is omitted the transport names the field
    ``File<N>`` using the attachment's 1-based position.
    """

    path: str
    field_name: str | None = None


AttachmentLike = FileAttachment | tuple[str | None, str] | str


def coerce_attachment(item: AttachmentLike) -> FileAttachment:
    """Accept a FileAttachment, a ``(field_name, path)`` pair or a bare path."""
    if isinstance(item, FileAttachment):
        return item
    if isinstance(item, (str, Path)):
        return FileAttachment(path=str(item))
    field_name, path = item
    return FileAttachment(path=str(path), field_name=field_name)


def _error_messages(errors: Any) -> list[str]:
    messages = []
    for error in errors or []:
        if isinstance(error, Mapping):
            messages.append(str(error.get("message", error)))
        else:
            messages.append(str(error))
    return messages


class FogBugzTransport:
    """Builds and sends single requests to the FogBugz JSON API."""

    def __init__(
        self,
        config: FogBugzConfig,
        session: requests.Session | None = None,
    ):
        """Initialize the transport.

        Args:
            config: Connection settings (endpoint, token, timeout)
            session: Optional pre-built session, mainly for tests
        """
        self.config = config
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return self.config.api_endpoint

    def build_payload(
        self, command: str, parameters: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Build the command payload without mutating ``parameters``."""
        params = dict(parameters or {})

        # The JSON API only accepts the column list in array form.
        cols = params.get("cols")
        if isinstance(cols, str):
            params["cols"] = [c.strip() for c in cols.split(",") if c.strip()]

        return {"cmd": command, "token": self.config.api_key, **params}

    def send(
        self,
        command: str,
        parameters: Mapping[str, Any] | None = None,
        attachments: Iterable[AttachmentLike] | None = None,
    ) -> Any:
        """Send one command and unwrap the response envelope.

        Args:
            command: API command name (e.g. ``listProjects``)
            parameters: Flat parameter mapping for the command
            attachments: Files to upload; missing files are skipped

        Returns:
            The envelope's ``data`` payload (``{}`` when absent)

        Raises:
            TransportError: On network failure, non-2xx status, an
                unparseable body, or a non-empty service error list
        """
        payload = self.build_payload(command, parameters)
        files = self._resolve_attachments(command, attachments or ())

        logger.debug(
            f"Sending FogBugz command {command} "
            f"(params: {sorted(k for k in payload if k != 'token')}, "
            f"files: {len(files)})"
        )

        try:
            if files:
                payload["nFileCount"] = len(files)
                response = self._post_multipart(payload, files)
            else:
                response = self._session.post(
                    self.endpoint,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.config.timeout,
                )
        except requests.RequestException as e:
            logger.error(f"Error in API request {command}: {e}")
            raise TransportError([str(e)], command=command) from e

        return self._unwrap(command, response)

    def _resolve_attachments(
        self, command: str, attachments: Iterable[AttachmentLike]
    ) -> list[tuple[str, Path]]:
        resolved = []
        for position, item in enumerate(attachments, start=1):
            attachment = coerce_attachment(item)
            path = Path(attachment.path)
            if not path.is_file():
                logger.warning(
                    f"Skipping attachment for {command}: file not found: {path}"
                )
                continue
            resolved.append((attachment.field_name or f"File{position}", path))
        return resolved

    def _post_multipart(
        self, payload: dict[str, Any], files: list[tuple[str, Path]]
    ) -> requests.Response:
        logger.debug(
            f"Uploading {len(files)} attachment(s): "
            f"{', '.join(str(path) for _, path in files)}"
        )
        with ExitStack() as stack:
            parts = [
                (field, (path.name, stack.enter_context(path.open("rb"))))
                for field, path in files
            ]
            return self._session.post(
                self.endpoint,
                data={"json": json.dumps(payload)},
                files=parts,
                timeout=self.config.timeout,
            )

    def _unwrap(self, command: str, response: requests.Response) -> Any:
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        if not 200 <= status < 300:
            if isinstance(body, Mapping) and body.get("errors"):
                messages = _error_messages(body["errors"])
            elif body is not None:
                messages = [json.dumps(body)]
            else:
                messages = [response.text or response.reason or "No response body"]
            logger.error(f"Error in API request {command}: status {status}")
            raise TransportError(messages, status=status, command=command)

        if not isinstance(body, Mapping):
            raise TransportError(
                [f"Invalid response body for {command}"], status=status, command=command
            )

        errors = body.get("errors")
        if errors:
            raise TransportError(_error_messages(errors), command=command)

        data = body.get("data")
        return {} if data is None else data
