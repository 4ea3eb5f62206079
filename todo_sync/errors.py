"""Exception types raised by the todo sync client and service."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any


class TodoSyncError(RuntimeError):
    """Base class for every failure surfaced to callers."""

    def __init__(self, message: str, *, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason

    @property
    def description(self) -> str:
        return str(self)


class ConfigError(TodoSyncError):
    """Raised when client options fail validation."""


class ClientErrorKind(StrEnum):
    """Classification of a failed store call, in the order it is checked."""

    MALFORMED_TARGET = "malformed_target"
    TRANSPORT = "transport"
    BAD_STATUS = "bad_status"
    BAD_SHAPE = "bad_shape"
    NO_BODY = "no_body"


_DESCRIPTIONS = {
    ClientErrorKind.MALFORMED_TARGET: "Internal error: invalid request target",
    ClientErrorKind.TRANSPORT: "Network request failed, check the connection",
    ClientErrorKind.BAD_STATUS: "Server returned an error",
    ClientErrorKind.BAD_SHAPE: "Failed to understand the server response",
    ClientErrorKind.NO_BODY: "No data received from the server",
}


class DocumentStoreError(TodoSyncError):
    """A remote call failed; ``kind`` tells how."""

    def __init__(
        self,
        kind: ClientErrorKind,
        detail: str,
        *,
        method: str | None = None,
        path: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(f"{_DESCRIPTIONS[kind]} ({detail})", reason=kind.value)
        self.kind = kind
        self.detail = detail
        self.method = method
        self.path = path
        self.status = status


class DecodeError(TodoSyncError):
    """A document could not be turned into an entity."""

    def __init__(self, entity: str, message: str, document: Any) -> None:
        super().__init__(f"Failed to decode {entity}: {message}", reason="decode")
        self.entity = entity
        self.document = dict(document) if isinstance(document, Mapping) else document


class DegradedSuccess(TodoSyncError):
    """The list is gone but its tasks could not be located for removal."""

    def __init__(self, list_id: str, cause: TodoSyncError) -> None:
        super().__init__(
            f"List {list_id} deleted, but associated tasks could not be located/removed: {cause}",
            reason="degraded",
        )
        self.list_id = list_id
        self.cause = cause


class CascadeDeleteError(TodoSyncError):
    """At least one task of a deleted list could not be removed."""

    def __init__(self, list_id: str, first_error: TodoSyncError) -> None:
        super().__init__(
            f"Failed to delete one or more tasks for list {list_id}: {first_error}",
            reason="cascade_failed",
        )
        self.list_id = list_id
        self.first_error = first_error


class OrphanTaskError(TodoSyncError):
    """A task referenced a list that does not exist."""

    def __init__(self, task_id: str, list_id: str) -> None:
        super().__init__(f"Task {task_id} references missing list {list_id}", reason="orphan")
        self.task_id = task_id
        self.list_id = list_id


__all__ = [
    "CascadeDeleteError",
    "ClientErrorKind",
    "ConfigError",
    "DecodeError",
    "DegradedSuccess",
    "DocumentStoreError",
    "OrphanTaskError",
    "TodoSyncError",
]
