"""Translate entities to store documents and validate documents on the way back."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

import voluptuous as vol

from .const import (
    FIELD_COLOR_HEX,
    FIELD_CREATED_AT,
    FIELD_DUE_DATE,
    FIELD_ID,
    FIELD_IS_COMPLETED,
    FIELD_LIST_ID,
    FIELD_NAME,
    FIELD_NOTES,
    FIELD_ORDER_INDEX,
    FIELD_PRIORITY,
    FIELD_TITLE,
    FIELD_UPDATED_AT,
)
from .errors import DecodeError
from .models import Task, TaskList, TaskPriority

T = TypeVar("T")


# ----------------------------------------------------------------------
# primitive validators; bool is an int subclass so it is rejected explicitly


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise vol.Invalid("expected a string")
    return value


def _boolean(value: Any) -> bool:
    if not isinstance(value, bool):
        raise vol.Invalid("expected a boolean")
    return value


def _integer(value: Any) -> int:
    if isinstance(value, bool):
        raise vol.Invalid("expected an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise vol.Invalid("expected an integer")


def _timestamp(value: Any) -> datetime:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise vol.Invalid("expected seconds since epoch")
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError) as err:
        raise vol.Invalid(f"timestamp out of range: {value}") from err


_PRIORITY = vol.All(_integer, vol.Coerce(TaskPriority), msg="unknown priority")

LIST_SCHEMA = vol.Schema(
    {
        vol.Required(FIELD_ID): _string,
        vol.Required(FIELD_NAME): _string,
        vol.Required(FIELD_COLOR_HEX): _string,
        vol.Required(FIELD_ORDER_INDEX): _integer,
        vol.Required(FIELD_CREATED_AT): _timestamp,
        vol.Required(FIELD_UPDATED_AT): _timestamp,
    },
    extra=vol.REMOVE_EXTRA,
)

TASK_SCHEMA = vol.Schema(
    {
        vol.Required(FIELD_ID): _string,
        vol.Required(FIELD_TITLE): _string,
        vol.Optional(FIELD_NOTES): vol.Any(None, _string),
        vol.Optional(FIELD_DUE_DATE): vol.Any(None, _timestamp),
        vol.Required(FIELD_IS_COMPLETED): _boolean,
        vol.Required(FIELD_PRIORITY): _PRIORITY,
        vol.Required(FIELD_LIST_ID): _string,
        vol.Required(FIELD_CREATED_AT): _timestamp,
        vol.Required(FIELD_UPDATED_AT): _timestamp,
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(slots=True, frozen=True)
class DecodeResult(Generic[T]):
    """Either a decoded entity or the :class:`DecodeError` explaining why not."""

    value: T | None = None
    error: DecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


# ----------------------------------------------------------------------
def encode_timestamp(moment: datetime) -> float:
    """Return ``moment`` as float seconds since the epoch (naive means UTC)."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.timestamp()


def encode_list(task_list: TaskList) -> dict[str, Any]:
    return {
        FIELD_ID: task_list.id,
        FIELD_NAME: task_list.name,
        FIELD_COLOR_HEX: task_list.color_hex,
        FIELD_ORDER_INDEX: int(task_list.order_index),
        FIELD_CREATED_AT: encode_timestamp(task_list.created_at),
        FIELD_UPDATED_AT: encode_timestamp(task_list.updated_at),
    }


def encode_task(task: Task) -> dict[str, Any]:
    document: dict[str, Any] = {
        FIELD_ID: task.id,
        FIELD_TITLE: task.title,
        FIELD_IS_COMPLETED: bool(task.is_completed),
        FIELD_PRIORITY: int(task.priority),
        FIELD_LIST_ID: task.list_id,
        FIELD_CREATED_AT: encode_timestamp(task.created_at),
        FIELD_UPDATED_AT: encode_timestamp(task.updated_at),
    }
    # absent optionals are omitted, never sent as null
    if task.notes is not None:
        document[FIELD_NOTES] = task.notes
    if task.due_date is not None:
        document[FIELD_DUE_DATE] = encode_timestamp(task.due_date)
    return document


def encode(entity: TaskList | Task) -> dict[str, Any]:
    if isinstance(entity, TaskList):
        return encode_list(entity)
    if isinstance(entity, Task):
        return encode_task(entity)
    raise TypeError(f"cannot encode {type(entity).__name__}")


# ----------------------------------------------------------------------
def _validate(schema: vol.Schema, entity: str, document: Any) -> dict[str, Any] | DecodeError:
    if not isinstance(document, Mapping):
        return DecodeError(entity, "expected a JSON object", document)
    try:
        return schema(dict(document))
    except vol.Invalid as err:
        return DecodeError(entity, str(err), document)


def decode_list(document: Any) -> DecodeResult[TaskList]:
    data = _validate(LIST_SCHEMA, "list", document)
    if isinstance(data, DecodeError):
        return DecodeResult(error=data)
    return DecodeResult(
        value=TaskList(
            id=data[FIELD_ID],
            name=data[FIELD_NAME],
            color_hex=data[FIELD_COLOR_HEX],
            order_index=data[FIELD_ORDER_INDEX],
            created_at=data[FIELD_CREATED_AT],
            updated_at=data[FIELD_UPDATED_AT],
        )
    )


def decode_task(document: Any) -> DecodeResult[Task]:
    data = _validate(TASK_SCHEMA, "task", document)
    if isinstance(data, DecodeError):
        return DecodeResult(error=data)
    return DecodeResult(
        value=Task(
            id=data[FIELD_ID],
            title=data[FIELD_TITLE],
            list_id=data[FIELD_LIST_ID],
            notes=data.get(FIELD_NOTES),
            due_date=data.get(FIELD_DUE_DATE),
            is_completed=data[FIELD_IS_COMPLETED],
            priority=data[FIELD_PRIORITY],
            created_at=data[FIELD_CREATED_AT],
            updated_at=data[FIELD_UPDATED_AT],
        )
    )


def decode_many(
    documents: Mapping[str, Any], decoder: Callable[[Any], DecodeResult[T]]
) -> tuple[list[T], dict[str, DecodeError]]:
    """Decode every document, returning the entities and the failures by key."""

    entities: list[T] = []
    failures: dict[str, DecodeError] = {}
    for key, document in documents.items():
        result = decoder(document)
        if result.ok:
            entities.append(result.value)  # type: ignore[arg-type]
        else:
            failures[str(key)] = result.error  # type: ignore[assignment]
    return entities, failures


__all__ = [
    "DecodeResult",
    "LIST_SCHEMA",
    "TASK_SCHEMA",
    "decode_list",
    "decode_many",
    "decode_task",
    "encode",
    "encode_list",
    "encode_task",
    "encode_timestamp",
]
