"""Client-side synchronisation of task lists with a REST document store."""

from .client import EMPTY_RESULT, DocumentStoreClient, EqualityFilter, RawDocumentSet
from .codec import DecodeResult, decode_list, decode_task, encode, encode_list, encode_task
from .config import TodoSyncConfig
from .errors import (
    CascadeDeleteError,
    ClientErrorKind,
    ConfigError,
    DecodeError,
    DegradedSuccess,
    DocumentStoreError,
    OrphanTaskError,
    TodoSyncError,
)
from .models import Task, TaskList, TaskPriority, next_order_index, parse_hex_color, split_tasks_by_completion
from .service import TodoSyncService

__all__ = [
    "CascadeDeleteError",
    "ClientErrorKind",
    "ConfigError",
    "DecodeError",
    "DecodeResult",
    "DegradedSuccess",
    "DocumentStoreClient",
    "DocumentStoreError",
    "EMPTY_RESULT",
    "EqualityFilter",
    "OrphanTaskError",
    "RawDocumentSet",
    "Task",
    "TaskList",
    "TaskPriority",
    "TodoSyncConfig",
    "TodoSyncError",
    "TodoSyncService",
    "decode_list",
    "decode_task",
    "encode",
    "encode_list",
    "encode_task",
    "next_order_index",
    "parse_hex_color",
    "split_tasks_by_completion",
]
