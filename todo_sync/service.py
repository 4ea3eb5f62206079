"""Domain-facing list and task operations on top of :class:`DocumentStoreClient`."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeVar

from .client import DocumentStoreClient, EqualityFilter, RawDocumentSet, normalise_path
from .codec import DecodeResult, decode_list, decode_many, decode_task, encode_list, encode_task
from .const import FIELD_LIST_ID, LISTS_PATH, TASKS_PATH
from .errors import (
    CascadeDeleteError,
    ClientErrorKind,
    DegradedSuccess,
    DocumentStoreError,
    OrphanTaskError,
    TodoSyncError,
)
from .models import Task, TaskList, split_tasks_by_completion
from .utils.fanout import gather_first_error
from .utils.logging import warn_once

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .config import TodoSyncConfig

_LOGGER = logging.getLogger(__name__)

Entity = TypeVar("Entity", TaskList, Task)


class TodoSyncService:
    """Stateless list/task API backed by a schemaless document store.

    Nothing is cached between calls: reads always go to the store and
    writes always send the complete document.
    """

    def __init__(
        self,
        client: DocumentStoreClient,
        *,
        clock: Callable[[], datetime] | None = None,
        verify_task_parent: bool = True,
        lists_path: str = LISTS_PATH,
        tasks_path: str = TASKS_PATH,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self.verify_task_parent = verify_task_parent
        self.lists_path = lists_path.strip("/")
        self.tasks_path = tasks_path.strip("/")
        self.logger = logger or _LOGGER

    @classmethod
    def from_config(cls, config: TodoSyncConfig, client: DocumentStoreClient | None = None) -> TodoSyncService:
        return cls(
            client or DocumentStoreClient.from_config(config),
            verify_task_parent=config.verify_task_parent,
            lists_path=config.lists_path,
            tasks_path=config.tasks_path,
        )

    # ------------------------------------------------------------------
    def list_path(self, list_id: str) -> str:
        return self._item_path(self.lists_path, list_id)

    def task_path(self, task_id: str) -> str:
        return self._item_path(self.tasks_path, task_id)

    @staticmethod
    def _item_path(collection: str, item_id: Any) -> str:
        # ids must form a single path segment
        if not isinstance(item_id, str) or not item_id.strip() or "/" in item_id:
            raise DocumentStoreError(
                ClientErrorKind.MALFORMED_TARGET, f"invalid id {item_id!r}", path=f"{collection}/{item_id}"
            )
        return normalise_path(f"{collection}/{item_id}")

    def _touch(self, entity: Entity) -> Entity:
        now = self._clock()
        created = entity.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=UTC)
        return replace(entity, updated_at=max(now, created))

    def _decode_collection(
        self,
        documents: RawDocumentSet,
        decoder: Callable[[Any], DecodeResult[Entity]],
        collection: str,
    ) -> list[Entity]:
        entities, failures = decode_many(documents.documents, decoder)
        for key, error in failures.items():
            warn_once(
                self.logger,
                f"decode:{collection}/{key}",
                "Skipping undecodable document %s/%s: %s",
                collection,
                key,
                error,
            )
        return entities

    # ------------------------------------------------------------------
    # lists
    async def async_list_lists(self) -> list[TaskList]:
        """Return every list ordered by ascending ``order_index``."""

        documents = await self.client.async_get(self.lists_path)
        lists = self._decode_collection(documents, decode_list, self.lists_path)
        lists.sort(key=lambda item: item.order_index)
        return lists

    async def async_get_list(self, list_id: str) -> TaskList | None:
        document = await self.client.async_get_document(self.list_path(list_id))
        if document is None:
            return None
        return decode_list(document).unwrap()

    async def async_create_list(self, task_list: TaskList) -> TaskList:
        return await self._put_list(task_list)

    async def async_update_list(self, task_list: TaskList) -> TaskList:
        return await self._put_list(task_list)

    async def _put_list(self, task_list: TaskList) -> TaskList:
        path = self.list_path(task_list.id)
        written = self._touch(task_list)
        await self.client.async_put(path, encode_list(written))
        return written

    async def async_reorder_lists(self, lists: Iterable[TaskList]) -> list[TaskList]:
        """Persist the given sequence as the display order.

        Each list gets its position as ``order_index``; only lists whose
        index changed are written, concurrently. The first failed write is
        raised after every write has finished.
        """

        reordered: list[TaskList] = []
        changed: list[TaskList] = []
        for position, task_list in enumerate(lists):
            if task_list.order_index == position:
                reordered.append(task_list)
                continue
            updated = self._touch(replace(task_list, order_index=position))
            reordered.append(updated)
            changed.append(updated)
        writes = [(self.list_path(item.id), encode_list(item)) for item in changed]
        first_error = await gather_first_error(
            (self.client.async_put(path, document) for path, document in writes),
            TodoSyncError,
        )
        if first_error is not None:
            raise first_error
        return reordered

    async def async_delete_list(self, list_id: str) -> None:
        """Delete a list and then every task that references it.

        Raises the list deletion error untouched when the list itself could
        not be removed. Once the list is gone, a failure to find its tasks
        raises :class:`DegradedSuccess` and a failure to remove any of them
        raises :class:`CascadeDeleteError` with the first error seen. The
        store is not repaired in either case.
        """

        list_path = self.list_path(list_id)
        await self.client.async_delete(list_path)
        self.logger.debug("Deleted list %s", list_id)

        try:
            documents = await self.client.async_get(self.tasks_path, EqualityFilter(FIELD_LIST_ID, list_id))
        except TodoSyncError as err:
            self.logger.warning("Could not fetch tasks of deleted list %s: %s", list_id, err)
            raise DegradedSuccess(list_id, err) from err

        if documents.is_empty:
            self.logger.debug("No tasks found for list %s", list_id)
            return

        task_paths = [self.task_path(key) for key in documents.keys()]
        self.logger.debug("Deleting %d tasks of list %s", len(task_paths), list_id)
        first_error = await gather_first_error(
            (self.client.async_delete(path) for path in task_paths),
            TodoSyncError,
        )
        if first_error is not None:
            self.logger.warning("Cascade delete of list %s left tasks behind: %s", list_id, first_error)
            raise CascadeDeleteError(list_id, first_error) from first_error

    # ------------------------------------------------------------------
    # tasks
    async def async_list_tasks(self, list_id: str) -> list[Task]:
        """Return the tasks of ``list_id``, newest ``created_at`` first."""

        documents = await self.client.async_get(self.tasks_path, EqualityFilter(FIELD_LIST_ID, list_id))
        tasks = self._decode_collection(documents, decode_task, self.tasks_path)
        tasks.sort(key=lambda task: task.created_at, reverse=True)
        return tasks

    async def async_list_tasks_split(self, list_id: str) -> tuple[list[Task], list[Task]]:
        return split_tasks_by_completion(await self.async_list_tasks(list_id))

    async def async_create_task(self, task: Task) -> Task:
        if self.verify_task_parent:
            parent = await self.client.async_get_document(self.list_path(task.list_id))
            if parent is None:
                raise OrphanTaskError(task.id, task.list_id)
        return await self._put_task(task)

    async def async_update_task(self, task: Task) -> Task:
        return await self._put_task(task)

    async def async_toggle_task_completion(self, task: Task) -> Task:
        return await self._put_task(task.toggled())

    async def _put_task(self, task: Task) -> Task:
        path = self.task_path(task.id)
        written = self._touch(task)
        await self.client.async_put(path, encode_task(written))
        return written

    async def async_delete_task(self, task_id: str) -> None:
        await self.client.async_delete(self.task_path(task_id))


__all__ = ["TodoSyncService"]
