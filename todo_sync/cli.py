"""Command line access to the todo sync service.

Usage::

    python -m todo_sync --base-url https://<db>.firebaseio.com lists
    python -m todo_sync add-task <list-id> "Buy milk" --priority high

Connection settings fall back to the ``TODO_SYNC_*`` environment variables.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import asdict, replace
from datetime import UTC, datetime
from typing import Any

from .client import DocumentStoreClient
from .config import TodoSyncConfig
from .errors import DegradedSuccess, TodoSyncError
from .models import Task, TaskList, TaskPriority, next_order_index
from .service import TodoSyncService

_LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_DEGRADED = 2


def _render(entity: TaskList | Task) -> dict[str, Any]:
    payload = asdict(entity)
    for key, value in payload.items():
        if isinstance(value, datetime):
            payload[key] = value.isoformat()
    if isinstance(entity, Task):
        payload["priority"] = entity.priority.label
    return payload


def _parse_due(text: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"invalid due date: {text}") from err
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_priority(text: str) -> TaskPriority:
    try:
        return TaskPriority[text.strip().upper()]
    except KeyError as err:
        choices = ", ".join(p.name.lower() for p in TaskPriority)
        raise argparse.ArgumentTypeError(f"invalid priority {text!r} (choose from {choices})") from err


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="todo-sync", description="Manage task lists in a REST document store")
    parser.add_argument("--base-url", help="document store URL (TODO_SYNC_BASE_URL)")
    parser.add_argument("--auth-token", help="store auth token (TODO_SYNC_AUTH_TOKEN)")
    parser.add_argument("--timeout", type=float, help="request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("lists", help="show all lists in display order")

    create = sub.add_parser("create-list", help="append a new list")
    create.add_argument("name")
    create.add_argument("--color", default=None, help="hex colour, e.g. #34C759")

    rename = sub.add_parser("rename-list", help="rename an existing list")
    rename.add_argument("list_id")
    rename.add_argument("name")

    delete = sub.add_parser("delete-list", help="delete a list and all of its tasks")
    delete.add_argument("list_id")

    tasks = sub.add_parser("tasks", help="show the tasks of a list, newest first")
    tasks.add_argument("list_id")
    tasks.add_argument("--split", action="store_true", help="group into pending and completed")

    add = sub.add_parser("add-task", help="add a task to a list")
    add.add_argument("list_id")
    add.add_argument("title")
    add.add_argument("--notes")
    add.add_argument("--due", type=_parse_due, help="ISO 8601 due date")
    add.add_argument("--priority", type=_parse_priority, default=TaskPriority.NONE)

    toggle = sub.add_parser("toggle-task", help="flip the completion state of a task")
    toggle.add_argument("list_id")
    toggle.add_argument("task_id")

    remove = sub.add_parser("delete-task", help="delete a single task")
    remove.add_argument("task_id")
    return parser


async def run(args: argparse.Namespace, service: TodoSyncService) -> Any:
    """Execute the parsed command and return a JSON-serialisable result."""

    command = args.command
    if command == "lists":
        return [_render(item) for item in await service.async_list_lists()]
    if command == "create-list":
        existing = await service.async_list_lists()
        task_list = TaskList(name=args.name, order_index=next_order_index(existing))
        if args.color:
            task_list.color_hex = args.color
        return _render(await service.async_create_list(task_list))
    if command == "rename-list":
        current = await service.async_get_list(args.list_id)
        if current is None:
            raise TodoSyncError(f"List {args.list_id} not found", reason="not_found")
        return _render(await service.async_update_list(replace(current, name=args.name)))
    if command == "delete-list":
        await service.async_delete_list(args.list_id)
        return {"deleted": args.list_id}
    if command == "tasks":
        if args.split:
            pending, completed = await service.async_list_tasks_split(args.list_id)
            return {
                "pending": [_render(task) for task in pending],
                "completed": [_render(task) for task in completed],
            }
        return [_render(task) for task in await service.async_list_tasks(args.list_id)]
    if command == "add-task":
        task = Task(
            title=args.title,
            list_id=args.list_id,
            notes=args.notes,
            due_date=args.due,
            priority=args.priority,
        )
        return _render(await service.async_create_task(task))
    if command == "toggle-task":
        tasks = await service.async_list_tasks(args.list_id)
        match = next((task for task in tasks if task.id == args.task_id), None)
        if match is None:
            raise TodoSyncError(f"Task {args.task_id} not found in list {args.list_id}", reason="not_found")
        return _render(await service.async_toggle_task_completion(match))
    if command == "delete-task":
        await service.async_delete_task(args.task_id)
        return {"deleted": args.task_id}
    raise TodoSyncError(f"unknown command {command}")  # pragma: no cover - argparse guards this


async def _async_main(args: argparse.Namespace, config: TodoSyncConfig) -> Any:
    async with DocumentStoreClient.from_config(config) as client:
        return await run(args, TodoSyncService.from_config(config, client))


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = TodoSyncConfig.from_env(base_url=args.base_url, auth_token=args.auth_token, timeout=args.timeout)
        result = asyncio.run(_async_main(args, config))
    except DegradedSuccess as err:
        print(f"warning: {err.description}", file=sys.stderr)
        return EXIT_DEGRADED
    except TodoSyncError as err:
        _LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {err.description}", file=sys.stderr)
        return EXIT_ERROR
    print(json.dumps(result, indent=2, sort_keys=True))
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - manual execution
    raise SystemExit(main())
