from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from todo_sync import Task, TaskList, TaskPriority, next_order_index, parse_hex_color, split_tasks_by_completion

NOW = datetime(2025, 4, 12, 9, 30, tzinfo=UTC)


def test_defaults_generate_unique_ids_and_blue_colour() -> None:
    first = TaskList(name="Inbox")
    second = TaskList(name="Inbox")
    assert first.id != second.id
    assert first.color_hex == "#007AFF"
    assert first.order_index == 0
    task = Task(title="Call back", list_id=first.id)
    assert task.priority is TaskPriority.NONE
    assert task.notes is None and task.due_date is None
    assert task.is_completed is False


def test_priority_labels_and_wire_values() -> None:
    assert [(p.label, int(p)) for p in TaskPriority] == [
        ("None", -1),
        ("Low", 0),
        ("Medium", 1),
        ("High", 2),
    ]


@pytest.mark.parametrize(
    ("indices", "expected"),
    [([], 0), ([0], 1), ([4, 1, 2], 5), ([-3], -2)],
)
def test_next_order_index(indices, expected) -> None:
    lists = [TaskList(name=f"l{i}", order_index=i) for i in indices]
    assert next_order_index(lists) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("#007AFF", (0.0, 122 / 255, 1.0, 1.0)),
        ("#FFF", (1.0, 1.0, 1.0, 1.0)),
        ("80FF0000", (1.0, 0.0, 0.0, 128 / 255)),
        ("#12345", (0.0, 0.0, 0.0, 1.0)),
        ("not a colour", (0.0, 0.0, 0.0, 1.0)),
        (None, (0.0, 0.0, 0.0, 1.0)),
    ],
)
def test_parse_hex_color(text, expected) -> None:
    assert parse_hex_color(text) == pytest.approx(expected)


def test_list_color_rgba_uses_its_hex() -> None:
    assert TaskList(name="Work", color_hex="#FF3B30").color_rgba() == pytest.approx((1.0, 59 / 255, 48 / 255, 1.0))


def test_toggled_returns_copy() -> None:
    task = Task(title="Stretch", list_id="l")
    flipped = task.toggled()
    assert flipped.is_completed is True
    assert task.is_completed is False
    assert flipped.id == task.id


def test_overdue_ignores_time_of_day() -> None:
    earlier_today = Task(title="t", list_id="l", due_date=NOW - timedelta(hours=2))
    yesterday = Task(title="t", list_id="l", due_date=NOW - timedelta(days=1))
    assert not earlier_today.is_overdue(NOW)
    assert earlier_today.is_due_today(NOW)
    assert yesterday.is_overdue(NOW)
    assert not yesterday.is_due_today(NOW)


def test_completed_or_undated_tasks_are_never_overdue() -> None:
    done = Task(title="t", list_id="l", due_date=NOW - timedelta(days=3), is_completed=True)
    undated = Task(title="t", list_id="l")
    assert not done.is_overdue(NOW)
    assert not undated.is_overdue(NOW)
    assert not undated.is_due_today(NOW)


def test_overdue_uses_reference_timezone() -> None:
    tokyo = timezone(timedelta(hours=9))
    now = datetime(2025, 4, 12, 8, 0, tzinfo=tokyo)
    # 23:00 UTC on the 11th is already the 12th in Tokyo
    task = Task(title="t", list_id="l", due_date=datetime(2025, 4, 11, 23, 0, tzinfo=UTC))
    assert task.is_due_today(now)
    assert not task.is_overdue(now)


def test_split_tasks_by_completion_orders_each_group() -> None:
    base = datetime(2025, 4, 1, tzinfo=UTC)
    old_open = Task(title="old", list_id="l", created_at=base, updated_at=base)
    new_open = Task(title="new", list_id="l", created_at=base + timedelta(days=2), updated_at=base)
    done_early = Task(
        title="done early",
        list_id="l",
        is_completed=True,
        created_at=base + timedelta(days=5),
        updated_at=base + timedelta(days=5),
    )
    done_late = Task(
        title="done late",
        list_id="l",
        is_completed=True,
        created_at=base,
        updated_at=base + timedelta(days=9),
    )
    pending, completed = split_tasks_by_completion([old_open, done_early, new_open, done_late])
    assert [task.title for task in pending] == ["new", "old"]
    assert [task.title for task in completed] == ["done late", "done early"]
