from __future__ import annotations

import pytest

from todo_sync import ConfigError, DocumentStoreClient, TodoSyncConfig, TodoSyncService


def test_from_options_applies_defaults() -> None:
    config = TodoSyncConfig.from_options({"base_url": " https://todo-test.firebaseio.com/ "})
    assert config.base_url == "https://todo-test.firebaseio.com"
    assert config.auth_token is None
    assert config.timeout == 30
    assert config.verify_task_parent is True
    assert (config.lists_path, config.tasks_path) == ("lists", "tasks")
    assert config.ready


def test_from_options_coerces_values() -> None:
    config = TodoSyncConfig.from_options(
        {
            "base_url": "https://todo-test.firebaseio.com",
            "auth_token": "  ",
            "timeout": "12.5",
            "verify_task_parent": "off",
            "lists_path": "/taskLists/",
            "unrelated": 1,
        }
    )
    assert config.auth_token is None
    assert config.timeout == 12.5
    assert config.verify_task_parent is False
    assert config.lists_path == "taskLists"


@pytest.mark.parametrize(
    "options",
    [
        {},
        {"base_url": ""},
        {"base_url": "not a url"},
        {"base_url": "https://todo-test.firebaseio.com", "timeout": 0},
        {"base_url": "https://todo-test.firebaseio.com", "timeout": "soon"},
        {"base_url": "https://todo-test.firebaseio.com", "verify_task_parent": "maybe"},
    ],
)
def test_from_options_rejects_invalid(options) -> None:
    with pytest.raises(ConfigError) as info:
        TodoSyncConfig.from_options(options)
    assert info.value.reason == "invalid_options"


def test_from_env_reads_prefixed_variables_and_overrides() -> None:
    environ = {
        "TODO_SYNC_BASE_URL": "https://env.firebaseio.com",
        "TODO_SYNC_AUTH_TOKEN": "env-token",
        "TODO_SYNC_TIMEOUT": "45",
        "TODO_SYNC_VERIFY_TASK_PARENT": "false",
        "UNRELATED": "x",
    }
    config = TodoSyncConfig.from_env(environ, auth_token="cli-token", timeout=None)
    assert config.base_url == "https://env.firebaseio.com"
    assert config.auth_token == "cli-token"
    assert config.timeout == 45
    assert config.verify_task_parent is False


def test_from_env_without_base_url_fails() -> None:
    with pytest.raises(ConfigError):
        TodoSyncConfig.from_env({})


def test_to_options_roundtrip() -> None:
    config = TodoSyncConfig.from_options({"base_url": "https://todo-test.firebaseio.com", "auth_token": "t"})
    assert TodoSyncConfig.from_options(config.to_options()) == config


def test_service_from_config_wires_paths() -> None:
    config = TodoSyncConfig.from_options(
        {"base_url": "https://todo-test.firebaseio.com", "tasks_path": "items", "verify_task_parent": False}
    )
    service = TodoSyncService.from_config(config)
    assert isinstance(service.client, DocumentStoreClient)
    assert service.client.base_url == "https://todo-test.firebaseio.com"
    assert service.task_path("t1") == "items/t1"
    assert service.verify_task_parent is False
