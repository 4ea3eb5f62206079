"""Configuration for the document store client and sync service."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import voluptuous as vol

from .const import (
    CONF_AUTH_TOKEN,
    CONF_BASE_URL,
    CONF_LISTS_PATH,
    CONF_TASKS_PATH,
    CONF_TIMEOUT,
    CONF_VERIFY_TASK_PARENT,
    DEFAULT_TIMEOUT,
    ENV_PREFIX,
    LISTS_PATH,
    MAX_TIMEOUT,
    MIN_TIMEOUT,
    TASKS_PATH,
)
from .errors import ConfigError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise vol.Invalid(f"invalid boolean value {value!r}")


def _stripped(value: Any) -> str:
    return str(value or "").strip()


def _optional_text(value: Any) -> str | None:
    return _stripped(value) or None


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_BASE_URL): vol.All(_stripped, vol.Length(min=1), vol.Url()),
        vol.Optional(CONF_AUTH_TOKEN, default=None): vol.Any(None, _optional_text),
        vol.Optional(CONF_TIMEOUT, default=DEFAULT_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=MIN_TIMEOUT, max=MAX_TIMEOUT)
        ),
        vol.Optional(CONF_VERIFY_TASK_PARENT, default=True): _boolean,
        vol.Optional(CONF_LISTS_PATH, default=LISTS_PATH): vol.All(_stripped, vol.Length(min=1)),
        vol.Optional(CONF_TASKS_PATH, default=TASKS_PATH): vol.All(_stripped, vol.Length(min=1)),
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(slots=True)
class TodoSyncConfig:
    """Settings required to talk to the document store."""

    base_url: str = ""
    auth_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    verify_task_parent: bool = True
    lists_path: str = LISTS_PATH
    tasks_path: str = TASKS_PATH

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> TodoSyncConfig:
        try:
            data = CONFIG_SCHEMA(dict(options))
        except vol.Invalid as err:
            raise ConfigError(f"invalid configuration: {err}", reason="invalid_options") from err
        return cls(
            base_url=data[CONF_BASE_URL].rstrip("/"),
            auth_token=data[CONF_AUTH_TOKEN],
            timeout=data[CONF_TIMEOUT],
            verify_task_parent=data[CONF_VERIFY_TASK_PARENT],
            lists_path=data[CONF_LISTS_PATH].strip("/"),
            tasks_path=data[CONF_TASKS_PATH].strip("/"),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> TodoSyncConfig:
        """Build a config from ``TODO_SYNC_*`` variables; ``overrides`` win when not ``None``."""

        environ = os.environ if environ is None else environ
        options: dict[str, Any] = {}
        for key in (
            CONF_BASE_URL,
            CONF_AUTH_TOKEN,
            CONF_TIMEOUT,
            CONF_VERIFY_TASK_PARENT,
            CONF_LISTS_PATH,
            CONF_TASKS_PATH,
        ):
            value = environ.get(f"{ENV_PREFIX}{key.upper()}")
            if value is not None and value != "":
                options[key] = value
        options.update({key: value for key, value in overrides.items() if value is not None})
        return cls.from_options(options)

    @property
    def ready(self) -> bool:
        return bool(self.base_url)

    def to_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            CONF_BASE_URL: self.base_url,
            CONF_TIMEOUT: self.timeout,
            CONF_VERIFY_TASK_PARENT: self.verify_task_parent,
            CONF_LISTS_PATH: self.lists_path,
            CONF_TASKS_PATH: self.tasks_path,
        }
        if self.auth_token:
            options[CONF_AUTH_TOKEN] = self.auth_token
        return options


__all__ = ["CONFIG_SCHEMA", "TodoSyncConfig"]
