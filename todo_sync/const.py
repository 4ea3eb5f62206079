"""Constants shared by the todo sync client and service."""

from __future__ import annotations

# Store collections
LISTS_PATH = "lists"
TASKS_PATH = "tasks"

# Document fields
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_COLOR_HEX = "colorHex"
FIELD_ORDER_INDEX = "orderIndex"
FIELD_CREATED_AT = "createdAt"
FIELD_UPDATED_AT = "updatedAt"
FIELD_TITLE = "title"
FIELD_NOTES = "notes"
FIELD_DUE_DATE = "dueDate"
FIELD_IS_COMPLETED = "isCompleted"
FIELD_PRIORITY = "priority"
FIELD_LIST_ID = "listId"

DEFAULT_LIST_COLOR = "#007AFF"

# Config keys
CONF_BASE_URL = "base_url"
CONF_AUTH_TOKEN = "auth_token"
CONF_TIMEOUT = "timeout"
CONF_VERIFY_TASK_PARENT = "verify_task_parent"
CONF_LISTS_PATH = "lists_path"
CONF_TASKS_PATH = "tasks_path"

DEFAULT_TIMEOUT = 30
MIN_TIMEOUT = 1
MAX_TIMEOUT = 300

ENV_PREFIX = "TODO_SYNC_"

# Characters the document store rejects inside a key.
FORBIDDEN_KEY_CHARS = frozenset(".$#[]")
PLACEHOLDER_PROJECT = "your-project-id"
