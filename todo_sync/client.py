"""Transport-level access to the REST document store."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from collections.abc import ItemsView, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from aiohttp import ClientError, ClientSession, ClientTimeout

from .const import DEFAULT_TIMEOUT, FORBIDDEN_KEY_CHARS, PLACEHOLDER_PROJECT
from .errors import ClientErrorKind, DocumentStoreError

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .config import TodoSyncConfig

_LOGGER = logging.getLogger(__name__)

Primitive = str | int | float | bool


@dataclass(slots=True, frozen=True)
class EqualityFilter:
    """Single ``field == value`` predicate, the only query the store supports."""

    field: str
    value: Primitive

    def to_params(self) -> dict[str, str]:
        # the store expects JSON literals, so strings keep their quotes
        return {"orderBy": json.dumps(self.field), "equalTo": json.dumps(self.value)}


@dataclass(slots=True, frozen=True)
class RawDocumentSet:
    """Documents returned by a collection read, keyed by store key."""

    documents: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_empty(self) -> bool:
        return not self.documents

    def keys(self) -> list[str]:
        return list(self.documents)

    def items(self) -> ItemsView[str, Any]:
        return self.documents.items()

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self) -> Iterator[str]:
        return iter(self.documents)


EMPTY_RESULT = RawDocumentSet()


def _malformed(detail: str, *, method: str | None = None, path: str | None = None) -> DocumentStoreError:
    return DocumentStoreError(ClientErrorKind.MALFORMED_TARGET, detail, method=method, path=path)


def _check_key(segment: str) -> str | None:
    if not segment:
        return "empty path segment"
    bad = FORBIDDEN_KEY_CHARS.intersection(segment)
    if bad:
        return f"forbidden characters {''.join(sorted(bad))!r} in {segment!r}"
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in segment):
        return f"control characters in {segment!r}"
    return None


def normalise_path(path: Any) -> str:
    """Return ``path`` without surrounding slashes or raise a malformed-target error."""

    if not isinstance(path, str):
        raise _malformed(f"path must be a string, got {type(path).__name__}")
    clean = path.strip().strip("/")
    if not clean:
        raise _malformed("empty path", path=path)
    for segment in clean.split("/"):
        problem = _check_key(segment)
        if problem:
            raise _malformed(problem, path=path)
    return clean


class DocumentStoreClient:
    """Issue GET/PUT/DELETE calls against the store and classify the outcome.

    Every failure is raised as a :class:`DocumentStoreError` whose ``kind``
    is checked in this order: malformed target, transport failure,
    non-success status, unparseable body, missing body.
    """

    def __init__(
        self,
        base_url: str,
        session: ClientSession | None = None,
        *,
        auth_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        self._base_url = str(base_url or "").strip().rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._auth_token = auth_token or None
        self._timeout = ClientTimeout(total=timeout)
        self.logger = logger or _LOGGER

    @classmethod
    def from_config(cls, config: TodoSyncConfig, session: ClientSession | None = None) -> DocumentStoreClient:
        return cls(
            config.base_url,
            session,
            auth_token=config.auth_token,
            timeout=config.timeout,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def async_close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def __aenter__(self) -> DocumentStoreClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.async_close()

    def _get_session(self) -> ClientSession:
        if self._session is None:
            self._session = ClientSession()
        return self._session

    # ------------------------------------------------------------------
    def build_url(self, path: str) -> str:
        """Return the absolute URL for ``path`` (``{base}/{path}.json``)."""

        clean = normalise_path(path)
        try:
            parts = urlsplit(self._base_url)
        except ValueError as err:
            raise _malformed(f"invalid base URL {self._base_url!r}: {err}", path=path) from err
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise _malformed(f"invalid base URL {self._base_url!r}", path=path)
        if PLACEHOLDER_PROJECT in self._base_url:
            raise _malformed("base URL still contains the placeholder project id", path=path)
        return f"{self._base_url}/{clean}.json"

    def _params(self, query: EqualityFilter | None, path: str) -> dict[str, str]:
        params: dict[str, str] = {}
        if query is not None:
            if not isinstance(query.field, str) or _check_key(query.field):
                raise _malformed(f"invalid filter field {query.field!r}", method="GET", path=path)
            value = query.value
            if value is None or not isinstance(value, str | int | float):
                raise _malformed(f"filter value must be a primitive, got {value!r}", method="GET", path=path)
            if isinstance(value, float) and not math.isfinite(value):
                raise _malformed(f"filter value must be finite, got {value!r}", method="GET", path=path)
            params.update(query.to_params())
        if self._auth_token:
            params["auth"] = self._auth_token
        return params

    async def _request(
        self,
        method: str,
        path: str,
        *,
        query: EqualityFilter | None = None,
        document: Mapping[str, Any] | None = None,
    ) -> bytes:
        url = self.build_url(path)
        params = self._params(query, path)
        headers = {"Accept": "application/json"}
        data: str | None = None
        if document is not None:
            try:
                data = json.dumps(document, separators=(",", ":"), allow_nan=False)
            except (TypeError, ValueError) as err:
                raise _malformed(f"document is not JSON serialisable: {err}", method=method, path=path) from err
            headers["Content-Type"] = "application/json"

        self.logger.debug("%s %s%s", method, path, f" where {query.field}=={query.value!r}" if query else "")
        try:
            async with self._get_session().request(
                method,
                url,
                params=params or None,
                data=data,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                body = await resp.read()
        except (ClientError, asyncio.TimeoutError) as err:
            detail = str(err) or type(err).__name__
            self.logger.warning("%s %s failed: %s", method, path, detail)
            raise DocumentStoreError(ClientErrorKind.TRANSPORT, detail, method=method, path=path) from err

        if not 200 <= status < 300:
            message = _error_message(body)
            self.logger.warning("%s %s returned status %s", method, path, status)
            raise DocumentStoreError(
                ClientErrorKind.BAD_STATUS,
                f"status code {status}: {message}" if message else f"status code {status}",
                method=method,
                path=path,
                status=status,
            )
        return body

    def _parse(self, method: str, path: str, body: bytes) -> Any:
        try:
            return json.loads(body)
        except ValueError as err:
            self.logger.warning("%s %s returned an unparseable body", method, path)
            raise DocumentStoreError(
                ClientErrorKind.BAD_SHAPE, f"invalid JSON: {err}", method=method, path=path
            ) from err

    # ------------------------------------------------------------------
    async def async_get(self, path: str, query: EqualityFilter | None = None) -> RawDocumentSet:
        """Read a collection, optionally filtered by a single equality predicate.

        Returns :data:`EMPTY_RESULT` when the collection is absent or no
        document matched.
        """

        body = await self._request("GET", path, query=query)
        if not body.strip():
            self.logger.warning("GET %s returned no body", path)
            raise DocumentStoreError(ClientErrorKind.NO_BODY, "empty response to GET", method="GET", path=path)
        payload = self._parse("GET", path, body)
        if payload is None:
            return EMPTY_RESULT
        if not isinstance(payload, dict):
            self.logger.warning("GET %s returned %s instead of an object", path, type(payload).__name__)
            raise DocumentStoreError(
                ClientErrorKind.BAD_SHAPE,
                f"expected a JSON object of documents, got {type(payload).__name__}",
                method="GET",
                path=path,
            )
        if not payload:
            return EMPTY_RESULT
        return RawDocumentSet(MappingProxyType(payload))

    async def async_get_document(self, path: str) -> dict[str, Any] | None:
        """Read a single document; ``None`` when nothing is stored at ``path``."""

        body = await self._request("GET", path)
        if not body.strip():
            raise DocumentStoreError(ClientErrorKind.NO_BODY, "empty response to GET", method="GET", path=path)
        payload = self._parse("GET", path, body)
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise DocumentStoreError(
                ClientErrorKind.BAD_SHAPE,
                f"expected a JSON object, got {type(payload).__name__}",
                method="GET",
                path=path,
            )
        return payload

    async def async_put(self, path: str, document: Mapping[str, Any]) -> None:
        """Create or fully replace the document at ``path``."""

        body = await self._request("PUT", path, document=document)
        if body.strip():
            self._parse("PUT", path, body)

    async def async_delete(self, path: str) -> None:
        """Remove the document at ``path``; absent documents are not an error."""

        body = await self._request("DELETE", path)
        if body.strip():
            self._parse("DELETE", path, body)


def _error_message(body: bytes) -> str | None:
    try:
        payload = json.loads(body) if body.strip() else None
    except ValueError:
        return None
    if isinstance(payload, Mapping):
        message = payload.get("error") or payload.get("message")
        return str(message) if message else None
    return None


__all__ = [
    "DocumentStoreClient",
    "EMPTY_RESULT",
    "EqualityFilter",
    "RawDocumentSet",
    "normalise_path",
]
