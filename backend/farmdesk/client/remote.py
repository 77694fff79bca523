"""Remote Resource Client — resource-shaped requests over the FarmDesk HTTP API.

Stateless apart from the injected session context: every call reads the
current bearer token, issues one request and translates the response (or
the transport failure) into records or the shared domain exceptions.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from farmdesk.client.session import SessionContext
from farmdesk.domain.entities import ResourceName
from farmdesk.domain.exceptions import (
    AuthError,
    NotFoundError,
    TransportError,
    UpstreamServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _error_detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return body.get("detail", body.get("error", body))
    return body


def _validation_messages(detail: Any) -> list[str]:
    """Flatten our ``detail: [str]`` bodies and FastAPI's ``detail: [{loc, msg}]`` ones."""
    if isinstance(detail, list):
        messages = []
        for item in detail:
            if isinstance(item, dict):
                loc = ".".join(str(part) for part in item.get("loc", ()) if part != "body")
                msg = item.get("msg", str(item))
                messages.append(f"{loc}: {msg}" if loc else msg)
            else:
                messages.append(str(item))
        return messages
    return [str(detail)]


def _raise_for_status(response: httpx.Response, resource: str, record_id: str | None = None) -> None:
    """Map a non-2xx response to the domain exception taxonomy."""
    if response.is_success:
        return

    status = response.status_code
    detail = _error_detail(response)

    if status in (401, 403):
        raise AuthError(str(detail) if detail else "Authentication required")
    if status == 404:
        raise NotFoundError(resource, record_id or "")
    if status in (400, 422):
        raise ValidationError(resource, _validation_messages(detail))
    raise TransportError(f"{resource}: HTTP {status}: {detail}", status_code=status)


class RemoteResourceClient:
    """Async client for ``/rest/{resource}``, ``/functions/*`` and ``/realtime``."""

    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._http_client = http_client
        self._timeout = timeout

    # ── Resource CRUD ───────────────────────────────────────────────

    async def list(
        self,
        resource: ResourceName,
        filters: dict[str, Any] | None = None,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """Caller's records matching ``filters``, newest first. No match is an empty list."""
        params: dict[str, Any] = {"skip": skip, "limit": limit}
        for key, value in (filters or {}).items():
            params[key] = json.dumps(value) if isinstance(value, bool) else value
        response = await self._request("GET", f"/rest/{resource.value}", params=params)
        _raise_for_status(response, resource.value)
        return response.json()

    async def get(self, resource: ResourceName, record_id: str) -> dict[str, Any]:
        response = await self._request("GET", f"/rest/{resource.value}/{record_id}")
        _raise_for_status(response, resource.value, record_id)
        return response.json()

    async def insert(self, resource: ResourceName, record: dict[str, Any]) -> dict[str, Any]:
        """Store a new record; returns it with backend-assigned id and timestamps."""
        response = await self._request("POST", f"/rest/{resource.value}", json=record)
        _raise_for_status(response, resource.value)
        return response.json()

    async def update(
        self, resource: ResourceName, record_id: str, patch: dict[str, Any]
    ) -> dict[str, Any]:
        response = await self._request(
            "PATCH", f"/rest/{resource.value}/{record_id}", json=patch
        )
        _raise_for_status(response, resource.value, record_id)
        return response.json()

    async def remove(self, resource: ResourceName, record_id: str) -> None:
        """Delete a record. Removing an id that is already gone is not an error."""
        response = await self._request("DELETE", f"/rest/{resource.value}/{record_id}")
        if response.status_code == 404:
            logger.debug("Remove matched nothing: %s/%s", resource.value, record_id)
            return
        _raise_for_status(response, resource.value, record_id)

    # ── Functions ───────────────────────────────────────────────────

    async def invoke(
        self, function_name: str, payload: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Call a backend function.

        A 500 answer carrying ``{"error": message}`` raises
        ``UpstreamServiceError`` with that message.
        """
        response = await self._request("POST", f"/functions/{function_name}", json=payload or {})
        if response.status_code >= 500:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and "error" in body:
                raise UpstreamServiceError(function_name, response.status_code, str(body["error"]))
        _raise_for_status(response, function_name)
        return response.json()

    # ── Realtime ────────────────────────────────────────────────────

    async def stream_changes(self) -> AsyncIterator[str]:
        """Yield raw SSE lines from the caller's change feed until it closes."""
        session = self._session.require("subscribe to changes")
        url = f"{self._base_url}{API_PREFIX}/realtime"
        headers = {
            "Authorization": f"Bearer {session.access_token}",
            "Accept": "text/event-stream",
        }

        client = self._http_client or httpx.AsyncClient(timeout=None)
        should_close = self._http_client is None
        try:
            async with client.stream("GET", url, headers=headers) as response:
                if not response.is_success:
                    await response.aread()
                    _raise_for_status(response, "realtime")
                async for line in response.aiter_lines():
                    yield line
        except httpx.TransportError as exc:
            raise TransportError(f"Change feed interrupted: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

    # ── Internals ───────────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        session = self._session.require()
        url = f"{self._base_url}{API_PREFIX}{path}"
        headers = {"Authorization": f"Bearer {session.access_token}"}

        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        should_close = self._http_client is None
        try:
            return await client.request(method, url, headers=headers, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(f"Backend unreachable: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()
