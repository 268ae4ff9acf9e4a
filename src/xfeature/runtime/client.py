"""
HTTP client for the XFeature backend network contract.

All endpoints live under ``{base_url}/xfeatures``::

    GET  /xfeatures                        feature names
    GET  /xfeatures/{name}                 full definition
    GET  /xfeatures/{name}/checksum        MD5 of the feature file
    GET  /xfeatures/{name}/backend         BackendInfo
    GET  /xfeatures/{name}/frontend        FrontendElements
    GET  /xfeatures/{name}/mappings        MappingsResponse
    POST /xfeatures/{name}/queries/{id}    QueryResponse
    POST /xfeatures/{name}/actions/{id}    ActionResponse

Every failure surfaces as ``BackendError``. Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from xfeature.core.errors import BackendError
from xfeature.specs import (
    ActionResponse,
    BackendInfo,
    FeatureChecksum,
    FeatureDefinition,
    FrontendElements,
    MappingsResponse,
    QueryResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

ModelT = TypeVar("ModelT", bound=BaseModel)


class BackendClient:
    """
    Async client for the backend network contract.

    Example:
        async with BackendClient("http://localhost:8080/api/v1") as client:
            backend = await client.get_backend_info("UserManagement")
            rows = await client.execute_query("UserManagement", "ListUsers", {"status": "active"})

    A caller-supplied ``http_client`` is used as is and left open on close.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _url(self, *segments: str) -> str:
        path = "/".join(quote(s, safe="") for s in segments)
        return f"{self.base_url}/xfeatures/{path}" if path else f"{self.base_url}/xfeatures"

    async def _request(self, method: str, url: str, json: dict[str, Any] | None = None) -> Any:
        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.TimeoutException as e:
            raise BackendError(f"Request timed out after {self.timeout}s", url=url) from e
        except httpx.RequestError as e:
            raise BackendError(f"Request failed: {e}", url=url) from e

        if response.is_error:
            raise BackendError(
                _error_message(response),
                status_code=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(
                "Response is not valid JSON", status_code=response.status_code, url=url
            ) from e

    @staticmethod
    def _parse(model: type[ModelT], payload: Any, url: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise BackendError(
                f"Unexpected {model.__name__} payload: {e.error_count()} validation error(s)",
                url=url,
            ) from e

    # ------------------------------------------------------------------
    # Features
    # ------------------------------------------------------------------

    async def list_features(self) -> list[str]:
        url = self._url()
        payload = await self._request("GET", url)
        # Either a bare list or {"features": [...]}
        if isinstance(payload, dict):
            payload = payload.get("features", [])
        if not isinstance(payload, list):
            raise BackendError("Unexpected feature list payload", url=url)
        return [str(item) for item in payload]

    async def get_feature(self, name: str) -> FeatureDefinition:
        url = self._url(name)
        return self._parse(FeatureDefinition, await self._request("GET", url), url)

    async def get_checksum(self, name: str) -> FeatureChecksum:
        url = self._url(name, "checksum")
        payload = await self._request("GET", url)
        if isinstance(payload, dict):
            payload.setdefault("feature", name)
        return self._parse(FeatureChecksum, payload, url)

    async def get_backend_info(self, name: str) -> BackendInfo:
        url = self._url(name, "backend")
        payload = await self._request("GET", url)
        # Older servers send "actions" instead of "actionQueries"
        if isinstance(payload, dict) and "actionQueries" not in payload and "actions" in payload:
            payload = {**payload, "actionQueries": payload["actions"]}
        return self._parse(BackendInfo, payload, url)

    async def get_frontend_elements(self, name: str) -> FrontendElements:
        url = self._url(name, "frontend")
        return self._parse(FrontendElements, await self._request("GET", url), url)

    async def get_mappings(self, name: str) -> MappingsResponse:
        url = self._url(name, "mappings")
        return self._parse(MappingsResponse, await self._request("GET", url), url)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute_query(
        self, name: str, query_id: str, params: dict[str, Any] | None = None
    ) -> QueryResponse:
        url = self._url(name, "queries", query_id)
        payload = await self._request("POST", url, json=dict(params or {}))
        return self._parse(QueryResponse, payload, url)

    async def execute_action(
        self, name: str, action_id: str, params: dict[str, Any] | None = None
    ) -> ActionResponse:
        url = self._url(name, "actions", action_id)
        payload = await self._request("POST", url, json=dict(params or {}))
        return self._parse(ActionResponse, payload, url)


def _error_message(response: httpx.Response) -> str:
    """Prefer the JSON ``error`` field of an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()
