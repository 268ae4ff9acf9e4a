"""
Execution gateway: dispatch of feature operations.

Two interchangeable strategies, chosen once by ``create_gateway``:

- ``MockGateway`` answers from a static, closed-world ``MockBundle``. It
  never touches a transport and skips before/after hooks; an id missing from
  the bundle is reported to ``on_error`` and raised as
  ``ReferenceNotFoundError`` (a ``LookupError``).
- ``LiveGateway`` runs each call through the hook pipeline::

      before-hook -> (short-circuit | backend call) -> after-hook
                 \\-> on_error on failure, then re-raise

Hooks run one after another and are awaited in order.

An exception raised by an after-hook is logged at WARNING and goes no
further: it is not passed to ``on_error`` and the caller still receives the
result. Only failures of the before-hook or the backend call reach
``on_error``.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from xfeature.core.errors import ConfigError, ReferenceNotFoundError
from xfeature.logging import log_with_context
from xfeature.runtime.client import BackendClient
from xfeature.runtime.hooks import (
    AfterActionEvent,
    AfterFrontendEvent,
    AfterMappingsEvent,
    AfterQueryEvent,
    BeforeActionEvent,
    BeforeFrontendEvent,
    BeforeMappingsEvent,
    BeforeQueryEvent,
    ErrorEvent,
    GatewayHooks,
    OperationContext,
    call_hook,
)
from xfeature.specs import (
    ActionResponse,
    BackendInfo,
    FeatureDefinition,
    FrontendElements,
    MappingsResponse,
    QueryResponse,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


# =============================================================================
# Mock bundle
# =============================================================================


class MockBundle(BaseModel):
    """
    Canned responses for every gateway operation.

    Every slot is optional; a request for an empty slot or unknown id fails.
    JSON files use the wire names ``backEnd``, ``frontEnd``, ``mappings``,
    ``queries`` and ``actionQueries``::

        {
          "frontEnd": {"feature": "users", "dataTables": [], "forms": []},
          "queries": {"ListUsers": {"data": [{"id": 1}], "total": 1}},
          "actionQueries": {"CreateUser": {"success": true}}
        }
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    backend: BackendInfo | None = Field(default=None, alias="backEnd")
    frontend: FrontendElements | None = Field(default=None, alias="frontEnd")
    mappings: MappingsResponse | None = None
    queries: dict[str, QueryResponse] = Field(default_factory=dict)
    actions: dict[str, ActionResponse] = Field(default_factory=dict, alias="actionQueries")

    @field_validator("mappings", mode="before")
    @classmethod
    def _wrap_mapping_list(cls, value: Any) -> Any:
        # A bare mapping list is shorthand for a MappingsResponse
        if isinstance(value, list):
            return {"mappings": value, "resolvedCount": len(value)}
        return value

    @classmethod
    def from_definition(
        cls,
        definition: FeatureDefinition,
        queries: dict[str, QueryResponse] | None = None,
        actions: dict[str, ActionResponse] | None = None,
    ) -> MockBundle:
        """Bundle serving a compiled feature plus the given canned results."""
        return cls(
            backend=definition.backend,
            frontend=FrontendElements(
                feature=definition.name,
                version=definition.version,
                data_tables=definition.frontend.data_tables,
                forms=definition.frontend.forms,
            ),
            mappings=MappingsResponse(
                feature=definition.name,
                version=definition.version,
                resolved_count=len(definition.mappings),
                mappings=definition.mappings,
            ),
            queries=dict(queries or {}),
            actions=dict(actions or {}),
        )

    @classmethod
    def from_file(cls, path: Path | str) -> MockBundle:
        """
        Load a bundle from a JSON file.

        Raises:
            ConfigError: If the file is unreadable or not a valid bundle
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid mock bundle {path}: {e}") from e


# =============================================================================
# Strategies
# =============================================================================


class Gateway(ABC):
    """Operations the runtime dispatches for one feature at a time."""

    def __init__(self, hooks: GatewayHooks | None = None):
        self.hooks = hooks or GatewayHooks()

    @abstractmethod
    async def load_backend(self, feature: str) -> BackendInfo: ...

    @abstractmethod
    async def load_frontend(self, feature: str) -> FrontendElements: ...

    @abstractmethod
    async def load_mappings(self, feature: str) -> MappingsResponse: ...

    @abstractmethod
    async def execute_query(
        self, feature: str, query_id: str, params: dict[str, Any] | None = None
    ) -> QueryResponse: ...

    @abstractmethod
    async def execute_action(
        self, feature: str, action_id: str, params: dict[str, Any] | None = None
    ) -> ActionResponse: ...

    async def close(self) -> None:
        """Release transport resources, if any."""
        return None

    async def _report_error(self, event: ErrorEvent) -> None:
        """Log a failure and hand it to ``on_error``; never raises."""
        log_with_context(
            logger,
            logging.WARNING,
            f"{event.context.value} operation failed: {event.error}",
            {
                "context": event.context.value,
                "feature": event.feature_name,
                "query_id": event.query_id,
                "action_id": event.action_id,
                "error_type": type(event.error).__name__,
            },
        )
        try:
            await call_hook(self.hooks.on_error, event)
        except Exception as e:
            logger.warning("on_error hook failed for %s: %s", event.context.value, e)


class MockGateway(Gateway):
    """Closed-world gateway over a ``MockBundle``."""

    def __init__(self, bundle: MockBundle, hooks: GatewayHooks | None = None):
        super().__init__(hooks)
        self.bundle = bundle

    async def _canned(
        self,
        value: R | None,
        kind: str,
        ref: str,
        context: OperationContext,
        feature: str,
        query_id: str | None = None,
        action_id: str | None = None,
    ) -> R:
        if value is not None:
            logger.debug("Mock %s %s", kind, ref)
            return value
        error = ReferenceNotFoundError(kind, ref, f"Mock bundle has no {kind} entry for '{ref}'")
        await self._report_error(
            ErrorEvent(
                error=error,
                context=context,
                feature_name=feature,
                query_id=query_id,
                action_id=action_id,
            )
        )
        raise error

    async def load_backend(self, feature: str) -> BackendInfo:
        return await self._canned(
            self.bundle.backend, "backend info", feature, OperationContext.FEATURE, feature
        )

    async def load_frontend(self, feature: str) -> FrontendElements:
        return await self._canned(
            self.bundle.frontend, "frontend elements", feature, OperationContext.FEATURE, feature
        )

    async def load_mappings(self, feature: str) -> MappingsResponse:
        return await self._canned(
            self.bundle.mappings, "mappings", feature, OperationContext.MAPPINGS, feature
        )

    async def execute_query(
        self, feature: str, query_id: str, params: dict[str, Any] | None = None
    ) -> QueryResponse:
        return await self._canned(
            self.bundle.queries.get(query_id),
            "query",
            query_id,
            OperationContext.QUERY,
            feature,
            query_id=query_id,
        )

    async def execute_action(
        self, feature: str, action_id: str, params: dict[str, Any] | None = None
    ) -> ActionResponse:
        return await self._canned(
            self.bundle.actions.get(action_id),
            "action",
            action_id,
            OperationContext.ACTION,
            feature,
            action_id=action_id,
        )


class LiveGateway(Gateway):
    """Gateway that calls the backend through the hook pipeline."""

    def __init__(
        self,
        client: BackendClient,
        hooks: GatewayHooks | None = None,
        *,
        owns_client: bool = False,
    ):
        super().__init__(hooks)
        self.client = client
        self._owns_client = owns_client

    async def close(self) -> None:
        if self._owns_client:
            await self.client.close()

    async def _dispatch(
        self,
        *,
        before: Callable[..., Any] | None,
        before_event: Any,
        call: Callable[[], Awaitable[R]],
        after: Callable[..., Any] | None,
        after_event: Callable[[R], Any],
        error_event: Callable[[BaseException], ErrorEvent],
    ) -> R:
        try:
            result = await call_hook(before, before_event)
            if result is None:
                result = await call()
            else:
                logger.debug("Before-hook short-circuited %s", type(before_event).__name__)
        except Exception as e:
            await self._report_error(error_event(e))
            raise

        try:
            await call_hook(after, after_event(result))
        except Exception as e:
            logger.warning("After-hook failed (%s): %s", type(before_event).__name__, e)
        return result

    async def load_backend(self, feature: str) -> BackendInfo:
        logger.debug("Loading backend info for %s", feature)
        try:
            return await self.client.get_backend_info(feature)
        except Exception as e:
            await self._report_error(
                ErrorEvent(error=e, context=OperationContext.FEATURE, feature_name=feature)
            )
            raise

    async def load_frontend(self, feature: str) -> FrontendElements:
        logger.debug("Loading frontend elements for %s", feature)
        return await self._dispatch(
            before=self.hooks.on_before_frontend,
            before_event=BeforeFrontendEvent(feature_name=feature),
            call=lambda: self.client.get_frontend_elements(feature),
            after=self.hooks.on_after_frontend,
            after_event=lambda r: AfterFrontendEvent(feature_name=feature, result=r),
            error_event=lambda e: ErrorEvent(
                error=e, context=OperationContext.FEATURE, feature_name=feature
            ),
        )

    async def load_mappings(self, feature: str) -> MappingsResponse:
        logger.debug("Loading mappings for %s", feature)
        return await self._dispatch(
            before=self.hooks.on_before_mappings,
            before_event=BeforeMappingsEvent(feature_name=feature),
            call=lambda: self.client.get_mappings(feature),
            after=self.hooks.on_after_mappings,
            after_event=lambda r: AfterMappingsEvent(feature_name=feature, result=r),
            error_event=lambda e: ErrorEvent(
                error=e, context=OperationContext.MAPPINGS, feature_name=feature
            ),
        )

    async def execute_query(
        self, feature: str, query_id: str, params: dict[str, Any] | None = None
    ) -> QueryResponse:
        params = dict(params or {})
        logger.debug("Executing query %s.%s", feature, query_id)
        return await self._dispatch(
            before=self.hooks.on_before_query,
            before_event=BeforeQueryEvent(feature_name=feature, query_id=query_id, params=params),
            call=lambda: self.client.execute_query(feature, query_id, params),
            after=self.hooks.on_after_query,
            after_event=lambda r: AfterQueryEvent(
                feature_name=feature, query_id=query_id, params=params, result=r
            ),
            error_event=lambda e: ErrorEvent(
                error=e,
                context=OperationContext.QUERY,
                feature_name=feature,
                query_id=query_id,
            ),
        )

    async def execute_action(
        self, feature: str, action_id: str, params: dict[str, Any] | None = None
    ) -> ActionResponse:
        params = dict(params or {})
        logger.debug("Executing action %s.%s", feature, action_id)
        return await self._dispatch(
            before=self.hooks.on_before_action,
            before_event=BeforeActionEvent(feature_name=feature, action_id=action_id, params=params),
            call=lambda: self.client.execute_action(feature, action_id, params),
            after=self.hooks.on_after_action,
            after_event=lambda r: AfterActionEvent(
                feature_name=feature, action_id=action_id, params=params, result=r
            ),
            error_event=lambda e: ErrorEvent(
                error=e,
                context=OperationContext.ACTION,
                feature_name=feature,
                action_id=action_id,
            ),
        )


def create_gateway(
    *,
    client: BackendClient | None = None,
    hooks: GatewayHooks | None = None,
    mock: MockBundle | None = None,
    owns_client: bool = False,
) -> Gateway:
    """
    Select the gateway strategy.

    A mock bundle wins over a client; one of the two is required.

    Raises:
        ValueError: If neither a client nor a mock bundle is given
    """
    if mock is not None:
        return MockGateway(mock, hooks)
    if client is None:
        raise ValueError("create_gateway needs a BackendClient or a MockBundle")
    return LiveGateway(client, hooks, owns_client=owns_client)
