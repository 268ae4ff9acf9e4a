"""
Gateway hook surface.

Collaborators intercept gateway operations with plain or async callables:

- ``on_before_*`` receives a before-event and may return a substitute result
  to short-circuit the backend call, or ``None`` to proceed
- ``on_after_*`` receives an after-event carrying the final result; its
  return value is ignored
- ``on_error`` receives an ``ErrorEvent`` before the error is re-raised

Example:
    async def fake_users(event: BeforeQueryEvent) -> QueryResponse | None:
        if event.query_id == "ListUsers":
            return QueryResponse(data=[{"id": 1}], total=1)
        return None

    hooks = GatewayHooks(on_before_query=fake_users)
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from xfeature.specs import ActionResponse, FrontendElements, MappingsResponse, QueryResponse

T = TypeVar("T")

# A hook may return its value directly or an awaitable of it
HookResult = T | Awaitable[T]


class OperationContext(str, Enum):
    """Operation family tag carried by error events."""

    FEATURE = "feature"
    QUERY = "query"
    ACTION = "action"
    MAPPINGS = "mappings"


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class BeforeQueryEvent:
    feature_name: str
    query_id: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AfterQueryEvent:
    feature_name: str
    query_id: str
    params: dict[str, Any]
    result: QueryResponse


@dataclass(frozen=True)
class BeforeActionEvent:
    feature_name: str
    action_id: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AfterActionEvent:
    feature_name: str
    action_id: str
    params: dict[str, Any]
    result: ActionResponse


@dataclass(frozen=True)
class BeforeFrontendEvent:
    feature_name: str


@dataclass(frozen=True)
class AfterFrontendEvent:
    feature_name: str
    result: FrontendElements


@dataclass(frozen=True)
class BeforeMappingsEvent:
    feature_name: str


@dataclass(frozen=True)
class AfterMappingsEvent:
    feature_name: str
    result: MappingsResponse


@dataclass(frozen=True)
class ErrorEvent:
    """A failed gateway operation, as reported to ``on_error``."""

    error: BaseException
    context: OperationContext
    feature_name: str | None = None
    query_id: str | None = None
    action_id: str | None = None


# =============================================================================
# Hook set
# =============================================================================


@dataclass
class GatewayHooks:
    """Optional interception callbacks, one slot per hook point."""

    on_before_query: Callable[[BeforeQueryEvent], HookResult[QueryResponse | None]] | None = None
    on_after_query: Callable[[AfterQueryEvent], HookResult[None]] | None = None
    on_before_action: Callable[[BeforeActionEvent], HookResult[ActionResponse | None]] | None = None
    on_after_action: Callable[[AfterActionEvent], HookResult[None]] | None = None
    on_before_frontend: (
        Callable[[BeforeFrontendEvent], HookResult[FrontendElements | None]] | None
    ) = None
    on_after_frontend: Callable[[AfterFrontendEvent], HookResult[None]] | None = None
    on_before_mappings: (
        Callable[[BeforeMappingsEvent], HookResult[MappingsResponse | None]] | None
    ) = None
    on_after_mappings: Callable[[AfterMappingsEvent], HookResult[None]] | None = None
    on_error: Callable[[ErrorEvent], HookResult[None]] | None = None


async def call_hook(hook: Callable[..., Any] | None, event: Any) -> Any:
    """
    Invoke a hook and await its result if it returned an awaitable.

    Returns:
        The hook's (awaited) return value, or None when no hook is set
    """
    if hook is None:
        return None
    result = hook(event)
    if inspect.isawaitable(result):
        result = await result
    return result
