"""
XFeature runtime: mapping resolution, loading and operation dispatch.
"""

from xfeature.runtime.client import BackendClient
from xfeature.runtime.context import FeatureContext
from xfeature.runtime.gateway import (
    Gateway,
    LiveGateway,
    MockBundle,
    MockGateway,
    create_gateway,
)
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
)
from xfeature.runtime.mappings import (
    MappingTable,
    build_mapping_table,
    parameter_mappings,
    resolve_data_table,
    resolve_field,
    resolve_form,
)
from xfeature.runtime.state import LoadState, LoadStateMachine
from xfeature.runtime.store import DefinitionStore, StoreEntry

__all__ = [
    # Mappings
    "MappingTable",
    "build_mapping_table",
    "resolve_field",
    "resolve_form",
    "resolve_data_table",
    "parameter_mappings",
    # Store / state
    "DefinitionStore",
    "StoreEntry",
    "LoadState",
    "LoadStateMachine",
    # Hooks
    "GatewayHooks",
    "OperationContext",
    "ErrorEvent",
    "BeforeQueryEvent",
    "AfterQueryEvent",
    "BeforeActionEvent",
    "AfterActionEvent",
    "BeforeFrontendEvent",
    "AfterFrontendEvent",
    "BeforeMappingsEvent",
    "AfterMappingsEvent",
    # Gateway
    "Gateway",
    "LiveGateway",
    "MockGateway",
    "MockBundle",
    "create_gateway",
    "BackendClient",
    # Context
    "FeatureContext",
]
