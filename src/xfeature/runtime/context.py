"""
FeatureContext: the runtime surface bound to a single feature.

Rendering collaborators use one context per feature to load it, look up and
resolve its elements, and run its queries and actions.

Example:
    async with FeatureContext.from_config("UserManagement", load_config()) as ctx:
        if await ctx.load() is LoadState.LOADED:
            form = ctx.resolve_form("CreateUser")
            rows = await ctx.execute_query("ListUsers", {"status": "active"})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from xfeature.runtime.client import BackendClient
from xfeature.runtime.gateway import Gateway, MockBundle, create_gateway
from xfeature.runtime.hooks import GatewayHooks
from xfeature.runtime.mappings import (
    MappingTable,
    parameter_mappings,
    resolve_data_table,
    resolve_field,
    resolve_form,
)
from xfeature.runtime.state import LoadState, LoadStateMachine
from xfeature.runtime.store import DefinitionStore, StoreEntry
from xfeature.specs import (
    ActionQuery,
    ActionResponse,
    Column,
    DataTable,
    FeatureDefinition,
    Field,
    Form,
    Mapping,
    Query,
    QueryResponse,
)

if TYPE_CHECKING:
    from xfeature.config import XFeatureConfig

logger = logging.getLogger(__name__)


class FeatureContext:
    """
    Owns the store, load state machine and gateway of one feature.

    Lookups return None until the first successful load and on any miss.
    """

    def __init__(self, feature: str, gateway: Gateway):
        self.feature = feature
        self.gateway = gateway
        self.store = DefinitionStore()
        self._machine = LoadStateMachine(feature, gateway, self.store)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        feature: str,
        config: XFeatureConfig,
        hooks: GatewayHooks | None = None,
        mock: MockBundle | None = None,
    ) -> FeatureContext:
        """Context talking to the configured backend, or to ``mock`` if given."""
        if mock is not None:
            return cls(feature, create_gateway(hooks=hooks, mock=mock))
        client = BackendClient(config.api.base_url, timeout=config.api.timeout)
        return cls(feature, create_gateway(client=client, hooks=hooks, owns_client=True))

    @classmethod
    def from_definition(
        cls,
        definition: FeatureDefinition,
        queries: dict[str, QueryResponse] | None = None,
        actions: dict[str, ActionResponse] | None = None,
        hooks: GatewayHooks | None = None,
    ) -> FeatureContext:
        """Offline context serving a compiled feature from a mock bundle."""
        bundle = MockBundle.from_definition(definition, queries=queries, actions=actions)
        return cls(definition.name, create_gateway(hooks=hooks, mock=bundle))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> LoadState:
        return await self._machine.load()

    @property
    def state(self) -> LoadState:
        return self._machine.state

    @property
    def revision(self) -> int:
        return self._machine.revision

    @property
    def error(self) -> Exception | None:
        return self._machine.error

    @property
    def is_loaded(self) -> bool:
        return self.state is LoadState.LOADED

    @property
    def _entry(self) -> StoreEntry | None:
        return self.store.get(self.feature)

    @property
    def definition(self) -> FeatureDefinition | None:
        """Definition of the last successful load (stale after a failed reload)."""
        entry = self._entry
        return entry.definition if entry else None

    @property
    def mapping_table(self) -> MappingTable:
        entry = self._entry
        return entry.mapping_table if entry else MappingTable()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_query(self, query_id: str) -> Query | None:
        definition = self.definition
        return definition.get_query(query_id) if definition else None

    def get_action(self, action_id: str) -> ActionQuery | None:
        definition = self.definition
        return definition.get_action(action_id) if definition else None

    def get_form(self, form_id: str) -> Form | None:
        definition = self.definition
        return definition.get_form(form_id) if definition else None

    def get_data_table(self, table_id: str) -> DataTable | None:
        definition = self.definition
        return definition.get_data_table(table_id) if definition else None

    def get_mapping(self, name: str) -> Mapping | None:
        return self.mapping_table.get(name)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_field(self, element: Field | Column) -> Field | Column:
        return resolve_field(element, self.mapping_table)

    def resolve_form(self, form_id: str) -> Form | None:
        form = self.get_form(form_id)
        return resolve_form(form, self.mapping_table) if form else None

    def resolve_data_table(self, table_id: str) -> DataTable | None:
        table = self.get_data_table(table_id)
        return resolve_data_table(table, self.mapping_table) if table else None

    def query_parameter_mappings(self, query_id: str) -> list[Mapping]:
        """Mappings for the parameters of a query or action query."""
        query = self.get_query(query_id) or self.get_action(query_id)
        if query is None:
            return []
        return parameter_mappings(query, self.mapping_table)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute_query(
        self, query_id: str, params: dict[str, Any] | None = None
    ) -> QueryResponse:
        return await self.gateway.execute_query(self.feature, query_id, params)

    async def execute_action(
        self, action_id: str, params: dict[str, Any] | None = None
    ) -> ActionResponse:
        return await self.gateway.execute_action(self.feature, action_id, params)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        self.store.close()
        await self.gateway.close()

    async def __aenter__(self) -> FeatureContext:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
