"""Tests for the load state machine and definition store."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from xfeature.core.errors import BackendError
from xfeature.runtime.gateway import Gateway, MockBundle, MockGateway
from xfeature.runtime.mappings import MappingTable
from xfeature.runtime.state import LoadState, LoadStateMachine
from xfeature.runtime.store import DefinitionStore, StoreEntry
from xfeature.specs import (
    BackendInfo,
    DataTable,
    FeatureDefinition,
    FrontendElements,
    Mapping,
    MappingsResponse,
    Query,
)


def _gateway(label: str = "Status") -> AsyncMock:
    gateway = AsyncMock(spec=Gateway)
    gateway.load_backend.return_value = BackendInfo(queries=[Query(id="Q1")])
    gateway.load_frontend.return_value = FrontendElements(
        feature="f", version="3", data_tables=[DataTable(id="T1", query_ref="Q1")]
    )
    gateway.load_mappings.return_value = MappingsResponse(
        feature="f", mappings=[Mapping(name="status", label=label)]
    )
    return gateway


class TestLoadStateMachine:
    def test_initial_state(self) -> None:
        machine = LoadStateMachine("f", AsyncMock(spec=Gateway), DefinitionStore())
        assert machine.state is LoadState.UNINITIALIZED
        assert machine.revision == 0
        assert machine.error is None

    @pytest.mark.asyncio
    async def test_successful_load(self) -> None:
        store = DefinitionStore()
        machine = LoadStateMachine("f", _gateway(), store)

        assert await machine.load() is LoadState.LOADED
        assert machine.revision == 1

        entry = store.get("f")
        assert entry.definition.name == "f"
        assert entry.definition.version == "3"
        assert entry.definition.get_data_table("T1").query_ref == "Q1"
        assert entry.mapping_table.get("status").label == "Status"

    @pytest.mark.asyncio
    async def test_steps_run_in_order(self) -> None:
        gateway = _gateway()
        order: list[str] = []
        gateway.load_backend.side_effect = lambda f: order.append("backend") or BackendInfo()
        gateway.load_frontend.side_effect = lambda f: order.append("frontend") or FrontendElements()
        gateway.load_mappings.side_effect = lambda f: order.append("mappings") or MappingsResponse()

        await LoadStateMachine("f", gateway, DefinitionStore()).load()

        assert order == ["backend", "frontend", "mappings"]

    @pytest.mark.asyncio
    async def test_failure_stops_sequence(self) -> None:
        gateway = _gateway()
        failure = BackendError("frontend down")
        gateway.load_frontend.side_effect = failure
        store = DefinitionStore()
        machine = LoadStateMachine("f", gateway, store)

        assert await machine.load() is LoadState.FAILED
        assert machine.error is failure
        assert machine.revision == 0
        gateway.load_mappings.assert_not_called()
        assert store.get("f") is None

    @pytest.mark.asyncio
    async def test_failed_reload_keeps_previous_entry(self) -> None:
        gateway = _gateway(label="Old")
        store = DefinitionStore()
        machine = LoadStateMachine("f", gateway, store)
        await machine.load()
        previous = store.get("f")

        gateway.load_mappings.side_effect = BackendError("mappings down")
        assert await machine.load() is LoadState.FAILED

        assert store.get("f") is previous
        assert store.get("f").mapping_table.get("status").label == "Old"
        assert machine.revision == 1

    @pytest.mark.asyncio
    async def test_reload_replaces_entry_and_bumps_revision(self) -> None:
        gateway = _gateway(label="Old")
        store = DefinitionStore()
        machine = LoadStateMachine("f", gateway, store)
        await machine.load()

        gateway.load_mappings.return_value = MappingsResponse(
            mappings=[Mapping(name="status", label="New")]
        )
        await machine.load()

        assert machine.revision == 2
        assert store.get("f").mapping_table.get("status").label == "New"

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self) -> None:
        gateway = _gateway()
        gateway.load_backend.side_effect = [BackendError("once"), BackendInfo()]
        machine = LoadStateMachine("f", gateway, DefinitionStore())

        await machine.load()
        assert machine.error is not None
        await machine.load()
        assert machine.state is LoadState.LOADED
        assert machine.error is None

    @pytest.mark.asyncio
    async def test_load_through_mock_gateway(self, user_management: FeatureDefinition) -> None:
        store = DefinitionStore()
        gateway = MockGateway(MockBundle.from_definition(user_management))
        machine = LoadStateMachine("UserManagement", gateway, store)

        assert await machine.load() is LoadState.LOADED
        assert store.get("UserManagement").definition.stats == user_management.stats

    @pytest.mark.asyncio
    async def test_empty_bundle_fails(self) -> None:
        machine = LoadStateMachine("f", MockGateway(MockBundle()), DefinitionStore())
        assert await machine.load() is LoadState.FAILED
        assert isinstance(machine.error, LookupError)


class TestDefinitionStore:
    def _entry(self) -> StoreEntry:
        return StoreEntry(
            definition=FeatureDefinition(name="f"),
            backend=BackendInfo(),
            frontend=FrontendElements(),
            mapping_table=MappingTable(),
        )

    def test_replace_and_get(self) -> None:
        store = DefinitionStore()
        entry = self._entry()
        store.replace("f", entry)
        assert store.get("f") is entry
        assert "f" in store
        assert len(store) == 1

    def test_discard_and_clear(self) -> None:
        store = DefinitionStore()
        store.replace("a", self._entry())
        store.replace("b", self._entry())
        store.discard("a")
        store.discard("missing")
        assert store.get("a") is None
        store.clear()
        assert len(store) == 0

    def test_closed_store_rejects_writes(self) -> None:
        store = DefinitionStore()
        store.replace("f", self._entry())
        store.close()

        assert store.closed is True
        assert store.get("f") is None
        with pytest.raises(RuntimeError, match="closed"):
            store.replace("f", self._entry())


class TestLoadAfterClose:
    @pytest.mark.asyncio
    async def test_closed_store_fails_load(self) -> None:
        store = DefinitionStore()
        store.close()
        machine = LoadStateMachine("f", _gateway(), store)

        assert await machine.load() is LoadState.FAILED
        assert isinstance(machine.error, RuntimeError)
        assert machine.revision == 0
