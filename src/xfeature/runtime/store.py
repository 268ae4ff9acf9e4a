"""
Per-feature definition store.

One entry per feature identity, always replaced as a whole so readers never
see a definition paired with another load's mapping table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from xfeature.runtime.mappings import MappingTable
from xfeature.specs import BackendInfo, FeatureDefinition, FrontendElements

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreEntry:
    """Everything one successful load produced."""

    definition: FeatureDefinition
    backend: BackendInfo
    frontend: FrontendElements
    mapping_table: MappingTable


class DefinitionStore:
    """
    Explicitly owned cache of loaded features.

    Example:
        store = DefinitionStore()
        store.replace("users", entry)
        store.get("users").mapping_table.get("status")
        store.close()
    """

    def __init__(self) -> None:
        self._entries: dict[str, StoreEntry] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, feature: str) -> StoreEntry | None:
        return self._entries.get(feature)

    def replace(self, feature: str, entry: StoreEntry) -> None:
        """Swap in a new entry for ``feature``."""
        self._check_open()
        self._entries[feature] = entry
        logger.debug("Stored definition for feature %s", feature)

    def discard(self, feature: str) -> None:
        self._check_open()
        self._entries.pop(feature, None)

    def clear(self) -> None:
        self._check_open()
        self._entries.clear()

    def close(self) -> None:
        """Drop every entry; further writes raise RuntimeError."""
        self._entries.clear()
        self._closed = True

    def __contains__(self, feature: object) -> bool:
        return feature in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("DefinitionStore is closed")
