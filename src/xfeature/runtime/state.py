"""
Load state machine for one feature.

    UNINITIALIZED -> LOADING -> LOADED
                             -> FAILED

A load fetches backend info, frontend elements and mappings strictly in that
order. Only when all three succeed is the store entry replaced, so a failed
reload leaves the previous definition and mapping table in place.

Overlapping ``load()`` calls are not guarded: the last one to finish decides
the final state.
"""

from __future__ import annotations

import logging
from enum import Enum

from xfeature.runtime.gateway import Gateway
from xfeature.runtime.mappings import build_mapping_table
from xfeature.runtime.store import DefinitionStore, StoreEntry
from xfeature.specs import FeatureDefinition, FrontendInfo

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class LoadStateMachine:
    """
    Sequences the three load steps for ``feature`` into ``store``.

    Attributes:
        state: Current LoadState
        revision: Incremented by one on every successful load
        error: Exception of the last failed load, None after a success
    """

    def __init__(self, feature: str, gateway: Gateway, store: DefinitionStore):
        self.feature = feature
        self.gateway = gateway
        self.store = store
        self.state = LoadState.UNINITIALIZED
        self.revision = 0
        self.error: Exception | None = None

    async def load(self) -> LoadState:
        """
        Run one load.

        Failures are reported through the returned state and ``error``;
        the gateway has already passed them to the error hook.
        """
        self.state = LoadState.LOADING
        logger.debug("Loading feature %s (revision %d)", self.feature, self.revision)

        try:
            backend = await self.gateway.load_backend(self.feature)
            frontend = await self.gateway.load_frontend(self.feature)
            mappings = await self.gateway.load_mappings(self.feature)
            table = build_mapping_table(mappings.mappings)
            definition = FeatureDefinition(
                name=self.feature,
                version=frontend.version or mappings.version,
                backend=backend,
                frontend=FrontendInfo(data_tables=frontend.data_tables, forms=frontend.forms),
                mappings=mappings.mappings,
            )
            # A closed store raises RuntimeError here
            self.store.replace(
                self.feature,
                StoreEntry(
                    definition=definition,
                    backend=backend,
                    frontend=frontend,
                    mapping_table=table,
                ),
            )
        except Exception as e:
            self.state = LoadState.FAILED
            self.error = e
            logger.warning("Loading feature %s failed: %s", self.feature, e)
            return self.state

        self.error = None
        self.revision += 1
        self.state = LoadState.LOADED
        logger.info(
            "Loaded feature %s revision %d: %s", self.feature, self.revision, definition.stats
        )
        return self.state
