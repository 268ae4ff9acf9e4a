"""
Mapping table and resolver.

Mappings are feature-wide presentation overrides joined to fields and
columns by name. Resolution never mutates the canonical objects; it returns
derived copies (or the element itself when nothing applies).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TypeVar

from xfeature.specs import ActionQuery, Column, DataTable, Field, Form, Mapping, Query

logger = logging.getLogger(__name__)

ElementT = TypeVar("ElementT", Field, Column)


class MappingTable:
    """
    Read-only name → Mapping lookup.

    Built with ``build_mapping_table``; a new table is built on every
    successful load rather than updating an existing one.
    """

    def __init__(self, entries: dict[str, Mapping] | None = None):
        self._entries: dict[str, Mapping] = dict(entries or {})

    def get(self, name: str) -> Mapping | None:
        return self._entries.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    def values(self) -> list[Mapping]:
        return list(self._entries.values())

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"MappingTable({self.names!r})"


def build_mapping_table(mappings: Iterable[Mapping]) -> MappingTable:
    """
    Fold a mapping list into a table.

    On duplicate names the later entry wins.
    """
    entries: dict[str, Mapping] = {}
    for mapping in mappings:
        if mapping.name in entries:
            logger.debug("Mapping '%s' declared more than once; later entry wins", mapping.name)
        entries[mapping.name] = mapping
    return MappingTable(entries)


def resolve_field(element: ElementT, table: MappingTable) -> ElementT:
    """
    Effective presentation of a field or column.

    1. No mapping for ``element.name``: the element itself is returned.
    2. A non-empty mapping label replaces the element's label.
    3. Non-empty mapping option items replace a Field's inline options;
       empty or absent items leave the field's own options in effect.
       Columns carry no options, so only the label applies.

    Args:
        element: Field or Column from the canonical definition
        table: Current mapping table

    Returns:
        The element unchanged, or a derived copy
    """
    mapping = table.get(element.name)
    if mapping is None:
        return element

    update: dict[str, object] = {}
    if mapping.label:
        update["label"] = mapping.label
    if isinstance(element, Field) and mapping.has_options:
        update["options"] = mapping.option_items

    if not update:
        return element
    return element.model_copy(update=update)


def resolve_form(form: Form, table: MappingTable) -> Form:
    """Copy of ``form`` with every field resolved."""
    return form.model_copy(update={"fields": [resolve_field(f, table) for f in form.fields]})


def resolve_data_table(data_table: DataTable, table: MappingTable) -> DataTable:
    """Copy of ``data_table`` with every column resolved."""
    return data_table.model_copy(
        update={"columns": [resolve_field(c, table) for c in data_table.columns]}
    )


def parameter_mappings(query: Query | ActionQuery, table: MappingTable) -> list[Mapping]:
    """
    Mappings describing a query's parameters, in parameter order.

    Parameters without a mapping are skipped.
    """
    found = []
    for name in query.parameter_names:
        mapping = table.get(name)
        if mapping is not None:
            found.append(mapping)
    return found
