"""
Shared base model for XFeature specification types.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """
    Frozen model that serialises with the camelCase names of the network contract.

    Construction accepts either spelling:

        DataTable(id="T1", query_ref="Q1")
        DataTable.model_validate({"id": "T1", "queryRef": "Q1"})
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    def to_wire(self) -> dict[str, Any]:
        """Dump as a JSON-ready dict using wire (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True)
