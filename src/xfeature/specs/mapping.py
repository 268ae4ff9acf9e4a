"""
Mapping specification types.

A Mapping is a feature-wide override record for the presentation metadata of
every Field or Column sharing its name. It is not owned by any single element.
"""

from pydantic import Field

from xfeature.specs.backend import Parameter, QueryKind
from xfeature.specs.base import WireModel


class MappingOption(WireModel):
    """A label/value pair offered by a select-like input."""

    label: str = Field(default="", description="Displayed text")
    value: str | int | float = Field(default="", description="Submitted value")


class MappingOptions(WireModel):
    """Inline option list of a Mapping."""

    items: list[MappingOption] = Field(default_factory=list, description="Options")


class ListQuery(WireModel):
    """Query whose result rows populate a Mapping's options dynamically."""

    id: str = Field(default="", description="List query id")
    kind: QueryKind = Field(default=QueryKind.SELECT, alias="type", description="Query kind")
    description: str | None = Field(default=None, description="List query description")
    sql: str = Field(default="", description="Raw query text")
    parameters: list[Parameter] = Field(default_factory=list, description="Extracted parameters")


class Mapping(WireModel):
    """
    Feature-wide presentation override, joined to fields/columns by name.

    Example:
        Mapping(
            name="status",
            data_type="Text",
            label="Account status",
            options=MappingOptions(items=[
                MappingOption(label="Active", value="active"),
                MappingOption(label="Locked", value="locked"),
            ]),
        )
    """

    name: str = Field(description="Join key against Field.name / Column.name")
    data_type: str = Field(default="", description="Data type, e.g. Text, Int")
    label: str = Field(default="", description="Display label override")
    list_query: ListQuery | None = Field(default=None, description="Dynamic options source")
    options: MappingOptions | None = Field(default=None, description="Inline options")
    required: bool = False
    disabled: bool = False
    readonly: bool = False
    placeholder: str | None = None
    helper_text: str | None = None
    rows: int | None = None

    @property
    def option_items(self) -> list[MappingOption]:
        """Inline option items, empty when the mapping declares none."""
        if self.options is None:
            return []
        return list(self.options.items)

    @property
    def has_options(self) -> bool:
        return bool(self.option_items)
