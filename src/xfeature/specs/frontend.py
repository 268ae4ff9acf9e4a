"""
Frontend specification types: data tables, forms and their children.
"""

from enum import Enum

from pydantic import Field as PydanticField

from xfeature.specs.base import WireModel
from xfeature.specs.mapping import MappingOption

# =============================================================================
# Closed enumerations
# =============================================================================


class ColumnType(str, Enum):
    """Presentation types for table columns. Text is the default."""

    TEXT = "Text"
    NUMBER = "Number"
    DATE = "Date"
    DATETIME = "DateTime"
    BOOLEAN = "Boolean"
    CURRENCY = "Currency"
    PERCENTAGE = "Percentage"
    LINK = "Link"
    BADGE = "Badge"
    IMAGE = "Image"
    EMAIL = "Email"
    PHONE = "Phone"
    URL = "URL"


class FieldType(str, Enum):
    """Input types for form fields: every column type plus input-only kinds."""

    TEXT = "Text"
    NUMBER = "Number"
    DATE = "Date"
    DATETIME = "DateTime"
    BOOLEAN = "Boolean"
    CURRENCY = "Currency"
    PERCENTAGE = "Percentage"
    LINK = "Link"
    BADGE = "Badge"
    IMAGE = "Image"
    EMAIL = "Email"
    PHONE = "Phone"
    URL = "URL"
    # Input-only
    PASSWORD = "Password"
    SELECT = "Select"
    MULTI_SELECT = "MultiSelect"
    CHECKBOX = "Checkbox"
    RADIO = "Radio"
    TEXTAREA = "Textarea"
    HIDDEN = "Hidden"
    FILE = "File"
    DECIMAL = "Decimal"
    TIME = "Time"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FormMode(str, Enum):
    CREATE = "Create"
    EDIT = "Edit"
    VIEW = "View"
    DELETE = "Delete"
    SEARCH = "Search"


class ButtonType(str, Enum):
    SUBMIT = "Submit"
    CANCEL = "Cancel"
    RESET = "Reset"
    CLOSE = "Close"
    CUSTOM = "Custom"


class ButtonStyle(str, Enum):
    PRIMARY = "Primary"
    SECONDARY = "Secondary"
    DANGER = "Danger"
    SUCCESS = "Success"
    WARNING = "Warning"
    INFO = "Info"


class MessageType(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"
    SUCCESS = "Success"


# =============================================================================
# Data tables
# =============================================================================


class Column(WireModel):
    """
    Table column definition.

    Example:
        Column(name="email", label="Email", type=ColumnType.EMAIL, sortable=True)
    """

    name: str = PydanticField(description="Result column name")
    label: str = PydanticField(default="", description="Header label")
    type: ColumnType = PydanticField(default=ColumnType.TEXT, description="Presentation type")
    sortable: bool = False
    filterable: bool = False
    width: str | None = None
    format: str | None = PydanticField(default=None, description="Format string")
    align: Alignment = PydanticField(default=Alignment.LEFT, description="Cell alignment")


class DataTable(WireModel):
    """
    Table bound to a Query through ``query_ref``.

    ``query_ref`` is an opaque string; an unknown reference is a lookup miss
    at render time, not a compile error.
    """

    id: str = PydanticField(description="Table id, unique among tables")
    query_ref: str = PydanticField(default="", description="Id of the Query feeding the table")
    title: str | None = None
    description: str | None = None
    pagination: bool = PydanticField(default=True, description="Paginate rows")
    page_size: int | None = PydanticField(default=None, description="Rows per page")
    sortable: bool = False
    filterable: bool = False
    searchable: bool = False
    columns: list[Column] = PydanticField(default_factory=list, description="Columns")
    form_actions: str | None = PydanticField(
        default=None, description="Comma-separated Form ids exposed as row actions"
    )

    @property
    def form_action_ids(self) -> list[str]:
        """Split ``form_actions`` into trimmed, non-empty form ids."""
        if not self.form_actions:
            return []
        return [part.strip() for part in self.form_actions.split(",") if part.strip()]

    def get_column(self, name: str) -> Column | None:
        """Get column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None


# =============================================================================
# Forms
# =============================================================================


class Field(WireModel):
    """
    Form input definition.

    Example:
        Field(
            name="role",
            label="Role",
            data_type=FieldType.SELECT,
            options=[MappingOption(label="Admin", value="admin")],
        )
    """

    name: str = PydanticField(description="Input name; join key for Mappings")
    label: str = PydanticField(default="", description="Input label")
    data_type: FieldType = PydanticField(default=FieldType.TEXT, description="Input type")
    required: bool = False
    readonly: bool = False
    disabled: bool = False
    placeholder: str | None = None
    helper_text: str | None = None
    options: list[MappingOption] = PydanticField(
        default_factory=list, description="Inline options"
    )
    validation: str | None = PydanticField(default=None, description="Validation pattern")
    format: str | None = None
    default_value: str | None = None
    rows: int | None = None


_DEFAULT_BUTTON_LABELS: dict[ButtonType, str] = {
    ButtonType.SUBMIT: "Submit",
    ButtonType.CANCEL: "Cancel",
    ButtonType.RESET: "Reset",
    ButtonType.CLOSE: "Close",
    ButtonType.CUSTOM: "Button",
}


class Button(WireModel):
    """Form button. Without a label, the type supplies one."""

    id: str | None = None
    type: ButtonType = PydanticField(default=ButtonType.SUBMIT, description="Button role")
    label: str | None = None
    style: ButtonStyle = PydanticField(default=ButtonStyle.PRIMARY, description="Visual style")
    disabled: bool = False
    action_ref: str | None = PydanticField(default=None, description="Custom action target")

    @property
    def display_label(self) -> str:
        return self.label or _DEFAULT_BUTTON_LABELS[self.type]


class Message(WireModel):
    """Static message shown inside a form."""

    type: MessageType = PydanticField(default=MessageType.INFO, description="Severity")
    content: str = ""
    visible: bool = True


class Form(WireModel):
    """
    Form bound to an ActionQuery (``action_ref``) and optionally pre-populated
    from a Query (``query_ref``).
    """

    id: str = PydanticField(description="Form id, unique among forms")
    mode: FormMode = PydanticField(default=FormMode.CREATE, description="Form mode")
    title: str | None = None
    description: str | None = None
    dialog: bool = PydanticField(default=False, description="Render as a dialog")
    action_ref: str | None = PydanticField(default=None, description="Mutation target")
    query_ref: str | None = PydanticField(default=None, description="Pre-population source")
    fields: list[Field] = PydanticField(default_factory=list, description="Ordered inputs")
    buttons: list[Button] = PydanticField(default_factory=list, description="Ordered buttons")
    messages: list[Message] = PydanticField(default_factory=list, description="Messages")

    def get_field(self, name: str) -> Field | None:
        """Get field by name."""
        for field in self.fields:
            if field.name == name:
                return field
        return None

    @property
    def visible_messages(self) -> list[Message]:
        return [m for m in self.messages if m.visible]


# =============================================================================
# Section / wire response
# =============================================================================


class FrontendInfo(WireModel):
    """Frontend section of a feature."""

    data_tables: list[DataTable] = PydanticField(default_factory=list)
    forms: list[Form] = PydanticField(default_factory=list)

    def get_data_table(self, table_id: str) -> DataTable | None:
        """Get data table by id."""
        for table in self.data_tables:
            if table.id == table_id:
                return table
        return None

    def get_form(self, form_id: str) -> Form | None:
        """Get form by id."""
        for form in self.forms:
            if form.id == form_id:
                return form
        return None


class FrontendElements(FrontendInfo):
    """Frontend section as served by the backend, tagged with its feature."""

    feature: str = ""
    version: str = ""
