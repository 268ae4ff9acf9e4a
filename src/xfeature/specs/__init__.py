"""
XFeature specification types.

Frozen pydantic models for everything a feature document declares, plus the
wire responses of the backend network contract.
"""

from xfeature.specs.backend import (
    ActionKind,
    ActionQuery,
    BackendInfo,
    Parameter,
    Query,
    QueryKind,
)
from xfeature.specs.base import WireModel
from xfeature.specs.feature import FeatureDefinition
from xfeature.specs.frontend import (
    Alignment,
    Button,
    ButtonStyle,
    ButtonType,
    Column,
    ColumnType,
    DataTable,
    Field,
    FieldType,
    Form,
    FormMode,
    FrontendElements,
    FrontendInfo,
    Message,
    MessageType,
)
from xfeature.specs.mapping import ListQuery, Mapping, MappingOption, MappingOptions
from xfeature.specs.responses import (
    ActionResponse,
    FeatureChecksum,
    MappingsResponse,
    QueryResponse,
)

__all__ = [
    # Base
    "WireModel",
    # Backend
    "QueryKind",
    "ActionKind",
    "Parameter",
    "Query",
    "ActionQuery",
    "BackendInfo",
    # Frontend
    "ColumnType",
    "FieldType",
    "Alignment",
    "FormMode",
    "ButtonType",
    "ButtonStyle",
    "MessageType",
    "Column",
    "DataTable",
    "Field",
    "Button",
    "Message",
    "Form",
    "FrontendInfo",
    "FrontendElements",
    # Mappings
    "MappingOption",
    "MappingOptions",
    "ListQuery",
    "Mapping",
    # Feature
    "FeatureDefinition",
    # Responses
    "MappingsResponse",
    "QueryResponse",
    "ActionResponse",
    "FeatureChecksum",
]
