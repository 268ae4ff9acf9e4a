"""
Specification compiler: XFeature XML documents to FeatureDefinition.

Parsing is lenient by default. Absent or unrecognised attributes degrade to
documented defaults so that partially authored specifications still load;
only a malformed document or a root element other than ``<Feature>`` is
fatal. Pass ``strict=True`` to also reject missing ids/names and unknown
enumeration values.

Example document::

    <Feature Name="UserManagement" Version="1.0">
      <Backend>
        <Query Id="ListUsers" Type="Select">
          <![CDATA[SELECT * FROM users WHERE status = :status]]>
        </Query>
      </Backend>
      <Frontend>
        <DataTable Id="UsersTable" QueryRef="ListUsers">
          <Column Name="id" Label="ID" Type="Number"/>
        </DataTable>
      </Frontend>
      <Mapping Name="status" DataType="Text" Label="Status"/>
    </Feature>
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from enum import Enum
from pathlib import Path
from typing import TypeVar

from xfeature.core.errors import make_parse_error
from xfeature.core.params import extract_parameters
from xfeature.specs import (
    ActionKind,
    ActionQuery,
    Alignment,
    BackendInfo,
    Button,
    ButtonStyle,
    ButtonType,
    Column,
    ColumnType,
    DataTable,
    FeatureDefinition,
    Field,
    FieldType,
    Form,
    FormMode,
    FrontendInfo,
    ListQuery,
    Mapping,
    MappingOption,
    MappingOptions,
    Message,
    MessageType,
    Query,
    QueryKind,
)

logger = logging.getLogger(__name__)

ROOT_TAG = "Feature"
MAPPING_TAGS = ("Mapping", "ParameterMapping")

E = TypeVar("E", bound=Enum)

INTEGER_PATTERN = re.compile(r"-?\d+")


class _Normalizer:
    """Walks one document; carries the source label and strictness."""

    def __init__(self, source: str | None, strict: bool):
        self.source = source
        self.strict = strict

    # ------------------------------------------------------------------
    # Attribute readers
    # ------------------------------------------------------------------

    def _attr(self, elem: ET.Element, name: str) -> str | None:
        value = elem.get(name)
        if value is None:
            # camelCase spelling, e.g. queryRef
            value = elem.get(name[0].lower() + name[1:])
        return value

    def _str(self, elem: ET.Element, name: str) -> str | None:
        value = self._attr(elem, name)
        return value if value else None

    def _bool(self, elem: ET.Element, name: str, default: bool = False) -> bool:
        value = self._attr(elem, name)
        if value is None:
            return default
        return value == "true"

    def _int(self, elem: ET.Element, name: str) -> int | None:
        value = self._attr(elem, name)
        if value is None:
            return None
        # Plain digits only; int() would also take "+5" and "1_000"
        if not INTEGER_PATTERN.fullmatch(value.strip()):
            logger.debug("Ignoring non-integer %s=%r in %s", name, value, self.source or "<spec>")
            return None
        return int(value.strip())

    def _enum(self, elem: ET.Element, name: str, enum_cls: type[E], default: E, path: str) -> E:
        value = self._attr(elem, name)
        if value is None or value == "":
            return default
        wanted = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == wanted:
                return member
        if self.strict:
            raise make_parse_error(
                f"Unknown {enum_cls.__name__} value '{value}'",
                source=self.source,
                element=path,
                attribute=name,
            )
        logger.warning(
            "%s: unknown %s '%s' at %s, using '%s'",
            self.source or "<spec>",
            enum_cls.__name__,
            value,
            path,
            default.value,
        )
        return default

    def _required(self, elem: ET.Element, name: str, path: str) -> str:
        value = self._attr(elem, name)
        if not value:
            if self.strict:
                raise make_parse_error(
                    f"<{elem.tag}> is missing required attribute",
                    source=self.source,
                    element=path,
                    attribute=name,
                )
            return ""
        return value

    @staticmethod
    def _text(elem: ET.Element) -> str:
        return "".join(elem.itertext()).strip()

    # ------------------------------------------------------------------
    # Backend
    # ------------------------------------------------------------------

    def query(self, elem: ET.Element, parent: str) -> Query:
        ident = self._required(elem, "Id", f"{parent}/Query")
        path = f"{parent}/Query[{ident}]"
        sql = self._text(elem)
        return Query(
            id=ident,
            kind=self._enum(elem, "Type", QueryKind, QueryKind.SELECT, path),
            description=self._str(elem, "Description"),
            sql=sql,
            parameters=extract_parameters(sql),
        )

    def action_query(self, elem: ET.Element, parent: str) -> ActionQuery:
        ident = self._required(elem, "Id", f"{parent}/ActionQuery")
        path = f"{parent}/ActionQuery[{ident}]"
        sql = self._text(elem)
        return ActionQuery(
            id=ident,
            kind=self._enum(elem, "Type", ActionKind, ActionKind.INSERT, path),
            description=self._str(elem, "Description"),
            sql=sql,
            parameters=extract_parameters(sql),
        )

    def backend(self, elem: ET.Element | None) -> BackendInfo:
        if elem is None:
            return BackendInfo()
        path = f"{ROOT_TAG}/Backend"
        return BackendInfo(
            queries=[self.query(q, path) for q in elem.findall("Query")],
            action_queries=[self.action_query(a, path) for a in elem.findall("ActionQuery")],
        )

    # ------------------------------------------------------------------
    # Frontend
    # ------------------------------------------------------------------

    def column(self, elem: ET.Element, parent: str) -> Column:
        name = self._required(elem, "Name", f"{parent}/Column")
        path = f"{parent}/Column[{name}]"
        return Column(
            name=name,
            label=self._attr(elem, "Label") or "",
            type=self._enum(elem, "Type", ColumnType, ColumnType.TEXT, path),
            sortable=self._bool(elem, "Sortable"),
            filterable=self._bool(elem, "Filterable"),
            width=self._str(elem, "Width"),
            format=self._str(elem, "Format"),
            align=self._enum(elem, "Align", Alignment, Alignment.LEFT, path),
        )

    def data_table(self, elem: ET.Element, parent: str) -> DataTable:
        ident = self._required(elem, "Id", f"{parent}/DataTable")
        path = f"{parent}/DataTable[{ident}]"
        return DataTable(
            id=ident,
            query_ref=self._attr(elem, "QueryRef") or "",
            title=self._str(elem, "Title"),
            description=self._str(elem, "Description"),
            pagination=self._bool(elem, "Pagination", default=True),
            page_size=self._int(elem, "PageSize"),
            sortable=self._bool(elem, "Sortable"),
            filterable=self._bool(elem, "Filterable"),
            searchable=self._bool(elem, "Searchable"),
            columns=[self.column(c, path) for c in elem.findall("Column")],
            form_actions=self._str(elem, "FormActions"),
        )

    def option(self, elem: ET.Element) -> MappingOption:
        return MappingOption(
            label=self._attr(elem, "Label") or "",
            value=self._attr(elem, "Value") or "",
        )

    def options(self, elem: ET.Element) -> list[MappingOption]:
        """Option children, directly or wrapped in <Options>."""
        items = [self.option(o) for o in elem.findall("Option")]
        for wrapper in elem.findall("Options"):
            items.extend(self.option(o) for o in wrapper.findall("Option"))
        return items

    def field(self, elem: ET.Element, parent: str) -> Field:
        name = self._required(elem, "Name", f"{parent}/Field")
        path = f"{parent}/Field[{name}]"
        return Field(
            name=name,
            label=self._attr(elem, "Label") or "",
            data_type=self._enum(elem, "Type", FieldType, FieldType.TEXT, path),
            required=self._bool(elem, "Required"),
            readonly=self._bool(elem, "Readonly"),
            disabled=self._bool(elem, "Disabled"),
            placeholder=self._str(elem, "Placeholder"),
            helper_text=self._str(elem, "HelperText"),
            options=self.options(elem),
            validation=self._str(elem, "Validation"),
            format=self._str(elem, "Format"),
            default_value=self._attr(elem, "DefaultValue"),
            rows=self._int(elem, "Rows"),
        )

    def button(self, elem: ET.Element, parent: str) -> Button:
        path = f"{parent}/Button"
        return Button(
            id=self._str(elem, "Id"),
            type=self._enum(elem, "Type", ButtonType, ButtonType.SUBMIT, path),
            label=self._str(elem, "Label"),
            style=self._enum(elem, "Style", ButtonStyle, ButtonStyle.PRIMARY, path),
            disabled=self._bool(elem, "Disabled"),
            action_ref=self._str(elem, "ActionRef"),
        )

    def message(self, elem: ET.Element, parent: str) -> Message:
        return Message(
            type=self._enum(elem, "Type", MessageType, MessageType.INFO, f"{parent}/Message"),
            content=self._text(elem),
            visible=self._bool(elem, "Visible", default=True),
        )

    def form(self, elem: ET.Element, parent: str) -> Form:
        ident = self._required(elem, "Id", f"{parent}/Form")
        path = f"{parent}/Form[{ident}]"
        return Form(
            id=ident,
            mode=self._enum(elem, "Mode", FormMode, FormMode.CREATE, path),
            title=self._str(elem, "Title"),
            description=self._str(elem, "Description"),
            dialog=self._bool(elem, "Dialog"),
            action_ref=self._str(elem, "ActionRef"),
            query_ref=self._str(elem, "QueryRef"),
            fields=[self.field(f, path) for f in elem.findall("Field")],
            buttons=[self.button(b, path) for b in elem.findall("Button")],
            messages=[self.message(m, path) for m in elem.findall("Message")],
        )

    def frontend(self, elem: ET.Element | None) -> FrontendInfo:
        if elem is None:
            return FrontendInfo()
        path = f"{ROOT_TAG}/Frontend"
        return FrontendInfo(
            data_tables=[self.data_table(t, path) for t in elem.findall("DataTable")],
            forms=[self.form(f, path) for f in elem.findall("Form")],
        )

    # ------------------------------------------------------------------
    # Mappings
    # ------------------------------------------------------------------

    def list_query(self, elem: ET.Element, parent: str) -> ListQuery:
        ident = self._attr(elem, "Id") or ""
        sql = self._text(elem)
        return ListQuery(
            id=ident,
            kind=self._enum(elem, "Type", QueryKind, QueryKind.SELECT, f"{parent}/ListQuery"),
            description=self._str(elem, "Description"),
            sql=sql,
            parameters=extract_parameters(sql),
        )

    def mapping(self, elem: ET.Element) -> Mapping:
        name = self._required(elem, "Name", f"{ROOT_TAG}/{elem.tag}")
        path = f"{ROOT_TAG}/{elem.tag}[{name}]"

        options_elem = elem.find("Options")
        options = None
        if options_elem is not None:
            options = MappingOptions(items=[self.option(o) for o in options_elem.findall("Option")])

        list_query_elem = elem.find("ListQuery")
        list_query = None
        if list_query_elem is not None:
            list_query = self.list_query(list_query_elem, path)

        if options is not None and list_query is not None:
            logger.debug("%s declares both Options and ListQuery", path)

        return Mapping(
            name=name,
            data_type=self._attr(elem, "DataType") or "",
            label=self._attr(elem, "Label") or "",
            list_query=list_query,
            options=options,
            required=self._bool(elem, "Required"),
            disabled=self._bool(elem, "Disabled"),
            readonly=self._bool(elem, "Readonly"),
            placeholder=self._str(elem, "Placeholder"),
            helper_text=self._str(elem, "HelperText"),
            rows=self._int(elem, "Rows"),
        )

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def feature(self, root: ET.Element) -> FeatureDefinition:
        if root is None or root.tag != ROOT_TAG:
            found = "nothing" if root is None else f"<{root.tag}>"
            raise make_parse_error(
                f"Expected <{ROOT_TAG}> root element, found {found}", source=self.source
            )

        name = self._required(root, "Name", ROOT_TAG)
        definition = FeatureDefinition(
            name=name,
            version=self._attr(root, "Version") or "",
            backend=self.backend(root.find("Backend")),
            frontend=self.frontend(root.find("Frontend")),
            mappings=[self.mapping(m) for m in root if m.tag in MAPPING_TAGS],
        )
        logger.debug(
            "Compiled feature %s (version %s) from %s: %s",
            definition.name,
            definition.version,
            self.source or "<string>",
            definition.stats,
        )
        return definition


def normalize_feature(
    root: ET.Element,
    *,
    strict: bool = False,
    source: str | None = None,
) -> FeatureDefinition:
    """
    Convert a parsed element tree into a FeatureDefinition.

    Args:
        root: The document's root element; must be <Feature>
        strict: Reject missing ids/names and unknown enumeration values
        source: Label used in error messages (usually the file path)

    Returns:
        The compiled feature

    Raises:
        ParseError: If the root is missing or not <Feature>, or on a
            strict-mode violation
    """
    return _Normalizer(source, strict).feature(root)


def parse_feature_string(
    text: str,
    *,
    strict: bool = False,
    source: str | None = None,
) -> FeatureDefinition:
    """
    Compile an XFeature document held in a string.

    Raises:
        ParseError: If the XML is malformed or not a valid feature document
    """
    return normalize_feature(_read_root(text, source), strict=strict, source=source)


def _read_root(data: str | bytes, source: str | None) -> ET.Element:
    """Parse XML text or raw bytes; bytes are decoded per the XML declaration."""
    if not data or not data.strip():
        raise make_parse_error("Empty specification document", source=source)
    try:
        return ET.fromstring(data)
    except (ET.ParseError, UnicodeDecodeError, LookupError) as e:
        raise make_parse_error(f"Malformed XML: {e}", source=source) from e


def parse_feature_file(path: Path | str, *, strict: bool = False) -> FeatureDefinition:
    """
    Compile an XFeature document from disk.

    The file is read as bytes so the encoding named in its XML declaration
    applies (UTF-8 when there is none).

    Args:
        path: Path to the .xml file
        strict: See ``normalize_feature``

    Raises:
        ParseError: If the file is not a valid feature document, including
            bytes that do not decode in the declared encoding
        OSError: If the file cannot be read
    """
    path = Path(path)
    source = str(path)
    root = _read_root(path.read_bytes(), source)
    return normalize_feature(root, strict=strict, source=source)
