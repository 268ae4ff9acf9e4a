"""Shared pytest fixtures for XFeature tests."""

from pathlib import Path

import pytest

from xfeature.core.parser import parse_feature_file
from xfeature.specs import (
    Column,
    FeatureDefinition,
    Field,
    FieldType,
    Mapping,
    MappingOption,
    MappingOptions,
)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def xfeature_dir(fixtures_dir: Path) -> Path:
    """Return path to XFeature spec fixtures."""
    return fixtures_dir / "xfeature"


@pytest.fixture
def user_management_xml(xfeature_dir: Path) -> Path:
    return xfeature_dir / "UserManagement.xml"


@pytest.fixture
def mock_bundle_json(xfeature_dir: Path) -> Path:
    return xfeature_dir / "user_management_mock.json"


@pytest.fixture
def user_management(user_management_xml: Path) -> FeatureDefinition:
    """Compiled UserManagement feature."""
    return parse_feature_file(user_management_xml)


@pytest.fixture
def role_field() -> Field:
    """A select field with two inline options."""
    return Field(
        name="role",
        label="Role",
        data_type=FieldType.SELECT,
        options=[
            MappingOption(label="User", value="user"),
            MappingOption(label="Admin", value="admin"),
        ],
    )


@pytest.fixture
def role_column() -> Column:
    return Column(name="role", label="Role")


@pytest.fixture
def role_mapping() -> Mapping:
    """Mapping for 'role' with its own option list."""
    return Mapping(
        name="role",
        data_type="Text",
        label="User role",
        options=MappingOptions(
            items=[
                MappingOption(label="Member", value="user"),
                MappingOption(label="Administrator", value="admin"),
            ]
        ),
    )
