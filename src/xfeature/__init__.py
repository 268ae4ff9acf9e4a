"""
XFeature: declarative feature specifications for data-driven UIs.

One XML document declares a feature's named queries and mutations and the
data tables and forms that consume them. This package compiles such
documents into typed definitions and provides the runtime that loads them,
resolves field mappings, and dispatches queries through a mockable gateway.

Example:
    from xfeature import parse_feature_file, FeatureContext

    definition = parse_feature_file("specs/xfeature/UserManagement.xml")
    ctx = FeatureContext.from_definition(definition)
    await ctx.load()
    form = ctx.resolve_form("CreateUser")
"""

__version__ = "0.1.0"

from xfeature.core import (  # noqa: E402
    BackendError,
    ConfigError,
    ParseError,
    ReferenceNotFoundError,
    XFeatureError,
    extract_parameters,
    load_feature,
    parse_feature_file,
    parse_feature_string,
)
from xfeature.runtime import (  # noqa: E402
    FeatureContext,
    GatewayHooks,
    LoadState,
    MockBundle,
    build_mapping_table,
    create_gateway,
    resolve_field,
)
from xfeature.specs import FeatureDefinition  # noqa: E402

__all__ = [
    "__version__",
    # Compiler
    "parse_feature_string",
    "parse_feature_file",
    "load_feature",
    "extract_parameters",
    "FeatureDefinition",
    # Runtime
    "FeatureContext",
    "GatewayHooks",
    "LoadState",
    "MockBundle",
    "build_mapping_table",
    "resolve_field",
    "create_gateway",
    # Errors
    "XFeatureError",
    "ParseError",
    "ReferenceNotFoundError",
    "BackendError",
    "ConfigError",
]
