"""
XFeature core: the specification compiler and its helpers.
"""

from xfeature.core.errors import (
    BackendError,
    ConfigError,
    ErrorContext,
    ParseError,
    ReferenceNotFoundError,
    XFeatureError,
)
from xfeature.core.loader import (
    checksum_for_feature,
    directory_checksums,
    feature_checksum,
    feature_file_path,
    list_features,
    load_feature,
)
from xfeature.core.params import convert_placeholders, extract_parameters, parameter_names
from xfeature.core.parser import normalize_feature, parse_feature_file, parse_feature_string

__all__ = [
    # Errors
    "XFeatureError",
    "ParseError",
    "ReferenceNotFoundError",
    "BackendError",
    "ConfigError",
    "ErrorContext",
    # Parameters
    "extract_parameters",
    "parameter_names",
    "convert_placeholders",
    # Parser
    "normalize_feature",
    "parse_feature_string",
    "parse_feature_file",
    # Loader
    "feature_file_path",
    "load_feature",
    "list_features",
    "feature_checksum",
    "directory_checksums",
    "checksum_for_feature",
]
