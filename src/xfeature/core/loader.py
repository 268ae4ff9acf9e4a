"""
Feature file loader.

Feature files live flat or nested below a specification directory and are
addressed by name: ``<spec_dir>/<name>.xml``.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from xfeature.core.errors import ReferenceNotFoundError
from xfeature.core.parser import parse_feature_file
from xfeature.specs import FeatureChecksum, FeatureDefinition

logger = logging.getLogger(__name__)

FEATURE_SUFFIX = ".xml"


def feature_file_path(name: str, spec_dir: Path | str) -> Path:
    """Get the file path of the feature called ``name``."""
    return Path(spec_dir) / f"{name}{FEATURE_SUFFIX}"


def load_feature(name: str, spec_dir: Path | str, *, strict: bool = False) -> FeatureDefinition:
    """
    Read and compile a feature by name.

    Raises:
        ReferenceNotFoundError: If no file exists for the feature
        ParseError: If the file is not a valid feature document
    """
    path = feature_file_path(name, spec_dir)
    if not path.is_file():
        raise ReferenceNotFoundError("feature", name, f"Feature file not found: {path}")
    logger.debug("Loading feature %s from %s", name, path)
    return parse_feature_file(path, strict=strict)


def _is_feature_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() == FEATURE_SUFFIX


def list_features(spec_dir: Path | str) -> list[str]:
    """
    Names of the feature files directly inside ``spec_dir``.

    Returns:
        Sorted names without extension; empty when the directory is missing
    """
    directory = Path(spec_dir)
    if not directory.is_dir():
        return []
    return sorted(p.stem for p in directory.iterdir() if _is_feature_file(p))


def feature_checksum(path: Path | str) -> str:
    """MD5 hex digest of a file's bytes."""
    return hashlib.md5(Path(path).read_bytes()).hexdigest()


def directory_checksums(spec_dir: Path | str) -> dict[str, str]:
    """
    Checksum every feature file below ``spec_dir``.

    Returns:
        Mapping of POSIX-style path relative to ``spec_dir`` to MD5 digest,
        in sorted path order
    """
    root = Path(spec_dir)
    checksums: dict[str, str] = {}
    for path in sorted(root.rglob("*")):
        if _is_feature_file(path):
            checksums[path.relative_to(root).as_posix()] = feature_checksum(path)
    return checksums


def checksum_for_feature(name: str, spec_dir: Path | str) -> FeatureChecksum:
    """
    Checksum of one feature, in the backend's wire shape.

    Raises:
        ReferenceNotFoundError: If no file exists for the feature
    """
    path = feature_file_path(name, spec_dir)
    if not path.is_file():
        raise ReferenceNotFoundError("feature", name, f"Feature file not found: {path}")
    return FeatureChecksum(feature=name, checksum=feature_checksum(path))
