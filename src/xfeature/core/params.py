"""
Named-placeholder extraction for query text.

Placeholders are a colon followed by one or more word characters::

    SELECT * FROM users WHERE id = :id AND status = :status

There is no escaping: ``'::'`` or ``': '`` simply do not match.
"""

import re

from xfeature.specs.backend import Parameter

PLACEHOLDER_PATTERN = re.compile(r":(\w+)")

# Drivers whose placeholders are not written ":name"
_DRIVER_PREFIXES = {
    "sqlserver": "@",
    "mssql": "@",
}


def parameter_names(text: str) -> list[str]:
    """
    Placeholder names in order of first appearance, deduplicated.

    Args:
        text: Raw query text

    Returns:
        Names without the leading colon
    """
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(text or ""):
        seen.setdefault(match.group(1), None)
    return list(seen)


def extract_parameters(text: str) -> list[Parameter]:
    """
    Extract the parameter list of a query body.

    >>> [p.name for p in extract_parameters(":a :b :a")]
    ['a', 'b']
    """
    return [Parameter(name=name) for name in parameter_names(text)]


def convert_placeholders(text: str, driver: str) -> str:
    """
    Rewrite ``:name`` placeholders into the syntax a database driver expects.

    SQL Server takes ``@name``; every other driver keeps the text unchanged.
    """
    prefix = _DRIVER_PREFIXES.get(driver.lower())
    if prefix is None:
        return text
    return PLACEHOLDER_PATTERN.sub(lambda m: f"{prefix}{m.group(1)}", text)
