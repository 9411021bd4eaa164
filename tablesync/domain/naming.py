"""
Naming helpers: case conversion, table-name derivation and the identifier
allow-list applied to every name that ends up in generated SQL.
"""

from __future__ import annotations

import re

IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_]*$")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_VOWELS = frozenset("aeiou")

_IRREGULAR = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "mouse": "mice",
    "goose": "geese",
    "foot": "feet",
    "tooth": "teeth",
    "ox": "oxen",
}
_UNCOUNTABLE = frozenset(
    {"sheep", "fish", "series", "species", "news", "information", "equipment", "data"}
)


def to_snake(name: str) -> str:
    """
    Convert CamelCase, camelCase, kebab-case or spaced names to snake_case.

    Examples
    --------
    >>> to_snake("CreatedAt")
    'created_at'
    >>> to_snake("HTTPRequest")
    'http_request'
    """
    name = _CAMEL_BOUNDARY.sub("_", name.strip())
    name = re.sub(r"[\s\-]+", "_", name)
    return re.sub(r"_+", "_", name).lower()


def pluralize(word: str) -> str:
    """
    Plural of a snake_case word; only the last segment is inflected.

    >>> pluralize("blog_person")
    'blog_people'
    """
    if not word:
        return word
    head, sep, last = word.rpartition("_")
    if last in _UNCOUNTABLE:
        return word
    if last in _IRREGULAR:
        return head + sep + _IRREGULAR[last]
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if word.endswith("y") and len(word) > 1 and word[-2] not in _VOWELS:
        return word[:-1] + "ies"
    return word + "s"


def to_table_name(record_name: str) -> str:
    """Derive a table name from a record type name: snake_case, then plural."""
    return pluralize(to_snake(record_name))


def is_identifier(name: str) -> bool:
    """Whether `name` is a lower snake_case token safe to splice into SQL."""
    return bool(IDENTIFIER_RE.match(name))


__all__ = ["IDENTIFIER_RE", "to_snake", "pluralize", "to_table_name", "is_identifier"]
