"""
Index declarations: parsing, name derivation and name parsing.

A field's raw index declaration is a comma-separated list of tokens:

    single[=asc|desc]   single-column index on this field; keys always render ASC
    unique | uniq       the single index is unique; ignored without `single`
    group=<name>        add this field to the composite index <name>
    lower=true|false    index lower(column) instead of column

Group names starting with `pkey` declare the composite primary key (the
identity column is prepended as its first key); names starting with `unique`
declare a unique composite index.

Derived index names follow PostgreSQL's own naming for unnamed indexes:
`<table>_<col>_..._idx`, with `lower` standing in for a case-folded key.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from tablesync.domain.models import IndexDescriptor, IndexKey
from tablesync.errors import InvalidIndexSpec

PRIMARY_KEY_GROUP_PREFIX = "pkey"
UNIQUE_GROUP_PREFIX = "unique"
INDEX_SUFFIX = "idx"
CASE_FOLD_MARKER = "lower"

_KNOWN_TOKENS = frozenset({"single", "unique", "group", "lower"})
_TOKEN_ALIASES = {"uniq": "unique"}


class IndexNamePart(NamedTuple):
    """One segment of a derived index name. `column` is None for a case-folded key."""

    column: Optional[str]
    case_folded: bool


class _Group:
    def __init__(self, name: str, identity_column: str) -> None:
        self.name = name
        self.is_primary_key = name.startswith(PRIMARY_KEY_GROUP_PREFIX)
        self.unique = name.startswith(UNIQUE_GROUP_PREFIX)
        self.keys: List[IndexKey] = []
        if self.is_primary_key:
            self.keys.append(IndexKey(column=identity_column))

    def build(self) -> IndexDescriptor:
        keys = self.keys
        if not self.is_primary_key:
            keys = sorted(keys, key=lambda key: key.column)
        return IndexDescriptor(
            keys=tuple(keys),
            unique=self.unique,
            is_primary_key_group=self.is_primary_key,
        )


def _parse_tokens(field: str, raw: str) -> Dict[str, str]:
    tokens: Dict[str, str] = {}
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        key, _, value = token.partition("=")
        key = _TOKEN_ALIASES.get(key.strip(), key.strip())
        if key not in _KNOWN_TOKENS:
            raise InvalidIndexSpec(field, f"unsupported key '{key}' in {raw!r}")
        if key in tokens:
            raise InvalidIndexSpec(field, f"duplicated key '{key}' in {raw!r}")
        tokens[key] = value.strip()
    return tokens


def _flag(field: str, tokens: Mapping[str, str], key: str) -> bool:
    if key not in tokens:
        return False
    value = tokens[key].lower()
    if value in ("", "true"):
        return True
    if value == "false":
        return False
    raise InvalidIndexSpec(field, f"'{key}' must be true or false, got {tokens[key]!r}")


def parse_index_specs(
    specs: Mapping[str, str],
    identity_column: str = "id",
) -> Tuple[Optional[IndexDescriptor], List[IndexDescriptor]]:
    """
    Parse per-field index declarations into index descriptors.

    Parameters
    ----------
    specs : Mapping[str, str]
        Column name -> raw declaration, iterated in field declaration order.
    identity_column : str
        Column prepended to a primary-key group.

    Returns
    -------
    (primary_key, descriptors)
        The composite primary-key descriptor, if declared, and every other
        descriptor: single-column ones in field order, then groups in order of
        first appearance.

    Raises
    ------
    InvalidIndexSpec
        On unknown or duplicated tokens, bad values, or a second primary-key group.
    """
    singles: List[IndexDescriptor] = []
    groups: Dict[str, _Group] = {}

    for column, raw in specs.items():
        tokens = _parse_tokens(column, raw)
        lower = _flag(column, tokens, "lower")
        unique = _flag(column, tokens, "unique")
        group_name = tokens.get("group")
        has_single = "single" in tokens

        direction = tokens.get("single", "").lower() or "asc"
        if direction not in ("asc", "desc"):
            raise InvalidIndexSpec(column, f"'single' must be asc or desc, got {tokens['single']!r}")

        if group_name is None or has_single:
            key = IndexKey(column=column, case_folded=lower)
            singles.append(IndexDescriptor(keys=(key,), unique=unique))
        if group_name is None:
            continue
        if not group_name:
            raise InvalidIndexSpec(column, "'group' needs a name")

        group = groups.get(group_name)
        if group is None:
            group = _Group(group_name, identity_column)
            if group.is_primary_key and any(g.is_primary_key for g in groups.values()):
                raise InvalidIndexSpec(column, f"second primary key group '{group_name}'")
            groups[group_name] = group
        if group.is_primary_key:
            if lower:
                raise InvalidIndexSpec(column, "primary key columns cannot be case-folded")
            if column == identity_column:
                continue
        group.keys.append(IndexKey(column=column, case_folded=lower))

    primary_key: Optional[IndexDescriptor] = None
    descriptors = list(singles)
    for group in groups.values():
        if group.is_primary_key:
            primary_key = group.build()
        else:
            descriptors.append(group.build())
    return primary_key, descriptors


def derive_index_name(table_name: str, descriptor: IndexDescriptor) -> str:
    """Name PostgreSQL assigns to an unnamed index over `descriptor`'s keys."""
    parts = [table_name]
    for key in descriptor.keys:
        parts.append(CASE_FOLD_MARKER if key.case_folded else key.column)
    parts.append(INDEX_SUFFIX)
    return "_".join(parts)


def _split_segments(body: str, columns: Sequence[str]) -> Optional[List[IndexNamePart]]:
    candidates = [IndexNamePart(column, False) for column in columns]
    candidates.append(IndexNamePart(None, True))
    for part in candidates:
        token = CASE_FOLD_MARKER if part.case_folded else part.column
        if body == token:
            return [part]
        if body.startswith(token + "_"):
            rest = _split_segments(body[len(token) + 1 :], columns)
            if rest is not None:
                return [part] + rest
    return None


def parse_index_name(
    table_name: str,
    index_name: str,
    columns: Sequence[str],
) -> Optional[List[IndexNamePart]]:
    """
    Split a derived index name back into its key segments.

    Column names may contain underscores, so segments are resolved against
    the known `columns` (longest match first). Returns None when the name
    does not follow the derived naming scheme for this table.
    """
    prefix = f"{table_name}_"
    suffix = f"_{INDEX_SUFFIX}"
    if not index_name.startswith(prefix) or not index_name.endswith(suffix):
        return None
    body = index_name[len(prefix) : len(index_name) - len(suffix)]
    if not body:
        return None
    ordered = sorted(set(columns), key=len, reverse=True)
    return _split_segments(body, ordered)


def column_for_index_name(
    table_name: str,
    index_name: str,
    columns: Sequence[str],
) -> Optional[str]:
    """Column a single-column, non-folded derived index name refers to, if any."""
    parts = parse_index_name(table_name, index_name, columns)
    if parts is None or len(parts) != 1 or parts[0].case_folded:
        return None
    return parts[0].column


__all__ = [
    "IndexNamePart",
    "parse_index_specs",
    "derive_index_name",
    "parse_index_name",
    "column_for_index_name",
]
