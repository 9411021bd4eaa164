from __future__ import annotations

import pytest

from tablesync.domain.models import IndexDescriptor, IndexKey
from tablesync.errors import InvalidIndexSpec
from tablesync.schema.indexes import (
    IndexNamePart,
    column_for_index_name,
    derive_index_name,
    parse_index_name,
    parse_index_specs,
)


def test_single_defaults_to_ascending_non_unique() -> None:
    primary_key, indexes = parse_index_specs({"name": "single"})

    assert primary_key is None
    assert indexes == [IndexDescriptor(keys=(IndexKey(column="name"),))]


def test_single_desc_unique_lower() -> None:
    _, indexes = parse_index_specs({"email": "single=desc,uniq,lower=true"})

    (descriptor,) = indexes
    assert descriptor.unique is True
    assert descriptor.keys == (IndexKey(column="email", case_folded=True),)


def test_explicit_false_flags() -> None:
    _, indexes = parse_index_specs({"email": "single,unique=false,lower=false"})

    assert indexes == [IndexDescriptor(keys=(IndexKey(column="email"),), unique=False)]


def test_pkey_group_prepends_identity() -> None:
    primary_key, indexes = parse_index_specs(
        {"follower_id": "group=pkey", "followee_id": "group=pkey"}
    )

    assert indexes == []
    assert primary_key is not None
    assert primary_key.is_primary_key_group is True
    assert primary_key.columns == ("id", "follower_id", "followee_id")


def test_pkey_group_does_not_repeat_identity() -> None:
    primary_key, _ = parse_index_specs({"id": "group=pkey", "tenant": "group=pkey"})

    assert primary_key is not None
    assert primary_key.columns == ("id", "tenant")


def test_unique_prefixed_group_is_unique_and_sorted() -> None:
    _, indexes = parse_index_specs({"zone": "group=unique_place", "area": "group=unique_place"})

    (descriptor,) = indexes
    assert descriptor.unique is True
    assert descriptor.columns == ("area", "zone")


def test_unique_token_without_single_is_ignored_for_group() -> None:
    _, indexes = parse_index_specs({"a": "group=g1,unique", "b": "group=g1"})

    (descriptor,) = indexes
    assert descriptor.unique is False
    assert descriptor.columns == ("a", "b")


def test_single_and_group_on_same_field() -> None:
    _, indexes = parse_index_specs({"a": "single,unique,group=g1", "b": "group=g1"})

    assert [d.columns for d in indexes] == [("a",), ("a", "b")]
    assert indexes[0].unique is True
    assert indexes[1].unique is False


def test_singles_come_before_groups_in_field_order() -> None:
    _, indexes = parse_index_specs(
        {"c": "group=g2", "b": "single", "a": "group=g1", "d": "single=desc"}
    )

    assert [d.columns for d in indexes] == [("b",), ("d",), ("c",), ("a",)]


@pytest.mark.parametrize(
    "raw",
    [
        "single,bogus",
        "single,single=desc",
        "single=sideways",
        "single,unique=maybe",
        "group=",
    ],
)
def test_invalid_declarations_are_rejected(raw: str) -> None:
    with pytest.raises(InvalidIndexSpec) as excinfo:
        parse_index_specs({"name": raw})
    assert excinfo.value.field == "name"


def test_second_primary_key_group_is_rejected() -> None:
    with pytest.raises(InvalidIndexSpec):
        parse_index_specs({"a": "group=pkey", "b": "group=pkey_other"})


def test_case_folded_primary_key_is_rejected() -> None:
    with pytest.raises(InvalidIndexSpec):
        parse_index_specs({"a": "group=pkey,lower"})


def test_derive_index_name() -> None:
    plain = IndexDescriptor(keys=(IndexKey(column="name"),))
    folded = IndexDescriptor(keys=(IndexKey(column="email", case_folded=True),))
    composite = IndexDescriptor(keys=(IndexKey(column="a"), IndexKey(column="b", case_folded=True)))

    assert derive_index_name("users", plain) == "users_name_idx"
    assert derive_index_name("users", folded) == "users_lower_idx"
    assert derive_index_name("users", composite) == "users_a_lower_idx"


def test_parse_index_name_resolves_underscored_columns() -> None:
    columns = ["id", "user", "user_id", "created_at"]

    assert parse_index_name("posts", "posts_user_id_idx", columns) == [
        IndexNamePart("user_id", False)
    ]
    assert parse_index_name("posts", "posts_user_created_at_idx", columns) == [
        IndexNamePart("user", False),
        IndexNamePart("created_at", False),
    ]
    assert parse_index_name("posts", "posts_lower_idx", columns) == [IndexNamePart(None, True)]


def test_parse_index_name_rejects_foreign_names() -> None:
    columns = ["id", "name"]

    assert parse_index_name("users", "users_pkey", columns) is None
    assert parse_index_name("users", "accounts_name_idx", columns) is None
    assert parse_index_name("users", "users_unknown_idx", columns) is None
    assert parse_index_name("users", "users__idx", columns) is None


def test_derived_names_parse_back_to_their_keys() -> None:
    columns = ["id", "owner_id", "name", "email"]
    descriptors = [
        IndexDescriptor(keys=(IndexKey(column="owner_id"),)),
        IndexDescriptor(keys=(IndexKey(column="email", case_folded=True),)),
        IndexDescriptor(keys=(IndexKey(column="name"), IndexKey(column="owner_id"))),
    ]
    for descriptor in descriptors:
        parts = parse_index_name("items", derive_index_name("items", descriptor), columns)
        assert parts == [
            IndexNamePart(None if key.case_folded else key.column, key.case_folded)
            for key in descriptor.keys
        ]


def test_column_for_index_name_only_for_plain_single_keys() -> None:
    columns = ["id", "name", "email"]

    assert column_for_index_name("users", "users_name_idx", columns) == "name"
    assert column_for_index_name("users", "users_lower_idx", columns) is None
    assert column_for_index_name("users", "users_name_email_idx", columns) is None
    assert column_for_index_name("users", "users_pkey", columns) is None
