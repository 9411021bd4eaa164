from __future__ import annotations

from datetime import datetime
from typing import Optional

import pytest
from pydantic import BaseModel, Field

from tablesync.domain.models import IndexKey, Kind, NativeType
from tablesync.domain.records import RecordType
from tablesync.errors import InvalidFieldDefinition, UnsupportedType
from tablesync.schema.binding import bind


class Article(BaseModel):
    __sql_schema__ = "blog"

    id: int = Field(0, ge=0)
    title: str = Field("", max_length=120)
    slug: str = Field("", json_schema_extra={"index": "single,unique"})
    score: float = 0.0
    published: bool = False
    views: Optional[int] = None
    tags: list[str] = []
    meta: dict = {}
    cover: Optional[bytes] = None
    author_id: int = Field(0, json_schema_extra={"kind": "uint32", "index": "single=desc"})
    createdAt: datetime | None = None


def test_builder_keeps_declaration_order() -> None:
    record = RecordType("User").field("id", Kind.UINT64).field("name", "text", limit=8)

    assert [f.name for f in record.fields] == ["id", "name"]
    assert record.fields[1].native == NativeType(kind=Kind.TEXT)
    assert record.fields[1].limit == 8


def test_builder_rejects_duplicates_and_bad_values() -> None:
    record = RecordType("User").field("id", Kind.UINT64)

    with pytest.raises(InvalidFieldDefinition):
        record.field("id", Kind.TEXT)
    with pytest.raises(InvalidFieldDefinition):
        record.field("name", Kind.TEXT, limit=-1)
    with pytest.raises(InvalidFieldDefinition):
        record.field("name", "varchar")


def test_from_model_reads_field_metadata() -> None:
    record = RecordType.from_model(Article)
    natives = {f.name: f.native for f in record.fields}

    assert record.name == "Article"
    assert record.schema == "blog"
    assert natives["id"] == NativeType(kind=Kind.UINT64)
    assert natives["score"] == NativeType(kind=Kind.FLOAT64)
    assert natives["views"] == NativeType(kind=Kind.INT64, optional=True)
    assert natives["tags"] == NativeType(kind=Kind.LIST, element=Kind.TEXT)
    assert natives["meta"] == NativeType(kind=Kind.MAP)
    assert natives["cover"] == NativeType(kind=Kind.BYTES)
    assert natives["author_id"] == NativeType(kind=Kind.UINT32)
    assert natives["createdAt"] == NativeType(kind=Kind.TIMESTAMP, optional=True)
    assert {f.name: f.limit for f in record.fields}["title"] == 120


def test_from_model_binds_to_expected_columns() -> None:
    binding = bind(RecordType.from_model(Article))

    assert binding.qualified_name == "blog.articles"
    assert binding.field("id").column_type.rendered == "bigserial not null"
    assert binding.field("title").column_type.rendered == "varchar(120) not null default ''"
    assert binding.field("tags").column_type.rendered == "text[]"
    assert binding.field("created_at").column_type.rendered == "timestamp with time zone"
    assert [d.columns for d in binding.indexes] == [("slug",), ("author_id",)]
    assert binding.indexes[1].keys == (IndexKey(column="author_id"),)


def test_from_model_rejects_unmapped_types() -> None:
    class Bad(BaseModel):
        id: int = 0
        payload: set = set()

    with pytest.raises(UnsupportedType):
        RecordType.from_model(Bad)


def test_from_model_rejects_multi_member_unions() -> None:
    class Bad(BaseModel):
        id: int = 0
        value: int | str = 0

    with pytest.raises(UnsupportedType):
        RecordType.from_model(Bad)
