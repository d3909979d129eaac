"""
Foods API Backend — FoodCollection Tests
==========================================

What:  Tests for compiling filters, projection and sort into SQL over the
       foods table.
How:   Runs against an in-memory aiosqlite database seeded with twelve foods.
"""

import uuid
from datetime import datetime, timezone

import pytest

from app.exceptions import InvalidFilterSyntax
from app.models.food import Food
from app.schemas.query import FieldCondition, FilterPredicate, Operator, SortDirection, SortKey
from app.services.food_collection import FoodCollection, coerce_value

NAME_DESC = [SortKey(field="name", direction=SortDirection.DESC)]


def predicate(*conditions):
    return FilterPredicate(conditions=[FieldCondition(**c) for c in conditions])


async def names(collection, filter=None, sort=NAME_DESC, skip=0, limit=100):
    documents = await collection.find(filter or FilterPredicate(), ["name"], sort, skip, limit)
    return [doc["name"] for doc in documents]


class TestCoerceValue:
    """String filter values are converted to each column's Python type."""

    columns = Food.__table__.columns

    def test_integer(self):
        assert coerce_value(self.columns["calories"], "calories", "300") == 300

    def test_float(self):
        assert coerce_value(self.columns["price"], "price", "2.5") == 2.5

    def test_string_kept_verbatim(self):
        assert coerce_value(self.columns["category"], "category", " fruit ") == " fruit "

    def test_uuid(self):
        value = uuid.uuid4()
        assert coerce_value(self.columns["id"], "id", str(value)) == value

    def test_naive_datetime_assumed_utc(self):
        parsed = coerce_value(self.columns["created_at"], "created_at", "2024-01-15T12:00:00")
        assert parsed == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("field, value", [
        ("calories", "abc"),
        ("price", "cheap"),
        ("id", "not-a-uuid"),
        ("created_at", "yesterday"),
    ])
    def test_unparseable_value_raises(self, field, value):
        with pytest.raises(InvalidFilterSyntax) as exc_info:
            coerce_value(self.columns[field], field, value)
        assert exc_info.value.context["parameter"] == field


class TestFind:

    @pytest.mark.asyncio
    async def test_default_order_and_window(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        assert await names(collection, skip=5, limit=5) == [
            "Granola", "Fig", "Eggplant", "Donut", "Carrot",
        ]

    @pytest.mark.asyncio
    async def test_equality(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        result = await names(
            collection, predicate({"field": "category", "value": "vegetable"})
        )
        assert result == ["Kale", "Eggplant", "Carrot"]

    @pytest.mark.asyncio
    async def test_numeric_comparison(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        result = await names(
            collection, predicate({"field": "price", "operator": Operator.GREATER_THAN, "value": "3"})
        )
        assert result == ["Lasagna", "Hummus", "Granola"]

    @pytest.mark.asyncio
    async def test_range_on_one_field(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        result = await names(
            collection,
            predicate(
                {"field": "calories", "operator": Operator.GREATER_OR_EQUAL, "value": "100"},
                {"field": "calories", "operator": Operator.LESS_THAN, "value": "300"},
            ),
        )
        assert result == ["Ice Cream", "Hummus", "Donut", "Banana"]

    @pytest.mark.asyncio
    async def test_in(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        result = await names(
            collection,
            predicate({"field": "category", "operator": Operator.IN, "value": ["fruit", "dessert"]}),
        )
        assert result == ["Ice Cream", "Fig", "Donut", "Banana", "Apple"]

    @pytest.mark.asyncio
    async def test_less_or_equal_boundary(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        result = await names(
            collection,
            predicate({"field": "calories", "operator": Operator.LESS_OR_EQUAL, "value": "35"}),
        )
        assert result == ["Kale", "Eggplant", "Carrot"]

    @pytest.mark.asyncio
    async def test_unknown_field_matches_nothing(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        result = await names(collection, predicate({"field": "colour", "value": "red"}))
        assert result == []

    @pytest.mark.asyncio
    async def test_unknown_field_with_known_field_matches_nothing(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        result = await names(
            collection,
            predicate(
                {"field": "category", "value": "fruit"},
                {"field": "colour", "operator": Operator.IN, "value": ["red", "green"]},
            ),
        )
        assert result == []

    @pytest.mark.asyncio
    async def test_projection_always_includes_id(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        documents = await collection.find(
            FilterPredicate(), ["calories", "nonsense", "calories"], NAME_DESC, 0, 1
        )
        assert set(documents[0]) == {"id", "calories"}
        assert documents[0]["calories"] == 336

    @pytest.mark.asyncio
    async def test_empty_projection_returns_every_column(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        documents = await collection.find(FilterPredicate(), [], NAME_DESC, 0, 1)
        assert set(documents[0]) == {
            "id", "name", "slug", "description", "category",
            "calories", "price", "photo", "created_at",
        }
        assert documents[0]["photo"] == "no-photo.jpg"

    @pytest.mark.asyncio
    async def test_multi_key_sort(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        sort = [
            SortKey(field="category"),
            SortKey(field="calories", direction=SortDirection.DESC),
        ]
        result = await names(collection, sort=sort, limit=4)
        assert result == ["Granola", "Donut", "Ice Cream", "Banana"]

    @pytest.mark.asyncio
    async def test_sort_on_unknown_field_falls_back_to_id(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        result = await names(collection, sort=[SortKey(field="popularity")])
        assert len(result) == 12

    @pytest.mark.asyncio
    async def test_bad_value_raises(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        with pytest.raises(InvalidFilterSyntax):
            await names(
                collection,
                predicate({"field": "calories", "operator": Operator.GREATER_THAN, "value": "abc"}),
            )


class TestCount:

    @pytest.mark.asyncio
    async def test_count_all(self, db_session, seeded_foods):
        assert await FoodCollection(db_session).count() == 12

    @pytest.mark.asyncio
    async def test_count_filtered(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        assert await collection.count(predicate({"field": "category", "value": "fruit"})) == 3

    @pytest.mark.asyncio
    async def test_count_unknown_field(self, db_session, seeded_foods):
        collection = FoodCollection(db_session)
        assert await collection.count(predicate({"field": "colour", "value": "red"})) == 0

    @pytest.mark.asyncio
    async def test_count_empty_table(self, db_session):
        assert await FoodCollection(db_session).count() == 0
