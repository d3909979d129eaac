"""
Foods API Backend — SQLAlchemy Food Collection
================================================

What:  Collection implementation over the `foods` table.
How:   Resolves field names against Food's columns, coerces string filter
       values to each column's Python type, and compiles FieldConditions,
       projection and sort keys into one SELECT.
Who:   Created per request by FoodService with the request's AsyncSession.

Query plan (GET /api/v1/foods?price[gt]=10&select=name&sort=-name&page=2&limit=5):
    SELECT foods.id, foods.name FROM foods
    WHERE foods.price > 10.0
    ORDER BY foods.name DESC, foods.id ASC
    LIMIT 5 OFFSET 5

The trailing `id` sort key keeps page boundaries stable when the requested
sort has ties.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import asc, desc, false, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from app.exceptions import InvalidFilterSyntax
from app.models.food import Food
from app.schemas.query import FieldCondition, FilterPredicate, Operator, SortDirection, SortKey
from app.services.collection_base import Collection, Document

logger = logging.getLogger(__name__)

_TRUE_WORDS = {"1", "true", "yes", "y", "on"}
_FALSE_WORDS = {"0", "false", "no", "n", "off"}


def _column_python_type(column) -> Optional[type]:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _bad_value(field: str, value: str, kind: str) -> InvalidFilterSyntax:
    return InvalidFilterSyntax(
        message=f"Filter value for '{field}' is not a valid {kind}",
        parameter=field,
        context={"value": value, "expected": kind},
    )


def coerce_value(column, field: str, value: str) -> Any:
    """
    Convert a query-string value to the column's Python type.

    Raises:
        InvalidFilterSyntax: the text does not parse as that type.
    """
    python_type = _column_python_type(column)
    text = value.strip()
    if python_type is None or python_type is str:
        return value
    try:
        if python_type is bool:
            lowered = text.lower()
            if lowered in _TRUE_WORDS:
                return True
            if lowered in _FALSE_WORDS:
                return False
            raise ValueError(text)
        if python_type is int:
            return int(text)
        if python_type is float:
            return float(text.replace(",", "."))
        if python_type is uuid.UUID:
            return uuid.UUID(text)
        if python_type is datetime:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
        if python_type is date:
            return date.fromisoformat(text)
    except ValueError:
        raise _bad_value(field, value, python_type.__name__)
    return value


class FoodCollection(Collection):
    """Food documents stored in the `foods` table."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.columns = {column.key: column for column in Food.__table__.columns}

    def _column(self, field: str):
        column = self.columns.get(field)
        if column is None:
            logger.debug("Ignoring unknown field '%s'", field)
        return column

    def _clause(self, condition: FieldCondition) -> ColumnElement:
        column = self._column(condition.field)
        if column is None:
            # No food carries this field, so no food can match it
            return false()

        if condition.operator is Operator.IN:
            values = condition.value if isinstance(condition.value, list) else [condition.value]
            return column.in_([coerce_value(column, condition.field, v) for v in values])

        value = coerce_value(column, condition.field, condition.value)
        if condition.operator is Operator.GREATER_THAN:
            return column > value
        if condition.operator is Operator.GREATER_OR_EQUAL:
            return column >= value
        if condition.operator is Operator.LESS_THAN:
            return column < value
        if condition.operator is Operator.LESS_OR_EQUAL:
            return column <= value
        return column == value

    def where_clauses(self, filter: Optional[FilterPredicate]) -> List[ColumnElement]:
        """One SQL condition per filter condition."""
        if filter is None:
            return []
        return [self._clause(condition) for condition in filter.conditions]

    def selected_columns(self, projection: Sequence[str]) -> list:
        """Projected columns, `id` first; empty projection selects every column."""
        if not projection:
            return list(self.columns.values())
        names = ["id"]
        for field in projection:
            if field not in names and self._column(field) is not None:
                names.append(field)
        return [self.columns[name] for name in names]

    def order_by(self, sort: Sequence[SortKey]) -> list:
        ordering = []
        for key in sort:
            column = self._column(key.field)
            if column is None:
                continue
            ordering.append(desc(column) if key.direction is SortDirection.DESC else asc(column))
        ordering.append(asc(self.columns["id"]))
        return ordering

    async def count(self, filter: Optional[FilterPredicate] = None) -> int:
        statement = select(func.count()).select_from(Food.__table__)
        clauses = self.where_clauses(filter)
        if clauses:
            statement = statement.where(*clauses)
        result = await self.session.execute(statement)
        return result.scalar() or 0

    async def find(
        self,
        filter: FilterPredicate,
        projection: Sequence[str],
        sort: Sequence[SortKey],
        skip: int,
        limit: int,
    ) -> List[Document]:
        statement = select(*self.selected_columns(projection))
        clauses = self.where_clauses(filter)
        if clauses:
            statement = statement.where(*clauses)
        statement = statement.order_by(*self.order_by(sort)).offset(skip).limit(limit)

        result = await self.session.execute(statement)
        documents: List[Dict[str, Any]] = [dict(row) for row in result.mappings().all()]
        logger.debug("Fetched %d food documents (skip=%d, limit=%d)", len(documents), skip, limit)
        return documents
