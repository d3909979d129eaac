"""
Foods API Backend — List Query Types
======================================

What:  Typed pieces of a list query: filter conditions, projection, sort keys,
       page window and the pagination links returned to clients.
How:   Immutable Pydantic models built fresh for every request by
       ListQueryBuilder and consumed by a Collection.

Filter model:
    A filter is a list of FieldCondition values. Each condition is one
    (field, operator, value) triple where the operator is a tag from
    Operator. Query strings map onto it like this:

        ?category=light            → (category, eq,  "light")
        ?price[gt]=10              → (price,    gt,  "10")
        ?category[in]=a,b          → (category, in,  ["a", "b"])
        ?category=a&category=b     → (category, in,  ["a", "b"])

    FilterPredicate.as_store_filter() renders the document-store form,
    e.g. {"price": {"$gt": "10"}, "category": "light"}.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_serializer

FilterValue = Union[str, List[str]]

# Prefix the store uses to mark comparison operators inside a filter document
STORE_OPERATOR_MARKER = "$"


class Operator(str, Enum):
    """Comparison operators a filter condition can carry."""

    EQUALS = "eq"
    GREATER_THAN = "gt"
    GREATER_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_OR_EQUAL = "lte"
    IN = "in"

    @property
    def store_tag(self) -> str:
        """Tag used for this operator in a store filter document ("$gt")."""
        return f"{STORE_OPERATOR_MARKER}{self.value}"


# Operators a client may spell out explicitly (`price[gt]=...`); equality is implicit
QUERY_OPERATORS = {
    op.value: op for op in Operator if op is not Operator.EQUALS
}


class FieldCondition(BaseModel):
    """One predicate on one field."""

    field: str
    operator: Operator = Operator.EQUALS
    value: FilterValue

    model_config = {"frozen": True}


class FilterPredicate(BaseModel):
    """Conjunction of field conditions; empty means "match everything"."""

    conditions: List[FieldCondition] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.conditions

    def fields(self) -> List[str]:
        """Distinct field names in first-seen order."""
        seen: List[str] = []
        for condition in self.conditions:
            if condition.field not in seen:
                seen.append(condition.field)
        return seen

    def as_store_filter(self) -> Dict[str, Any]:
        """
        Render the predicate as a store filter document.

        A field with a single equality renders as its literal value; any
        other field renders as one `{"$op": value}` object holding all of its
        conditions, with equality spelled `$eq` there:

            price[gte]=2&price[lt]=5 → {"price": {"$gte": "2", "$lt": "5"}}
            price=3&price[gt]=1      → {"price": {"$eq": "3", "$gt": "1"}}
        """
        grouped: Dict[str, List[FieldCondition]] = {}
        for condition in self.conditions:
            grouped.setdefault(condition.field, []).append(condition)

        document: Dict[str, Any] = {}
        for field, conditions in grouped.items():
            if len(conditions) == 1 and conditions[0].operator is Operator.EQUALS:
                document[field] = conditions[0].value
            else:
                document[field] = {c.operator.store_tag: c.value for c in conditions}
        return document


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortKey(BaseModel):
    field: str
    direction: SortDirection = SortDirection.ASC

    model_config = {"frozen": True}

    def as_pair(self) -> Tuple[str, str]:
        return self.field, self.direction.value


class PageWindow(BaseModel):
    """
    One page of results.

    start_index is the number of documents skipped; end_index is the
    exclusive upper bound used to decide whether a next page exists.
    """

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)

    model_config = {"frozen": True}

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def end_index(self) -> int:
        return self.page * self.limit


class PageLink(BaseModel):
    page: int
    limit: int


class PaginationResult(BaseModel):
    """Links to adjacent pages; a missing link means there is no such page."""

    next: Optional[PageLink] = None
    prev: Optional[PageLink] = None

    @model_serializer(mode="wrap")
    def _drop_missing_links(self, handler):
        return {key: value for key, value in handler(self).items() if value is not None}


class ListQuery(BaseModel):
    """Everything a Collection needs to run one list request."""

    filter: FilterPredicate = Field(default_factory=FilterPredicate)
    projection: List[str] = Field(default_factory=list)
    sort: List[SortKey] = Field(default_factory=list)
    window: PageWindow = Field(default_factory=PageWindow)

    model_config = {"frozen": True}


class ListResult(BaseModel):
    """Outcome of running a ListQuery: one page of documents plus links."""

    items: List[Dict[str, Any]]
    pagination: PaginationResult
    total: int
