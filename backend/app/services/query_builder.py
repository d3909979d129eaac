"""
Foods API Backend — List Query Builder
========================================

What:  Turns raw query-string parameters into a ListQuery and runs it
       against a Collection.
How:   Reserved directives (select, sort, page, limit) become projection,
       sort keys and a page window; every other parameter becomes a typed
       FieldCondition. The collection is then asked for a total count and
       for one page of documents, and pagination links are derived.
Who:   FoodService.list_foods(); any other resource listing would reuse it.

Leniency policy:
    Bad `page`/`limit` values fall back to defaults, a page past the end is
    simply empty, and a filter on an unknown field matches nothing. Only
    filter parameters that cannot be read as a condition at all raise
    InvalidFilterSyntax.

Request flow (GET /api/v1/foods?select=name&sort=-name&page=2&limit=5):
    RawParameters ──▶ build() ──▶ ListQuery ──▶ run()
                                                 ├─ collection.count()
                                                 ├─ collection.find()
                                                 └─ paginate()
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from app.config import Settings
from app.exceptions import InvalidFilterSyntax
from app.schemas.query import (
    QUERY_OPERATORS,
    FieldCondition,
    FilterPredicate,
    FilterValue,
    ListQuery,
    ListResult,
    Operator,
    PageLink,
    PageWindow,
    PaginationResult,
    SortDirection,
    SortKey,
)
from app.services.collection_base import Collection

logger = logging.getLogger(__name__)

RawValue = Union[str, List[str], Mapping[str, FilterValue]]
RawParameters = Mapping[str, RawValue]

# Parameter names that steer the query instead of filtering it
RESERVED_PARAMETERS = ("select", "sort", "page", "limit")

DEFAULT_PAGE = 1

# `price[gt]` → field "price", operator "gt"
_BRACKET_KEY = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<operator>[^\[\]]*)\]$")

# Leading base-10 integer, the way query-string integers are usually read ("5abc" → 5)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def collect_raw_parameters(items: Iterable[Tuple[str, str]]) -> Dict[str, RawValue]:
    """
    Group query-string pairs into RawParameters.

    A key seen once maps to its string; a repeated key maps to the list of
    its values in order.
    """
    params: Dict[str, RawValue] = {}
    for key, value in items:
        if key not in params:
            params[key] = value
            continue
        existing = params[key]
        if isinstance(existing, list):
            existing.append(value)
        else:
            params[key] = [existing, value]
    return params


def _first(value: RawValue) -> Optional[str]:
    if isinstance(value, list):
        return value[0] if value else None
    if isinstance(value, str):
        return value
    return None


def _comma_values(value: RawValue) -> List[str]:
    """Split a comma list (or several of them) into trimmed, non-empty parts."""
    chunks = value if isinstance(value, list) else [value]
    parts: List[str] = []
    for chunk in chunks:
        if not isinstance(chunk, str):
            continue
        for part in chunk.split(","):
            part = part.strip()
            if part:
                parts.append(part)
    return parts


def parse_positive_int(value: Optional[RawValue], default: int) -> int:
    """
    Read a positive integer from a query value.

    Absent, unparseable or non-positive values give `default`:
        "2" → 2, "7 pages" → 7, "abc" → default, "0" → default
    """
    text = _first(value) if value is not None else None
    if text is None:
        return default
    match = _LEADING_INT.match(text)
    if not match:
        return default
    number = int(match.group(1))
    return number if number >= 1 else default


class ListQueryBuilder:
    """
    Builds and executes list queries.

    Configuration comes from the Settings object handed in at construction:
        default_page_limit:    limit when none is given
        max_page_limit:        upper bound for any limit
        default_sort:          sort directive when none is given ("-name")
        count_filtered_total:  count filtered documents instead of all
    """

    def __init__(self, config: Settings):
        self.default_limit = config.default_page_limit
        self.max_limit = config.max_page_limit
        self.default_sort = config.default_sort
        self.count_filtered_total = config.count_filtered_total

    # ── Filters ───────────────────────────────────────────────────────────

    def parse_filter(self, params: RawParameters) -> FilterPredicate:
        """
        Build the filter predicate from every non-reserved parameter.

        Raises:
            InvalidFilterSyntax: malformed bracket key, unknown operator,
                or several values given to a single-value comparison.
        """
        conditions: List[FieldCondition] = []
        for key, value in params.items():
            if key in RESERVED_PARAMETERS:
                continue
            conditions.extend(self._conditions_for(key, value))
        return FilterPredicate(conditions=conditions)

    def _conditions_for(self, key: str, value: RawValue) -> List[FieldCondition]:
        if "[" in key or "]" in key:
            match = _BRACKET_KEY.match(key)
            if not match:
                raise InvalidFilterSyntax(
                    message=f"Malformed filter parameter '{key}'",
                    parameter=key,
                )
            field = match.group("field").strip()
            return [self._comparison(key, field, match.group("operator"), value)]

        if isinstance(value, Mapping):
            if not value:
                raise InvalidFilterSyntax(
                    message=f"Filter parameter '{key}' has no operators",
                    parameter=key,
                )
            return [
                self._comparison(key, key, operator, operand)
                for operator, operand in value.items()
            ]

        if isinstance(value, list):
            return [FieldCondition(field=key, operator=Operator.IN, value=list(value))]
        return [FieldCondition(field=key, operator=Operator.EQUALS, value=value)]

    def _comparison(
        self, key: str, field: str, token: str, value: Any
    ) -> FieldCondition:
        operator = QUERY_OPERATORS.get(token)
        if not field or operator is None:
            raise InvalidFilterSyntax(
                message=f"Unsupported filter operator in '{key}'",
                parameter=key,
                context={"operator": token, "supported": sorted(QUERY_OPERATORS)},
            )
        if operator is Operator.IN:
            return FieldCondition(field=field, operator=operator, value=_comma_values(value))
        if isinstance(value, list):
            if len(value) != 1:
                raise InvalidFilterSyntax(
                    message=f"Filter operator '{token}' on '{field}' takes a single value",
                    parameter=key,
                )
            value = value[0]
        if not isinstance(value, str):
            raise InvalidFilterSyntax(
                message=f"Filter parameter '{key}' has an unreadable value",
                parameter=key,
            )
        return FieldCondition(field=field, operator=operator, value=value)

    # ── Projection & Sort ─────────────────────────────────────────────────

    def parse_projection(self, params: RawParameters) -> List[str]:
        """`select=name,calories` → ["name", "calories"]; absent → [] (all fields)."""
        raw = params.get("select")
        if raw is None:
            return []
        fields: List[str] = []
        for name in _comma_values(raw):
            if name not in fields:
                fields.append(name)
        return fields

    def parse_sort(self, params: RawParameters) -> List[SortKey]:
        """`sort=-name,calories` → [name desc, calories asc]; absent → default_sort."""
        raw = params.get("sort")
        keys = self._sort_keys(raw) if raw is not None else []
        return keys or self._sort_keys(self.default_sort)

    @staticmethod
    def _sort_keys(raw: RawValue) -> List[SortKey]:
        keys: List[SortKey] = []
        for token in _comma_values(raw):
            direction = SortDirection.ASC
            if token.startswith("-"):
                direction = SortDirection.DESC
                token = token[1:].strip()
            if token:
                keys.append(SortKey(field=token, direction=direction))
        return keys

    # ── Pagination ────────────────────────────────────────────────────────

    def parse_window(self, params: RawParameters) -> PageWindow:
        page = parse_positive_int(params.get("page"), DEFAULT_PAGE)
        limit = parse_positive_int(params.get("limit"), self.default_limit)
        return PageWindow(page=page, limit=min(limit, self.max_limit))

    @staticmethod
    def paginate(window: PageWindow, total: int) -> PaginationResult:
        """Links to the neighbouring pages that exist for `total` documents."""
        pagination = PaginationResult()
        if window.end_index < total:
            pagination.next = PageLink(page=window.page + 1, limit=window.limit)
        if window.start_index > 0:
            pagination.prev = PageLink(page=window.page - 1, limit=window.limit)
        return pagination

    # ── Entry Points ──────────────────────────────────────────────────────

    def build(self, params: RawParameters) -> ListQuery:
        """Translate RawParameters into a ListQuery without touching the store."""
        return ListQuery(
            filter=self.parse_filter(params),
            projection=self.parse_projection(params),
            sort=self.parse_sort(params),
            window=self.parse_window(params),
        )

    async def run(self, collection: Collection, params: RawParameters) -> ListResult:
        """
        Build the query, count, fetch one page and compute pagination links.

        The count and the fetch are two separate reads, so under concurrent
        writes the total may not match the page exactly.
        """
        query = self.build(params)
        logger.debug(
            "List query: filter=%s projection=%s sort=%s page=%d limit=%d",
            query.filter.as_store_filter(),
            query.projection,
            [key.as_pair() for key in query.sort],
            query.window.page,
            query.window.limit,
        )

        total = await collection.count(query.filter if self.count_filtered_total else None)

        # A window past the last document is empty; the store is never asked
        # for an offset it may not be able to represent.
        if query.window.start_index >= total:
            items = []
        else:
            items = await collection.find(
                query.filter,
                query.projection,
                query.sort,
                skip=query.window.start_index,
                limit=query.window.limit,
            )

        return ListResult(
            items=items,
            pagination=self.paginate(query.window, total),
            total=total,
        )
