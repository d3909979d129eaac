"""
Foods API Backend — Abstract Collection Interface
===================================================

What:  Abstract base class for the document store a list query runs against.
How:   Concrete implementations inherit from Collection and implement
       count() and find(). FoodCollection is the SQLAlchemy-backed one;
       tests use small in-memory subclasses.
Who:   Called by ListQueryBuilder.run().

Contract:
    - count() returns the number of documents, optionally restricted by a
      filter (None ⇒ the whole collection)
    - find() applies filter, projection, sort, skip and limit in that order
      and returns plain dicts
    - A filter on a field the store does not know matches no document;
      projection and sort skip such fields. Neither case is an error
    - Values that cannot be coerced to a field's type raise
      InvalidFilterSyntax
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from app.schemas.query import FilterPredicate, SortKey

Document = Dict[str, Any]


class Collection(ABC):
    """Read access to a set of documents."""

    @abstractmethod
    async def count(self, filter: Optional[FilterPredicate] = None) -> int:
        """Number of documents matching `filter`, or all documents when None."""
        ...

    @abstractmethod
    async def find(
        self,
        filter: FilterPredicate,
        projection: Sequence[str],
        sort: Sequence[SortKey],
        skip: int,
        limit: int,
    ) -> List[Document]:
        """
        Fetch one page of documents.

        Args:
            filter: Conditions every returned document satisfies
            projection: Field names to include; empty ⇒ every field
            sort: Sort keys applied in order
            skip: Number of matching documents to skip
            limit: Maximum number of documents to return

        Returns:
            List of documents as dicts, at most `limit` long.
        """
        ...
