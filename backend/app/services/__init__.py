# Services package init
"""
Foods API Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - Collection (abstract): count/find contract for a document store
    - FoodCollection: Collection over the `foods` table (SQLAlchemy)
    - ListQueryBuilder: query-string parameters → filter, projection,
      sort, page window → executed list with pagination links
    - FileService: photo validation, storage and lookup
    - FoodService: list/get/create/update/delete/upload for foods
"""
