"""
Foods API Backend — Application Package Initializer
====================================================

What: Marks the `app` directory as a Python package.
Who:  Imported by uvicorn (`app.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is layered the same way for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Query building, validation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Collection (Document Access)    │  ← count / find over the store
    └─────────────────────────────────────┘

    Routes translate HTTP to service calls; services own the rules for
    listing, creating and updating foods; the collection layer is the only
    code that speaks SQLAlchemy query syntax.
"""

__version__ = "1.0.0"
