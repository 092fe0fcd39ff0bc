"""
Bookstore Backend — Application Package Initializer
====================================================

What: Marks the `bookstore` directory as a Python package.
Who:  Imported by uvicorn (`bookstore.main:app`), Alembic, and pytest.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, order placement, stats
    ├─────────────────────────────────────┤
    │     Stores (Catalog / Order data)   │  ← Query building, row locking
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services never build HTTP responses.
"""

__version__ = "1.0.0"
