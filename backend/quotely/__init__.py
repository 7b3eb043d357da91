"""
Quotely Backend — Application Package Initializer
==================================================

What: Marks the `quotely` directory as a Python package.
Who:  Imported by uvicorn (`quotely.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, bearer auth
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← credentials, tokens, tags, quotes
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch SQL; services never build HTTP responses.
"""

__version__ = "1.0.0"
