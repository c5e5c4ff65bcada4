"""
Todo Service - Application Package Initializer
===============================================

What: Marks the `todo_service` directory as a Python package.
Who:  Used by uvicorn, Alembic, pytest and the `todo-service` console script.

Architecture Note:
    The service follows the same layered architecture throughout:

    ┌─────────────────────────────────────┐
    │     Routes (explicit route table)   │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Todos, Auth, IP lookup) │  ← Business rules, validation
    ├─────────────────────────────────────┤
    │   Schemas & Codec (wire contract)   │  ← Pydantic models, JSON text
    ├─────────────────────────────────────┤
    │   Stores (memory or SQLAlchemy)     │  ← Todo collection, tokens
    └─────────────────────────────────────┘

    Routes never touch a store directly; services never see a Request.
"""

__version__ = "0.1.0"
