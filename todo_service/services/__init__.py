"""
Todo Service - Services Layer
==============================

What:  Business logic between routes (HTTP) and stores (persistence).
How:   Services are plain classes built by create_app() with their
       collaborators passed in, then reached from handlers through the
       dependencies in todo_service.dependencies.

Service Inventory:
    - TodoService: list / create / get / update / delete / toggle
    - AuthService + TokenStore: token issuing and validation
    - TodoStore (abstract): InMemoryTodoStore, SqlTodoStore
    - UUIDGenerator (abstract): SimpleUUIDGenerator, SequentialUUIDGenerator
    - IPLookupService: best-effort origin lookup
"""
