"""
Todo Service - Todo Business Logic Tests
=========================================

What:  Tests for TodoService (create, get, list, update, toggle, delete).
How:   Real InMemoryTodoStore and SequentialUUIDGenerator; a mocked store
       where a failure or race has to be forced.

What we test:
    ✅ New todos get a fresh id and completed=false
    ✅ Unknown ids raise NotFoundError
    ✅ Blank, too long and empty-update input raises ValidationError
    ✅ Toggle twice restores the original state, also when concurrent
    ✅ Accepted text is stored exactly as given
    ✅ Store failures propagate unchanged
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from todo_service.exceptions import NotFoundError, StoreError, ValidationError
from todo_service.schemas.todo import Todo, TodoUpdate
from todo_service.services.todo_service import TodoService
from todo_service.services.todo_store import InMemoryTodoStore, SqlTodoStore
from todo_service.services.uuid_generator import SequentialUUIDGenerator

FIRST_ID = "00000000-0000-0000-0000-000000000001"
SECOND_ID = "00000000-0000-0000-0000-000000000002"


class TestTodoServiceCreate:
    """Tests for create_todo and list_todos."""

    def setup_method(self):
        self.store = InMemoryTodoStore()
        self.service = TodoService(self.store, SequentialUUIDGenerator(), max_text_length=20)

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_defaults(self):
        todo = await self.service.create_todo("buy milk")
        assert todo == Todo(id=FIRST_ID, text="buy milk", completed=False)
        assert await self.store.get(FIRST_ID) == todo

    @pytest.mark.asyncio
    async def test_create_keeps_text_as_given(self):
        todo = await self.service.create_todo("  buy milk \n")
        assert todo.text == "  buy milk \n"
        assert await self.service.get_todo(todo.id) == todo

    @pytest.mark.asyncio
    async def test_ids_are_distinct(self):
        first = await self.service.create_todo("a")
        second = await self.service.create_todo("b")
        assert (first.id, second.id) == (FIRST_ID, SECOND_ID)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    async def test_blank_text_rejected(self, text):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_todo(text)
        assert exc_info.value.field == "text"
        assert await self.store.list() == []

    @pytest.mark.asyncio
    async def test_text_length_limit(self):
        await self.service.create_todo("x" * 20)
        with pytest.raises(ValidationError):
            await self.service.create_todo("x" * 21)

    @pytest.mark.asyncio
    async def test_list_in_creation_order(self):
        for text in ("one", "two", "three"):
            await self.service.create_todo(text)
        assert [t.text for t in await self.service.list_todos()] == ["one", "two", "three"]


class TestTodoServiceLookup:
    """Tests for get_todo, update_todo, toggle_todo and delete_todo."""

    def setup_method(self):
        self.store = InMemoryTodoStore()
        self.service = TodoService(self.store, SequentialUUIDGenerator())

    @pytest.mark.asyncio
    async def test_get_after_create(self):
        created = await self.service.create_todo("buy milk")
        assert await self.service.get_todo(created.id) == created

    @pytest.mark.asyncio
    async def test_get_unknown_raises(self):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_todo("nope")
        assert exc_info.value.status_code == 404
        assert "nope" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_update_text_only(self):
        created = await self.service.create_todo("buy milk")
        updated = await self.service.update_todo(created.id, TodoUpdate(text="buy oat milk"))
        assert updated == Todo(id=created.id, text="buy oat milk", completed=False)
        assert await self.service.get_todo(created.id) == updated

    @pytest.mark.asyncio
    async def test_update_completed_only(self):
        created = await self.service.create_todo("buy milk")
        updated = await self.service.update_todo(created.id, TodoUpdate(completed=True))
        assert updated.text == "buy milk"
        assert updated.completed is True

    @pytest.mark.asyncio
    async def test_update_never_changes_id(self):
        created = await self.service.create_todo("a")
        updated = await self.service.update_todo(created.id, TodoUpdate(text="b", completed=True))
        assert updated.id == created.id

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self):
        created = await self.service.create_todo("a")
        with pytest.raises(ValidationError):
            await self.service.update_todo(created.id, TodoUpdate())

    @pytest.mark.asyncio
    async def test_update_blank_text_rejected(self):
        created = await self.service.create_todo("a")
        with pytest.raises(ValidationError):
            await self.service.update_todo(created.id, TodoUpdate(text=" "))
        assert (await self.service.get_todo(created.id)).text == "a"

    @pytest.mark.asyncio
    async def test_update_unknown_raises(self):
        with pytest.raises(NotFoundError):
            await self.service.update_todo("nope", TodoUpdate(completed=True))

    @pytest.mark.asyncio
    async def test_toggle_twice_restores(self):
        created = await self.service.create_todo("a")
        toggled = await self.service.toggle_todo(created.id)
        assert toggled.completed is True
        restored = await self.service.toggle_todo(created.id)
        assert restored == created

    @pytest.mark.asyncio
    async def test_toggle_unknown_raises(self):
        with pytest.raises(NotFoundError):
            await self.service.toggle_todo("nope")

    @pytest.mark.asyncio
    async def test_delete(self):
        created = await self.service.create_todo("a")
        await self.service.delete_todo(created.id)
        with pytest.raises(NotFoundError):
            await self.service.get_todo(created.id)
        assert await self.service.list_todos() == []

    @pytest.mark.asyncio
    async def test_delete_twice_raises(self):
        created = await self.service.create_todo("a")
        await self.service.delete_todo(created.id)
        with pytest.raises(NotFoundError):
            await self.service.delete_todo(created.id)


class TestTodoServiceStoreFailures:
    """Behaviour when the store misbehaves."""

    def setup_method(self):
        self.store = AsyncMock()
        self.service = TodoService(self.store, SequentialUUIDGenerator())

    @pytest.mark.asyncio
    async def test_store_error_propagates(self):
        self.store.add.side_effect = StoreError(context={"operation": "add"})
        with pytest.raises(StoreError):
            await self.service.create_todo("a")

    @pytest.mark.asyncio
    async def test_update_of_vanished_todo(self):
        self.store.update.return_value = None
        with pytest.raises(NotFoundError):
            await self.service.toggle_todo("x")


@pytest_asyncio.fixture(params=["memory", "database"])
async def concurrent_service(request, tmp_path):
    if request.param == "memory":
        store = InMemoryTodoStore()
    else:
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'todos.db'}")
        store = SqlTodoStore(engine, create_tables=True)
    await store.startup()
    yield TodoService(store, SequentialUUIDGenerator())
    await store.shutdown()


class TestTodoServiceConcurrency:
    """Concurrent changes to one todo must all take effect."""

    @pytest.mark.asyncio
    async def test_two_concurrent_toggles_restore(self, concurrent_service):
        created = await concurrent_service.create_todo("x")
        await asyncio.gather(
            concurrent_service.toggle_todo(created.id),
            concurrent_service.toggle_todo(created.id),
        )
        assert (await concurrent_service.get_todo(created.id)).completed is False

    @pytest.mark.asyncio
    async def test_concurrent_text_and_completed_updates(self, concurrent_service):
        created = await concurrent_service.create_todo("buy milk")
        await asyncio.gather(
            concurrent_service.update_todo(created.id, TodoUpdate(text="buy oat milk")),
            concurrent_service.update_todo(created.id, TodoUpdate(completed=True)),
        )
        assert await concurrent_service.get_todo(created.id) == Todo(
            id=created.id, text="buy oat milk", completed=True
        )
