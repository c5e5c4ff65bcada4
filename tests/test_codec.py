"""
Todo Service - JSON Codec Tests
================================

What:  Tests for encode() / decode().
How:   Pure functions, no fixtures needed.

What we test:
    ✅ Wire field names (clientId, issuedAt) and round trips
    ✅ Lists encode to JSON arrays
    ✅ DecodeError on empty bodies, invalid JSON, missing fields,
       wrong types and unknown fields
    ✅ Secrets never appear in decode error messages
"""

import json
from datetime import datetime, timezone

import pytest

from todo_service import codec
from todo_service.exceptions import DecodeError
from todo_service.schemas.auth import Credentials, OAuthError, OAuthToken
from todo_service.schemas.todo import Todo, TodoCreate, TodoUpdate


class TestEncode:
    """Tests for encode()."""

    def test_todo_fields(self):
        todo = Todo(id="abc", text="buy milk", completed=False)
        assert json.loads(codec.encode(todo)) == {
            "id": "abc",
            "text": "buy milk",
            "completed": False,
        }

    def test_token_uses_camel_case_names(self):
        token = OAuthToken(
            token="t-1",
            client_id="todo-web",
            issued_at=datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc),
        )
        payload = json.loads(codec.encode(token))
        assert payload["clientId"] == "todo-web"
        assert payload["issuedAt"].startswith("2026-10-19T12:00:00")
        assert "client_id" not in payload

    def test_list_encodes_to_array(self):
        todos = [Todo(id="1", text="a", completed=False), Todo(id="2", text="b", completed=True)]
        payload = json.loads(codec.encode(todos))
        assert [t["id"] for t in payload] == ["1", "2"]
        assert payload[1]["completed"] is True

    def test_empty_list(self):
        assert codec.encode([]) == "[]"


class TestDecode:
    """Tests for decode()."""

    def test_round_trip_todo(self):
        todo = Todo(id="abc", text="write tests", completed=True)
        assert codec.decode(Todo, codec.encode(todo)) == todo

    def test_round_trip_token(self):
        token = OAuthToken(
            token="t-1",
            client_id="cli",
            issued_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )
        assert codec.decode(OAuthToken, codec.encode(token)) == token

    def test_round_trip_error(self):
        error = OAuthError(code="invalid_token", description="The access token is invalid")
        assert codec.decode(OAuthError, codec.encode(error)) == error

    def test_accepts_bytes(self):
        body = codec.decode(TodoCreate, b'{"text": "buy milk"}')
        assert body.text == "buy milk"

    def test_todo_requires_completed(self):
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(Todo, '{"id": "1", "text": "x"}')
        assert "completed" in exc_info.value.message

    def test_update_fields_are_optional(self):
        update = codec.decode(TodoUpdate, '{"completed": true}')
        assert update.text is None
        assert update.completed is True
        assert not update.is_empty
        assert codec.decode(TodoUpdate, "{}").is_empty

    @pytest.mark.parametrize("body", ["", "   ", b""])
    def test_empty_body(self, body):
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(TodoCreate, body)
        assert "empty" in exc_info.value.message

    def test_invalid_json(self):
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(TodoCreate, '{"text": ')
        assert exc_info.value.code == "decode_error"
        assert exc_info.value.status_code == 400

    def test_missing_required_field(self):
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(Todo, '{"id": "1"}')
        assert "text" in exc_info.value.message

    def test_wrong_type_is_not_coerced(self):
        with pytest.raises(DecodeError):
            codec.decode(Todo, '{"id": "1", "text": "x", "completed": "true"}')

    def test_unknown_field_rejected(self):
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(TodoCreate, '{"text": "x", "priority": 3}')
        assert "priority" in exc_info.value.message

    def test_not_an_object(self):
        with pytest.raises(DecodeError):
            codec.decode(TodoCreate, '["buy milk"]')

    def test_secret_not_echoed(self):
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(Credentials, '{"clientSecret": "hunter2"}')
        assert "hunter2" not in exc_info.value.message
        assert "clientId" in exc_info.value.message
