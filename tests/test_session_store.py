"""Tests for the in-memory session store."""

import pytest

from order_support.conversation.session_store import InMemorySessionStore, SessionNotFoundError
from order_support.schemas.session_schema import SessionData


class TestInMemorySessionStore:
    def setup_method(self):
        self.store = InMemorySessionStore()

    def test_get_unknown_returns_none(self):
        assert self.store.get("nobody") is None

    def test_create_and_get(self):
        session = self.store.create(SessionData(user_id="u1"))
        assert self.store.get("u1") is session
        assert "u1" in self.store
        assert len(self.store) == 1

    def test_duplicate_create_rejected(self):
        self.store.create(SessionData(user_id="u1"))
        with pytest.raises(ValueError):
            self.store.create(SessionData(user_id="u1"))

    def test_evict(self):
        self.store.create(SessionData(user_id="u1"))
        assert self.store.evict("u1") is True
        assert self.store.get("u1") is None
        assert self.store.evict("u1") is False

    def test_get_or_raise(self):
        with pytest.raises(SessionNotFoundError) as exc_info:
            self.store.get_or_raise("ghost")
        assert exc_info.value.user_id == "ghost"
        assert "ghost" in str(exc_info.value)
