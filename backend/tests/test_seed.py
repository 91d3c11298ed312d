"""Seed script tests."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from product_flow.database import Base, make_session_factory
from product_flow.seed import TEST_IDEAS, seed_test_data
from product_flow.services.idea_service import list_ideas
from product_flow.services.record_store import RecordStore
from product_flow.services.studio_service import resolve_login

TEST_DATABASE_URL = "sqlite:///./test_seed.db"
SessionLocal = make_session_factory(TEST_DATABASE_URL)
engine = SessionLocal.kw["bind"]
store = RecordStore(SessionLocal)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.mark.asyncio
async def test_seed_creates_numbered_ideas():
    counts = await seed_test_data(store)
    assert counts["ideas"] == len(TEST_IDEAS)

    ideas = sorted(await list_ideas(store, "test", "test-web-app"), key=lambda i: i.idea_number)
    assert [i.idea_number for i in ideas] == [1, 2, 3, 4, 5]
    assert [i.name for i in ideas] == [idea["name"] for idea in TEST_IDEAS]
    assert all(len(i.status_history) == 1 and i.upvotes == 0 for i in ideas)


@pytest.mark.asyncio
async def test_seed_is_rerunnable():
    await seed_test_data(store)
    await store.create("KBDocument", {
        "title": "Scratch", "content": "x", "portfolio_code": "test", "product_code": "test-web-app",
    })
    await seed_test_data(store)

    assert len(await list_ideas(store, "test", "test-web-app")) == 5
    assert await store.list("KBDocument") == []
    assert len(await store.list("Portfolio")) == 1
    assert len(await store.list("StudioUser")) == 1


@pytest.mark.asyncio
async def test_seeded_owner_can_log_in():
    await seed_test_data(store)
    assert await resolve_login(store, "test@test.io") == "/test/test-web-app/ideas"
