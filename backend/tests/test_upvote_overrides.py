"""Optimistic upvote tests — success, rollback, background writes, reconcile."""

import asyncio
import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from product_flow.database import Base, make_session_factory
from product_flow.exceptions import StoreUnavailable
from product_flow.schemas.idea_schema import IdeaCreate
from product_flow.services.idea_service import create_idea, get_idea, upvote_idea
from product_flow.services.record_store import RecordStore
from product_flow.services.upvote_overrides import UpvoteOverrides, UpvoteState

TEST_DATABASE_URL = "sqlite:///./test_upvote_overrides.db"
SessionLocal = make_session_factory(TEST_DATABASE_URL)
engine = SessionLocal.kw["bind"]
store = RecordStore(SessionLocal)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


async def _new_idea():
    return await create_idea(
        store,
        IdeaCreate(portfolio_code="test", product_code="test-web-app", name="Beta Feature", hypothesis="H"),
    )


async def _failing_writer(store, idea_id, observed):
    raise StoreUnavailable("Idea.update timed out after 10.0s")


class TestUpvote:
    @pytest.mark.asyncio
    async def test_success_keeps_optimistic_count(self):
        idea = await _new_idea()
        overrides = UpvoteOverrides(store)

        outcome = await overrides.upvote(idea)

        assert outcome.ok is True
        assert outcome.displayed == 1
        assert overrides.displayed(idea) == 1
        assert overrides.state(idea.id) is UpvoteState.STABLE
        assert (await get_idea(store, idea.id)).upvotes == 1

    @pytest.mark.asyncio
    async def test_failure_rolls_back_to_pre_click_count(self):
        idea = await _new_idea()
        idea = await upvote_idea(store, idea.id, 4)
        overrides = UpvoteOverrides(store, writer=_failing_writer)

        outcome = await overrides.upvote(idea)

        assert outcome.ok is False
        assert overrides.displayed(idea) == 5
        assert outcome.displayed == 5
        assert "Failed to update upvotes" in overrides.last_error
        assert (await get_idea(store, idea.id)).upvotes == 5

    @pytest.mark.asyncio
    async def test_error_can_be_dismissed(self):
        idea = await _new_idea()
        overrides = UpvoteOverrides(store, writer=_failing_writer)
        await overrides.upvote(idea)
        overrides.dismiss_error()
        assert overrides.last_error is None

    @pytest.mark.asyncio
    async def test_consecutive_clicks_build_on_displayed_count(self):
        idea = await _new_idea()
        overrides = UpvoteOverrides(store)
        await overrides.upvote(idea)
        await overrides.upvote(idea)
        assert overrides.displayed(idea) == 2
        assert (await get_idea(store, idea.id)).upvotes == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_rolls_back_and_propagates(self):
        async def broken_writer(store, idea_id, observed):
            raise RuntimeError("boom")

        idea = await _new_idea()
        overrides = UpvoteOverrides(store, writer=broken_writer)
        with pytest.raises(RuntimeError):
            await overrides.upvote(idea)
        assert overrides.displayed(idea) == 0


class TestSchedule:
    @pytest.mark.asyncio
    async def test_displayed_count_moves_before_write(self):
        release = asyncio.Event()

        async def slow_writer(store, idea_id, observed):
            await release.wait()
            raise StoreUnavailable("store down")

        idea = await _new_idea()
        overrides = UpvoteOverrides(store, writer=slow_writer)

        task = overrides.schedule(idea)
        assert overrides.displayed(idea) == 1
        assert overrides.state(idea.id) is UpvoteState.PENDING

        release.set()
        outcome = await task
        assert outcome.ok is False
        assert overrides.displayed(idea) == 0
        assert overrides.state(idea.id) is UpvoteState.STABLE

    @pytest.mark.asyncio
    async def test_late_failure_keeps_newer_click(self):
        release = asyncio.Event()

        async def writer(store, idea_id, observed):
            if observed == 0:
                await release.wait()
                raise StoreUnavailable("store down")
            return await upvote_idea(store, idea_id, observed)

        idea = await _new_idea()
        overrides = UpvoteOverrides(store, writer=writer)
        first = overrides.schedule(idea)
        assert overrides.displayed(idea) == 1

        second = await overrides.schedule(idea)
        assert second.ok is True
        assert overrides.displayed(idea) == 2

        release.set()
        outcome = await first
        assert outcome.ok is False
        assert outcome.displayed == 2
        assert overrides.displayed(idea) == 2
        assert overrides.state(idea.id) is UpvoteState.STABLE
        assert "Failed to update upvotes" in overrides.last_error
        assert (await get_idea(store, idea.id)).upvotes == 2


class TestApplyAndReconcile:
    @pytest.mark.asyncio
    async def test_apply_merges_without_mutating(self):
        idea = await _new_idea()
        overrides = UpvoteOverrides(store)
        await overrides.upvote(idea)

        merged = overrides.apply([idea])
        assert merged[0].upvotes == 1
        assert idea.upvotes == 0

    @pytest.mark.asyncio
    async def test_reconcile_keeps_pending_rows(self):
        release = asyncio.Event()

        async def slow_writer(store, idea_id, observed):
            await release.wait()
            return await upvote_idea(store, idea_id, observed)

        settled = await _new_idea()
        pending = await _new_idea()
        overrides = UpvoteOverrides(store)
        await overrides.upvote(settled)
        overrides._writer = slow_writer
        task = overrides.schedule(pending)

        overrides.reconcile([settled.model_copy(update={"upvotes": 7}), pending])
        assert overrides.displayed(settled.model_copy(update={"upvotes": 7})) == 7
        assert overrides.displayed(pending) == 1

        release.set()
        await task
