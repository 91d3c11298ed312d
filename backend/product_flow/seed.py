"""Seed the ``test`` portfolio used by end-to-end tests and local development.

Usage:
    python -m product_flow.seed

Existing ``test`` data (ideas, KB documents, studio memberships, the
portfolio itself) is removed first, so the script can be re-run.
"""

import asyncio
import logging
from typing import Dict

from .database import DATABASE_URL, STORE_TIMEOUT_SECONDS, init_db, make_session_factory
from .exceptions import NotFoundError
from .schemas.idea_schema import IdeaCreate
from .services.idea_service import create_idea
from .services.record_store import RecordStore

logger = logging.getLogger(__name__)

TEST_PORTFOLIO = {
    "code": "test",
    "organization_name": "E2E Tests",
    "name": "Test Portfolio",
    "owners": ["test@test.io"],
    "products": [{"code": "test-web-app", "name": "Test Web App"}],
}

TEST_PRODUCT_CODE = "test-web-app"

TEST_IDEAS = [
    {
        "name": "Test Feature One",
        "hypothesis": "If we implement test feature one, then we can verify sorting works correctly.",
        "validation_status": "firstLevel",
        "source": "customerFeedback",
    },
    {
        "name": "Test Feature Two",
        "hypothesis": "If we implement test feature two, then we can verify filtering works correctly.",
        "validation_status": "secondLevel",
        "source": "teamBrainstorm",
    },
    {
        "name": "Alpha Feature",
        "hypothesis": "If we implement alpha feature, then it will sort first alphabetically.",
        "validation_status": "scaling",
        "source": "userResearch",
    },
    {
        "name": "Zebra Feature",
        "hypothesis": "If we implement zebra feature, then it will sort last alphabetically.",
        "validation_status": "firstLevel",
        "source": "marketTrend",
    },
    {
        "name": "Beta Feature",
        "hypothesis": "If we implement beta feature, then upvoting can be tested.",
        "validation_status": "firstLevel",
        "source": "competitorAnalysis",
    },
]

TEST_STUDIO_NAME = "E2E Studio"


async def delete_test_data(store: RecordStore) -> None:
    code = TEST_PORTFOLIO["code"]

    ideas = await store.list("Idea", filter={"portfolio_code": code})
    for idea in ideas:
        await store.delete("Idea", idea["id"])
    logger.info("Deleted %d test ideas", len(ideas))

    documents = await store.list("KBDocument", filter={"portfolio_code": code})
    for document in documents:
        await store.delete("KBDocument", document["id"])
    logger.info("Deleted %d test KB documents", len(documents))

    for studio in await store.list("Studio", filter={"portfolio_id": code}):
        for member in await store.list("StudioUser", filter={"studio_id": studio["id"]}):
            await store.delete("StudioUser", member["id"])
        await store.delete("Studio", studio["id"])

    try:
        await store.delete("Portfolio", code)
    except NotFoundError:
        # First run
        pass


async def seed_test_data(store: RecordStore) -> Dict[str, int]:
    """Recreate the test portfolio, its ideas, and a studio login."""
    await delete_test_data(store)

    await store.create("Portfolio", dict(TEST_PORTFOLIO))

    # Sequential, so the ideas are numbered 1..5 in list order
    for idea in TEST_IDEAS:
        await create_idea(
            store,
            IdeaCreate(portfolio_code=TEST_PORTFOLIO["code"], product_code=TEST_PRODUCT_CODE, **idea),
        )

    studio = await store.create("Studio", {"name": TEST_STUDIO_NAME, "portfolio_id": TEST_PORTFOLIO["code"]})
    for email in TEST_PORTFOLIO["owners"]:
        await store.create("StudioUser", {
            "studio_id": studio["id"],
            "email": email,
            "role": "product_manager",
        })

    return {"portfolios": 1, "ideas": len(TEST_IDEAS), "studio_users": len(TEST_PORTFOLIO["owners"])}


async def _main() -> None:
    session_factory = make_session_factory(DATABASE_URL)
    init_db(session_factory)
    store = RecordStore(session_factory, timeout=STORE_TIMEOUT_SECONDS)

    print(f"Seeding test data into {DATABASE_URL}")
    counts = await seed_test_data(store)
    print(f"   Portfolio:    {TEST_PORTFOLIO['code']}")
    print(f"   Ideas:        {counts['ideas']}")
    print(f"   Studio users: {counts['studio_users']}")
    print("Done")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_main())


if __name__ == "__main__":
    main()
