from __future__ import annotations

import os
import uuid
from collections.abc import Iterator

import pytest
from pymongo import MongoClient


@pytest.fixture(scope="session")
def mongo_url() -> str:
    """
    MongoDB URL for integration tests.

    Set REPLIMONGO_TEST_MONGO_URL (e.g. mongodb://127.0.0.1:27017) to run
    them; they are skipped otherwise.
    """
    url = os.environ.get("REPLIMONGO_TEST_MONGO_URL")
    if not url:
        pytest.skip("REPLIMONGO_TEST_MONGO_URL is not set")
    return url


@pytest.fixture
def database_name(mongo_url: str) -> Iterator[str]:
    """
    Per-test database, dropped afterwards.

    We fail fast if MongoDB is unreachable, so failures are actionable.
    """
    client = MongoClient(mongo_url, serverSelectionTimeoutMS=2000)
    try:
        client.admin.command("ping")
    except Exception as exc:  # pragma: no cover
        client.close()
        pytest.fail(
            "MongoDB test server is not reachable.\n"
            f"- REPLIMONGO_TEST_MONGO_URL={mongo_url!r}\n"
            f"- Underlying error: {exc}",
            pytrace=False,
        )

    name = f"replimongo_test_{uuid.uuid4().hex[:10]}"
    yield name

    client.drop_database(name)
    client.close()
