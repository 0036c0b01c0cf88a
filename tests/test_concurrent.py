"""Tests that the server handles multiple concurrent connections correctly.

The app is async (FastAPI + asyncpg pool) and serves requests concurrently on
one event loop. These tests assert that many simultaneous requests succeed, return
correct results, and keep counters exact.
"""

import asyncio

import pytest

from shortlink.counters import period_keys
from shortlink.database.memory import InMemoryShortlinkDB
from shortlink.errors import DailyLimitExceeded, MonthlyLimitExceeded
from shortlink.url_service import URLShortenerService

from conftest import TEST_BASE_URL, TEST_DAILY_LIMIT, TEST_MONTHLY_LIMIT


async def logged_in_headers(client, notifier, username="a@b.com", password="p1"):
    await client.post(
        "/api/auth/signup",
        json={"firstName": "A", "lastName": "B", "username": username, "password": password},
    )
    token = notifier.activation_token_for(username)
    await client.patch(f"/api/auth/activation/{token}")
    response = await client.post("/api/auth/login", json={"username": username, "password": password})
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


class TestConcurrentConnections:
    """Prove the server handles many simultaneous requests."""

    async def test_concurrent_health_requests(self, client):
        """Many concurrent GET /api/health requests all succeed."""
        concurrency = 50
        tasks = [client.get("/api/health") for _ in range(concurrency)]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 200, f"Request {i}: status {r.status_code}"
            assert r.json()["status"] == "healthy"

    async def test_concurrent_redirects_count_every_visit(self, client, notifier):
        """Concurrent visits to one short URL are all counted."""
        headers = await logged_in_headers(client, notifier)
        created = await client.post(
            "/api/url/short-url", json={"origUrl": "https://example.com"}, headers=headers
        )
        url_id = created.json()["urlId"]

        concurrency = 40
        tasks = [client.get(f"/{url_id}", follow_redirects=False) for _ in range(concurrency)]
        responses = await asyncio.gather(*tasks)

        assert all(r.status_code == 302 for r in responses)
        listed = await client.get("/api/url/created-url", headers=headers)
        assert listed.json()[0]["count"] == concurrency

    async def test_concurrent_shorten_for_many_users(self, client, notifier):
        """Each user's concurrent requests get unique codes."""
        users = [f"user{i}@example.com" for i in range(5)]
        all_headers = [await logged_in_headers(client, notifier, username=u) for u in users]

        tasks = [
            client.post("/api/url/short-url", json={"origUrl": f"https://example.com/{i}"}, headers=h)
            for h in all_headers
            for i in range(2)
        ]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        url_ids = []
        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 201, f"Request {i}: {r.status_code} {r.text}"
            url_ids.append(r.json()["urlId"])

        assert len(set(url_ids)) == len(url_ids)

    async def test_concurrent_signups_same_username(self, client):
        """Only one of several simultaneous signups for a username wins."""
        body = {"firstName": "A", "lastName": "B", "username": "race@example.com", "password": "p1"}

        responses = await asyncio.gather(*[client.post("/api/auth/signup", json=body) for _ in range(5)])

        codes = sorted(r.status_code for r in responses)
        assert codes == [200, 409, 409, 409, 409]


class YieldingStore(InMemoryShortlinkDB):
    """In-memory store that gives up the event loop before every call.

    Mimics the round trip of a networked store so concurrent requests
    interleave between store operations.
    """

    async def get_user(self, user_id):
        await asyncio.sleep(0)
        return await super().get_user(user_id)

    async def increment_url_counts(self, user_id, day_key, month_key):
        await asyncio.sleep(0)
        return await super().increment_url_counts(user_id, day_key, month_key)

    async def find_short_url(self, user_id, orig_url):
        await asyncio.sleep(0)
        return await super().find_short_url(user_id, orig_url)

    async def short_code_exists(self, url_id):
        await asyncio.sleep(0)
        return await super().short_code_exists(url_id)

    async def create_short_url(self, short_url):
        await asyncio.sleep(0)
        return await super().create_short_url(short_url)


class TestConcurrentLimits:
    """Limits hold when one user's requests interleave."""

    async def test_daily_limit_holds_under_concurrency(self, active_user, logger):
        store = YieldingStore(logger=logger)
        await store.create_user(active_user)
        service = URLShortenerService(
            db=store,
            base_url=TEST_BASE_URL,
            daily_limit=TEST_DAILY_LIMIT,
            monthly_limit=100,
            logger=logger,
        )

        results = await asyncio.gather(
            *[service.shorten(f"https://example.com/{i}", active_user.id) for i in range(10)],
            return_exceptions=True,
        )

        created = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, DailyLimitExceeded)]
        assert len(created) == TEST_DAILY_LIMIT
        assert len(rejected) == 10 - TEST_DAILY_LIMIT

        user = await store.get_user(active_user.id)
        today, _ = period_keys(service.clock())
        assert user.daily_url_counts[today] == 10
        assert len(await store.list_short_urls(active_user.id)) == TEST_DAILY_LIMIT

    async def test_monthly_limit_holds_under_concurrency(self, active_user, logger):
        store = YieldingStore(logger=logger)
        await store.create_user(active_user)
        service = URLShortenerService(
            db=store,
            base_url=TEST_BASE_URL,
            daily_limit=100,
            monthly_limit=TEST_MONTHLY_LIMIT,
            logger=logger,
        )

        results = await asyncio.gather(
            *[service.shorten(f"https://example.com/{i}", active_user.id) for i in range(12)],
            return_exceptions=True,
        )

        assert sum(isinstance(r, MonthlyLimitExceeded) for r in results) == 12 - TEST_MONTHLY_LIMIT
        assert len(await store.list_short_urls(active_user.id)) == TEST_MONTHLY_LIMIT
