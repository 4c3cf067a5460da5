"""Tests for the sliding-window rate limiter."""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from api.errors import register_exception_handlers
from api.middleware.rate_limit import (
    InMemoryRateLimitStore,
    RateLimiter,
    rate_limit,
    reset_rate_limiters,
)
from shared.exceptions import RateLimitError


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def never() -> float:
    return 1.0


def always() -> float:
    return 0.0


@pytest.fixture
def clock():
    return FakeClock()


class TestRateLimiter:
    def test_allows_up_to_max(self, clock):
        limiter = RateLimiter(60_000, 5, clock=clock, rand=never)

        for _ in range(5):
            limiter.hit("1.2.3.4")

        assert len(limiter.store.get("1.2.3.4")) == 5

    def test_rejects_over_max(self, clock):
        """The sixth request within the window is rejected."""
        limiter = RateLimiter(60_000, 5, "Slow down", clock=clock, rand=never)
        for _ in range(5):
            limiter.hit("1.2.3.4")
            clock.advance(1_000)

        with pytest.raises(RateLimitError) as exc_info:
            limiter.hit("1.2.3.4")

        error = exc_info.value
        assert error.message == "Slow down"
        assert 0 < error.retry_after <= 60
        # Oldest request was 5s ago: it leaves the window in 55s
        assert error.retry_after == 55

    def test_rejected_requests_are_not_counted(self, clock):
        limiter = RateLimiter(60_000, 2, clock=clock, rand=never)
        limiter.hit("k")
        limiter.hit("k")
        for _ in range(3):
            with pytest.raises(RateLimitError):
                limiter.hit("k")

        assert len(limiter.store.get("k")) == 2

    def test_allows_again_after_window(self, clock):
        limiter = RateLimiter(60_000, 5, clock=clock, rand=never)
        for _ in range(5):
            limiter.hit("1.2.3.4")

        clock.advance(60_001)

        limiter.hit("1.2.3.4")
        assert len(limiter.store.get("1.2.3.4")) == 1

    def test_window_slides(self, clock):
        """Only requests inside the trailing window count."""
        limiter = RateLimiter(10_000, 2, clock=clock, rand=never)
        limiter.hit("k")
        clock.advance(6_000)
        limiter.hit("k")
        clock.advance(5_000)

        limiter.hit("k")

        with pytest.raises(RateLimitError) as exc_info:
            limiter.hit("k")
        assert exc_info.value.retry_after == 5

    def test_keys_are_independent(self, clock):
        limiter = RateLimiter(60_000, 1, clock=clock, rand=never)
        limiter.hit("a")
        limiter.hit("b")
        with pytest.raises(RateLimitError):
            limiter.hit("a")

    def test_sweep_evicts_idle_keys(self, clock):
        """An occasional sweep drops keys whose timestamps all expired."""
        store = InMemoryRateLimitStore()
        limiter = RateLimiter(60_000, 5, store=store, clock=clock, rand=never)
        limiter.hit("idle")
        clock.advance(61_000)

        limiter._rand = always
        limiter.hit("busy")

        assert store.keys() == ["busy"]

    def test_no_sweep_without_luck(self, clock):
        store = InMemoryRateLimitStore()
        limiter = RateLimiter(60_000, 5, store=store, clock=clock, rand=never)
        limiter.hit("idle")
        clock.advance(61_000)

        limiter.hit("busy")

        assert sorted(store.keys()) == ["busy", "idle"]

    def test_sweep_prunes_old_timestamps(self, clock):
        store = InMemoryRateLimitStore()
        limiter = RateLimiter(60_000, 5, store=store, clock=clock, rand=never)
        limiter.hit("k")
        clock.advance(30_000)
        limiter.hit("k")
        clock.advance(31_000)

        limiter.sweep()

        assert store.get("k") == [clock.now - 31_000]

    def test_reset(self, clock):
        limiter = RateLimiter(60_000, 1, clock=clock, rand=never)
        limiter.hit("k")
        limiter.reset()
        limiter.hit("k")

    @pytest.mark.parametrize("window_ms, max_requests", [(0, 5), (1000, 0), (-1, 1)])
    def test_rejects_bad_configuration(self, window_ms, max_requests):
        with pytest.raises(ValueError):
            RateLimiter(window_ms, max_requests)


class TestRateLimitRegistry:
    def test_reset_rate_limiters(self):
        limiter = rate_limit(60_000, 1)
        limiter.hit("k")

        reset_rate_limiters()

        limiter.hit("k")

    def test_custom_store(self):
        store = InMemoryRateLimitStore()
        limiter = rate_limit(60_000, 3, store=store)
        limiter.hit("k")
        assert len(store) == 1


class TestRateLimitDependency:
    @pytest.fixture
    def limited_client(self, clock):
        limiter = RateLimiter(60_000, 5, "Too many requests, slow down", clock=clock, rand=never)
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/limited", dependencies=[Depends(limiter)])
        async def limited():
            return {"ok": True}

        return TestClient(app)

    def test_returns_429_with_retry_after(self, limited_client):
        for _ in range(5):
            assert limited_client.get("/limited").status_code == 200

        response = limited_client.get("/limited")

        assert response.status_code == 429
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "RATE_LIMITED"
        assert body["message"] == "Too many requests, slow down"
        assert body["retryAfter"] == 60
        assert response.headers["retry-after"] == "60"

    def test_login_endpoint_is_limited(self, client):
        """Login allows 10 attempts per window per client."""
        for _ in range(10):
            response = client.post(
                "/api/auth/login",
                json={"email": "nobody@example.com", "password": "wrong"},
            )
            assert response.status_code == 401

        response = client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": "wrong"},
        )

        assert response.status_code == 429
        assert response.json()["message"] == "Too many login attempts, please try again later"

    def test_register_endpoint_is_limited(self, client):
        for i in range(5):
            client.post("/api/auth/register", json={
                "username": f"user{i}x",
                "email": f"user{i}x@example.com",
                "password": "secret123",
            })

        response = client.post("/api/auth/register", json={
            "username": "onemore",
            "email": "onemore@example.com",
            "password": "secret123",
        })

        assert response.status_code == 429

    def test_users_limit_runs_before_auth(self, client):
        """Anonymous floods on admin routes are limited too."""
        for _ in range(50):
            assert client.get("/api/users").status_code == 401

        assert client.get("/api/users").status_code == 429
