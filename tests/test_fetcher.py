"""Tests for funding_arb/transport/fetcher.py."""

from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from conftest import FakeResponse, FakeSession
from funding_arb.transport import RateLimiter, ResilientFetcher


def make_fetcher(session: FakeSession, base_delay: float = 0.0, max_retries: int = 3) -> ResilientFetcher:
    return ResilientFetcher(
        name="test",
        limiter=RateLimiter(max_calls=100, window_seconds=60),
        base_delay=base_delay,
        max_retries=max_retries,
        session=session,
    )


class TestResilientFetcher:
    @pytest.mark.asyncio()
    async def test_success_returns_json(self) -> None:
        session = FakeSession(FakeResponse(200, {"code": "0", "data": [1, 2]}))
        fetcher = make_fetcher(session)

        result = await fetcher.fetch("https://x.test/a", headers={"K": "v"}, params={"p": 1})

        assert result.success
        assert result.data == {"code": "0", "data": [1, 2]}
        assert result.attempts == 1
        assert session.calls == [{"url": "https://x.test/a", "headers": {"K": "v"}, "params": {"p": 1}}]

    @pytest.mark.asyncio()
    async def test_always_429_retries_exactly_max_retries(self) -> None:
        session = FakeSession(FakeResponse(429, reason="Too Many Requests"))
        fetcher = make_fetcher(session, max_retries=3)

        result = await fetcher.fetch("https://x.test/limited")

        assert not result.success
        assert "429" in result.error
        assert len(session.calls) == 3

    @pytest.mark.asyncio()
    async def test_429_then_success(self) -> None:
        session = FakeSession(
            FakeResponse(429),
            FakeResponse(200, {"ok": True}),
        )
        fetcher = make_fetcher(session)

        result = await fetcher.fetch("https://x.test/a")

        assert result.success
        assert result.attempts == 2

    @pytest.mark.asyncio()
    async def test_server_error_carries_last_message(self) -> None:
        session = FakeSession(FakeResponse(503, reason="Service Unavailable"))
        fetcher = make_fetcher(session, max_retries=2)

        result = await fetcher.fetch("https://x.test/down")

        assert not result.success
        assert result.error == "HTTP 503: Service Unavailable"
        assert len(session.calls) == 2

    @pytest.mark.asyncio()
    async def test_transport_error_is_not_raised(self) -> None:
        session = FakeSession(aiohttp.ClientConnectionError("connection refused"))
        fetcher = make_fetcher(session)

        result = await fetcher.fetch("https://x.test/unreachable")

        assert not result.success
        assert "connection refused" in result.error
        assert len(session.calls) == 3

    @pytest.mark.asyncio()
    async def test_invalid_json_is_retried(self) -> None:
        session = FakeSession(
            FakeResponse(200, ValueError("bad json")),
            FakeResponse(200, [1]),
        )
        fetcher = make_fetcher(session)

        result = await fetcher.fetch("https://x.test/a")

        assert result.success
        assert result.data == [1]

    @pytest.mark.asyncio()
    async def test_backoff_delays(self) -> None:
        session = FakeSession(
            FakeResponse(429),
            FakeResponse(500, reason="Internal Server Error"),
            FakeResponse(200, {"ok": True}),
        )
        fetcher = make_fetcher(session, base_delay=2.4)

        with patch("funding_arb.transport.fetcher.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await fetcher.fetch("https://x.test/a")

        assert result.success
        delays = [c.args[0] for c in sleep.await_args_list]
        # 429 -> doubled delay, error on attempt 2 -> linear backoff, success -> pacing delay
        assert delays == [pytest.approx(4.8), pytest.approx(4.8), pytest.approx(2.4)]

    @pytest.mark.asyncio()
    async def test_waits_for_rate_limit_slot(self) -> None:
        session = FakeSession(FakeResponse(200, {}))
        limiter = RateLimiter(max_calls=1, window_seconds=60)
        limiter.record()
        fetcher = ResilientFetcher("test", limiter, base_delay=0.0, session=session)

        with patch.object(limiter, "can_proceed", side_effect=[False, True]), \
                patch.object(limiter, "time_until_next_slot", return_value=12.5), \
                patch("funding_arb.transport.fetcher.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await fetcher.fetch("https://x.test/a")

        assert result.success
        assert sleep.await_args_list[0].args[0] == 12.5

    @pytest.mark.asyncio()
    async def test_records_each_attempt(self) -> None:
        session = FakeSession(FakeResponse(429))
        limiter = RateLimiter(max_calls=100, window_seconds=60)
        fetcher = ResilientFetcher("test", limiter, base_delay=0.0, max_retries=2, session=session)

        await fetcher.fetch("https://x.test/a")

        assert limiter.recent_calls == 2

    @pytest.mark.asyncio()
    async def test_close_keeps_injected_session(self) -> None:
        session = FakeSession(FakeResponse(200, {}))
        fetcher = make_fetcher(session)
        await fetcher.close()
        assert not session.closed
