"""Ledger retry/failover policy and JSON-RPC error mapping."""

from __future__ import annotations

import httpx
import pytest

from lcc.errors import (
    RETRYABLE_LEDGER_ERRORS,
    ExternalServiceError,
    LedgerError,
    LedgerRateLimited,
    LedgerTimeout,
)
from lcc.ledger.client import InMemoryLedgerClient, JsonRpcLedgerClient, LedgerEndpoints
from lcc.ledger.retry import call_with_retry


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FlakyOperation:
    """Fails with the queued errors, then returns ``result``."""

    def __init__(self, errors: list[Exception], result: str = "ok", endpoints: LedgerEndpoints | None = None):
        self.errors = list(errors)
        self.result = result
        self.calls = 0
        self.endpoints = endpoints
        self.seen_urls: list[str] = []

    async def __call__(self) -> str:
        self.calls += 1
        if self.endpoints is not None:
            self.seen_urls.append(self.endpoints.active)
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.fixture
def endpoints() -> LedgerEndpoints:
    return LedgerEndpoints(primary="http://primary.test", fallback="http://fallback.test")


class TestCallWithRetry:
    @pytest.mark.asyncio
    async def test_first_attempt_success_never_sleeps(self, endpoints):
        sleep = RecordingSleep()
        op = FlakyOperation([])
        assert await call_with_retry(op, endpoints, sleep=sleep) == "ok"
        assert op.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_linear_backoff_then_success(self, endpoints):
        sleep = RecordingSleep()
        op = FlakyOperation([LedgerRateLimited("429"), LedgerTimeout("slow")])
        assert await call_with_retry(op, endpoints, sleep=sleep) == "ok"
        assert op.calls == 3
        assert sleep.delays == [1.0, 2.0]
        assert endpoints.on_fallback is False

    @pytest.mark.asyncio
    async def test_exhaustion_switches_to_fallback(self, endpoints):
        sleep = RecordingSleep()
        op = FlakyOperation([LedgerRateLimited("429")] * 5, endpoints=endpoints)
        assert await call_with_retry(op, endpoints, sleep=sleep) == "ok"
        assert sleep.delays == [1.0, 2.0, 3.0, 4.0]
        assert op.calls == 6
        assert op.seen_urls[:5] == ["http://primary.test"] * 5
        assert op.seen_urls[5] == "http://fallback.test"
        assert endpoints.active == "http://fallback.test"

    @pytest.mark.asyncio
    async def test_fallback_failure_propagates(self, endpoints):
        op = FlakyOperation([LedgerTimeout("slow")] * 6)
        with pytest.raises(LedgerTimeout):
            await call_with_retry(op, endpoints, sleep=RecordingSleep())
        assert op.calls == 6

    @pytest.mark.asyncio
    async def test_permanent_error_not_retried(self, endpoints):
        sleep = RecordingSleep()
        op = FlakyOperation([LedgerError("bad request")])
        with pytest.raises(LedgerError):
            await call_with_retry(op, endpoints, sleep=sleep)
        assert op.calls == 1
        assert sleep.delays == []
        assert endpoints.on_fallback is False

    @pytest.mark.asyncio
    async def test_base_delay_scales(self, endpoints):
        sleep = RecordingSleep()
        op = FlakyOperation([LedgerRateLimited("429")] * 2)
        await call_with_retry(op, endpoints, base_delay=0.5, max_attempts=3, sleep=sleep)
        assert sleep.delays == [0.5, 1.0]


class TestEndpoints:
    def test_active_defaults_to_primary(self, endpoints):
        assert endpoints.active == "http://primary.test"
        endpoints.use_fallback()
        assert endpoints.on_fallback
        assert endpoints.active == "http://fallback.test"


def _rpc_client(endpoints: LedgerEndpoints, handler) -> JsonRpcLedgerClient:
    return JsonRpcLedgerClient(endpoints, authority="authority", transport=httpx.MockTransport(handler))


class TestJsonRpcLedgerClient:
    @pytest.mark.asyncio
    async def test_http_429_maps_to_rate_limited(self, endpoints):
        client = _rpc_client(endpoints, lambda request: httpx.Response(429))
        with pytest.raises(LedgerRateLimited):
            await client.get_balance("wallet")

    @pytest.mark.asyncio
    async def test_rpc_error_message_mapping(self, endpoints):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"message": "Request timed out"}})

        client = _rpc_client(endpoints, handler)
        with pytest.raises(LedgerTimeout):
            await client.get_balance("wallet")

    @pytest.mark.asyncio
    async def test_transport_timeout_maps_to_timeout(self, endpoints):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = _rpc_client(endpoints, handler)
        with pytest.raises(LedgerTimeout):
            await client.get_balance("wallet")

    @pytest.mark.asyncio
    async def test_other_rpc_error_is_permanent(self, endpoints):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"message": "invalid params"}})

        client = _rpc_client(endpoints, handler)
        with pytest.raises(LedgerError) as exc_info:
            await client.get_balance("wallet")
        assert not isinstance(exc_info.value, (LedgerRateLimited, LedgerTimeout))

    @pytest.mark.asyncio
    async def test_requests_follow_active_endpoint(self, endpoints):
        hosts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            hosts.append(request.url.host)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"value": 42}})

        client = _rpc_client(endpoints, handler)
        assert await client.get_balance("wallet") == 42
        endpoints.use_fallback()
        await client.get_balance("wallet")
        assert hosts == ["primary.test", "fallback.test"]

    @pytest.mark.asyncio
    async def test_mint_parses_receipt(self, endpoints):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "result": {"mintAddress": "M1", "signature": "SIG"}},
            )

        client = _rpc_client(endpoints, handler)
        receipt = await client.mint("owner", "http://meta", "Lemon Seed #1", "LSEED")
        assert (receipt.mint_reference, receipt.tx_signature) == ("M1", "SIG")


class TestMalformedLedgerResponses:
    """Unexpected response shapes surface as ledger errors, never as crashes."""

    @pytest.mark.asyncio
    async def test_non_json_body(self, endpoints):
        client = _rpc_client(
            endpoints,
            lambda request: httpx.Response(200, text="<html>Bad Gateway</html>"),
        )
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.get_balance("wallet")
        assert isinstance(exc_info.value, LedgerError)
        assert "non-JSON" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_string_error_is_permanent(self, endpoints):
        client = _rpc_client(
            endpoints,
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": "boom"}),
        )
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.get_balance("wallet")
        assert not isinstance(exc_info.value, RETRYABLE_LEDGER_ERRORS)
        assert "boom" in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("message", "expected"),
        [("429 Too Many Requests", LedgerRateLimited), ("upstream timeout", LedgerTimeout)],
    )
    async def test_string_error_still_classified(self, endpoints, message, expected):
        client = _rpc_client(
            endpoints,
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": message}),
        )
        with pytest.raises(expected):
            await client.get_balance("wallet")

    @pytest.mark.asyncio
    async def test_null_mint_result(self, endpoints):
        client = _rpc_client(
            endpoints,
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None}),
        )
        with pytest.raises(ExternalServiceError):
            await client.mint("owner", "http://meta", "Lemon Seed #1", "LSEED")

    @pytest.mark.asyncio
    async def test_null_update_result(self, endpoints):
        client = _rpc_client(
            endpoints,
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None}),
        )
        with pytest.raises(LedgerError):
            await client.update_metadata("M1", "Lemon Sprout", "LSPRT", "http://meta")

    @pytest.mark.asyncio
    async def test_non_object_find_result(self, endpoints):
        client = _rpc_client(
            endpoints,
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": ["M1"]}),
        )
        with pytest.raises(LedgerError):
            await client.find_by_reference("M1")

    @pytest.mark.asyncio
    async def test_unreadable_balance(self, endpoints):
        client = _rpc_client(
            endpoints,
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"value": "lots"}}),
        )
        with pytest.raises(LedgerError):
            await client.get_balance("wallet")


class TestInMemoryLedger:
    @pytest.mark.asyncio
    async def test_mint_then_update(self):
        ledger = InMemoryLedgerClient()
        receipt = await ledger.mint("owner", "http://meta/1", "Lemon Seed #1", "LSEED")
        await ledger.update_metadata(receipt.mint_reference, "Lemon Sprout", "LSPRT", "http://meta/2")
        asset = await ledger.find_by_reference(receipt.mint_reference)
        assert (asset.name, asset.symbol, asset.uri) == ("Lemon Sprout", "LSPRT", "http://meta/2")

    @pytest.mark.asyncio
    async def test_unknown_reference(self):
        with pytest.raises(LedgerError):
            await InMemoryLedgerClient().find_by_reference("missing")
