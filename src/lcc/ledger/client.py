"""
Ledger clients with provider abstraction.

Supports a JSON-RPC endpoint (default for deployments) and an in-memory
ledger for development and tests. Provider is selected via configuration.
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from lcc.errors import LedgerError, LedgerRateLimited, LedgerTimeout

logger = structlog.get_logger()


@dataclass(frozen=True)
class MintReceipt:
    mint_reference: str
    tx_signature: str


@dataclass(frozen=True)
class LedgerAsset:
    name: str
    symbol: str
    uri: str = ""


@dataclass
class LedgerEndpoints:
    """Active ledger endpoint selection. Failover is a field update, nothing more."""

    primary: str
    fallback: str
    active: str = ""

    def __post_init__(self) -> None:
        if not self.active:
            self.active = self.primary

    @property
    def on_fallback(self) -> bool:
        return self.active == self.fallback

    def use_fallback(self) -> None:
        if not self.on_fallback:
            logger.warning("ledger_failover", primary=self.primary, fallback=self.fallback)
        self.active = self.fallback


class LedgerClient(ABC):
    """Abstract base class for ledger backends."""

    @abstractmethod
    async def mint(self, owner_address: str, metadata_ref: str, name: str, symbol: str) -> MintReceipt:
        """Record a new collectible owned by ``owner_address``."""
        ...

    @abstractmethod
    async def update_metadata(self, mint_reference: str, name: str, symbol: str, metadata_ref: str) -> str:
        """Point an existing collectible at new stage metadata. Returns the tx signature."""
        ...

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Balance in the ledger's smallest unit."""
        ...

    @abstractmethod
    async def find_by_reference(self, mint_reference: str) -> LedgerAsset:
        ...


class JsonRpcLedgerClient(LedgerClient):
    """Talk JSON-RPC to whichever endpoint is currently active.

    ``getBalance`` is the standard Solana RPC method. Minting and metadata
    updates go through the minting gateway methods exposed on the same
    endpoint.
    """

    MINT_METHOD = "mintCollectible"
    UPDATE_METHOD = "updateCollectibleMetadata"
    FIND_METHOD = "getCollectible"

    def __init__(
        self,
        endpoints: LedgerEndpoints,
        authority: str,
        timeout: float = 30.0,
        seller_fee_basis_points: int = 500,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoints = endpoints
        self.authority = authority
        self.timeout = timeout
        self.seller_fee_basis_points = seller_fee_basis_points
        self._transport = transport
        self._request_id = 0

    async def _call(self, method: str, params: list[Any]) -> Any:  # noqa: ANN401
        self._request_id += 1
        url = self.endpoints.active
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params}

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(url, json=payload)
        except httpx.TimeoutException as exc:
            raise LedgerTimeout(f"{method} timeout against {url}") from exc
        except httpx.HTTPError as exc:
            raise LedgerError(f"{method} failed against {url}: {exc}") from exc

        if response.status_code == 429:
            raise LedgerRateLimited(f"{method}: 429 Too Many Requests from {url}")
        if response.status_code >= 400:
            raise LedgerError(f"{method}: HTTP {response.status_code} from {url}")

        try:
            body = response.json()
        except ValueError as exc:
            raise LedgerError(f"{method}: non-JSON response from {url}: {response.text[:200]!r}") from exc
        if not isinstance(body, dict):
            raise LedgerError(f"{method}: unexpected response shape from {url}: {body!r}")

        error = body.get("error")
        if error:
            message = str(error.get("message", error)) if isinstance(error, dict) else str(error)
            lowered = message.lower()
            if "429" in message or "too many requests" in lowered:
                raise LedgerRateLimited(f"{method}: {message}")
            if "timeout" in lowered or "timed out" in lowered:
                raise LedgerTimeout(f"{method}: {message}")
            raise LedgerError(f"{method}: {message}")
        return body.get("result")

    @staticmethod
    def _expect_object(method: str, result: Any) -> dict[str, Any]:  # noqa: ANN401
        if not isinstance(result, dict):
            raise LedgerError(f"{method}: expected an object result, got {result!r}")
        return result

    async def mint(self, owner_address: str, metadata_ref: str, name: str, symbol: str) -> MintReceipt:
        result = await self._call(self.MINT_METHOD, [{
            "uri": metadata_ref,
            "name": name,
            "symbol": symbol,
            "sellerFeeBasisPoints": self.seller_fee_basis_points,
            "tokenOwner": owner_address,
            "creators": [{"address": self.authority, "share": 100}],
            "isMutable": True,
            "commitment": "finalized",
        }])
        result = self._expect_object(self.MINT_METHOD, result)
        return MintReceipt(
            mint_reference=str(result.get("mintAddress", "")),
            tx_signature=str(result.get("signature") or ""),
        )

    async def update_metadata(self, mint_reference: str, name: str, symbol: str, metadata_ref: str) -> str:
        result = await self._call(self.UPDATE_METHOD, [{
            "mintAddress": mint_reference,
            "name": name,
            "symbol": symbol,
            "uri": metadata_ref,
            "sellerFeeBasisPoints": self.seller_fee_basis_points,
            "authority": self.authority,
            "commitment": "finalized",
        }])
        result = self._expect_object(self.UPDATE_METHOD, result)
        return str(result.get("signature") or "")

    async def get_balance(self, address: str) -> int:
        result = await self._call("getBalance", [address, {"commitment": "confirmed"}])
        value = result.get("value", 0) if isinstance(result, dict) else result
        try:
            return int(value or 0)
        except (TypeError, ValueError) as exc:
            raise LedgerError(f"getBalance: unreadable balance {value!r}") from exc

    async def find_by_reference(self, mint_reference: str) -> LedgerAsset:
        result = await self._call(self.FIND_METHOD, [mint_reference])
        if not result:
            raise LedgerError(f"Collectible {mint_reference} not found on ledger")
        result = self._expect_object(self.FIND_METHOD, result)
        return LedgerAsset(
            name=str(result.get("name", "")),
            symbol=str(result.get("symbol", "")),
            uri=str(result.get("uri", "")),
        )


@dataclass
class InMemoryLedgerClient(LedgerClient):
    """Process-local ledger for development and tests."""

    default_balance: int = 10**9
    balances: dict[str, int] = field(default_factory=dict)
    assets: dict[str, LedgerAsset] = field(default_factory=dict)
    owners: dict[str, str] = field(default_factory=dict)

    async def mint(self, owner_address: str, metadata_ref: str, name: str, symbol: str) -> MintReceipt:
        mint_reference = secrets.token_hex(16)
        self.assets[mint_reference] = LedgerAsset(name=name, symbol=symbol, uri=metadata_ref)
        self.owners[mint_reference] = owner_address
        return MintReceipt(mint_reference=mint_reference, tx_signature=secrets.token_hex(32))

    async def update_metadata(self, mint_reference: str, name: str, symbol: str, metadata_ref: str) -> str:
        if mint_reference not in self.assets:
            raise LedgerError(f"Collectible {mint_reference} not found on ledger")
        self.assets[mint_reference] = LedgerAsset(name=name, symbol=symbol, uri=metadata_ref)
        return secrets.token_hex(32)

    async def get_balance(self, address: str) -> int:
        return self.balances.get(address, self.default_balance)

    async def find_by_reference(self, mint_reference: str) -> LedgerAsset:
        try:
            return self.assets[mint_reference]
        except KeyError:
            raise LedgerError(f"Collectible {mint_reference} not found on ledger") from None


def create_ledger_client(
    provider: str,
    endpoints: LedgerEndpoints,
    authority: str,
    timeout: float = 30.0,
    seller_fee_basis_points: int = 500,
) -> LedgerClient:
    """Create a ledger client based on configuration."""
    provider = provider.lower()
    if provider == "jsonrpc":
        return JsonRpcLedgerClient(
            endpoints,
            authority=authority,
            timeout=timeout,
            seller_fee_basis_points=seller_fee_basis_points,
        )
    if provider == "memory":
        return InMemoryLedgerClient()
    msg = f"Unsupported ledger provider: {provider}"
    raise ValueError(msg)
