"""Solana JSON-RPC client: the three calls the risk analysis needs.

Each call is a single attempt. Failures are raised as typed errors so the
provider can decide between retrying, degrading and aborting:
RpcTimeout (timed out), NetworkError (no response), RpcError (HTTP or
JSON-RPC error), ParseError (unexpected payload).
"""

import base64
import binascii
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from spl_risk.errors import NetworkError, ParseError, RpcError, RpcTimeout
from spl_risk.rpc.models import AccountInfo, SignatureInfo, TokenAccountBalance
from spl_risk.rpc.rate_limiter import RateLimiter

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
COMMITMENT = "confirmed"
MAX_SIGNATURES = 1000


class SolanaRpcClient:
    """Async JSON-RPC client over a shared httpx connection pool."""

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        *,
        timeout: float = 10.0,
        max_rps: float = 10.0,
    ) -> None:
        self._rpc_url = rpc_url
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=timeout)
        self._request_id = 0

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SolanaRpcClient":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _call(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        await self._rate_limiter.acquire()
        try:
            resp = await self._client.post(self._rpc_url, json=payload)
        except httpx.TimeoutException as e:
            raise RpcTimeout(f"{method} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} transport error: {e}") from e

        if resp.status_code != 200:
            raise RpcError(f"{method} HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ParseError(f"{method} returned invalid JSON") from e

        if "error" in data:
            raise RpcError(f"{method} RPC error: {data['error']}")
        if "result" not in data:
            raise ParseError(f"{method} response has no result")
        return data["result"]

    async def get_account_info(self, address: Pubkey) -> AccountInfo | None:
        """Fetch raw account bytes and owner. None if the account does not exist."""
        result = await self._call(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": COMMITMENT}],
        )
        value = (result or {}).get("value")
        if value is None:
            return None

        try:
            raw_b64 = value["data"][0]
            return AccountInfo(
                address=address,
                owner=Pubkey.from_string(value["owner"]),
                data=base64.b64decode(raw_b64),
                lamports=value.get("lamports", 0),
                executable=value.get("executable", False),
            )
        except (KeyError, IndexError, TypeError, ValueError, binascii.Error) as e:
            raise ParseError(f"Malformed account payload for {address}: {e}") from e

    async def get_token_largest_accounts(self, mint: Pubkey) -> list[TokenAccountBalance]:
        """Top token accounts for a mint (the node caps this at 20)."""
        result = await self._call(
            "getTokenLargestAccounts", [str(mint), {"commitment": COMMITMENT}]
        )
        try:
            return [
                TokenAccountBalance(
                    address=acc["address"],
                    amount=acc["amount"],
                    decimals=acc.get("decimals", 0),
                    ui_amount_string=acc.get("uiAmountString") or "",
                )
                for acc in (result or {}).get("value", [])
            ]
        except (KeyError, TypeError, ValidationError) as e:
            raise ParseError(f"Malformed largest-accounts payload: {e}") from e

    async def get_signatures_for_address(
        self, address: Pubkey, *, limit: int = MAX_SIGNATURES
    ) -> list[SignatureInfo]:
        """Signature history, newest first. The last entry is the oldest seen."""
        result = await self._call(
            "getSignaturesForAddress",
            [str(address), {"limit": min(limit, MAX_SIGNATURES), "commitment": COMMITMENT}],
        )
        try:
            return [
                SignatureInfo(
                    signature=sig.get("signature", ""),
                    slot=sig.get("slot", 0),
                    block_time=sig.get("blockTime"),
                    err=sig.get("err"),
                )
                for sig in result or []
            ]
        except (AttributeError, TypeError, ValidationError) as e:
            raise ParseError(f"Malformed signatures payload: {e}") from e

    def __repr__(self) -> str:
        return f"SolanaRpcClient({self._rpc_url!r})"


def log_rpc_failure(context: str, error: Exception) -> None:
    """Log a recoverable RPC failure at the level its kind deserves."""
    if isinstance(error, (RpcTimeout, NetworkError)):
        logger.debug(f"[RPC] {context}: {type(error).__name__}: {error}")
    else:
        logger.warning(f"[RPC] {context}: {error}")
