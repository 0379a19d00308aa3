"""Tests for the Solana JSON-RPC client (mocked httpx)."""

import base64
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from spl_risk.errors import NetworkError, ParseError, RpcError, RpcTimeout
from spl_risk.parsers.mint_parser import TOKEN_PROGRAM_ID
from spl_risk.rpc.client import SolanaRpcClient
from tests.chain_data import build_mint


def _client_returning(payload: dict | None = None, status_code: int = 200) -> SolanaRpcClient:
    client = SolanaRpcClient("https://rpc.example.com", max_rps=1000.0)
    mock_resp = MagicMock()
    mock_resp.status_code = status_code
    mock_resp.json.return_value = payload
    client._client = AsyncMock()
    client._client.post = AsyncMock(return_value=mock_resp)
    return client


def _client_raising(exc: Exception) -> SolanaRpcClient:
    client = SolanaRpcClient("https://rpc.example.com", max_rps=1000.0)
    client._client = AsyncMock()
    client._client.post = AsyncMock(side_effect=exc)
    return client


class TestGetAccountInfo:
    @pytest.mark.asyncio
    async def test_decodes_account(self) -> None:
        raw = build_mint(supply=42)
        client = _client_returning({
            "jsonrpc": "2.0",
            "id": 1,
            "result": {
                "context": {"slot": 1},
                "value": {
                    "data": [base64.b64encode(raw).decode(), "base64"],
                    "owner": str(TOKEN_PROGRAM_ID),
                    "lamports": 1461600,
                    "executable": False,
                },
            },
        })
        address = Pubkey.new_unique()

        account = await client.get_account_info(address)

        assert account is not None
        assert account.address == address
        assert account.owner == TOKEN_PROGRAM_ID
        assert account.data == raw
        assert account.lamports == 1461600

        sent = client._client.post.call_args.kwargs["json"]
        assert sent["method"] == "getAccountInfo"
        assert sent["params"][0] == str(address)
        assert sent["params"][1]["encoding"] == "base64"

    @pytest.mark.asyncio
    async def test_missing_account_returns_none(self) -> None:
        client = _client_returning({"result": {"context": {"slot": 1}, "value": None}})
        assert await client.get_account_info(Pubkey.new_unique()) is None

    @pytest.mark.asyncio
    async def test_malformed_payload(self) -> None:
        client = _client_returning({"result": {"value": {"data": [], "owner": "x"}}})
        with pytest.raises(ParseError):
            await client.get_account_info(Pubkey.new_unique())


class TestErrors:
    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        client = _client_returning({}, status_code=429)
        with pytest.raises(RpcError, match="HTTP 429"):
            await client.get_account_info(Pubkey.new_unique())

    @pytest.mark.asyncio
    async def test_jsonrpc_error(self) -> None:
        client = _client_returning({"error": {"code": -32602, "message": "Invalid param"}})
        with pytest.raises(RpcError, match="Invalid param"):
            await client.get_token_largest_accounts(Pubkey.new_unique())

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        client = _client_raising(httpx.ReadTimeout("slow"))
        with pytest.raises(RpcTimeout):
            await client.get_account_info(Pubkey.new_unique())

    @pytest.mark.asyncio
    async def test_connect_error(self) -> None:
        client = _client_raising(httpx.ConnectError("refused"))
        with pytest.raises(NetworkError):
            await client.get_signatures_for_address(Pubkey.new_unique())

    @pytest.mark.asyncio
    async def test_timeout_is_rpc_error(self) -> None:
        client = _client_raising(httpx.ConnectTimeout("slow"))
        with pytest.raises(RpcError):
            await client.get_account_info(Pubkey.new_unique())


class TestLargestAccounts:
    @pytest.mark.asyncio
    async def test_parses_balances(self) -> None:
        acc = str(Pubkey.new_unique())
        client = _client_returning({
            "result": {
                "context": {"slot": 1},
                "value": [
                    {"address": acc, "amount": "771", "decimals": 2, "uiAmountString": "7.71"},
                ],
            }
        })

        balances = await client.get_token_largest_accounts(Pubkey.new_unique())

        assert len(balances) == 1
        assert balances[0].address == acc
        assert balances[0].amount == "771"
        assert balances[0].ui_amount_string == "7.71"

    @pytest.mark.asyncio
    async def test_empty(self) -> None:
        client = _client_returning({"result": {"context": {"slot": 1}, "value": []}})
        assert await client.get_token_largest_accounts(Pubkey.new_unique()) == []


class TestSignatures:
    @pytest.mark.asyncio
    async def test_parses_signatures(self) -> None:
        client = _client_returning({
            "result": [
                {"signature": "new", "slot": 200, "blockTime": 1_700_000_100, "err": None},
                {"signature": "old", "slot": 100, "blockTime": None, "err": {"x": 1}},
            ]
        })

        sigs = await client.get_signatures_for_address(Pubkey.new_unique(), limit=5000)

        assert [s.signature for s in sigs] == ["new", "old"]
        assert sigs[0].block_time == 1_700_000_100
        assert sigs[1].block_time is None
        assert sigs[1].err == {"x": 1}
        sent = client._client.post.call_args.kwargs["json"]
        assert sent["params"][1]["limit"] == 1000
