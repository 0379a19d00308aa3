"""Pydantic models for Solana JSON-RPC responses."""

from pydantic import BaseModel, ConfigDict
from solders.pubkey import Pubkey  # type: ignore[import-untyped]


class AccountInfo(BaseModel):
    """Decoded `getAccountInfo` value (base64 encoding)."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    address: Pubkey
    owner: Pubkey
    data: bytes
    lamports: int = 0
    executable: bool = False


class TokenAccountBalance(BaseModel):
    """Entry of `getTokenLargestAccounts`."""

    address: str  # token account, not the owner wallet
    amount: str  # raw u64 as decimal string
    decimals: int = 0
    ui_amount_string: str = ""


class SignatureInfo(BaseModel):
    """Entry of `getSignaturesForAddress` (newest first)."""

    signature: str
    slot: int = 0
    block_time: int | None = None
    err: dict | str | None = None  # non-None means failed
