"""On-chain mint and token account parsers (SPL Token / Token-2022).

Works on raw account bytes from getAccountInfo. Token-2022 mints share the
82-byte base layout and append an account-type byte plus extension TLVs.
"""

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from spl_risk.errors import ParseError

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
TOKEN_PROGRAMS = frozenset({TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID})

# SPL Token mint layout: 82 bytes
# [0:36]   mintAuthorityOption (4) + mintAuthority (32)
# [36:44]  supply (u64)
# [44:45]  decimals (u8)
# [45:46]  isInitialized (bool)
# [46:82]  freezeAuthorityOption (4) + freezeAuthority (32)
SPL_MINT_SIZE = 82

# SPL Token account layout: 165 bytes
# [0:32] mint, [32:64] owner, [64:72] amount, ..., [108] state
SPL_ACCOUNT_SIZE = 165
ACCOUNT_STATE_OFFSET = 108

# Token-2022: extended accounts are padded to the account size, then tagged
ACCOUNT_TYPE_OFFSET = SPL_ACCOUNT_SIZE
ACCOUNT_TYPE_MINT = 1
ACCOUNT_TYPE_ACCOUNT = 2


@dataclass(frozen=True)
class MintState:
    """Decoded base fields of a mint account."""

    supply: int
    decimals: int
    mint_authority: Pubkey | None = None  # None = revoked
    freeze_authority: Pubkey | None = None  # None = revoked
    is_token2022: bool = False


def is_token_program(owner: Pubkey) -> bool:
    return owner in TOKEN_PROGRAMS


def decode_mint(raw: bytes) -> MintState:
    """Decode raw mint account bytes. Raises ParseError on malformed data."""
    if len(raw) < SPL_MINT_SIZE:
        raise ParseError(f"Mint data too short: {len(raw)} bytes")

    mint_authority = _read_coption_key(raw, 0)
    supply = struct.unpack_from("<Q", raw, 36)[0]
    decimals = raw[44]
    if raw[45] != 1:
        raise ParseError("Mint is not initialized")
    freeze_authority = _read_coption_key(raw, 46)

    is_token2022 = len(raw) > SPL_MINT_SIZE
    if is_token2022:
        if len(raw) <= ACCOUNT_TYPE_OFFSET or raw[ACCOUNT_TYPE_OFFSET] != ACCOUNT_TYPE_MINT:
            raise ParseError(f"Extended account is not a mint ({len(raw)} bytes)")

    return MintState(
        supply=supply,
        decimals=decimals,
        mint_authority=mint_authority,
        freeze_authority=freeze_authority,
        is_token2022=is_token2022,
    )


def decode_token_account_owner(raw: bytes) -> Pubkey:
    """Owner wallet of an SPL token account."""
    if len(raw) < SPL_ACCOUNT_SIZE:
        raise ParseError(f"Token account data too short: {len(raw)} bytes")
    if raw[ACCOUNT_STATE_OFFSET] == 0:
        raise ParseError("Token account is not initialized")
    if len(raw) > SPL_ACCOUNT_SIZE and raw[ACCOUNT_TYPE_OFFSET] != ACCOUNT_TYPE_ACCOUNT:
        raise ParseError("Extended account is not a token account")
    return Pubkey.from_bytes(raw[32:64])


def _read_coption_key(raw: bytes, offset: int) -> Pubkey | None:
    """COption<Pubkey>: u32 tag (0 = None, 1 = Some) + 32 key bytes."""
    tag = struct.unpack_from("<I", raw, offset)[0]
    if tag == 0:
        return None
    if tag != 1:
        raise ParseError(f"Invalid COption tag {tag} at offset {offset}")
    return Pubkey.from_bytes(raw[offset + 4:offset + 36])
