"""Metaplex token metadata: PDA derivation and account decoding.

Only the fixed-layout prefix is decoded:
- key (1) + update_authority (32) + mint (32)
- name, symbol, uri: u32 LE length + bytes, NUL padded
- seller_fee_basis_points (u16)
- creators: Option<Vec<(pubkey 32, verified u8, share u8)>>

Truncated accounts never raise; missing strings read as "" and the
verification flag falls back to False.
"""

import struct

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from spl_risk.models.token import TokenMetadata

METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
METADATA_SEED = b"metadata"

_HEADER_SIZE = 1 + 32 + 32
_CREATOR_SIZE = 32 + 1 + 1


def find_metadata_address(mint: Pubkey) -> Pubkey:
    """Derive the metadata PDA for a mint."""
    pda, _bump = Pubkey.find_program_address(
        [METADATA_SEED, bytes(METADATA_PROGRAM_ID), bytes(mint)],
        METADATA_PROGRAM_ID,
    )
    return pda


def decode_metadata(raw: bytes) -> TokenMetadata:
    offset = _HEADER_SIZE
    name, offset = _read_string(raw, offset)
    symbol, offset = _read_string(raw, offset)
    uri, offset = _read_string(raw, offset)

    return TokenMetadata(
        name=name,
        symbol=symbol,
        uri=uri,
        is_verified=_has_verified_creator(raw, offset),
    )


def _read_string(data: bytes, offset: int) -> tuple[str, int]:
    """Read a length-prefixed string, clipped safely at the end of data."""
    if offset + 4 > len(data):
        return "", len(data)
    length = struct.unpack_from("<I", data, offset)[0]
    offset += 4
    if offset + length > len(data):
        return "", len(data)
    text = data[offset:offset + length].decode("utf-8", errors="replace")
    return text.rstrip("\x00"), offset + length


def _has_verified_creator(data: bytes, offset: int) -> bool:
    offset += 2  # seller_fee_basis_points
    if offset + 1 > len(data) or data[offset] != 1:
        return False
    offset += 1
    if offset + 4 > len(data):
        return False
    count = struct.unpack_from("<I", data, offset)[0]
    offset += 4
    for i in range(count):
        start = offset + i * _CREATOR_SIZE
        if start + _CREATOR_SIZE > len(data):
            return False
        if data[start + 32] == 1:
            return True
    return False
