"""Shared test fixtures."""

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from spl_risk.models.token import TokenHolder, TokenMetadata, TokenSnapshot
from spl_risk.profiles import BALANCED, Profile


@pytest.fixture
def balanced() -> Profile:
    return BALANCED


@pytest.fixture
def mint() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def make_snapshot(mint: Pubkey):
    """Factory for snapshots with holders given as (percentage, age_days) pairs."""

    def _make(
        *,
        holders: list[tuple[float, int | None]] | None = None,
        mint_authority: Pubkey | None = None,
        freeze_authority: Pubkey | None = None,
        metadata: TokenMetadata | None = None,
        supply: int = 1_000_000,
        **kwargs,
    ) -> TokenSnapshot:
        records = [
            TokenHolder(
                address=Pubkey.new_unique(),
                amount=int(supply * pct / 100),
                percentage=pct,
                wallet_age_days=age,
            )
            for pct, age in (holders or [])
        ]
        return TokenSnapshot(
            mint=mint,
            supply=supply,
            decimals=6,
            mint_authority=mint_authority,
            freeze_authority=freeze_authority,
            metadata=metadata,
            holders=records,
            **kwargs,
        )

    return _make
