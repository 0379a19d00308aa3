"""Named risk profiles: rule weights and thresholds.

The analyzer treats a profile as opaque data. Positive weights add risk,
negative weights ("revoked", "distributed") reduce it.
"""

from dataclasses import dataclass

from spl_risk.errors import ConfigError


@dataclass(frozen=True)
class RiskWeights:
    # Critical
    mint_authority_active: int
    freeze_authority_active: int
    creator_supply_high: int
    creator_is_authority: int
    # Medium
    wallet_young: int
    low_holders: int
    no_verified_metadata: int
    # Risk reducers
    mint_revoked: int
    freeze_revoked: int
    supply_distributed: int


@dataclass(frozen=True)
class Thresholds:
    creator_supply_high_pct: float
    supply_distributed_pct: float
    wallet_young_days: int
    low_holders_count: int


@dataclass(frozen=True)
class Profile:
    name: str
    weights: RiskWeights
    thresholds: Thresholds


CONSERVATIVE = Profile(
    name="conservative",
    weights=RiskWeights(
        mint_authority_active=35,
        freeze_authority_active=30,
        creator_supply_high=30,
        creator_is_authority=20,
        wallet_young=15,
        low_holders=10,
        no_verified_metadata=5,
        mint_revoked=-25,
        freeze_revoked=-20,
        supply_distributed=-20,
    ),
    thresholds=Thresholds(
        creator_supply_high_pct=40.0,
        supply_distributed_pct=15.0,
        wallet_young_days=14,
        low_holders_count=50,
    ),
)

BALANCED = Profile(
    name="balanced",
    weights=RiskWeights(
        mint_authority_active=30,
        freeze_authority_active=25,
        creator_supply_high=25,
        creator_is_authority=15,
        wallet_young=10,
        low_holders=5,
        no_verified_metadata=2,
        mint_revoked=-20,
        freeze_revoked=-15,
        supply_distributed=-15,
    ),
    thresholds=Thresholds(
        creator_supply_high_pct=50.0,
        supply_distributed_pct=10.0,
        wallet_young_days=7,
        low_holders_count=30,
    ),
)

DEGENERATE = Profile(
    name="degenerate",
    weights=RiskWeights(
        mint_authority_active=20,
        freeze_authority_active=15,
        creator_supply_high=15,
        creator_is_authority=10,
        wallet_young=5,
        low_holders=3,
        no_verified_metadata=1,
        mint_revoked=-15,
        freeze_revoked=-10,
        supply_distributed=-10,
    ),
    thresholds=Thresholds(
        creator_supply_high_pct=70.0,
        supply_distributed_pct=5.0,
        wallet_young_days=3,
        low_holders_count=10,
    ),
)

PROFILES: dict[str, Profile] = {
    p.name: p for p in (CONSERVATIVE, BALANCED, DEGENERATE)
}


def get_profile(name: str) -> Profile:
    """Resolve a profile by name (case-insensitive)."""
    profile = PROFILES.get(name.strip().lower())
    if profile is None:
        raise ConfigError(
            f"Unknown profile: {name} (expected one of {', '.join(PROFILES)})"
        )
    return profile
