"""Risk rules: stateless evaluators over a TokenSnapshot.

Each rule reads the snapshot and profile and appends zero or more findings
to the report. Rules also record the metrics they compute, whether or not a
finding fires. RULES order is the presentation order of the breakdown.
"""

from collections.abc import Callable
from typing import NamedTuple

from spl_risk.models.report import RiskReport
from spl_risk.models.token import TokenSnapshot
from spl_risk.profiles import Profile

RuleFn = Callable[[TokenSnapshot, Profile, RiskReport], None]


class Rule(NamedTuple):
    name: str
    evaluate: RuleFn


def mint_authority(token: TokenSnapshot, profile: Profile, report: RiskReport) -> None:
    if token.mint_authority is not None:
        report.flags.mint_authority = True
        report.add_finding(
            "mint_authority_active",
            profile.weights.mint_authority_active,
            "Mint authority is active - owner can create unlimited tokens",
            "active",
        )
    else:
        report.add_finding(
            "mint_revoked",
            profile.weights.mint_revoked,
            "Mint authority revoked - supply is fixed",
            "revoked",
        )


def freeze_authority(token: TokenSnapshot, profile: Profile, report: RiskReport) -> None:
    if token.freeze_authority is not None:
        report.flags.freeze_authority = True
        report.add_finding(
            "freeze_authority_active",
            profile.weights.freeze_authority_active,
            "Freeze authority is active - owner can freeze token accounts",
            "active",
        )
    else:
        report.add_finding(
            "freeze_revoked",
            profile.weights.freeze_revoked,
            "Freeze authority revoked - accounts cannot be frozen",
            "revoked",
        )


def creator_supply(token: TokenSnapshot, profile: Profile, report: RiskReport) -> None:
    pct = token.creator_supply_percentage
    report.metrics.creator_supply_pct = pct
    if not token.holders:
        return

    thresholds = profile.thresholds
    if token.is_supply_concentrated(thresholds.creator_supply_high_pct):
        report.add_finding(
            "creator_supply_high",
            profile.weights.creator_supply_high,
            f"Creator holds {pct:.1f}% of supply (high concentration)",
            "high",
        )
    elif pct < thresholds.supply_distributed_pct:
        report.add_finding(
            "supply_distributed",
            profile.weights.supply_distributed,
            f"Top holder has only {pct:.1f}% (well distributed)",
            "low",
        )


def creator_is_authority(token: TokenSnapshot, profile: Profile, report: RiskReport) -> None:
    creator = token.creator_address
    if creator is None:
        return
    authorities = [a for a in (token.mint_authority, token.freeze_authority) if a is not None]
    if creator in authorities:
        report.add_finding(
            "creator_is_authority",
            profile.weights.creator_is_authority,
            "Token creator retains mint or freeze authority",
            "retains",
        )


def wallet_age(token: TokenSnapshot, profile: Profile, report: RiskReport) -> None:
    if not token.holders:
        return
    age_days = token.holders[0].wallet_age_days
    if age_days is None:
        return

    report.metrics.wallet_age_days = age_days
    if age_days < profile.thresholds.wallet_young_days:
        report.add_finding(
            "wallet_young",
            profile.weights.wallet_young,
            f"Creator wallet is only {age_days} days old",
            "young",
        )


def holder_count(token: TokenSnapshot, profile: Profile, report: RiskReport) -> None:
    count = token.holder_count
    report.metrics.holders = count
    if count >= profile.thresholds.low_holders_count:
        return

    if count <= 10:
        description = f"Very low holder count ({count}) - high concentration risk"
    elif count <= 50:
        description = f"Low holder count ({count}) - early stage or limited adoption"
    else:
        description = f"Moderate holder count ({count}) - developing adoption"
    report.add_finding("low_holders", profile.weights.low_holders, description, "low")


def verified_metadata(token: TokenSnapshot, profile: Profile, report: RiskReport) -> None:
    metadata = token.metadata
    if metadata is None:
        report.add_finding(
            "no_metadata",
            profile.weights.no_verified_metadata,
            "No metadata found for this token",
            "missing",
        )
    elif metadata.is_verified:
        report.add_finding("verified_metadata", 0, "Metadata is verified", "verified")
    else:
        report.add_finding(
            "no_verified_metadata",
            profile.weights.no_verified_metadata,
            "Metadata exists but is not verified",
            "unverified",
        )


RULES: tuple[Rule, ...] = (
    Rule("mint_authority", mint_authority),
    Rule("freeze_authority", freeze_authority),
    Rule("creator_supply", creator_supply),
    Rule("creator_is_authority", creator_is_authority),
    Rule("wallet_age", wallet_age),
    Rule("holder_count", holder_count),
    Rule("verified_metadata", verified_metadata),
)
