"""Tests for the individual risk rules."""

from dataclasses import replace

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from spl_risk.models.report import RiskReport
from spl_risk.models.token import TokenMetadata
from spl_risk.profiles import BALANCED
from spl_risk.rules import (
    RULES,
    creator_is_authority,
    creator_supply,
    freeze_authority,
    holder_count,
    mint_authority,
    verified_metadata,
    wallet_age,
)


def _report(snapshot) -> RiskReport:
    return RiskReport(mint=snapshot.mint, profile="balanced")


def _keys(report: RiskReport) -> list[str]:
    return [f.rule for f in report.breakdown]


class TestAuthorities:
    def test_mint_authority_active(self, make_snapshot) -> None:
        snap = make_snapshot(mint_authority=Pubkey.new_unique())
        report = _report(snap)
        mint_authority(snap, BALANCED, report)

        assert report.flags.mint_authority is True
        assert report.breakdown[0].rule == "mint_authority_active"
        assert report.breakdown[0].weight == 30
        assert report.breakdown[0].status == "active"

    def test_mint_authority_revoked(self, make_snapshot) -> None:
        snap = make_snapshot()
        report = _report(snap)
        mint_authority(snap, BALANCED, report)

        assert report.flags.mint_authority is False
        assert _keys(report) == ["mint_revoked"]
        assert report.breakdown[0].weight == -20

    def test_freeze_authority_active(self, make_snapshot) -> None:
        snap = make_snapshot(freeze_authority=Pubkey.new_unique())
        report = _report(snap)
        freeze_authority(snap, BALANCED, report)

        assert report.flags.freeze_authority is True
        assert _keys(report) == ["freeze_authority_active"]

    def test_freeze_authority_revoked(self, make_snapshot) -> None:
        snap = make_snapshot()
        report = _report(snap)
        freeze_authority(snap, BALANCED, report)

        assert report.flags.freeze_authority is False
        assert _keys(report) == ["freeze_revoked"]
        assert report.breakdown[0].weight == -15


class TestCreatorSupply:
    def test_high_concentration(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(60.0, None), (5.0, None)])
        report = _report(snap)
        creator_supply(snap, BALANCED, report)

        assert _keys(report) == ["creator_supply_high"]
        assert "60.0%" in report.breakdown[0].description
        assert report.metrics.creator_supply_pct == 60.0

    def test_well_distributed(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(3.0, None)])
        report = _report(snap)
        creator_supply(snap, BALANCED, report)

        assert _keys(report) == ["supply_distributed"]
        assert report.breakdown[0].weight == -15

    def test_middle_band_records_metric_only(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(30.0, None)])
        report = _report(snap)
        creator_supply(snap, BALANCED, report)

        assert report.breakdown == []
        assert report.metrics.creator_supply_pct == 30.0

    def test_threshold_is_exclusive(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(50.0, None)])
        report = _report(snap)
        creator_supply(snap, BALANCED, report)
        assert report.breakdown == []

    def test_no_holders_no_finding(self, make_snapshot) -> None:
        snap = make_snapshot()
        report = _report(snap)
        creator_supply(snap, BALANCED, report)
        assert report.breakdown == []
        assert report.metrics.creator_supply_pct == 0.0

    @pytest.mark.parametrize(
        ("pct", "threshold", "expected"),
        [(60.0, 50.0, True), (50.0, 50.0, False), (49.9, 50.0, False), (71.0, 70.0, True)],
    )
    def test_snapshot_concentration(self, make_snapshot, pct, threshold, expected) -> None:
        snap = make_snapshot(holders=[(pct, None), (1.0, None)])
        assert snap.is_supply_concentrated(threshold) is expected

    def test_empty_snapshot_never_concentrated(self, make_snapshot) -> None:
        assert make_snapshot().is_supply_concentrated(0.0) is False


class TestCreatorIsAuthority:
    def test_creator_holds_mint_authority(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(40.0, None)])
        snap.mint_authority = snap.holders[0].address
        report = _report(snap)
        creator_is_authority(snap, BALANCED, report)

        assert _keys(report) == ["creator_is_authority"]
        assert report.breakdown[0].status == "retains"

    def test_creator_holds_freeze_authority(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(40.0, None)])
        snap.freeze_authority = snap.holders[0].address
        report = _report(snap)
        creator_is_authority(snap, BALANCED, report)
        assert _keys(report) == ["creator_is_authority"]

    def test_unrelated_authority(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(40.0, None)], mint_authority=Pubkey.new_unique())
        report = _report(snap)
        creator_is_authority(snap, BALANCED, report)
        assert report.breakdown == []

    def test_no_holders(self, make_snapshot) -> None:
        snap = make_snapshot(mint_authority=Pubkey.new_unique())
        report = _report(snap)
        creator_is_authority(snap, BALANCED, report)
        assert report.breakdown == []


class TestWalletAge:
    def test_young_wallet(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(40.0, 2)])
        report = _report(snap)
        wallet_age(snap, BALANCED, report)

        assert _keys(report) == ["wallet_young"]
        assert report.breakdown[0].description == "Creator wallet is only 2 days old"
        assert report.metrics.wallet_age_days == 2

    def test_old_wallet(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(40.0, 7)])
        report = _report(snap)
        wallet_age(snap, BALANCED, report)

        assert report.breakdown == []
        assert report.metrics.wallet_age_days == 7

    def test_unknown_age(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(40.0, None)])
        report = _report(snap)
        wallet_age(snap, BALANCED, report)
        assert report.breakdown == []
        assert report.metrics.wallet_age_days is None


class TestHolderCount:
    def test_very_low(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(1.0, None)] * 5)
        report = _report(snap)
        holder_count(snap, BALANCED, report)

        assert _keys(report) == ["low_holders"]
        assert report.breakdown[0].description.startswith("Very low holder count (5)")
        assert report.metrics.holders == 5

    def test_low(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(1.0, None)] * 20)
        report = _report(snap)
        holder_count(snap, BALANCED, report)
        assert report.breakdown[0].description.startswith("Low holder count (20)")

    def test_moderate_description_with_high_threshold(self, make_snapshot) -> None:
        profile = replace(BALANCED, thresholds=replace(BALANCED.thresholds, low_holders_count=100))
        snap = make_snapshot(holders=[(0.5, None)] * 60)
        report = _report(snap)
        holder_count(snap, profile, report)
        assert report.breakdown[0].description.startswith("Moderate holder count (60)")

    def test_enough_holders(self, make_snapshot) -> None:
        snap = make_snapshot(holders=[(0.1, None)] * 30)
        report = _report(snap)
        holder_count(snap, BALANCED, report)
        assert report.breakdown == []


class TestVerifiedMetadata:
    def test_verified_is_neutral(self, make_snapshot) -> None:
        snap = make_snapshot(metadata=TokenMetadata("A", "A", "u", is_verified=True))
        report = _report(snap)
        verified_metadata(snap, BALANCED, report)

        assert _keys(report) == ["verified_metadata"]
        assert report.breakdown[0].weight == 0

    def test_unverified(self, make_snapshot) -> None:
        snap = make_snapshot(metadata=TokenMetadata("A", "A", "u"))
        report = _report(snap)
        verified_metadata(snap, BALANCED, report)

        assert _keys(report) == ["no_verified_metadata"]
        assert report.breakdown[0].weight == 2

    def test_missing(self, make_snapshot) -> None:
        snap = make_snapshot()
        report = _report(snap)
        verified_metadata(snap, BALANCED, report)

        assert _keys(report) == ["no_metadata"]
        assert report.breakdown[0].status == "missing"


def test_rules_do_not_mutate_snapshot(make_snapshot) -> None:
    snap = make_snapshot(holders=[(60.0, 2), (10.0, 100)], mint_authority=Pubkey.new_unique())
    before = (snap.mint_authority, [(h.address, h.amount, h.wallet_age_days) for h in snap.holders])
    report = _report(snap)

    for rule in RULES:
        rule.evaluate(snap, BALANCED, report)

    after = (snap.mint_authority, [(h.address, h.amount, h.wallet_age_days) for h in snap.holders])
    assert before == after


def test_registry_order() -> None:
    assert [r.name for r in RULES] == [
        "mint_authority",
        "freeze_authority",
        "creator_supply",
        "creator_is_authority",
        "wallet_age",
        "holder_count",
        "verified_metadata",
    ]
