"""Risk analyzer: runs the provider and the rules, finalizes the report.

Sequence: fetch snapshot -> record data-source quality -> enrich wallet
ages -> evaluate rules in order -> score -> confidence -> summary -> freeze.
"""

import asyncio

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from spl_risk.errors import RiskError, RpcTimeout
from spl_risk.models.report import RiskReport
from spl_risk.models.token import (
    SOURCE_HOLDERS,
    SOURCE_METADATA,
    SOURCE_RPC,
    FactStatus,
    TokenSnapshot,
)
from spl_risk.profiles import Profile
from spl_risk.provider import TokenDataProvider
from spl_risk.rules import RULES, Rule


class RiskAnalyzer:
    def __init__(
        self,
        profile: Profile,
        provider: TokenDataProvider,
        rules: tuple[Rule, ...] | list[Rule] = RULES,
    ) -> None:
        self._profile = profile
        self._provider = provider
        self._rules = tuple(rules)

    @property
    def profile(self) -> Profile:
        return self._profile

    async def analyze(self, mint: Pubkey, *, timeout: float | None = None) -> RiskReport:
        """Analyze one mint. Raises RpcTimeout if `timeout` seconds elapse."""
        if timeout is None:
            return await self._analyze(mint)
        try:
            return await asyncio.wait_for(self._analyze(mint), timeout)
        except TimeoutError as e:
            logger.warning(f"[SCORING] Analysis of {str(mint)[:12]} exceeded {timeout}s")
            raise RpcTimeout(f"Analysis exceeded {timeout}s") from e

    async def _analyze(self, mint: Pubkey) -> RiskReport:
        report = RiskReport(mint=mint, profile=self._profile.name)

        snapshot = await self._provider.fetch_token_snapshot(mint)
        self._record_snapshot(snapshot, report)

        try:
            age_status = await self._provider.enrich_holder_ages(snapshot.holders)
        except RiskError as e:
            logger.warning(f"[SCORING] Wallet age enrichment failed: {e}")
            age_status = FactStatus.MISSING
        report.data_sources.wallet_age = age_status

        for rule in self._rules:
            rule.evaluate(snapshot, self._profile, report)

        report.calculate_score()
        report.update_confidence()
        report.generate_summary()

        logger.info(
            f"[SCORING] {str(mint)[:12]}: score={report.risk_score} ({report.risk_level()}) "
            f"confidence={report.confidence_score:.2f} findings={len(report.breakdown)}"
        )
        return report.freeze()

    @staticmethod
    def _record_snapshot(snapshot: TokenSnapshot, report: RiskReport) -> None:
        metrics = report.metrics
        metrics.total_supply = snapshot.supply
        metrics.decimals = snapshot.decimals
        metrics.creation_timestamp = snapshot.creation_timestamp
        if snapshot.holders:
            metrics.top_holder_pct = snapshot.holders[0].percentage
        else:
            logger.debug(f"[SCORING] No holders found for {snapshot.mint}")

        sources = report.data_sources
        sources.rpc = snapshot.source(SOURCE_RPC)
        sources.holders = snapshot.source(SOURCE_HOLDERS)
        sources.metadata = snapshot.source(SOURCE_METADATA)
        if not snapshot.holders and sources.holders == FactStatus.OK:
            sources.holders = FactStatus.PARTIAL
        if snapshot.metadata is None and sources.metadata == FactStatus.OK:
            sources.metadata = FactStatus.MISSING
        if snapshot.from_cache:
            sources.cached_at = {"token": snapshot.fetched_at.isoformat()}
