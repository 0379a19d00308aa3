"""Risk report: the output artifact of one analysis.

The analyzer fills a report through a fixed sequence (findings, score,
confidence, summary) and then freezes it before handing it to renderers.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from spl_risk.models.token import FactStatus

CONFIDENCE_CEILING = 0.95

# Multiplicative confidence penalties per degraded source
HOLDERS_DEGRADED_FACTOR = 0.7
METADATA_CACHED_FACTOR = 0.98
METADATA_MISSING_FACTOR = 0.85
WALLET_AGE_MISSING_FACTOR = 0.92
RPC_DEGRADED_FACTOR = 0.6
NO_LP_ANALYSIS_FACTOR = 0.90

LOW_CONFIDENCE = 0.7

ZERO_HOLDERS_WARNING = (
    "RPC returned zero holders - data is incomplete. "
    "Token may have many more holders."
)

_SUMMARIES = (
    (20, "Low risk. Token appears relatively safe based on on-chain data."),
    (40, "Low-medium risk. Some concerns present, proceed with caution."),
    (60, "Medium risk. Multiple risk factors detected. DYOR recommended."),
    (80, "High risk. Significant red flags present. High probability of issues."),
    (100, "Critical risk. Extreme caution advised. Strong rug-pull indicators."),
)

_RISK_LEVELS = (
    (20, "LOW"),
    (40, "LOW-MEDIUM"),
    (60, "MEDIUM"),
    (80, "HIGH"),
    (100, "CRITICAL"),
)

_DEGRADED_HOLDERS = (FactStatus.PARTIAL, FactStatus.TIMEOUT)


class FrozenReportError(AttributeError):
    pass


@dataclass(frozen=True)
class RiskFinding:
    rule: str
    weight: int
    description: str
    status: str | None = None


@dataclass
class RiskFlags:
    mint_authority: bool = False
    freeze_authority: bool = False


@dataclass
class RiskMetrics:
    creator_supply_pct: float = 0.0
    wallet_age_days: int | None = None
    holders: int = 0
    decimals: int | None = None
    total_supply: int | None = None
    top_holder_pct: float | None = None
    creation_timestamp: int | None = None


@dataclass
class DataSources:
    rpc: FactStatus = FactStatus.OK
    metadata: FactStatus = FactStatus.OK
    holders: FactStatus = FactStatus.OK
    wallet_age: FactStatus = FactStatus.OK
    cached_at: dict[str, str] | None = None


@dataclass
class RiskReport:
    mint: Pubkey
    profile: str
    risk_score: int = 0
    confidence_score: float = 1.0
    flags: RiskFlags = field(default_factory=RiskFlags)
    metrics: RiskMetrics = field(default_factory=RiskMetrics)
    breakdown: list[RiskFinding] = field(default_factory=list)
    summary: str = ""
    warnings: list[str] = field(default_factory=list)
    data_sources: DataSources = field(default_factory=DataSources)
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise FrozenReportError(f"RiskReport is frozen, cannot set {name}")
        super().__setattr__(name, value)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add_finding(
        self, rule: str, weight: int, description: str, status: str | None = None
    ) -> None:
        self.breakdown.append(RiskFinding(rule, weight, description, status))

    def calculate_score(self) -> None:
        total = sum(f.weight for f in self.breakdown)
        self.risk_score = max(0, min(total, 100))

    def update_confidence(self, *, lp_analysis: bool = False) -> None:
        sources = self.data_sources
        confidence = CONFIDENCE_CEILING

        if sources.holders in _DEGRADED_HOLDERS:
            confidence *= HOLDERS_DEGRADED_FACTOR

        if sources.metadata == FactStatus.CACHED:
            confidence *= METADATA_CACHED_FACTOR
        elif sources.metadata in (FactStatus.MISSING, FactStatus.ERROR):
            confidence *= METADATA_MISSING_FACTOR

        if sources.wallet_age == FactStatus.MISSING:
            confidence *= WALLET_AGE_MISSING_FACTOR

        if sources.rpc in (FactStatus.TIMEOUT, FactStatus.ERROR):
            confidence *= RPC_DEGRADED_FACTOR

        if not lp_analysis:
            confidence *= NO_LP_ANALYSIS_FACTOR

        self.confidence_score = confidence

    def generate_summary(self) -> None:
        summary = _band(_SUMMARIES, self.risk_score)

        if self.flags.mint_authority and self.flags.freeze_authority:
            summary += " Token owner retains destructive privileges."

        if self.metrics.holders == 0 and self.data_sources.holders in _DEGRADED_HOLDERS:
            if ZERO_HOLDERS_WARNING not in self.warnings:
                self.warnings.append(ZERO_HOLDERS_WARNING)
            summary += " Note: Unable to fetch complete holder data."

        if self.confidence_score < LOW_CONFIDENCE:
            self.warnings.insert(
                0,
                f"Low confidence score ({self.confidence_score * 100:.0f}%) - "
                "data may be incomplete. Results may be optimistic.",
            )

        self.summary = summary

    def risk_level(self) -> str:
        return _band(_RISK_LEVELS, self.risk_score)

    def confidence_level(self) -> str:
        pct = int(self.confidence_score * 100)
        if pct >= 92:
            return "HIGH"
        if pct >= 70:
            return "MEDIUM"
        return "LOW"

    def freeze(self) -> "RiskReport":
        """Make the report read-only; lists become tuples."""
        if self._frozen:
            return self
        self.breakdown = tuple(self.breakdown)  # type: ignore[assignment]
        self.warnings = tuple(self.warnings)  # type: ignore[assignment]
        object.__setattr__(self, "_frozen", True)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Plain-JSON view: pubkeys as base58, statuses as strings."""
        sources: dict[str, Any] = {
            "rpc": str(self.data_sources.rpc),
            "metadata": str(self.data_sources.metadata),
            "holders": str(self.data_sources.holders),
            "wallet_age": str(self.data_sources.wallet_age),
        }
        if self.data_sources.cached_at is not None:
            sources["cached_at"] = dict(self.data_sources.cached_at)

        return {
            "mint": str(self.mint),
            "risk_score": self.risk_score,
            "risk_level": self.risk_level(),
            "confidence_score": round(self.confidence_score, 4),
            "confidence_level": self.confidence_level(),
            "profile": self.profile,
            "flags": asdict(self.flags),
            "metrics": asdict(self.metrics),
            "breakdown": [asdict(f) for f in self.breakdown],
            "summary": self.summary,
            "warnings": list(self.warnings),
            "data_sources": sources,
        }


def _band(table: tuple[tuple[int, str], ...], score: int) -> str:
    for upper, text in table:
        if score <= upper:
            return text
    return table[-1][1]
