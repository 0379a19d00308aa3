from spl_risk.models.report import (
    DataSources,
    RiskFinding,
    RiskFlags,
    RiskMetrics,
    RiskReport,
)
from spl_risk.models.token import (
    FactResult,
    FactStatus,
    TokenHolder,
    TokenMetadata,
    TokenSnapshot,
)

__all__ = [
    "DataSources",
    "FactResult",
    "FactStatus",
    "RiskFinding",
    "RiskFlags",
    "RiskMetrics",
    "RiskReport",
    "TokenHolder",
    "TokenMetadata",
    "TokenSnapshot",
]
