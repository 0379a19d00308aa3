"""Token snapshot data model: the unit of analysis."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Generic, TypeVar

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

T = TypeVar("T")


class FactStatus(StrEnum):
    """Quality of one fact category as seen by the provider."""

    OK = "ok"
    CACHED = "cached"
    PARTIAL = "partial"
    TIMEOUT = "timeout"
    MISSING = "missing"
    ERROR = "error"


# Fact categories tracked in TokenSnapshot.sources
SOURCE_RPC = "rpc"
SOURCE_HOLDERS = "holders"
SOURCE_METADATA = "metadata"
SOURCE_CREATION_TIME = "creation_time"


@dataclass(frozen=True)
class FactResult(Generic[T]):
    """Outcome of an optional sub-fetch: a status and maybe a value."""

    status: FactStatus
    value: T | None = None
    error: str | None = None


@dataclass
class TokenMetadata:
    name: str
    symbol: str
    uri: str
    is_verified: bool = False


@dataclass
class TokenHolder:
    """Wallet holding the token, resolved from its token account."""

    address: Pubkey
    amount: int
    percentage: float  # of supply at fetch time
    wallet_age_days: int | None = None


@dataclass
class TokenSnapshot:
    """Point-in-time facts about a mint.

    `holders` is sorted by amount, descending. Index 0 is treated as the
    creator by convention.
    """

    mint: Pubkey
    supply: int
    decimals: int
    mint_authority: Pubkey | None = None
    freeze_authority: Pubkey | None = None
    metadata: TokenMetadata | None = None
    holders: list[TokenHolder] = field(default_factory=list)
    creation_timestamp: int | None = None
    sources: dict[str, FactStatus] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    from_cache: bool = False

    @property
    def holder_count(self) -> int:
        return len(self.holders)

    @property
    def creator_address(self) -> Pubkey | None:
        return self.holders[0].address if self.holders else None

    @property
    def creator_supply_percentage(self) -> float:
        return self.holders[0].percentage if self.holders else 0.0

    def is_supply_concentrated(self, threshold: float) -> bool:
        return self.creator_supply_percentage > threshold

    def source(self, category: str) -> FactStatus:
        return self.sources.get(category, FactStatus.OK)
