"""Token data acquisition: mint state, holders, metadata, wallet ages.

Only the mint account is mandatory: failing to fetch (after retries) or
decode it aborts the call. Every other fact is absorbed into a FactResult
and recorded in TokenSnapshot.sources so the analyzer can lower confidence.

Holder percentages are computed against the supply seen at fetch time and
are not re-validated when a snapshot is served from cache.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import TypeVar

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from config.settings import Settings
from spl_risk.cache import CacheStats, TTLCache
from spl_risk.errors import InvalidToken, NotSplToken, RiskError, RpcError, RpcTimeout
from spl_risk.models.token import (
    SOURCE_CREATION_TIME,
    SOURCE_HOLDERS,
    SOURCE_METADATA,
    SOURCE_RPC,
    FactResult,
    FactStatus,
    TokenHolder,
    TokenMetadata,
    TokenSnapshot,
)
from spl_risk.parsers.metadata import METADATA_PROGRAM_ID, decode_metadata, find_metadata_address
from spl_risk.parsers.mint_parser import decode_mint, decode_token_account_owner, is_token_program
from spl_risk.rpc.client import SolanaRpcClient, log_rpc_failure

T = TypeVar("T")

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class CacheStatsSummary:
    token_cache: CacheStats
    metadata_cache: CacheStats
    wallet_age_cache: CacheStats


class TokenDataProvider:
    """Fetches TokenSnapshots from a Solana RPC node with caching and retries."""

    def __init__(
        self,
        rpc: SolanaRpcClient,
        *,
        token_cache: TTLCache[Pubkey, TokenSnapshot] | None = None,
        metadata_cache: TTLCache[Pubkey, TokenMetadata] | None = None,
        wallet_age_cache: TTLCache[Pubkey, int] | None = None,
        owner_lookup_delay: float = 0.1,
        retry_attempts: int = 3,
        retry_base_delay: float = 2.0,
        max_age_holders: int = 10,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rpc = rpc
        # Empty caches are falsy (__len__), so compare against None explicitly
        if token_cache is None:
            token_cache = TTLCache(300.0, 1000, name="token")
        if metadata_cache is None:
            metadata_cache = TTLCache(300.0, 1000, name="metadata")
        if wallet_age_cache is None:
            wallet_age_cache = TTLCache(600.0, 5000, name="wallet_age")
        self._token_cache = token_cache
        self._metadata_cache = metadata_cache
        self._wallet_age_cache = wallet_age_cache
        self._owner_lookup_delay = owner_lookup_delay
        self._retry_attempts = retry_attempts
        self._retry_base_delay = retry_base_delay
        self._max_age_holders = max_age_holders
        self._clock = clock

    @classmethod
    def from_settings(cls, rpc: SolanaRpcClient, settings: Settings) -> "TokenDataProvider":
        return cls(
            rpc,
            token_cache=TTLCache(
                settings.token_cache_ttl_sec, settings.token_cache_size, name="token"
            ),
            metadata_cache=TTLCache(
                settings.metadata_cache_ttl_sec, settings.metadata_cache_size, name="metadata"
            ),
            wallet_age_cache=TTLCache(
                settings.wallet_age_cache_ttl_sec,
                settings.wallet_age_cache_size,
                name="wallet_age",
            ),
            owner_lookup_delay=settings.owner_lookup_delay_sec,
            retry_attempts=settings.retry_attempts,
            retry_base_delay=settings.retry_base_delay_sec,
            max_age_holders=settings.wallet_age_max_holders,
        )

    def clear_cache(self) -> None:
        self._token_cache.clear()
        self._metadata_cache.clear()
        self._wallet_age_cache.clear()

    def cache_stats(self) -> CacheStatsSummary:
        return CacheStatsSummary(
            token_cache=self._token_cache.stats(),
            metadata_cache=self._metadata_cache.stats(),
            wallet_age_cache=self._wallet_age_cache.stats(),
        )

    async def fetch_token_snapshot(self, mint: Pubkey) -> TokenSnapshot:
        """Return a snapshot for mint, from cache when fresh.

        Raises InvalidToken / NotSplToken / ParseError / RpcError only for the
        mint account itself.
        """
        cached = self._token_cache.get(mint)
        if cached is not None:
            logger.debug(f"[PROVIDER] Token cache hit for {str(mint)[:12]}")
            return _detached(cached, from_cache=True)

        account = await self._with_retry("getAccountInfo(mint)", self._rpc.get_account_info, mint)
        if account is None:
            raise InvalidToken(f"Mint account {mint} not found")
        if not is_token_program(account.owner):
            raise NotSplToken(str(account.owner))

        state = decode_mint(account.data)

        holders, metadata, creation = await asyncio.gather(
            self._fetch_holders(mint, state.supply),
            self._fetch_metadata(mint),
            self._fetch_creation_time(mint),
        )

        rpc_status = FactStatus.OK
        if holders.status == FactStatus.TIMEOUT:
            rpc_status = FactStatus.TIMEOUT
        elif holders.error is not None:
            rpc_status = FactStatus.ERROR

        snapshot = TokenSnapshot(
            mint=mint,
            supply=state.supply,
            decimals=state.decimals,
            mint_authority=state.mint_authority,
            freeze_authority=state.freeze_authority,
            metadata=metadata.value,
            holders=holders.value or [],
            creation_timestamp=creation.value,
            sources={
                SOURCE_RPC: rpc_status,
                SOURCE_HOLDERS: holders.status,
                SOURCE_METADATA: metadata.status,
                SOURCE_CREATION_TIME: creation.status,
            },
        )

        self._token_cache.insert(mint, _detached(snapshot))
        logger.info(
            f"[PROVIDER] {str(mint)[:12]}: supply={state.supply} holders={snapshot.holder_count} "
            f"metadata={metadata.status} creation={creation.status}"
        )
        return snapshot

    async def enrich_holder_ages(self, holders: list[TokenHolder]) -> FactStatus:
        """Populate wallet_age_days for the top holders in place.

        A failed lookup leaves that holder's age unset and moves on.
        """
        top = holders[: self._max_age_holders]
        if not top:
            return FactStatus.OK

        live = 0
        for holder in top:
            if holder.wallet_age_days is not None:
                continue
            cached = self._wallet_age_cache.get(holder.address)
            if cached is not None:
                holder.wallet_age_days = cached
                continue
            try:
                holder.wallet_age_days = await self._get_wallet_age(holder.address)
                live += 1
            except RiskError as e:
                log_rpc_failure(f"wallet age {str(holder.address)[:12]}", e)

        if all(h.wallet_age_days is None for h in top):
            return FactStatus.MISSING
        if live == 0:
            return FactStatus.CACHED
        return FactStatus.OK

    async def _with_retry(
        self, label: str, func: Callable[..., Awaitable[T]], *args: object
    ) -> T:
        """Call func, retrying RpcError with exponential backoff (2s, 4s, 8s)."""
        delay = self._retry_base_delay
        for attempt in range(self._retry_attempts + 1):
            try:
                return await func(*args)
            except RpcError as e:
                if attempt >= self._retry_attempts:
                    logger.warning(f"[PROVIDER] {label} failed after {attempt + 1} attempts: {e}")
                    raise
                logger.debug(
                    f"[PROVIDER] {label}: {e}, retrying in {delay:.0f}s "
                    f"({self._retry_attempts - attempt} retries left)"
                )
                await asyncio.sleep(delay)
                delay *= 2
        raise AssertionError("unreachable")

    async def _fetch_holders(self, mint: Pubkey, total_supply: int) -> FactResult[list[TokenHolder]]:
        try:
            largest = await self._with_retry(
                "getTokenLargestAccounts", self._rpc.get_token_largest_accounts, mint
            )
        except RpcTimeout as e:
            return FactResult(FactStatus.TIMEOUT, [], error=str(e))
        except RiskError as e:
            return FactResult(FactStatus.PARTIAL, [], error=str(e))

        if not largest:
            logger.warning(f"[PROVIDER] No holders returned for {str(mint)[:12]}")
            return FactResult(FactStatus.PARTIAL, [])

        holders: list[TokenHolder] = []
        for balance in largest:
            try:
                amount = int(balance.amount)
                token_account = Pubkey.from_string(balance.address)
            except ValueError:
                logger.debug(f"[PROVIDER] Skipping malformed balance entry {balance.address}")
                continue
            if amount <= 0:
                continue

            await asyncio.sleep(self._owner_lookup_delay)
            owner = await self._resolve_owner(token_account)
            percentage = amount / total_supply * 100 if total_supply > 0 else 0.0
            holders.append(TokenHolder(address=owner, amount=amount, percentage=percentage))

        holders.sort(key=lambda h: h.amount, reverse=True)
        return FactResult(FactStatus.OK if holders else FactStatus.PARTIAL, holders)

    async def _resolve_owner(self, token_account: Pubkey) -> Pubkey:
        """Owner wallet of a token account; the account itself if unresolvable."""
        try:
            account = await self._rpc.get_account_info(token_account)
            if account is None:
                logger.debug(f"[PROVIDER] Token account {token_account} vanished")
                return token_account
            return decode_token_account_owner(account.data)
        except RiskError as e:
            log_rpc_failure(f"owner of {token_account}", e)
            return token_account

    async def _fetch_metadata(self, mint: Pubkey) -> FactResult[TokenMetadata]:
        cached = self._metadata_cache.get(mint)
        if cached is not None:
            return FactResult(FactStatus.CACHED, cached)

        address = find_metadata_address(mint)
        try:
            account = await self._rpc.get_account_info(address)
        except RiskError as e:
            log_rpc_failure(f"metadata {str(mint)[:12]}", e)
            return FactResult(FactStatus.ERROR, error=str(e))

        if account is None:
            return FactResult(FactStatus.MISSING)
        if account.owner != METADATA_PROGRAM_ID:
            logger.warning(f"[PROVIDER] Metadata account {address} has foreign owner {account.owner}")
            return FactResult(FactStatus.ERROR, error="Account is not owned by Metaplex program")

        metadata = decode_metadata(account.data)
        self._metadata_cache.insert(mint, metadata)
        return FactResult(FactStatus.OK, metadata)

    async def _fetch_creation_time(self, mint: Pubkey) -> FactResult[int]:
        try:
            signatures = await self._rpc.get_signatures_for_address(mint)
        except RiskError as e:
            log_rpc_failure(f"creation time {str(mint)[:12]}", e)
            return FactResult(FactStatus.ERROR, error=str(e))

        if not signatures or signatures[-1].block_time is None:
            return FactResult(FactStatus.MISSING)
        return FactResult(FactStatus.OK, signatures[-1].block_time)

    async def _get_wallet_age(self, wallet: Pubkey) -> int:
        signatures = await self._rpc.get_signatures_for_address(wallet)
        if not signatures or signatures[-1].block_time is None:
            return 0

        age_days = max(0, int(self._clock() - signatures[-1].block_time) // SECONDS_PER_DAY)
        self._wallet_age_cache.insert(wallet, age_days)
        return age_days


def _detached(snapshot: TokenSnapshot, *, from_cache: bool = False) -> TokenSnapshot:
    """Copy whose holder records can be enriched without touching the original."""
    return replace(
        snapshot,
        holders=[replace(h) for h in snapshot.holders],
        sources=dict(snapshot.sources),
        from_cache=from_cache,
    )
