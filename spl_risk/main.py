"""Command-line entry point: `spl-risk <MINT>`.

Exit codes: 0 low risk (<40), 1 medium (40-69), 2 high (>=70), 3 error.
"""

import argparse
import asyncio
import sys

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from config.settings import settings
from spl_risk.cache import CacheStats
from spl_risk.errors import ConfigError, RiskError
from spl_risk.output.human import render_human
from spl_risk.output.json_output import render_json
from spl_risk.profiles import PROFILES, get_profile
from spl_risk.provider import TokenDataProvider
from spl_risk.rpc.client import SolanaRpcClient
from spl_risk.scoring import RiskAnalyzer
from spl_risk.utils.logger import setup_logger

EXIT_ERROR = 3


def _pubkey(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid pubkey: {value}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spl-risk",
        description=(
            "Deterministic risk analyzer for Solana SPL tokens. "
            "Probabilistic assessment only, NOT financial advice."
        ),
    )
    parser.add_argument("mint_address", type=_pubkey, help="SPL token mint address")
    parser.add_argument(
        "-r", "--rpc-url", default=settings.solana_rpc_url, help="Solana RPC endpoint URL"
    )
    parser.add_argument(
        "-p", "--profile", default=settings.risk_profile, choices=sorted(PROFILES),
        help="Risk profile",
    )
    parser.add_argument("-j", "--json", action="store_true", help="Output JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show metrics and sources")
    parser.add_argument(
        "-t", "--timeout", type=float, default=settings.rpc_timeout_sec,
        help="Request timeout in seconds",
    )
    parser.add_argument("--no-cache", action="store_true", help="Disable caching")
    parser.add_argument("--cache-stats", action="store_true", help="Print cache statistics")
    return parser


def exit_code_for(score: int) -> int:
    if score >= 70:
        return 2
    if score >= 40:
        return 1
    return 0


def _format_stats(label: str, stats: CacheStats) -> str:
    return f"  {label}: {stats.size}/{stats.capacity} entries ({stats.expired_entries} expired)"


async def run(args: argparse.Namespace) -> int:
    try:
        profile = get_profile(args.profile)
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_ERROR

    async with SolanaRpcClient(
        args.rpc_url, timeout=args.timeout, max_rps=settings.rpc_max_rps
    ) as rpc:
        provider_settings = settings
        if args.no_cache:
            # Capacity 0 = every insert is dropped
            provider_settings = settings.model_copy(
                update={
                    "token_cache_size": 0,
                    "metadata_cache_size": 0,
                    "wallet_age_cache_size": 0,
                }
            )
        provider = TokenDataProvider.from_settings(rpc, provider_settings)

        analyzer = RiskAnalyzer(profile, provider)
        try:
            report = await analyzer.analyze(args.mint_address)
        except RiskError as e:
            logger.error(f"Analysis failed for {args.mint_address}: {e}")
            return EXIT_ERROR

        if args.cache_stats:
            stats = provider.cache_stats()
            print("Cache Statistics:", file=sys.stderr)
            print(_format_stats("Token Cache", stats.token_cache), file=sys.stderr)
            print(_format_stats("Metadata Cache", stats.metadata_cache), file=sys.stderr)
            print(_format_stats("Wallet Age Cache", stats.wallet_age_cache), file=sys.stderr)

    if args.json:
        print(render_json(report))
    else:
        print(render_human(report, verbose=args.verbose))

    return exit_code_for(report.risk_score)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(json_logs=settings.log_json, level=settings.log_level, log_file=settings.log_file)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
