"""Plain-text report rendering for terminals."""

from datetime import UTC, datetime

from spl_risk.models.report import RiskReport

RULE = "=" * 59
THIN = "-" * 59

_SOURCE_LABELS = {
    "ok": "OK",
    "cached": "Cached",
    "partial": "Partial",
    "timeout": "Timeout",
    "missing": "Missing",
    "error": "Error",
}


def render_human(report: RiskReport, verbose: bool = False) -> str:
    lines = [
        "",
        RULE,
        "SPL TOKEN RISK ANALYSIS",
        RULE,
        "",
        f"TOKEN: {report.mint}",
        f"PROFILE: {report.profile}",
        "",
        f"RISK SCORE: {report.risk_score}% [{report.risk_level()}]",
        f"CONFIDENCE: {report.confidence_score * 100:.0f}% [{report.confidence_level()}]",
        "",
        "BREAKDOWN:",
        THIN,
    ]

    for item in report.breakdown:
        weight = f"(+{item.weight})" if item.weight >= 0 else f"({item.weight})"
        lines.append(
            f" -- {item.rule.replace('_', ' '):<24} : {item.status or '':<14} "
            f"{weight:>7}  {item.description}"
        )
    lines.append("")

    if verbose:
        lines.extend(_metrics_section(report))

    if report.warnings:
        lines += ["WARNINGS:", THIN]
        lines += [f"  !  {w}" for w in report.warnings]
        lines.append("")

    lines += [
        "SUMMARY:",
        THIN,
        f"  {report.summary}",
        "",
        "DISCLAIMER:",
        THIN,
        "  Probabilistic assessment based on on-chain heuristics only.",
        "  NOT financial advice. Always DYOR (Do Your Own Research).",
        RULE,
        "",
    ]
    return "\n".join(lines)


def _metrics_section(report: RiskReport) -> list[str]:
    m = report.metrics
    lines = ["METRICS:", THIN]
    if m.total_supply is not None:
        lines.append(f"  {'Total Supply':<27}: {m.total_supply:,}")
    if m.decimals is not None:
        lines.append(f"  {'Decimals':<27}: {m.decimals}")
    lines.append(f"  {'Creator Supply':<27}: {m.creator_supply_pct:.2f}%")
    lines.append(f"  {'Holders':<27}: {m.holders}")
    if m.top_holder_pct is not None:
        warning = " (high concentration)" if m.top_holder_pct > 30.0 else ""
        lines.append(f"  {'Top Holder':<27}: {m.top_holder_pct:.2f}%{warning}")
    if m.wallet_age_days is not None:
        lines.append(
            f"  {'Wallet Age':<27}: {m.wallet_age_days} days ~ {m.wallet_age_days / 365.25:.1f} years"
        )
    if m.creation_timestamp is not None:
        created = datetime.fromtimestamp(m.creation_timestamp, UTC)
        lines.append(f"  {'Oldest Mint Activity':<27}: {created:%Y-%m-%d %H:%M} UTC")
    lines.append("")

    sources = report.data_sources
    lines += [
        "DATA SOURCES:",
        THIN,
        f"  RPC          : {_SOURCE_LABELS.get(sources.rpc, sources.rpc)}",
        f"  Metadata     : {_SOURCE_LABELS.get(sources.metadata, sources.metadata)}",
        f"  Holders      : {_SOURCE_LABELS.get(sources.holders, sources.holders)}",
        f"  Wallet Age   : {_SOURCE_LABELS.get(sources.wallet_age, sources.wallet_age)}",
    ]
    if sources.cached_at:
        lines += ["", "  Cache timestamps:"]
        lines += [f"    {key:<12} -> {ts}" for key, ts in sources.cached_at.items()]
    lines.append("")
    return lines
