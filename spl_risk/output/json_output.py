import json

from spl_risk.models.report import RiskReport


def render_json(report: RiskReport) -> str:
    """Pretty JSON of the report, pubkeys as base58 strings."""
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)
