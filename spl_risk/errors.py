"""Error taxonomy for token analysis.

Only mint-account failures (fetch or decode) abort an analysis. Optional
facts are degraded into FactStatus values by the provider instead.
"""


class RiskError(Exception):
    """Base class for all analysis errors."""


class RpcError(RiskError):
    """RPC node answered with an error (HTTP status or JSON-RPC error)."""


class NetworkError(RpcError):
    """Transport failure before a response was received."""


class RpcTimeout(RpcError):
    """Request or analysis budget exceeded."""


class InvalidToken(RiskError):
    """Address does not hold a usable token mint."""


class NotSplToken(InvalidToken):
    """Account is not owned by an SPL token program."""

    def __init__(self, owner: str = "") -> None:
        msg = "Not an SPL token"
        if owner:
            msg += f" (owner {owner})"
        super().__init__(msg)


class ParseError(RiskError):
    """Account bytes or RPC payload could not be decoded."""


class ConfigError(RiskError):
    """Unknown profile or invalid configuration."""
