from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Solana RPC
    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"
    rpc_timeout_sec: float = 10.0
    rpc_max_rps: float = 10.0  # public mainnet endpoint tolerates ~10 RPS

    # Scoring
    risk_profile: str = "balanced"  # conservative / balanced / degenerate

    # Caches (seconds / max entries)
    token_cache_ttl_sec: float = 300.0
    token_cache_size: int = 1000
    metadata_cache_ttl_sec: float = 300.0
    metadata_cache_size: int = 1000
    wallet_age_cache_ttl_sec: float = 600.0  # wallet age changes slowly
    wallet_age_cache_size: int = 5000

    # Acquisition policy
    owner_lookup_delay_sec: float = 0.1  # gap between per-holder owner lookups
    retry_attempts: int = 3  # retries after the first attempt
    retry_base_delay_sec: float = 2.0  # 2s, 4s, 8s
    wallet_age_max_holders: int = 10  # each wallet = 1 RPC call

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # empty = console only
    log_json: bool = False  # serialize records as JSON lines


settings = Settings()
