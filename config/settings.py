from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # CoinGecko (public API works without a key; demo key raises limits)
    coingecko_api_key: str = ""
    coingecko_max_rps: float = 0.5  # free tier ~30 calls/min
    enable_coingecko: bool = True

    # Etherscan (free key: 5 RPS)
    etherscan_api_key: str = ""
    etherscan_max_rps: float = 5.0
    enable_etherscan: bool = True

    # Uniswap V3 subgraph (key only needed for The Graph gateway)
    uniswap_api_key: str = ""
    enable_uniswap: bool = True

    # BitQuery (key required)
    bitquery_api_key: str = ""
    enable_bitquery: bool = True

    # TokenMetrics (key required)
    tokenmetrics_api_key: str = ""
    enable_tokenmetrics: bool = True

    # Per-call race timeouts
    market_data_timeout_sec: float = 5.0  # address resolution must finish first
    source_timeout_sec: float = 3.0  # address-dependent fetchers run in parallel
    http_timeout_sec: float = 10.0

    # Alternate backend: proxy analysis to an external function
    remote_backend_url: str = ""
    remote_backend_key: str = ""
    remote_backend_timeout_sec: float = 15.0

    # Fallback generator: seed randomness by identifier for reproducible scores
    fallback_seeded: bool = True

    # Composite weights (must sum to 1.0)
    weight_wallet_concentration: float = 0.40
    weight_liquidity: float = 0.25
    weight_supply_dynamics: float = 0.20
    weight_trading_volume: float = 0.15

    # Sub-score constants
    single_wallet_penalty_pct: float = 30.0
    single_wallet_penalty: int = 0  # e.g. 10; non-zero trades away monotonicity in top-5 share
    minting_risk_score: int = 85
    wash_trading_score: int = 90
    wash_trading_volume_ratio: float = 5.0  # volume24h / marketCap

    # Red flag thresholds
    flag_wallet_score: int = 75
    flag_liquidity_score: int = 75
    flag_top_wallets_pct: float = 70.0
    flag_data_quality: int = 50

    # HTTP server
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_debug: bool = False
    api_cors_origins: str = "http://localhost:3000"  # comma-separated
    analyze_rate_limit: str = "30/minute"

    @model_validator(mode="after")
    def _check_weights(self) -> "Settings":
        total = (
            self.weight_wallet_concentration
            + self.weight_liquidity
            + self.weight_supply_dynamics
            + self.weight_trading_volume
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Composite weights must sum to 1.0, got {total:.4f}")
        return self


settings = Settings()
