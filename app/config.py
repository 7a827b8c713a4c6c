from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["auto", "json", "console"] = Field(
        default="auto",
        description="Log renderer; auto uses console output at DEBUG and JSON otherwise",
    )
    service_name: str = Field(default="copytrade-dashboard", description="Service tag on every log line")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # Upstream Endpoints
    gamma_api_url: str = Field(
        default="https://gamma-api.polymarket.com",
        description="Polymarket Gamma API (market discovery)",
    )
    data_api_url: str = Field(
        default="https://data-api.polymarket.com",
        description="Polymarket Data API (leaderboard)",
    )
    activity_subgraph_url: str = Field(
        default=(
            "https://api.goldsky.com/api/public/project_cl6mb8i9h0003e201j6li0diw"
            "/subgraphs/activity-subgraph/0.0.4/gn"
        ),
        description="GraphQL endpoint for account fills",
    )
    positions_subgraph_url: str = Field(
        default=(
            "https://api.goldsky.com/api/public/project_cl6mb8i9h0003e201j6li0diw"
            "/subgraphs/positions-subgraph/0.0.7/gn"
        ),
        description="GraphQL endpoint for account positions",
    )

    # Rate Limiting / Timeouts
    request_timeout_seconds: float = Field(default=10.0, gt=0, description="Upstream request timeout")

    # Leaderboard
    leaderboard_page_size: int = Field(
        default=50,
        ge=1,
        le=50,
        description="Rows per leaderboard request (provider maximum is 50)",
    )
    leaderboard_retry_attempts: int = Field(
        default=1,
        ge=0,
        le=3,
        description="Retries per leaderboard page after a failed attempt",
    )
    leaderboard_category: str = Field(default="OVERALL", description="Leaderboard category")
    leaderboard_time_period: str = Field(default="MONTH", description="DAY, WEEK, MONTH or ALL")
    leaderboard_order_by: str = Field(default="PNL", description="PNL or VOL")
    top_traders_default_limit: int = Field(default=100, ge=1, le=500)

    # Cache Settings
    cache_ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")
    max_cache_size: int = Field(default=1000, description="Maximum cache size")

    # Derivation
    win_rate_jitter: float = Field(
        default=0.0,
        ge=0.0,
        le=5.0,
        description="Amplitude (percentage points) of cosmetic win-rate noise; 0 disables it",
    )
    win_rate_jitter_seed: Optional[int] = Field(
        default=None,
        description="Seed for the win-rate noise generator (reproducible output)",
    )

    # User Performance
    user_trades_limit: int = Field(
        default=1000,
        ge=1,
        le=1000,
        description="Fills fetched per account when computing performance",
    )

    @property
    def jitter_enabled(self) -> bool:
        return self.win_rate_jitter > 0


# Global settings instance
settings = Settings()
