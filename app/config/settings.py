import os
from functools import lru_cache

from pydantic import BaseModel, Field

_DEFAULT_POPULAR_SYMBOLS = ["AAPL", "MSFT", "GOOGL", "AMZN", "TSLA"]


class Settings(BaseModel):
    ALPHA_VANTAGE_API_KEY: str = "demo"
    ALPHA_VANTAGE_BASE_URL: str = "https://www.alphavantage.co"
    UPSTREAM_TIMEOUT_SEC: float = Field(default=5.0, gt=0)
    STOCKS_TABLE: str = ""
    USER_FAVORITES_TABLE: str = ""
    AWS_REGION: str = "us-east-1"
    CACHE_TTL_SEC: int = Field(default=900, gt=0)
    BATCH_MAX_WORKERS: int = Field(default=8, ge=1)
    POPULAR_SYMBOLS: list[str] = Field(default_factory=lambda: list(_DEFAULT_POPULAR_SYMBOLS))
    COGNITO_USER_POOL_ID: str = ""
    COGNITO_CLIENT_ID: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        raw_popular = os.getenv("POPULAR_SYMBOLS", "")
        popular = [s.strip().upper() for s in raw_popular.split(",") if s.strip()]
        if not popular:
            popular = list(_DEFAULT_POPULAR_SYMBOLS)

        values = {
            name: os.getenv(name)
            for name in (
                "ALPHA_VANTAGE_API_KEY",
                "ALPHA_VANTAGE_BASE_URL",
                "UPSTREAM_TIMEOUT_SEC",
                "STOCKS_TABLE",
                "USER_FAVORITES_TABLE",
                "AWS_REGION",
                "CACHE_TTL_SEC",
                "BATCH_MAX_WORKERS",
                "COGNITO_USER_POOL_ID",
                "COGNITO_CLIENT_ID",
            )
        }
        # unset variables fall back to the field defaults
        values = {k: v for k, v in values.items() if v is not None}
        values["POPULAR_SYMBOLS"] = popular
        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
