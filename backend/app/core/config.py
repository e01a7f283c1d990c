"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "StockSight Backend"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Redis (series cache)
    redis_url: str = "redis://localhost:6379"
    series_cache_ttl: int = 900  # seconds

    # CORS
    allowed_origins: list[str] = ["http://localhost:5173"]

    # Alpha Vantage (prices, fundamentals, news sentiment)
    alpha_vantage_api_key: Optional[str] = None
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    alpha_vantage_output_size: str = "compact"  # compact = last 100 bars
    http_timeout_seconds: float = 10.0

    # SEC EDGAR (filings and XBRL facts for the AI assistant)
    # EDGAR rejects requests without a contact User-Agent
    sec_user_agent: str = "StockSight stocksight@example.com"
    sec_filings_limit: int = 5
    sec_fact_years: int = 3

    # LLM Providers
    gemini_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    llm_primary_provider: str = "gemini"  # Options: gemini, anthropic, openai
    gemini_model: str = "gemini-1.5-flash"
    anthropic_model: str = "claude-3-haiku-20240307"
    openai_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.9
    llm_max_tokens: int = 2048

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
