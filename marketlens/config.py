"""Configuration management for MarketLens application."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelSpec(BaseModel):
    """An LLM the pipeline asks for an independent market judgment."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    display_name: str
    provider: str


DEFAULT_ANALYSIS_MODELS = [
    ModelSpec(
        model_id="google/gemini-3-flash-preview",
        display_name="Gemini Flash",
        provider="Google",
    ),
    ModelSpec(
        model_id="google/gemini-2.5-pro",
        display_name="Gemini Pro",
        provider="Google",
    ),
    ModelSpec(
        model_id="google/gemini-3-pro-preview",
        display_name="Gemini 3 Pro",
        provider="Google",
    ),
]

# Ordered substitutes tried when a primary model fails outright
DEFAULT_FALLBACK_MODELS = {
    "google/gemini-3-flash-preview": [
        "google/gemini-2.5-flash",
        "google/gemini-2.5-flash-lite",
    ],
    "google/gemini-2.5-pro": [
        "google/gemini-3-pro-preview",
        "google/gemini-2.5-flash",
    ],
    "google/gemini-3-pro-preview": [
        "google/gemini-2.5-pro",
        "google/gemini-2.5-flash",
    ],
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM Gateway Configuration (OpenAI-compatible chat completions)
    llm_gateway_api_key: str = ""
    llm_gateway_base_url: str = "https://ai.gateway.lovable.dev/v1"
    llm_request_timeout: float = 60.0
    llm_max_tokens: int = 2000
    llm_temperature: float = 0.5

    # LLM Model Configuration
    analysis_models: List[ModelSpec] = Field(
        default_factory=lambda: [m.model_copy() for m in DEFAULT_ANALYSIS_MODELS]
    )
    fallback_models: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_FALLBACK_MODELS.items()}
    )

    # Crypto Price Feed Configuration
    price_feed_base_url: str = "https://api.binance.com"
    price_feed_timeout: float = 5.0
    price_feed_quote_asset: str = "USDT"
    candle_interval: str = "15m"
    candle_limit: int = 24

    # Database Configuration
    database_path: str = "data/marketlens.db"

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Optional[str] = "marketlens.log"

    # HTTP API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create settings singleton instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
