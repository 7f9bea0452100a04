"""Configuration management."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API Keys
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    perplexity_api_key: str = Field(default="", alias="PERPLEXITY_API_KEY")

    # Analysis engine
    analysis_provider: str = "openai"  # "openai" or "perplexity"
    analysis_model: str = "gpt-4o-mini"
    search_model: str = "gpt-4o-mini-search-preview"
    perplexity_model: str = "sonar-pro"
    enable_search: bool = True
    request_timeout: float = 120.0

    # Archive
    offer_store_path: str = Field(default="./data/saved_offers.json", alias="OFFER_STORE_PATH")
    max_comparison: int = 3

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True


settings = Settings()
