"""
Configuration management using Pydantic Settings
Handles environment variables and validation
"""
from functools import lru_cache
from typing import List

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Environment
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Application
    app_name: str = "ReportBuilder"
    app_version: str = "0.1.0"

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    # API
    cors_origins: List[str] = Field(default=["*"])
    prometheus_enabled: bool = Field(default=True)

    # Chart library delivered to exported documents
    chart_js_cdn_url: str = Field(default="https://cdn.jsdelivr.net/npm/chart.js@4.4.1/dist/chart.umd.min.js")
    chart_js_fallback_urls: List[str] = Field(
        default=[
            "https://unpkg.com/chart.js@4.4.1/dist/chart.umd.min.js",
            "https://cdnjs.cloudflare.com/ajax/libs/Chart.js/4.4.1/chart.umd.min.js",
        ],
        description="Loaded in order when the primary CDN fails",
    )

    # Embedded runtime defaults
    runtime_data_path: str = Field(default="./report_data.json")
    runtime_auto_print: bool = Field(default=True)
    runtime_print_delay_ms: int = Field(default=500, ge=0)
    runtime_fetch_timeout_ms: int = Field(default=10000, ge=0, description="0 disables the data fetch timeout")
    runtime_chart_wait_ms: int = Field(default=3000, ge=0)

    # Asset inlining
    asset_inline_enabled: bool = Field(default=True)
    asset_fetch_concurrency: int = Field(default=5, ge=1)
    asset_fetch_timeout: float = Field(default=10.0, gt=0)

    # Export defaults
    default_page_size: str = Field(default="A4")
    default_margin_mm: float = Field(default=20.0, ge=0)
    watermark_text: str = Field(default="Made with ReportBuilder")
    max_tree_nodes: int = Field(default=5000, ge=1)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("default_page_size")
    @classmethod
    def validate_page_size(cls, v):
        if v not in ("A4", "Letter"):
            raise ValueError("Default page size must be 'A4' or 'Letter'")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
