"""
Marketplace Analytics
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalyticsSettings(BaseSettings):
    """Eligibility gates, scoring weights and report sizes"""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    # Seller performance
    seller_min_orders: int = Field(default=50, description="Min distinct orders for a seller to be ranked")
    delivered_status: str = Field(default="delivered", description="Order status counted for on-time delivery")

    # Product recommendation
    product_min_sales: int = Field(default=10, description="Min line items for a product to be recommended")
    product_min_reviews: int = Field(default=5, description="Min review entries for a product to be recommended")
    recommendation_limit: int = Field(default=10, description="Max products recommended per category")
    sales_weight: float = Field(default=0.5, description="Weight of normalized sales count")
    review_weight: float = Field(default=0.3, description="Weight of normalized review count")
    rating_weight: float = Field(default=0.2, description="Weight of normalized average rating")

    # Grouping reports
    top_categories_limit: int = Field(default=10, description="Categories kept in the best-sellers report")
    price_range_edges: List[float] = Field(
        default=[50.0, 100.0, 200.0, 500.0],
        description="Upper bounds (inclusive) of the price buckets"
    )

    @field_validator(
        "seller_min_orders",
        "product_min_sales",
        "product_min_reviews",
        "recommendation_limit",
        "top_categories_limit",
    )
    @classmethod
    def validate_non_negative_int(cls, v: int) -> int:
        """Thresholds and limits cannot be negative"""
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("sales_weight", "review_weight", "rating_weight")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        """Weights cannot be negative"""
        if v < 0:
            raise ValueError("weight must be >= 0")
        return v

    @field_validator("price_range_edges")
    @classmethod
    def validate_edges(cls, v: List[float]) -> List[float]:
        """Bucket edges must be positive and strictly increasing"""
        if not v:
            raise ValueError("at least one price edge is required")
        if any(edge <= 0 for edge in v):
            raise ValueError("price edges must be positive")
        if any(b <= a for a, b in zip(v, v[1:])):
            raise ValueError("price edges must be strictly increasing")
        return v


class DataLakeSettings(BaseSettings):
    """Raw dataset location"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    raw_path: str = Field(default="./data/raw", description="Directory holding the raw CSV exports")
    encoding: str = Field(default="utf8", description="CSV encoding")
    datetime_format: str = Field(default="%Y-%m-%d %H:%M:%S", description="Timestamp format in the exports")
    null_values: List[str] = Field(default_factory=lambda: [""], description="Cell values read as missing")

    # File names
    orders_file: str = Field(default="olist_orders_dataset.csv", description="Orders file")
    order_items_file: str = Field(default="olist_order_items_dataset.csv", description="Order line items file")
    order_reviews_file: str = Field(default="olist_order_reviews_dataset.csv", description="Order reviews file")
    products_file: str = Field(default="olist_products_dataset.csv", description="Products file")
    translations_file: str = Field(
        default="product_category_name_translation.csv",
        description="Category name translation file"
    )


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate renderer name"""
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be one of: ['json', 'text']")
        return v.lower()


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="marketplace-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode: log at DEBUG unless a level is given")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    data_lake: DataLakeSettings = Field(default_factory=DataLakeSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
