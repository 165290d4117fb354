"""
Configuration module for the sales analytics pipeline.

This module handles environment variables and settings for the store
connection, the sample data generator, the discount update and the export.
"""

from typing import Any, Dict

from pydantic import Field
from pydantic_settings import BaseSettings


class SalesSettings(BaseSettings):
    """Pipeline settings loaded from environment variables (prefix ``SALES_``)."""

    # Store connection
    mongo_url: str = Field(default="mongodb://localhost:27017/")
    database_name: str = Field(default="sales_analytics")
    collection_name: str = Field(default="product_sales")
    reset_collection: bool = Field(default=False)

    # Sample data
    sample_size: int = Field(default=500, ge=1)
    random_seed: int = Field(default=123)

    # Queries
    top_products_limit: int = Field(default=5, ge=1)
    matrix_limit: int = Field(default=10, ge=1)
    high_value_category: str = Field(default="Electronics")
    high_value_min_price: float = Field(default=300.0)

    # Discount update
    discount_category: str = Field(default="Electronics")
    discount_factor: float = Field(default=0.9, gt=0)

    # Outputs
    export_path: str = Field(default="sales_data_export.csv")
    chart_dir: str = Field(default="charts")
    render_charts: bool = Field(default=True)

    # Logging settings
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    model_config = {
        "env_prefix": "SALES_",
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration"""
        return {"log_level": self.log_level, "log_format": self.log_format}


def get_settings(**overrides: Any) -> SalesSettings:
    """Build settings from the environment, with optional explicit overrides."""
    return SalesSettings(**overrides)
