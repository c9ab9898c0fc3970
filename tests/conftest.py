"""
Test Suite Configuration
"""
from datetime import datetime, timedelta
from typing import List

import pytest

from marketplace_analytics.config import AnalyticsSettings, Settings
from marketplace_analytics.data import (
    CategoryTranslation,
    LineItem,
    MarketplaceGenerator,
    Order,
    Product,
)
from marketplace_analytics.analytics import build_category_lookup


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    """Default gates and weights"""
    return AnalyticsSettings()


@pytest.fixture
def sample_translations() -> List[CategoryTranslation]:
    """Category name translations, with a duplicated source name"""
    return [
        CategoryTranslation("beleza_saude", "health_beauty"),
        CategoryTranslation("telefonia", "telephony"),
        CategoryTranslation("cama_mesa_banho", "bed_bath_table"),
        CategoryTranslation("telefonia", "phones"),
    ]


@pytest.fixture
def sample_products() -> List[Product]:
    """Products with resolvable, unknown and missing categories"""
    return [
        Product("prod-1", "beleza_saude"),
        Product("prod-2", "beleza_saude"),
        Product("prod-3", "telefonia"),
        Product("prod-4", "pc_gamer"),
        Product("prod-5", None),
        Product("prod-6", ""),
    ]


@pytest.fixture
def sample_lookup(sample_translations, sample_products):
    """Category lookup over the sample catalog"""
    return build_category_lookup(sample_translations, sample_products)


@pytest.fixture
def make_orders():
    """Factory for n orders with ids '<prefix>-<i>'"""
    def factory(prefix: str, n: int, status: str = "delivered") -> List[Order]:
        base = datetime(2018, 1, 1, 9, 0, 0)
        return [
            Order(
                order_id=f"{prefix}-{i}",
                status=status,
                purchase_timestamp=base + timedelta(hours=i),
            )
            for i in range(1, n + 1)
        ]
    return factory


@pytest.fixture
def make_items():
    """Factory for one line item per order"""
    def factory(
        orders: List[Order],
        seller_id: str,
        product_id: str = "prod-1",
        price: float = 10.0,
    ) -> List[LineItem]:
        return [
            LineItem(
                order_id=order.order_id,
                item_seq=1,
                product_id=product_id,
                seller_id=seller_id,
                price=price,
                freight_value=5.0,
            )
            for order in orders
        ]
    return factory


@pytest.fixture(scope="session")
def generated_dataset():
    """Seeded synthetic marketplace"""
    return MarketplaceGenerator(seed=7).generate(n_orders=2500, n_products=80, n_sellers=12)
