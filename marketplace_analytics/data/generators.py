"""
Synthetic Data Generator

Generates realistic marketplace data for testing and development.
Includes:
- Category translations and a product catalog
- Sellers with uneven order volume
- Orders with delivery outcomes and multi-item baskets
- Review entries (including orders reviewed more than once)
"""

import random
from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np
from faker import Faker
import structlog

from marketplace_analytics.data.models import (
    CategoryTranslation,
    LineItem,
    MarketplaceDataset,
    Order,
    Product,
    Review,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("beleza_saude", "health_beauty"),
    ("cama_mesa_banho", "bed_bath_table"),
    ("esporte_lazer", "sports_leisure"),
    ("informatica_acessorios", "computers_accessories"),
    ("moveis_decoracao", "furniture_decor"),
    ("relogios_presentes", "watches_gifts"),
    ("telefonia", "telephony"),
    ("utilidades_domesticas", "housewares"),
]

ORDER_STATUSES = [
    ("delivered", 0.90),
    ("shipped", 0.04),
    ("canceled", 0.02),
    ("invoiced", 0.02),
    ("processing", 0.02),
]

BASE_PRICES = {
    "health_beauty": (10, 250),
    "bed_bath_table": (20, 300),
    "sports_leisure": (15, 400),
    "computers_accessories": (30, 900),
    "furniture_decor": (40, 700),
    "watches_gifts": (50, 1200),
    "telephony": (20, 600),
    "housewares": (10, 200),
}


# =============================================================================
# GENERATOR
# =============================================================================

class MarketplaceGenerator:
    """
    Generate a complete, internally consistent marketplace dataset.

    The same seed always yields the same dataset.

    Example:
        dataset = MarketplaceGenerator(seed=7).generate(n_orders=2000)
    """

    def __init__(self, seed: int = 42):
        self.seed = seed
        self._random = random.Random(seed)
        self._np_random = np.random.default_rng(seed)
        self._fake = Faker()
        self._fake.seed_instance(seed)

    def _generate_translations(self) -> List[CategoryTranslation]:
        return [CategoryTranslation(raw, english) for raw, english in CATEGORIES]

    def _generate_products(self, n: int) -> List[Product]:
        products = []
        for i in range(n):
            # A few products have no category, or one missing from the translation table
            roll = self._random.random()
            if roll < 0.03:
                category_name = None
            elif roll < 0.05:
                category_name = "pc_gamer"
            else:
                category_name = self._random.choice(CATEGORIES)[0]
            products.append(Product(product_id=self._fake.uuid4(), category_name=category_name))
        return products

    def _generate_sellers(self, n: int) -> List[str]:
        return [self._fake.uuid4() for _ in range(n)]

    def _generate_order(
        self,
        start_date: datetime,
        end_date: datetime,
    ) -> Order:
        purchase = self._fake.date_time_between(start_date=start_date, end_date=end_date)
        status = self._random.choices(
            [s[0] for s in ORDER_STATUSES],
            weights=[s[1] for s in ORDER_STATUSES],
        )[0]

        estimated = (purchase + timedelta(days=self._random.randint(10, 30))).replace(
            hour=0, minute=0, second=0
        )
        delivered = None
        if status == "delivered" and self._random.random() > 0.02:
            # Mostly early, sometimes late
            delivered = estimated + timedelta(days=self._random.randint(-12, 5))

        return Order(
            order_id=self._fake.uuid4(),
            status=status,
            purchase_timestamp=purchase,
            delivered_customer_date=delivered,
            estimated_delivery_date=estimated,
            customer_id=self._fake.uuid4(),
            approved_at=purchase + timedelta(minutes=self._random.randint(5, 600)),
        )

    def generate(
        self,
        n_orders: int = 2000,
        n_products: int = 80,
        n_sellers: int = 12,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> MarketplaceDataset:
        """Generate orders with items and reviews"""
        start_date = start_date or datetime(2017, 1, 1)
        end_date = end_date or datetime(2018, 8, 31)

        translations = self._generate_translations()
        products = self._generate_products(n_products)
        sellers = self._generate_sellers(n_sellers)
        category_by_product = {p.product_id: p.category_name for p in products}
        english = dict(CATEGORIES)

        # Skewed seller popularity so some sellers fall below eligibility
        seller_weights = [1.0 / (rank + 1) for rank in range(n_sellers)]

        orders = []
        line_items = []
        reviews = []

        for _ in range(n_orders):
            order = self._generate_order(start_date, end_date)
            orders.append(order)

            num_items = int(self._np_random.choice([1, 2, 3, 4], p=[0.80, 0.12, 0.06, 0.02]))
            seller_id = self._random.choices(sellers, weights=seller_weights)[0]

            for seq in range(1, num_items + 1):
                product = self._random.choice(products)
                low, high = BASE_PRICES.get(
                    english.get(category_by_product[product.product_id]), (10, 300)
                )
                line_items.append(LineItem(
                    order_id=order.order_id,
                    item_seq=seq,
                    product_id=product.product_id,
                    seller_id=seller_id,
                    price=round(self._random.uniform(low, high), 2),
                    freight_value=round(self._random.uniform(5, 40), 2),
                    shipping_limit_date=order.purchase_timestamp + timedelta(days=3),
                ))

            # ~90% of orders are reviewed, a few of them twice
            if self._random.random() < 0.90:
                n_reviews = 2 if self._random.random() < 0.04 else 1
                for _ in range(n_reviews):
                    reviews.append(Review(
                        order_id=order.order_id,
                        score=int(self._np_random.choice(
                            [1, 2, 3, 4, 5], p=[0.10, 0.04, 0.08, 0.20, 0.58]
                        )),
                        review_id=self._fake.uuid4(),
                    ))

        dataset = MarketplaceDataset(
            orders=tuple(orders),
            line_items=tuple(line_items),
            reviews=tuple(reviews),
            products=tuple(products),
            translations=tuple(translations),
        )

        logger.debug("Generated synthetic marketplace", seed=self.seed, **dataset.row_counts)

        return dataset
