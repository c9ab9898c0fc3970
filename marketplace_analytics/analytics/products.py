"""
Product Metrics Calculator

Per-product sales and review metrics for every product that resolves to a
canonical category, filtered by the recommendation eligibility gate.
"""

from typing import Dict, Iterable, List, Optional

import structlog

from marketplace_analytics.config import get_settings
from marketplace_analytics.data.models import LineItem, ProductMetrics
from .lookups import CategoryLookup
from .review_index import ReviewIndex

logger = structlog.get_logger(__name__)
settings = get_settings()


class ProductMetricsCalculator:
    """
    Product metrics with an eligibility gate.

    A product is kept only when it has at least ``min_sales`` line items and
    at least ``min_reviews`` review entries across the orders it appears in.

    Example:
        calculator = ProductMetricsCalculator()
        eligible = calculator.compute(line_items, lookup, review_index)
    """

    def __init__(
        self,
        min_sales: Optional[int] = None,
        min_reviews: Optional[int] = None,
    ):
        self.min_sales = min_sales if min_sales is not None else settings.analytics.product_min_sales
        self.min_reviews = min_reviews if min_reviews is not None else settings.analytics.product_min_reviews

    def measure(self, items: List[LineItem], review_index: ReviewIndex) -> ProductMetrics:
        """Metrics of one product from its line items"""
        order_ids = {item.order_id for item in items}
        scores = review_index.scores_for(order_ids)
        return ProductMetrics(
            sales_count=len(items),
            review_count=len(scores),
            avg_rating=sum(scores) / len(scores) if scores else 0.0,
        )

    def is_eligible(self, metrics: ProductMetrics) -> bool:
        """Check the sales and review floors"""
        return metrics.sales_count >= self.min_sales and metrics.review_count >= self.min_reviews

    def compute(
        self,
        line_items: Iterable[LineItem],
        category_lookup: CategoryLookup,
        review_index: ReviewIndex,
    ) -> Dict[str, ProductMetrics]:
        """
        Compute metrics for categorized products and drop ineligible ones.

        Args:
            line_items: Order line items
            category_lookup: Product to category mapping
            review_index: Review entries grouped by order

        Returns:
            Mapping product_id -> ProductMetrics for eligible products only
        """
        items_by_product: Dict[str, List[LineItem]] = {}
        for item in line_items:
            if category_lookup.category_for(item.product_id) is None:
                continue
            items_by_product.setdefault(item.product_id, []).append(item)

        eligible: Dict[str, ProductMetrics] = {}
        for product_id, items in items_by_product.items():
            metrics = self.measure(items, review_index)
            if self.is_eligible(metrics):
                eligible[product_id] = metrics

        logger.info(
            "Product metrics computed",
            products=len(items_by_product),
            eligible_products=len(eligible),
            min_sales=self.min_sales,
            min_reviews=self.min_reviews,
        )

        return eligible


def compute_product_metrics(
    line_items: Iterable[LineItem],
    category_lookup: CategoryLookup,
    review_index: ReviewIndex,
) -> Dict[str, ProductMetrics]:
    """
    Convenience function returning the eligible products' metrics.

    Args:
        line_items: Order line items
        category_lookup: Product to category mapping
        review_index: Review entries grouped by order

    Returns:
        Mapping product_id -> ProductMetrics
    """
    return ProductMetricsCalculator().compute(line_items, category_lookup, review_index)
