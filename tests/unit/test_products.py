"""
Unit Tests - Product Metrics
"""
import pytest

from marketplace_analytics.analytics.products import ProductMetricsCalculator, compute_product_metrics
from marketplace_analytics.analytics.review_index import build_review_index
from marketplace_analytics.data import LineItem, ProductMetrics, Review


def _items(product_id, order_ids):
    return [
        LineItem(
            order_id=order_id,
            item_seq=seq,
            product_id=product_id,
            seller_id="seller-1",
            price=19.9,
            freight_value=3.1,
        )
        for seq, order_id in enumerate(order_ids, start=1)
    ]


class TestProductMetricsCalculator:
    """Tests for ProductMetricsCalculator"""

    def test_eligible_product(self, sample_lookup):
        """10 sales and 5 review entries pass the gate"""
        order_ids = [f"o{i}" for i in range(10)]
        reviews = build_review_index([Review(f"o{i}", score) for i, score in enumerate([5, 4, 3, 5, 3])])

        result = compute_product_metrics(_items("prod-1", order_ids), sample_lookup, reviews)

        assert result == {"prod-1": ProductMetrics(sales_count=10, review_count=5, avg_rating=4.0)}

    def test_sales_floor(self, sample_lookup):
        """Nine sales are not enough"""
        order_ids = [f"o{i}" for i in range(9)]
        reviews = build_review_index([Review(f"o{i}", 5) for i in range(9)])

        result = ProductMetricsCalculator().compute(_items("prod-1", order_ids), sample_lookup, reviews)

        assert result == {}

    def test_review_floor(self, sample_lookup):
        """Four review entries are not enough"""
        order_ids = [f"o{i}" for i in range(12)]
        reviews = build_review_index([Review(f"o{i}", 5) for i in range(4)])

        result = ProductMetricsCalculator().compute(_items("prod-1", order_ids), sample_lookup, reviews)

        assert result == {}

    def test_review_entries_not_orders(self, sample_lookup):
        """Three reviewed orders with five entries reach the floor"""
        order_ids = ["a", "b", "c"] + [f"o{i}" for i in range(7)]
        reviews = build_review_index([
            Review("a", 5), Review("a", 1),
            Review("b", 4), Review("b", 4),
            Review("c", 1),
        ])

        result = ProductMetricsCalculator().compute(_items("prod-1", order_ids), sample_lookup, reviews)

        assert result["prod-1"].review_count == 5
        assert result["prod-1"].avg_rating == pytest.approx(3.0)

    def test_repeated_order_reviews_counted_once(self, sample_lookup):
        """Several items of one order do not multiply its reviews"""
        order_ids = ["a"] * 10
        reviews = build_review_index([Review("a", 4) for _ in range(5)])

        result = ProductMetricsCalculator().compute(_items("prod-2", order_ids), sample_lookup, reviews)

        assert result["prod-2"] == ProductMetrics(sales_count=10, review_count=5, avg_rating=4.0)

    def test_uncategorized_products_skipped(self, sample_lookup):
        """Products outside the lookup are never measured"""
        order_ids = [f"o{i}" for i in range(10)]
        reviews = build_review_index([Review(f"o{i}", 5) for i in range(10)])
        items = _items("prod-4", order_ids) + _items("prod-5", order_ids)

        result = ProductMetricsCalculator().compute(items, sample_lookup, reviews)

        assert result == {}

    def test_measure_without_reviews(self):
        """Average rating defaults to 0.0"""
        metrics = ProductMetricsCalculator().measure(_items("prod-1", ["o1", "o2"]), build_review_index([]))

        assert metrics == ProductMetrics(sales_count=2, review_count=0, avg_rating=0.0)

    def test_custom_thresholds(self, sample_lookup):
        """Gates are configurable"""
        reviews = build_review_index([Review("o1", 2)])

        result = ProductMetricsCalculator(min_sales=1, min_reviews=1).compute(
            _items("prod-3", ["o1"]), sample_lookup, reviews
        )

        assert result == {"prod-3": ProductMetrics(sales_count=1, review_count=1, avg_rating=2.0)}
