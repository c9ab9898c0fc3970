"""
Seller Performance Aggregation

Ranks sellers with enough order volume by total sales and reports, for each
of them:
- Total sales (item prices, freight excluded)
- Average order value
- Number of distinct products sold
- Average review score over every review entry of the seller's orders
- On-time delivery rate
"""

import math
from typing import Dict, Iterable, List, Optional, Set, Tuple

import structlog

from marketplace_analytics.config import get_settings
from marketplace_analytics.data.models import LineItem, Order, SellerRecord
from .review_index import ReviewIndex

logger = structlog.get_logger(__name__)
settings = get_settings()


def round_half_up(value: float, digits: int = 2) -> float:
    """Round on the scaled value, halves going up (2.675 -> 2.68 when 267.5 is exact)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def index_orders(orders: Iterable[Order]) -> Dict[str, Order]:
    """order_id -> Order; the first record of a duplicated id wins."""
    by_id: Dict[str, Order] = {}
    for order in orders:
        if order.order_id and order.order_id not in by_id:
            by_id[order.order_id] = order
    return by_id


class SellerAggregator:
    """
    Seller performance scoring.

    Aggregation happens in two phases: line items are first grouped into a
    per-seller snapshot, then every metric is derived from that snapshot.

    Example:
        aggregator = SellerAggregator(min_orders=50)
        ranking = aggregator.compute(line_items, orders, review_index)
    """

    def __init__(
        self,
        min_orders: Optional[int] = None,
        delivered_status: Optional[str] = None,
    ):
        self.min_orders = min_orders if min_orders is not None else settings.analytics.seller_min_orders
        self.delivered_status = (
            delivered_status if delivered_status is not None else settings.analytics.delivered_status
        )

    def _group_by_seller(self, line_items: Iterable[LineItem]) -> Dict[str, List[LineItem]]:
        """Group line items by seller, skipping items without a seller"""
        grouped: Dict[str, List[LineItem]] = {}
        for item in line_items:
            if not item.seller_id:
                continue
            grouped.setdefault(item.seller_id, []).append(item)
        return grouped

    def _on_time_rate(self, order_ids: Set[str], orders_by_id: Dict[str, Order]) -> float:
        deliverable = 0
        on_time = 0
        for order_id in order_ids:
            order = orders_by_id[order_id]
            if order.status != self.delivered_status or not order.has_delivery_dates:
                continue
            deliverable += 1
            if order.delivered_on_time:
                on_time += 1
        if deliverable == 0:
            return 0.0
        return on_time / deliverable

    def _measure_seller(
        self,
        seller_id: str,
        items: List[LineItem],
        order_ids: Set[str],
        orders_by_id: Dict[str, Order],
        review_index: ReviewIndex,
    ) -> SellerRecord:
        """Derive all metrics of one eligible seller"""
        total_sales = round_half_up(sum(item.price for item in items))
        avg_order_value = round_half_up(total_sales / len(order_ids)) if order_ids else 0.0
        unique_products = len({item.product_id for item in items if item.product_id})

        scores = review_index.scores_for(order_ids)
        avg_review_score = round_half_up(sum(scores) / len(scores)) if scores else 0.0

        return SellerRecord(
            seller_id=seller_id,
            total_sales=total_sales,
            avg_order_value=avg_order_value,
            unique_product_count=unique_products,
            avg_review_score=avg_review_score,
            on_time_rate=round_half_up(self._on_time_rate(order_ids, orders_by_id)),
        )

    def compute(
        self,
        line_items: Iterable[LineItem],
        orders: Iterable[Order],
        review_index: ReviewIndex,
    ) -> Dict[str, SellerRecord]:
        """
        Compute the seller ranking.

        Only orders present in ``orders`` count toward a seller's order set.
        Sellers with fewer distinct orders than ``min_orders`` are left out.

        Args:
            line_items: Order line items
            orders: Order headers
            review_index: Review entries grouped by order

        Returns:
            Ordered mapping seller_id -> SellerRecord, by total sales descending
            then seller_id ascending
        """
        orders_by_id = index_orders(orders)
        items_by_seller = self._group_by_seller(line_items)

        records: List[SellerRecord] = []
        for seller_id, items in items_by_seller.items():
            order_ids = {item.order_id for item in items if item.order_id in orders_by_id}
            if len(order_ids) < self.min_orders:
                continue
            records.append(
                self._measure_seller(seller_id, items, order_ids, orders_by_id, review_index)
            )

        records.sort(key=lambda record: (-record.total_sales, record.seller_id))

        logger.info(
            "Seller performance computed",
            sellers=len(items_by_seller),
            eligible_sellers=len(records),
            min_orders=self.min_orders,
        )

        return {record.seller_id: record for record in records}


def seller_report(
    records: Dict[str, SellerRecord],
) -> Dict[str, Tuple[float, float, int, float, float]]:
    """Flatten a seller ranking into seller_id -> metric tuple, keeping its order."""
    return {seller_id: record.as_tuple() for seller_id, record in records.items()}


def compute_seller_performance(
    line_items: Iterable[LineItem],
    orders: Iterable[Order],
    review_index: ReviewIndex,
    min_orders: Optional[int] = None,
) -> Dict[str, SellerRecord]:
    """
    Convenience function to rank sellers.

    Args:
        line_items: Order line items
        orders: Order headers
        review_index: Review entries grouped by order
        min_orders: Override for the distinct-order eligibility floor

    Returns:
        Ordered mapping seller_id -> SellerRecord
    """
    aggregator = SellerAggregator(min_orders=min_orders)
    return aggregator.compute(line_items, orders, review_index)
