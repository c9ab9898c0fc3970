"""
Grouping Reports

Single-pass grouping/counting reports over the marketplace data:
- Best-selling categories by line-item volume
- Purchase distribution by hour of day
- Product price-range histogram per category
"""

from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import polars as pl
import structlog

from marketplace_analytics.config import get_settings
from marketplace_analytics.data.models import LineItem, Order
from .lookups import CategoryLookup

logger = structlog.get_logger(__name__)
settings = get_settings()


def price_range_labels(edges: Sequence[float]) -> List[str]:
    """Bucket labels for the given upper bounds: (0,50], (50,100], ..., (500,)"""
    bounds = [0.0] + [float(edge) for edge in edges]
    labels = [
        f"({_format_edge(low)},{_format_edge(high)}]"
        for low, high in zip(bounds, bounds[1:])
    ]
    labels.append(f"({_format_edge(bounds[-1])},)")
    return labels


def _format_edge(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _items_frame(line_items: Iterable[LineItem], category_lookup: CategoryLookup) -> pl.DataFrame:
    """Line items with their canonical category (null when unresolved)"""
    product_ids = []
    categories = []
    prices = []
    for item in line_items:
        product_ids.append(item.product_id)
        categories.append(category_lookup.category_for(item.product_id))
        prices.append(item.price)
    return pl.DataFrame(
        {"product_id": product_ids, "category": categories, "price": prices},
        schema={"product_id": pl.Utf8, "category": pl.Utf8, "price": pl.Float64},
    )


def top_selling_categories(
    line_items: Iterable[LineItem],
    category_lookup: CategoryLookup,
    limit: Optional[int] = None,
) -> Dict[str, int]:
    """
    Categories ranked by number of line items sold.

    Ties are broken by category name. Items whose product has no canonical
    category are ignored.

    Returns:
        Ordered mapping category -> line items sold
    """
    limit = limit if limit is not None else settings.analytics.top_categories_limit

    sales = (
        _items_frame(line_items, category_lookup)
        .filter(pl.col("category").is_not_null())
        .group_by("category")
        .agg(pl.len().alias("sales"))
        .sort(["sales", "category"], descending=[True, False])
        .head(limit)
    )

    return dict(zip(sales["category"].to_list(), sales["sales"].to_list()))


def purchase_pattern_by_hour(orders: Iterable[Order]) -> Dict[str, int]:
    """
    Orders per hour of the purchase timestamp.

    Returns:
        Mapping "00:00" ... "23:00" -> order count, every hour present
    """
    timestamps = [order.purchase_timestamp for order in orders if order.purchase_timestamp is not None]
    frame = pl.DataFrame(
        {"purchase_timestamp": timestamps},
        schema={"purchase_timestamp": pl.Datetime},
    )

    hourly = frame.group_by(
        pl.col("purchase_timestamp").dt.hour().alias("hour")
    ).agg(pl.len().alias("orders"))
    counts = {int(hour): int(n) for hour, n in zip(hourly["hour"].to_list(), hourly["orders"].to_list())}

    return {f"{hour:02d}:00": counts.get(hour, 0) for hour in range(24)}


def price_range_distribution(
    line_items: Iterable[LineItem],
    category_lookup: CategoryLookup,
    edges: Optional[Sequence[float]] = None,
) -> Dict[str, Dict[str, int]]:
    """
    Count products per price range within each category.

    A product's price is the mean price over its line items. Only categories
    with at least one priced product are reported.

    Returns:
        Mapping category (sorted) -> ordered mapping range label -> product count
    """
    edges = list(edges if edges is not None else settings.analytics.price_range_edges)
    labels = price_range_labels(edges)

    product_prices = (
        _items_frame(line_items, category_lookup)
        .filter(pl.col("category").is_not_null())
        .group_by(["product_id", "category"])
        .agg(pl.col("price").mean().alias("avg_price"))
    )

    # side="left" makes every upper bound inclusive
    buckets = np.searchsorted(np.asarray(edges, dtype=float), product_prices["avg_price"].to_numpy(), side="left")

    distribution: Dict[str, Dict[str, int]] = {}
    for category, bucket in zip(product_prices["category"].to_list(), buckets.tolist()):
        ranges = distribution.setdefault(category, {label: 0 for label in labels})
        ranges[labels[bucket]] += 1

    logger.debug("Price range distribution computed", categories=len(distribution))

    return {category: distribution[category] for category in sorted(distribution)}
