"""
Category Recommender

Top products per canonical category. Within a category each product's sales
count, review count and average rating are min-max normalized, combined
into a weighted score and ranked.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import structlog

from marketplace_analytics.config import get_settings
from marketplace_analytics.data.models import ProductMetrics
from .lookups import CategoryLookup

logger = structlog.get_logger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class ScoredProduct:
    """Product with its normalized component scores"""
    product_id: str
    sales_score: float
    review_score: float
    rating_score: float
    score: float


def min_max_scale(value: float, low: float, high: float) -> float:
    """Scale to [0, 1]; a degenerate range (high == low) scales to 1.0."""
    if high == low:
        return 1.0
    return (value - low) / (high - low)


class CategoryRecommender:
    """
    Weighted, per-category product ranking.

    Example:
        recommender = CategoryRecommender(limit=10)
        recommendations = recommender.recommend(eligible_products, lookup)
    """

    def __init__(
        self,
        limit: Optional[int] = None,
        sales_weight: Optional[float] = None,
        review_weight: Optional[float] = None,
        rating_weight: Optional[float] = None,
    ):
        analytics = settings.analytics
        self.limit = limit if limit is not None else analytics.recommendation_limit
        self.sales_weight = sales_weight if sales_weight is not None else analytics.sales_weight
        self.review_weight = review_weight if review_weight is not None else analytics.review_weight
        self.rating_weight = rating_weight if rating_weight is not None else analytics.rating_weight

    def _group_by_category(
        self,
        products: Mapping[str, ProductMetrics],
        category_lookup: CategoryLookup,
    ) -> Dict[str, List[Tuple[str, ProductMetrics]]]:
        grouped: Dict[str, List[Tuple[str, ProductMetrics]]] = {}
        for product_id, metrics in products.items():
            category = category_lookup.category_for(product_id)
            if category is None:
                continue
            grouped.setdefault(category, []).append((product_id, metrics))
        return grouped

    def score_category(self, products: List[Tuple[str, ProductMetrics]]) -> List[ScoredProduct]:
        """
        Score and rank the products of a single category.

        Returns:
            All products, by score descending then product_id ascending
        """
        if not products:
            return []

        sales = [m.sales_count for _, m in products]
        reviews = [m.review_count for _, m in products]
        ratings = [m.avg_rating for _, m in products]
        sales_range = (min(sales), max(sales))
        review_range = (min(reviews), max(reviews))
        rating_range = (min(ratings), max(ratings))

        scored = []
        for product_id, metrics in products:
            sales_score = min_max_scale(metrics.sales_count, *sales_range)
            review_score = min_max_scale(metrics.review_count, *review_range)
            rating_score = min_max_scale(metrics.avg_rating, *rating_range)
            scored.append(ScoredProduct(
                product_id=product_id,
                sales_score=sales_score,
                review_score=review_score,
                rating_score=rating_score,
                score=(
                    self.sales_weight * sales_score
                    + self.review_weight * review_score
                    + self.rating_weight * rating_score
                ),
            ))

        scored.sort(key=lambda p: (-p.score, p.product_id))
        return scored

    def recommend(
        self,
        eligible_products: Mapping[str, ProductMetrics],
        category_lookup: CategoryLookup,
        known_categories: Optional[Iterable[str]] = None,
    ) -> Dict[str, List[str]]:
        """
        Recommend the top products of every category.

        Args:
            eligible_products: product_id -> metrics, already gated
            category_lookup: Product to category mapping
            known_categories: Category universe; defaults to the lookup's

        Returns:
            Mapping category -> ranked product ids (at most ``limit``), one key
            per known category, keys sorted
        """
        if known_categories is None:
            known_categories = category_lookup.known_categories

        grouped = self._group_by_category(eligible_products, category_lookup)

        recommendations: Dict[str, List[str]] = {}
        for category in sorted(set(known_categories) | set(grouped)):
            ranked = self.score_category(grouped.get(category, []))
            recommendations[category] = [p.product_id for p in ranked[: self.limit]]

        logger.info(
            "Recommendations computed",
            categories=len(recommendations),
            categories_with_products=len(grouped),
            eligible_products=len(eligible_products),
        )

        return recommendations


def recommend_products(
    eligible_products: Mapping[str, ProductMetrics],
    category_lookup: CategoryLookup,
    known_categories: Optional[Iterable[str]] = None,
) -> Dict[str, List[str]]:
    """
    Convenience function for the per-category top-N recommendation.

    Args:
        eligible_products: product_id -> metrics, already gated
        category_lookup: Product to category mapping
        known_categories: Category universe; defaults to the lookup's

    Returns:
        Mapping category -> ranked product ids
    """
    return CategoryRecommender().recommend(eligible_products, category_lookup, known_categories)
