"""
Marketplace Analyzer

Runs every analysis over one in-memory dataset. The category lookup and the
review index are built once and shared, read-only, by all analyses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple
import uuid

import structlog

from marketplace_analytics.config import AnalyticsSettings, get_settings
from marketplace_analytics.config.logging import run_context
from marketplace_analytics.data.models import MarketplaceDataset, ProductMetrics, SellerRecord
from .lookups import CategoryLookup, build_category_lookup
from .products import ProductMetricsCalculator
from .recommender import CategoryRecommender
from .reports import price_range_distribution, purchase_pattern_by_hour, top_selling_categories
from .review_index import ReviewIndex, build_review_index
from .sellers import SellerAggregator, seller_report

logger = structlog.get_logger(__name__)


@dataclass
class AnalyticsReport:
    """Results of a full analytics run"""
    top_selling_categories: Dict[str, int]
    purchase_pattern_by_hour: Dict[str, int]
    price_range_distribution: Dict[str, Dict[str, int]]
    seller_performance: Dict[str, Tuple[float, float, int, float, float]]
    recommended_products: Dict[str, List[str]]
    started_at: datetime
    completed_at: datetime
    duration_seconds: float
    row_counts: Dict[str, int] = field(default_factory=dict)
    run_id: str = ""
    version: str = ""


class MarketplaceAnalyzer:
    """
    Analytics over one batch of marketplace data.

    Example:
        analyzer = MarketplaceAnalyzer(dataset)
        sellers = analyzer.seller_performance()
        recommendations = analyzer.recommended_products()
    """

    def __init__(
        self,
        dataset: MarketplaceDataset,
        config: Optional[AnalyticsSettings] = None,
    ):
        self.dataset = dataset
        self.config = config or get_settings().analytics
        self.version = get_settings().version
        self.category_lookup: CategoryLookup = build_category_lookup(
            dataset.translations, dataset.products
        )
        self.review_index: ReviewIndex = build_review_index(dataset.reviews)

        self.seller_aggregator = SellerAggregator(
            min_orders=self.config.seller_min_orders,
            delivered_status=self.config.delivered_status,
        )
        self.product_calculator = ProductMetricsCalculator(
            min_sales=self.config.product_min_sales,
            min_reviews=self.config.product_min_reviews,
        )
        self.recommender = CategoryRecommender(
            limit=self.config.recommendation_limit,
            sales_weight=self.config.sales_weight,
            review_weight=self.config.review_weight,
            rating_weight=self.config.rating_weight,
        )

    def top_selling_categories(self) -> Dict[str, int]:
        return top_selling_categories(
            self.dataset.line_items,
            self.category_lookup,
            limit=self.config.top_categories_limit,
        )

    def purchase_pattern_by_hour(self) -> Dict[str, int]:
        return purchase_pattern_by_hour(self.dataset.orders)

    def price_range_distribution(self) -> Dict[str, Dict[str, int]]:
        return price_range_distribution(
            self.dataset.line_items,
            self.category_lookup,
            edges=self.config.price_range_edges,
        )

    def seller_records(self) -> Dict[str, SellerRecord]:
        """Eligible sellers, ranked"""
        return self.seller_aggregator.compute(
            self.dataset.line_items, self.dataset.orders, self.review_index
        )

    def seller_performance(self) -> Dict[str, Tuple[float, float, int, float, float]]:
        """Ranked seller_id -> (total_sales, avg_order_value, unique_products, avg_review_score, on_time_rate)"""
        return seller_report(self.seller_records())

    def product_metrics(self) -> Dict[str, ProductMetrics]:
        """Metrics of products passing the recommendation gate"""
        return self.product_calculator.compute(
            self.dataset.line_items, self.category_lookup, self.review_index
        )

    def recommended_products(self) -> Dict[str, List[str]]:
        return self.recommender.recommend(self.product_metrics(), self.category_lookup)

    def run_all(self) -> AnalyticsReport:
        """
        Run every analysis.

        Log events emitted during the run carry its ``run_id``.

        Returns:
            AnalyticsReport with all results and timing
        """
        run_id = uuid.uuid4().hex[:12]
        started_at = datetime.utcnow()

        with run_context(run_id=run_id):
            logger.info("Starting analytics run", version=self.version, **self.dataset.row_counts)

            report = AnalyticsReport(
                top_selling_categories=self.top_selling_categories(),
                purchase_pattern_by_hour=self.purchase_pattern_by_hour(),
                price_range_distribution=self.price_range_distribution(),
                seller_performance=self.seller_performance(),
                recommended_products=self.recommended_products(),
                started_at=started_at,
                completed_at=started_at,
                duration_seconds=0.0,
                row_counts=self.dataset.row_counts,
                run_id=run_id,
                version=self.version,
            )
            report.completed_at = datetime.utcnow()
            report.duration_seconds = (report.completed_at - started_at).total_seconds()

            logger.info(
                "Analytics run complete",
                ranked_sellers=len(report.seller_performance),
                categories=len(report.recommended_products),
                duration_seconds=report.duration_seconds,
            )

        return report
