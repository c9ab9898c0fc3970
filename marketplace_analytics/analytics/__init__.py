"""
Marketplace Analytics Module
"""
from .lookups import CategoryLookup, build_category_lookup
from .review_index import ReviewIndex, build_review_index
from .sellers import SellerAggregator, compute_seller_performance, seller_report
from .products import ProductMetricsCalculator, compute_product_metrics
from .recommender import CategoryRecommender, recommend_products
from .reports import price_range_distribution, purchase_pattern_by_hour, top_selling_categories
from .runner import AnalyticsReport, MarketplaceAnalyzer

__all__ = [
    "CategoryLookup",
    "build_category_lookup",
    "ReviewIndex",
    "build_review_index",
    "SellerAggregator",
    "compute_seller_performance",
    "seller_report",
    "ProductMetricsCalculator",
    "compute_product_metrics",
    "CategoryRecommender",
    "recommend_products",
    "price_range_distribution",
    "purchase_pattern_by_hour",
    "top_selling_categories",
    "AnalyticsReport",
    "MarketplaceAnalyzer",
]
