"""
Marketplace Data Module
"""
from .models import (
    CategoryTranslation,
    LineItem,
    MarketplaceDataset,
    Order,
    Product,
    ProductMetrics,
    Review,
    SellerRecord,
)
from .generators import MarketplaceGenerator

__all__ = [
    "CategoryTranslation",
    "LineItem",
    "MarketplaceDataset",
    "Order",
    "Product",
    "ProductMetrics",
    "Review",
    "SellerRecord",
    "MarketplaceGenerator",
]
