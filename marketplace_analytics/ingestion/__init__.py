"""
Data Ingestion Module
"""
from .batch_loader import LoadResult, LoadStatus, MarketplaceLoader, load_marketplace_dataset

__all__ = [
    "LoadResult",
    "LoadStatus",
    "MarketplaceLoader",
    "load_marketplace_dataset",
]
