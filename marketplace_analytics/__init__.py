"""
Marketplace Analytics

Seller performance scoring and category-scoped product recommendation over
e-commerce marketplace data.
"""

__version__ = "1.0.0"
