"""
Marketplace Data Models

Immutable in-memory records for the five marketplace datasets, plus the
derived records produced by the analytics layer.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


# =============================================================================
# SOURCE RECORDS
# =============================================================================

@dataclass(frozen=True)
class Order:
    """Customer order header"""
    order_id: str
    status: str
    purchase_timestamp: Optional[datetime] = None
    delivered_customer_date: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    customer_id: Optional[str] = None
    approved_at: Optional[datetime] = None
    delivered_carrier_date: Optional[datetime] = None

    @property
    def has_delivery_dates(self) -> bool:
        """Both the actual and the estimated delivery date are known"""
        return (
            self.delivered_customer_date is not None
            and self.estimated_delivery_date is not None
        )

    @property
    def delivered_on_time(self) -> bool:
        """Delivered on or before the estimate (False when dates are missing)"""
        if not self.has_delivery_dates:
            return False
        return self.delivered_customer_date <= self.estimated_delivery_date


@dataclass(frozen=True)
class LineItem:
    """One item within an order, sold by a single seller"""
    order_id: str
    item_seq: int
    product_id: str
    seller_id: str
    price: float
    freight_value: float
    shipping_limit_date: Optional[datetime] = None


@dataclass(frozen=True)
class Review:
    """One review entry; an order may have several"""
    order_id: str
    score: int
    review_id: Optional[str] = None


@dataclass(frozen=True)
class Product:
    """Catalog product with its source-language category name"""
    product_id: str
    category_name: Optional[str] = None


@dataclass(frozen=True)
class CategoryTranslation:
    """Source-language category name -> English category name"""
    category_name: str
    category_name_english: str


@dataclass(frozen=True)
class MarketplaceDataset:
    """The five source collections of one batch run"""
    orders: Tuple[Order, ...] = ()
    line_items: Tuple[LineItem, ...] = ()
    reviews: Tuple[Review, ...] = ()
    products: Tuple[Product, ...] = ()
    translations: Tuple[CategoryTranslation, ...] = ()

    @property
    def row_counts(self) -> dict:
        """Number of records per collection"""
        return {
            "orders": len(self.orders),
            "line_items": len(self.line_items),
            "reviews": len(self.reviews),
            "products": len(self.products),
            "translations": len(self.translations),
        }


# =============================================================================
# DERIVED RECORDS
# =============================================================================

@dataclass(frozen=True)
class ProductMetrics:
    """Sales and review metrics of a single product"""
    sales_count: int  # line items, not distinct orders
    review_count: int  # review entries, not reviewed orders
    avg_rating: float  # 0.0 when review_count == 0


@dataclass(frozen=True)
class SellerRecord:
    """Performance metrics of an eligible seller"""
    seller_id: str
    total_sales: float
    avg_order_value: float
    unique_product_count: int
    avg_review_score: float
    on_time_rate: float

    def as_tuple(self) -> Tuple[float, float, int, float, float]:
        """Metrics in report order"""
        return (
            self.total_sales,
            self.avg_order_value,
            self.unique_product_count,
            self.avg_review_score,
            self.on_time_rate,
        )
