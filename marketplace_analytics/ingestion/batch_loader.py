"""
Batch Data Loader

Reads the marketplace CSV exports into immutable in-memory records.
Supports:
- Quoted fields with embedded delimiters and newlines
- Typed parsing of numeric and timestamp columns
- Silent dropping of malformed rows, counted per file
- Audit logging
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union
import hashlib

import polars as pl
import structlog
from pydantic import BaseModel

from marketplace_analytics.config import get_settings
from marketplace_analytics.data.models import (
    CategoryTranslation,
    LineItem,
    MarketplaceDataset,
    Order,
    Product,
    Review,
)

logger = structlog.get_logger(__name__)
settings = get_settings()


class LoadStatus(str, Enum):
    """Batch load status"""
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class LoadResult(BaseModel):
    """Result of loading one dataset file"""
    dataset: str
    file_path: str
    status: LoadStatus
    rows_read: int = 0
    rows_loaded: int = 0
    rows_dropped: int = 0
    error_message: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None
    file_hash: Optional[str] = None


@dataclass(frozen=True)
class DatasetSchema:
    """How to type and validate one CSV export"""
    name: str
    required: Tuple[str, ...]
    integers: Tuple[str, ...] = ()
    floats: Tuple[str, ...] = ()
    datetimes: Tuple[str, ...] = ()


ORDERS_SCHEMA = DatasetSchema(
    name="orders",
    required=("order_id",),
    datetimes=(
        "order_purchase_timestamp",
        "order_approved_at",
        "order_delivered_carrier_date",
        "order_delivered_customer_date",
        "order_estimated_delivery_date",
    ),
)

ORDER_ITEMS_SCHEMA = DatasetSchema(
    name="line_items",
    required=("order_id", "order_item_id", "price", "freight_value"),
    integers=("order_item_id",),
    floats=("price", "freight_value"),
    datetimes=("shipping_limit_date",),
)

ORDER_REVIEWS_SCHEMA = DatasetSchema(
    name="reviews",
    required=("order_id", "review_score"),
    integers=("review_score",),
    datetimes=("review_creation_date", "review_answer_timestamp"),
)

PRODUCTS_SCHEMA = DatasetSchema(
    name="products",
    required=("product_id",),
)

TRANSLATIONS_SCHEMA = DatasetSchema(
    name="translations",
    required=("product_category_name", "product_category_name_english"),
)


class MarketplaceLoader:
    """
    Loader for the five marketplace CSV exports.

    Every column is read as text and then typed explicitly, so a single bad
    value drops its row instead of failing the whole file.

    Example:
        loader = MarketplaceLoader("data/raw")
        dataset, results = loader.load_all()
    """

    def __init__(
        self,
        raw_path: Optional[Union[str, Path]] = None,
        datetime_format: Optional[str] = None,
        encoding: Optional[str] = None,
        null_values: Optional[List[str]] = None,
    ):
        lake = settings.data_lake
        self.raw_path = Path(raw_path or lake.raw_path)
        self.datetime_format = datetime_format or lake.datetime_format
        self.encoding = encoding or lake.encoding
        self.null_values = list(null_values if null_values is not None else lake.null_values)
        self.file_names = {
            "orders": lake.orders_file,
            "line_items": lake.order_items_file,
            "reviews": lake.order_reviews_file,
            "products": lake.products_file,
            "translations": lake.translations_file,
        }

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for audit"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _read_csv(self, file_path: Path) -> pl.DataFrame:
        """Read every column as text; ``null_values`` cells become null"""
        return pl.read_csv(
            file_path,
            encoding=self.encoding,
            null_values=self.null_values,
            infer_schema_length=0,
        )

    def _typed(self, column: str, schema: DatasetSchema) -> pl.Expr:
        if column in schema.integers:
            return pl.col(column).cast(pl.Int64, strict=False)
        if column in schema.floats:
            return pl.col(column).cast(pl.Float64, strict=False)
        return pl.col(column).str.strptime(pl.Datetime, self.datetime_format, strict=False)

    def _apply_schema(self, df: pl.DataFrame, schema: DatasetSchema) -> pl.DataFrame:
        """
        Type the columns of ``schema`` and drop malformed rows.

        A row is malformed when a required value is missing, or when a
        non-empty value cannot be parsed to its column type.
        """
        missing = [col for col in schema.required if col not in df.columns]
        if missing:
            raise ValueError(f"{schema.name}: missing columns {missing}")

        typed_columns = [
            col for col in schema.integers + schema.floats + schema.datetimes
            if col in df.columns
        ]
        if not typed_columns:
            return df.filter(pl.all_horizontal([pl.col(col).is_not_null() for col in schema.required]))

        typed = df.with_columns([
            self._typed(col, schema).alias(f"_typed_{col}") for col in typed_columns
        ])

        valid = pl.lit(True)
        for col in schema.required:
            valid = valid & pl.col(col).is_not_null()
        for col in typed_columns:
            valid = valid & ~(pl.col(col).is_not_null() & pl.col(f"_typed_{col}").is_null())

        typed = typed.filter(valid)
        return typed.with_columns([
            pl.col(f"_typed_{col}").alias(col) for col in typed_columns
        ]).drop([f"_typed_{col}" for col in typed_columns])

    @staticmethod
    def _to_order(row: Dict) -> Order:
        return Order(
            order_id=row["order_id"],
            status=row.get("order_status") or "",
            purchase_timestamp=row.get("order_purchase_timestamp"),
            delivered_customer_date=row.get("order_delivered_customer_date"),
            estimated_delivery_date=row.get("order_estimated_delivery_date"),
            customer_id=row.get("customer_id"),
            approved_at=row.get("order_approved_at"),
            delivered_carrier_date=row.get("order_delivered_carrier_date"),
        )

    @staticmethod
    def _to_line_item(row: Dict) -> LineItem:
        return LineItem(
            order_id=row["order_id"],
            item_seq=row["order_item_id"],
            product_id=row.get("product_id") or "",
            seller_id=row.get("seller_id") or "",
            price=row["price"],
            freight_value=row["freight_value"],
            shipping_limit_date=row.get("shipping_limit_date"),
        )

    @staticmethod
    def _to_review(row: Dict) -> Review:
        return Review(
            order_id=row["order_id"],
            score=row["review_score"],
            review_id=row.get("review_id"),
        )

    @staticmethod
    def _to_product(row: Dict) -> Product:
        return Product(
            product_id=row["product_id"],
            category_name=row.get("product_category_name"),
        )

    @staticmethod
    def _to_translation(row: Dict) -> CategoryTranslation:
        return CategoryTranslation(
            category_name=row["product_category_name"],
            category_name_english=row["product_category_name_english"],
        )

    def load_file(
        self,
        file_path: Union[str, Path],
        schema: DatasetSchema,
        to_record: Callable[[Dict], object],
    ) -> Tuple[tuple, LoadResult]:
        """
        Load one CSV export.

        Args:
            file_path: CSV file to read
            schema: Column typing and required columns
            to_record: Row dict -> record factory

        Returns:
            Tuple of (records, LoadResult)

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If a required column is absent
        """
        file_path = Path(file_path)
        started_at = datetime.utcnow()

        result = LoadResult(
            dataset=schema.name,
            file_path=str(file_path),
            status=LoadStatus.FAILED,
            started_at=started_at,
        )

        logger.info("Starting batch load", dataset=schema.name, file=str(file_path))

        try:
            if not file_path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")

            result.file_hash = self._compute_file_hash(file_path)

            raw = self._read_csv(file_path)
            df = self._apply_schema(raw, schema)
            records = tuple(to_record(row) for row in df.iter_rows(named=True))
        except (OSError, ValueError, pl.exceptions.PolarsError) as e:
            logger.error("Batch load failed", dataset=schema.name, error=str(e), file=str(file_path))
            raise

        result.rows_read = len(raw)
        result.rows_loaded = len(records)
        result.rows_dropped = len(raw) - len(records)
        result.status = LoadStatus.COMPLETED if result.rows_dropped == 0 else LoadStatus.PARTIAL
        result.completed_at = datetime.utcnow()
        result.load_duration_seconds = (result.completed_at - started_at).total_seconds()

        if result.rows_dropped:
            logger.warning(
                "Dropped malformed rows",
                dataset=schema.name,
                rows_dropped=result.rows_dropped,
            )

        logger.info(
            "Batch load completed",
            dataset=schema.name,
            rows_loaded=result.rows_loaded,
            duration_seconds=result.load_duration_seconds,
        )

        return records, result

    def load_all(self) -> Tuple[MarketplaceDataset, List[LoadResult]]:
        """
        Load all five exports from ``raw_path``.

        Returns:
            Tuple of (MarketplaceDataset, one LoadResult per file)
        """
        plan = [
            ("orders", ORDERS_SCHEMA, self._to_order),
            ("line_items", ORDER_ITEMS_SCHEMA, self._to_line_item),
            ("reviews", ORDER_REVIEWS_SCHEMA, self._to_review),
            ("products", PRODUCTS_SCHEMA, self._to_product),
            ("translations", TRANSLATIONS_SCHEMA, self._to_translation),
        ]

        collections = {}
        results = []
        for name, schema, to_record in plan:
            records, result = self.load_file(self.raw_path / self.file_names[name], schema, to_record)
            collections[name] = records
            results.append(result)

        dataset = MarketplaceDataset(**collections)

        logger.info(
            "Marketplace dataset loaded",
            directory=str(self.raw_path),
            **dataset.row_counts,
        )

        return dataset, results


def load_marketplace_dataset(raw_path: Optional[Union[str, Path]] = None) -> MarketplaceDataset:
    """Load the five exports from ``raw_path`` (defaults to the configured raw zone)."""
    dataset, _ = MarketplaceLoader(raw_path=raw_path).load_all()
    return dataset
