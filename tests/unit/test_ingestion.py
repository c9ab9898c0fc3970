"""
Unit Tests - CSV Ingestion
"""
from datetime import datetime

import pytest

from marketplace_analytics.ingestion import LoadStatus, MarketplaceLoader, load_marketplace_dataset


ORDERS_CSV = """order_id,customer_id,order_status,order_purchase_timestamp,order_approved_at,order_delivered_carrier_date,order_delivered_customer_date,order_estimated_delivery_date
o1,c1,delivered,2017-10-02 10:56:33,2017-10-02 11:07:15,2017-10-04 19:55:00,2017-10-10 21:25:13,2017-10-18 00:00:00
o2,c2,shipped,2018-07-24 20:41:37,,,,2018-08-13 00:00:00
o3,c3,delivered,not-a-date,,,,
"""

ITEMS_CSV = """order_id,order_item_id,product_id,seller_id,shipping_limit_date,price,freight_value
o1,1,p1,s1,2017-10-06 11:07:15,29.99,8.72
o1,2,p2,s1,2017-10-06 11:07:15,10.00,8.72
o2,1,p1,s2,2018-07-30 03:24:27,abc,5.00
,1,p1,s2,2018-07-30 03:24:27,5.00,5.00
"""

REVIEWS_CSV = """review_id,order_id,review_score,review_comment_title,review_comment_message,review_creation_date,review_answer_timestamp
r1,o1,4,,"Chegou rápido, recomendo",2017-10-11 00:00:00,2017-10-12 03:43:48
r2,o1,5,,,2017-10-11 00:00:00,2017-10-12 03:43:48
r3,o2,x,,,,
"""

PRODUCTS_CSV = """product_id,product_category_name,product_name_lenght
p1,beleza_saude,40
p2,,35
"""

TRANSLATIONS_CSV = """product_category_name,product_category_name_english
beleza_saude,health_beauty
"""


@pytest.fixture
def raw_dir(tmp_path):
    """Directory with the five exports"""
    files = {
        "olist_orders_dataset.csv": ORDERS_CSV,
        "olist_order_items_dataset.csv": ITEMS_CSV,
        "olist_order_reviews_dataset.csv": REVIEWS_CSV,
        "olist_products_dataset.csv": PRODUCTS_CSV,
        "product_category_name_translation.csv": TRANSLATIONS_CSV,
    }
    for name, content in files.items():
        (tmp_path / name).write_text(content, encoding="utf-8")
    return tmp_path


class TestMarketplaceLoader:
    """Tests for MarketplaceLoader"""

    def test_load_all(self, raw_dir):
        """All five files are typed into records"""
        dataset, results = MarketplaceLoader(raw_dir).load_all()

        assert dataset.row_counts == {
            "orders": 2,
            "line_items": 2,
            "reviews": 2,
            "products": 2,
            "translations": 1,
        }
        assert [r.dataset for r in results] == [
            "orders", "line_items", "reviews", "products", "translations"
        ]

    def test_orders_typed(self, raw_dir):
        """Timestamps parse; empty cells become None"""
        dataset, _ = MarketplaceLoader(raw_dir).load_all()
        orders = {o.order_id: o for o in dataset.orders}

        assert orders["o1"].delivered_customer_date == datetime(2017, 10, 10, 21, 25, 13)
        assert orders["o1"].estimated_delivery_date == datetime(2017, 10, 18)
        assert orders["o1"].delivered_on_time
        assert orders["o2"].status == "shipped"
        assert orders["o2"].delivered_customer_date is None
        assert "o3" not in orders

    def test_line_items_typed(self, raw_dir):
        """Numeric columns are typed; malformed rows dropped"""
        dataset, _ = MarketplaceLoader(raw_dir).load_all()
        first = dataset.line_items[0]

        assert first.item_seq == 1
        assert first.price == pytest.approx(29.99)
        assert first.seller_id == "s1"
        assert {item.order_id for item in dataset.line_items} == {"o1"}

    def test_reviews_with_quoted_commas(self, raw_dir):
        """Quoted comment text does not shift columns"""
        dataset, _ = MarketplaceLoader(raw_dir).load_all()

        assert sorted(r.score for r in dataset.reviews) == [4, 5]
        assert {r.order_id for r in dataset.reviews} == {"o1"}

    def test_products_missing_category(self, raw_dir):
        dataset, _ = MarketplaceLoader(raw_dir).load_all()
        products = {p.product_id: p for p in dataset.products}

        assert products["p1"].category_name == "beleza_saude"
        assert products["p2"].category_name is None

    def test_load_results(self, raw_dir):
        """Dropped rows are counted and flag a partial load"""
        _, results = MarketplaceLoader(raw_dir).load_all()
        by_name = {r.dataset: r for r in results}

        assert by_name["orders"].status == LoadStatus.PARTIAL
        assert by_name["orders"].rows_read == 3
        assert by_name["orders"].rows_dropped == 1
        assert by_name["line_items"].rows_dropped == 2
        assert by_name["translations"].status == LoadStatus.COMPLETED
        assert by_name["translations"].file_hash is not None

    def test_missing_file(self, tmp_path):
        """A missing export is an error"""
        with pytest.raises(FileNotFoundError):
            MarketplaceLoader(tmp_path).load_all()

    def test_missing_column(self, raw_dir):
        """Required columns must exist"""
        (raw_dir / "product_category_name_translation.csv").write_text(
            "product_category_name\nbeleza_saude\n", encoding="utf-8"
        )

        with pytest.raises(ValueError):
            MarketplaceLoader(raw_dir).load_all()

    def test_convenience_loader(self, raw_dir):
        dataset = load_marketplace_dataset(raw_dir)

        assert len(dataset.orders) == 2

    def test_custom_null_values(self, raw_dir):
        """Configured markers read as missing cells"""
        (raw_dir / "olist_products_dataset.csv").write_text(
            "product_id,product_category_name\np1,beleza_saude\np2,NA\np3,\n", encoding="utf-8"
        )

        dataset, _ = MarketplaceLoader(raw_dir, null_values=["", "NA"]).load_all()
        products = {p.product_id: p for p in dataset.products}

        assert products["p1"].category_name == "beleza_saude"
        assert products["p2"].category_name is None
        assert products["p3"].category_name is None

    def test_default_null_values_keep_markers(self, raw_dir):
        """Only empty cells are missing by default"""
        (raw_dir / "olist_products_dataset.csv").write_text(
            "product_id,product_category_name\np1,NA\np2,\n", encoding="utf-8"
        )

        dataset, _ = MarketplaceLoader(raw_dir).load_all()
        products = {p.product_id: p for p in dataset.products}

        assert products["p1"].category_name == "NA"
        assert products["p2"].category_name is None
