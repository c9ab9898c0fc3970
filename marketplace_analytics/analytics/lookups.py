"""
Category Lookup Builder

Resolves products to their canonical (English) category through the
category name translation table.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

import structlog

from marketplace_analytics.data.models import CategoryTranslation, Product

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CategoryLookup:
    """
    Read-only category mappings for one batch run.

    Attributes:
        translations: source category name -> English category name
        category_of: product_id -> English category name
    """
    translations: Dict[str, str] = field(default_factory=dict)
    category_of: Dict[str, str] = field(default_factory=dict)

    @property
    def known_categories(self) -> Tuple[str, ...]:
        """Every canonical category name, sorted"""
        return tuple(sorted(set(self.translations.values())))

    def category_for(self, product_id: Optional[str]) -> Optional[str]:
        """Canonical category of a product, or None if it does not resolve"""
        if not product_id:
            return None
        return self.category_of.get(product_id)


def build_translation_map(translations: Iterable[CategoryTranslation]) -> Dict[str, str]:
    """Source name -> English name; the first occurrence of a source name wins."""
    mapping: Dict[str, str] = {}
    for translation in translations:
        if translation.category_name not in mapping:
            mapping[translation.category_name] = translation.category_name_english
    return mapping


def build_category_lookup(
    translations: Iterable[CategoryTranslation],
    products: Iterable[Product],
) -> CategoryLookup:
    """
    Build the category lookup used by every category-aware analysis.

    A product is mapped only when its source category name is non-empty and
    present in the translation table. Duplicate product ids keep their first
    mapping.

    Args:
        translations: Category name translation records
        products: Product catalog

    Returns:
        CategoryLookup with both mappings populated
    """
    translation_map = build_translation_map(translations)

    category_of: Dict[str, str] = {}
    unresolved = 0
    for product in products:
        if not product.product_id:
            continue
        english = translation_map.get(product.category_name) if product.category_name else None
        if english is None:
            unresolved += 1
            continue
        category_of.setdefault(product.product_id, english)

    logger.debug(
        "Category lookup built",
        translations=len(translation_map),
        mapped_products=len(category_of),
        unresolved_products=unresolved,
    )

    return CategoryLookup(translations=translation_map, category_of=category_of)
