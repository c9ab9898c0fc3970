"""
Order Review Index

Groups review entries by order. An order can have zero, one or several
review entries, and every entry counts toward averages.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Tuple

import structlog

from marketplace_analytics.data.models import Review

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReviewIndex:
    """Read-only order_id -> review scores index"""
    scores_by_order: Dict[str, Tuple[int, ...]] = field(default_factory=dict)

    @property
    def reviewed_orders(self) -> FrozenSet[str]:
        """Orders with at least one review entry"""
        return frozenset(self.scores_by_order)

    def scores_for(self, order_ids: Iterable[str]) -> List[int]:
        """Flatten the review entries of every reviewed order in ``order_ids``."""
        scores: List[int] = []
        for order_id in order_ids:
            scores.extend(self.scores_by_order.get(order_id, ()))
        return scores


def build_review_index(reviews: Iterable[Review]) -> ReviewIndex:
    """
    Index review scores by order id.

    Reviews without an order id are ignored.
    """
    grouped: Dict[str, List[int]] = {}
    entries = 0
    for review in reviews:
        if not review.order_id:
            continue
        grouped.setdefault(review.order_id, []).append(review.score)
        entries += 1

    logger.debug("Review index built", reviewed_orders=len(grouped), review_entries=entries)

    return ReviewIndex(
        scores_by_order={order_id: tuple(scores) for order_id, scores in grouped.items()}
    )
