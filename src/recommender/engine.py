"""Recommendation engine: one catalog snapshot plus one interaction store.

The engine is built once by the composition root (the API lifespan or a
CLI ``main``) and handed to every caller. Rebuilding swaps in a fully built
snapshot in one step, so a reader sees either the old or the new model.
"""

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from src.recommender.catalog import Product, load_catalog_csv
from src.recommender.collaborative import (
    DEFAULT_NEIGHBORS,
    CollaborativeScores,
    cf_scores_for_user,
    top_k_neighbors,
)
from src.recommender.embed import TfidfModel, build_tfidf_model
from src.recommender.hybrid import BlendOptions, HybridRecommender, ScoredProduct, rank_scores
from src.recommender.interactions import EventResult, InteractionStore, InteractionType
from src.recommender.text import canonical_id
from src.recommender.utils import DEFAULT_LIMIT

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    """Products, their content model and an id index, built together."""

    products: Tuple[Product, ...]
    model: TfidfModel
    products_by_id: Mapping[str, Product]
    built_at: float

    @classmethod
    def build(cls, products: Sequence[Product]) -> "CatalogSnapshot":
        products = tuple(products)
        return cls(
            products=products,
            model=build_tfidf_model(products),
            products_by_id={product.product_id: product for product in products},
            built_at=time.time(),
        )


class RecommenderEngine:
    """Scores products for seeds, queries and users.

    Entry points return ranked ``ScoredProduct`` lists; they never raise for
    "no data" situations (unknown seed, unknown user, empty catalog) and
    return empty or popularity-based results instead.
    """

    def __init__(
        self,
        products: Sequence[Product] = (),
        store: Optional[InteractionStore] = None,
    ):
        self._swap_lock = threading.Lock()
        self._snapshot = CatalogSnapshot.build(products)
        self.store = store if store is not None else InteractionStore()

        logger.info(
            f"Initialized RecommenderEngine: {len(self._snapshot.products)} products, "
            f"vocabulary_size={self._snapshot.model.vocabulary_size}"
        )

    @classmethod
    def from_csv(cls, csv_path: Union[str, Path]) -> "RecommenderEngine":
        """Build an engine from a catalog CSV file."""
        return cls(load_catalog_csv(csv_path))

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def rebuild(self, products: Sequence[Product]) -> CatalogSnapshot:
        """Recompute the content model for a new catalog and install it.

        Recorded interactions are kept. Interactions with products that are no
        longer in the catalog stay in user vectors but are never returned.
        """
        start_time = time.time()
        snapshot = CatalogSnapshot.build(products)
        with self._swap_lock:
            self._snapshot = snapshot

        logger.info(
            "Catalog snapshot rebuilt",
            extra={
                "num_products": len(snapshot.products),
                "vocabulary_size": snapshot.model.vocabulary_size,
                "build_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        return snapshot

    def reload_csv(self, csv_path: Union[str, Path]) -> CatalogSnapshot:
        return self.rebuild(load_catalog_csv(csv_path))

    # ----- catalog -----

    def list_products(self) -> List[Product]:
        return list(self._snapshot.products)

    def product_ids(self) -> List[str]:
        return [product.product_id for product in self._snapshot.products]

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._snapshot.products_by_id.get(canonical_id(product_id))

    # ----- content -----

    def recommend_by_product_id(self, product_id: str, limit: Optional[int] = DEFAULT_LIMIT) -> List[ScoredProduct]:
        """Products most similar to a seed product, the seed excluded.

        Returns an empty list when the seed is unknown.
        """
        snapshot = self._snapshot
        pid = canonical_id(product_id)
        scores = snapshot.model.similarities_to_product(pid)
        return rank_scores(scores, snapshot.products_by_id, limit)

    def recommend_by_query(self, query: str, limit: Optional[int] = DEFAULT_LIMIT) -> List[ScoredProduct]:
        """Products most similar to a free-text query."""
        snapshot = self._snapshot
        scores = snapshot.model.similarities_to_text(query or "")
        return rank_scores(scores, snapshot.products_by_id, limit)

    # ----- interactions -----

    def register_event(
        self,
        user_id: str,
        product_id: str,
        interaction_type: Union[InteractionType, str],
        timestamp: Optional[float] = None,
    ) -> EventResult:
        """Record an implicit interaction; unknown products are ignored."""
        products_by_id = self._snapshot.products_by_id
        return self.store.register_event(
            user_id=user_id,
            product_id=product_id,
            interaction_type=interaction_type,
            is_known_product=products_by_id.__contains__,
            timestamp=timestamp,
        )

    def register_event_dict(self, event: Mapping[str, Any]) -> EventResult:
        """Register an event given as ``{user_id, product_id, type, timestamp?}``."""
        return self.register_event(
            user_id=event["user_id"],
            product_id=event["product_id"],
            interaction_type=event["type"],
            timestamp=event.get("timestamp"),
        )

    def register_events(self, events: Iterable[Mapping[str, Any]]) -> Tuple[int, int]:
        """Register a batch of events in order.

        A malformed event (missing field, unknown type) is counted as ignored
        and does not stop the rest of the batch.

        Returns:
            (accepted, ignored) counts.
        """
        accepted = ignored = 0
        for event in events:
            try:
                result = self.register_event_dict(event)
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed event {dict(event)!r}: {e}")
                ignored += 1
                continue
            if result.accepted:
                accepted += 1
            else:
                ignored += 1

        logger.info(f"Registered {accepted} events, ignored {ignored}")
        return accepted, ignored

    # ----- collaborative -----

    def top_k_neighbors(self, user_id: str, k: int = DEFAULT_NEIGHBORS) -> List[Tuple[str, float]]:
        return top_k_neighbors(self.store, user_id, k)

    def cf_scores_for_user(self, user_id: str) -> CollaborativeScores:
        return cf_scores_for_user(self.store, user_id)

    def popular_items(self, limit: Optional[int] = None) -> List[ScoredProduct]:
        """Products ranked by total interaction weight."""
        return rank_scores(self.store.popularity().to_dict(), self._snapshot.products_by_id, limit)

    def recommend_for_user(self, user_id: str, limit: Optional[int] = DEFAULT_LIMIT) -> List[ScoredProduct]:
        """Collaborative recommendations, popularity for users without history."""
        snapshot = self._snapshot
        result = cf_scores_for_user(self.store, user_id)
        return rank_scores(result.scores.to_dict(), snapshot.products_by_id, limit)

    # ----- blend -----

    def recommend_blend(self, options: Optional[BlendOptions] = None, **kwargs: Any) -> List[ScoredProduct]:
        """Blend content and collaborative signals.

        Accepts a prepared ``BlendOptions`` or the raw keyword options accepted
        by ``BlendOptions.create``.
        """
        if options is None:
            options = BlendOptions.create(**kwargs)
        elif kwargs:
            raise TypeError("Pass either a BlendOptions instance or keyword options, not both")

        snapshot = self._snapshot
        recommender = HybridRecommender(snapshot.model, snapshot.products_by_id, self.store)
        return recommender.recommend(options)

    def stats(self) -> Dict[str, Any]:
        snapshot = self._snapshot
        return {
            "num_products": len(snapshot.products),
            "vocabulary_size": snapshot.model.vocabulary_size,
            "num_users": self.store.user_count,
            "num_interactions": self.store.interaction_count,
            "catalog_built_at": snapshot.built_at,
        }
