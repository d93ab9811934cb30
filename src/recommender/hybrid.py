"""Hybrid recommendation module.

Blends content similarity (seed product and/or free-text query) with
collaborative scores, adds a category bias, applies exclusion rules and tags
every result with the reasons it was recommended.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from src.recommender.catalog import Product
from src.recommender.collaborative import (
    CandidateSource,
    cf_scores_for_user,
    popular_items,
)
from src.recommender.embed import TfidfModel
from src.recommender.interactions import InteractionStore
from src.recommender.sparse import SparseVector
from src.recommender.text import canonical_id
from src.recommender.utils import DEFAULT_LIMIT, clamp, clamp_limit, round_score

# Configure module logger
logger = logging.getLogger(__name__)

# Default weights for hybrid scoring
DEFAULT_ALPHA = 0.5  # 50% content, 50% collaborative
DEFAULT_BETA = 0.0  # no category boost


class ReasonKind(str, Enum):
    """Why a product was recommended."""

    SIMILAR_TO = "similar_to"
    MATCH_QUERY = "match_query"
    NEIGHBORS = "neighbors"
    POPULAR = "popular"
    BIAS_CATEGORY = "bias_category"


@dataclass(frozen=True)
class Reason:
    """A reason tag. Only SIMILAR_TO carries a product id."""

    kind: ReasonKind
    product_id: Optional[str] = None

    def __post_init__(self):
        if (self.kind is ReasonKind.SIMILAR_TO) != (self.product_id is not None):
            raise ValueError(f"Reason {self.kind.value} has invalid product_id {self.product_id!r}")

    def __str__(self) -> str:
        if self.kind is ReasonKind.SIMILAR_TO:
            return f"{self.kind.value}:{self.product_id}"
        return self.kind.value

    @classmethod
    def similar_to(cls, product_id: str) -> "Reason":
        return cls(ReasonKind.SIMILAR_TO, product_id)


MATCH_QUERY = Reason(ReasonKind.MATCH_QUERY)
NEIGHBORS = Reason(ReasonKind.NEIGHBORS)
POPULAR = Reason(ReasonKind.POPULAR)
BIAS_CATEGORY = Reason(ReasonKind.BIAS_CATEGORY)


@dataclass(frozen=True)
class ScoredProduct:
    """A ranked product with its score and, on the blend path, reasons."""

    product: Product
    score: float
    reasons: Optional[Tuple[Reason, ...]] = None

    @property
    def product_id(self) -> str:
        return self.product.product_id

    def to_dict(self) -> Dict:
        data = self.product.to_dict()
        data["score"] = round_score(self.score)
        if self.reasons is not None:
            data["reasons"] = [str(reason) for reason in self.reasons]
        return data


@dataclass(frozen=True)
class BlendOptions:
    """Every knob of the blend operation.

    Build it with :meth:`create`, which canonicalizes ids and clamps numbers
    into range; direct construction with out-of-range values is rejected.

    Attributes:
        user_id: Requesting user (collaborative signal and seen set).
        product_id: Seed product for content similarity.
        query: Free-text query for content similarity.
        alpha: Content weight in [0, 1]; collaborative gets ``1 - alpha``.
        beta: Additive boost in [0, 1] for products in a bias category.
        limit: Result size in [1, 50].
        bias_categories: Lowercased category names receiving the boost.
        exclude_seen: Drop products the user already interacted with.
        exclude_seed: Drop the seed product.
    """

    user_id: Optional[str] = None
    product_id: Optional[str] = None
    query: Optional[str] = None
    alpha: float = DEFAULT_ALPHA
    beta: float = DEFAULT_BETA
    limit: int = DEFAULT_LIMIT
    bias_categories: Tuple[str, ...] = field(default_factory=tuple)
    exclude_seen: bool = True
    exclude_seed: bool = True

    def __post_init__(self):
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"alpha must be within [0, 1], got {self.alpha}")
        if not 0.0 <= self.beta <= 1.0:
            raise ValueError(f"beta must be within [0, 1], got {self.beta}")
        if clamp_limit(self.limit) != self.limit:
            raise ValueError(f"limit must be within [1, 50], got {self.limit}")

    @classmethod
    def create(
        cls,
        user_id: Optional[str] = None,
        product_id: Optional[str] = None,
        query: Optional[str] = None,
        alpha: Optional[float] = None,
        beta: Optional[float] = None,
        limit: Optional[int] = None,
        bias_categories: Optional[Iterable[str]] = None,
        exclude_seen: bool = True,
        exclude_seed: bool = True,
    ) -> "BlendOptions":
        """Normalize raw caller options, applying defaults and clamping."""
        categories = tuple(
            dict.fromkeys(
                category.strip().lower()
                for category in (bias_categories or ())
                if category and category.strip()
            )
        )
        return cls(
            user_id=canonical_id(user_id) or None,
            product_id=canonical_id(product_id) or None,
            query=query if query and query.strip() else None,
            alpha=clamp(DEFAULT_ALPHA if alpha is None else float(alpha), 0.0, 1.0),
            beta=clamp(DEFAULT_BETA if beta is None else float(beta), 0.0, 1.0),
            limit=clamp_limit(limit),
            bias_categories=categories,
            exclude_seen=exclude_seen,
            exclude_seed=exclude_seed,
        )

    @property
    def has_signal(self) -> bool:
        return bool(self.user_id or self.product_id or self.query)

    @property
    def bias_enabled(self) -> bool:
        return self.beta > 0 and len(self.bias_categories) > 0


class _ReasonLog:
    """Insertion-ordered, deduplicated reasons per product."""

    def __init__(self):
        self._reasons: Dict[str, Dict[Reason, None]] = {}

    def add(self, product_id: str, reason: Reason) -> None:
        self._reasons.setdefault(product_id, {})[reason] = None

    def add_all(self, product_ids: Iterable[str], reason: Reason) -> None:
        for product_id in product_ids:
            self.add(product_id, reason)

    def get(self, product_id: str) -> Tuple[Reason, ...]:
        return tuple(self._reasons.get(product_id, ()))


class HybridRecommender:
    """Combines content and collaborative scores for one catalog snapshot.
    """

    def __init__(
        self,
        model: TfidfModel,
        products_by_id: Mapping[str, Product],
        store: InteractionStore,
    ):
        """Initialize the recommender.
        """
        self.model = model
        self.products_by_id = products_by_id
        self.store = store

    def _get_content_scores(self, options: BlendOptions, reasons: _ReasonLog) -> SparseVector:
        """Max-merge of seed and query similarity."""
        content = SparseVector()

        if options.product_id:
            seed_scores = self.model.similarities_to_product(options.product_id)
            for pid, score in seed_scores.items():
                content.set_max(pid, max(score, 0.0))
            reasons.add_all(seed_scores, Reason.similar_to(options.product_id))
            content.remove(options.product_id)

        if options.query:
            query_scores = self.model.similarities_to_text(options.query)
            for pid, score in query_scores.items():
                content.set_max(pid, max(score, 0.0))
            reasons.add_all(query_scores, MATCH_QUERY)

        return content

    def _get_cf_scores(self, options: BlendOptions, reasons: _ReasonLog) -> SparseVector:
        if not options.user_id:
            return SparseVector()

        result = cf_scores_for_user(self.store, options.user_id)
        reason = NEIGHBORS if result.source is CandidateSource.NEIGHBORS else POPULAR
        reasons.add_all(result.scores.keys(), reason)
        return result.scores

    def _excluded(self, product_id: str, options: BlendOptions, seen: Set[str]) -> bool:
        if options.exclude_seed and options.product_id and product_id == options.product_id:
            return True
        return product_id in seen

    def _popular_fallback(self, options: BlendOptions, seen: Set[str]) -> List[ScoredProduct]:
        fallback = []
        for pid, score in popular_items(self.store):
            if self._excluded(pid, options, seen):
                continue
            product = self.products_by_id.get(pid)
            if product is None:
                continue
            fallback.append(ScoredProduct(product, score, (POPULAR,)))
            if len(fallback) == options.limit:
                break
        return fallback

    def recommend(self, options: BlendOptions) -> List[ScoredProduct]:
        """Rank products for the given blend options.

        Each signal map is rescaled so its best score is 1, then mixed as
        ``alpha * content + (1 - alpha) * cf``. Products in a bias category get
        ``beta`` added (capped at 1). Seed and already-seen products are
        dropped when the matching flag is set, as is anything scoring <= 0.
        If nothing survives and a user was given, the raw popularity ranking
        is returned instead.
        """
        start_time = time.time()
        logger.info(
            f"Generating blend recommendations: user={options.user_id}, "
            f"seed={options.product_id}, query={options.query!r}, "
            f"alpha={options.alpha:.2f}, beta={options.beta:.2f}, limit={options.limit}"
        )

        reasons = _ReasonLog()
        content_scores_norm = self._get_content_scores(options, reasons).normalized_to_max()
        cf_scores_norm = self._get_cf_scores(options, reasons).normalized_to_max()

        seen: Set[str] = set()
        if options.user_id and options.exclude_seen:
            seen = self.store.seen_products(options.user_id)

        all_product_ids = list(dict.fromkeys([*content_scores_norm.keys(), *cf_scores_norm.keys()]))
        candidates: List[ScoredProduct] = []

        for pid in all_product_ids:
            if self._excluded(pid, options, seen):
                continue
            product = self.products_by_id.get(pid)
            if product is None:
                continue

            # Mix them together
            score = (
                options.alpha * content_scores_norm.get(pid)
                + (1 - options.alpha) * cf_scores_norm.get(pid)
            )

            if options.bias_enabled and product.in_any_category(options.bias_categories):
                score = min(1.0, score + options.beta)
                reasons.add(pid, BIAS_CATEGORY)

            if score <= 0:
                continue
            candidates.append(ScoredProduct(product, score, reasons.get(pid)))

        candidates.sort(key=lambda item: (-item.score, item.product_id))
        recommendations = candidates[: options.limit]

        if not recommendations and options.user_id:
            logger.info(f"Blend produced nothing for user {options.user_id}, using popularity")
            recommendations = self._popular_fallback(options, seen)

        logger.info(
            "Blend recommendations generated",
            extra={
                "user_id": options.user_id,
                "num_candidates": len(candidates),
                "num_recommendations": len(recommendations),
                "total_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )

        return recommendations


def rank_scores(
    scores: Mapping[str, float],
    products_by_id: Mapping[str, Product],
    limit: Optional[int] = None,
) -> List[ScoredProduct]:
    """Turn a score map into ranked products (score desc, then product id)."""
    ranking = sorted(
        ((pid, score) for pid, score in scores.items() if pid in products_by_id),
        key=lambda item: (-item[1], item[0]),
    )
    if limit is not None:
        ranking = ranking[:limit]
    return [ScoredProduct(products_by_id[pid], score) for pid, score in ranking]


def to_dicts(results: Sequence[ScoredProduct]) -> List[Dict]:
    return [result.to_dict() for result in results]
