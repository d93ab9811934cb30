"""User-based collaborative filtering over implicit interaction vectors.

Finds the users whose preference vectors point the same way as the target
user's and scores the products those neighbors interacted with. Users without
history fall back to global popularity.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from src.recommender.interactions import InteractionStore
from src.recommender.similarity import sparse_cosine
from src.recommender.sparse import SparseVector
from src.recommender.text import canonical_id

# Configure module logger
logger = logging.getLogger(__name__)

# Default parameters
DEFAULT_NEIGHBORS = 20
CF_NEIGHBORS = 30


class CandidateSource(str, Enum):
    """Where a collaborative score map came from."""

    NEIGHBORS = "neighbors"
    POPULAR = "popular"


@dataclass(frozen=True)
class CollaborativeScores:
    """Candidate scores for one user.

    Attributes:
        scores: product_id -> score.
        had_vector: Whether the user had any recorded interaction.
        source: NEIGHBORS when scores come from similar users, POPULAR when
            the popularity fallback was used.
    """

    scores: SparseVector
    had_vector: bool
    source: CandidateSource


def top_k_neighbors(
    store: InteractionStore,
    user_id: str,
    k: int = DEFAULT_NEIGHBORS,
) -> List[Tuple[str, float]]:
    """Find the users most similar to the given user.

    Only strictly positive similarities are kept. The user is never its own
    neighbor. Ties are broken by user id so the result is deterministic.

    Args:
        store: Interaction store to scan.
        user_id: Target user (canonicalized here).
        k: Maximum number of neighbors.

    Returns:
        List of (neighbor_user_id, similarity), most similar first. Empty for
        an unknown user.
    """
    uid = canonical_id(user_id)
    return _rank_neighbors(store.user_vectors(), uid, k)


def _rank_neighbors(vectors: Dict[str, SparseVector], uid: str, k: int) -> List[Tuple[str, float]]:
    target = vectors.get(uid)
    if target is None:
        return []

    similarities = []
    for other_id, vector in vectors.items():
        if other_id == uid:
            continue
        similarity = sparse_cosine(target, vector)
        if similarity > 0:
            similarities.append((other_id, similarity))

    similarities.sort(key=lambda item: (-item[1], item[0]))
    return similarities[:k]


def popular_items(store: InteractionStore, limit: Optional[int] = None) -> List[Tuple[str, float]]:
    """Rank products by total interaction weight across all users."""
    return store.popularity().ranked(limit)


def aggregate_neighbor_scores(
    own_vector: SparseVector,
    neighbors: List[Tuple[str, float]],
    vectors: Dict[str, SparseVector],
) -> SparseVector:
    """Sum ``similarity * neighbor_weight`` for products the user has not touched."""
    candidates = SparseVector()
    for neighbor_id, similarity in neighbors:
        candidates.merge(vectors[neighbor_id], factor=similarity)
    for product_id in own_vector:
        candidates.remove(product_id)
    return candidates


def cf_scores_for_user(
    store: InteractionStore,
    user_id: str,
    k: int = CF_NEIGHBORS,
) -> CollaborativeScores:
    """Collaborative candidate scores for a user.

    Users with no (or an empty) vector get the global popularity ranking. For
    everyone else the top ``k`` neighbors' vectors are aggregated; products
    the user already interacted with are skipped. If the neighbors contribute
    nothing, the popularity ranking is used instead.
    """
    start_time = time.time()
    uid = canonical_id(user_id)
    vectors = store.user_vectors()
    own_vector = vectors.get(uid)

    if own_vector is None or len(own_vector) == 0:
        logger.info(
            "User has no interactions, using popularity",
            extra={"user_id": uid, "strategy": "cold_start"},
        )
        return CollaborativeScores(
            scores=store.popularity(),
            had_vector=False,
            source=CandidateSource.POPULAR,
        )

    neighbors = _rank_neighbors(vectors, uid, k)
    candidates = aggregate_neighbor_scores(own_vector, neighbors, vectors)

    if len(candidates) == 0:
        logger.info(
            "Neighbors produced no candidates, using popularity",
            extra={"user_id": uid, "num_neighbors": len(neighbors)},
        )
        return CollaborativeScores(
            scores=store.popularity(),
            had_vector=True,
            source=CandidateSource.POPULAR,
        )

    logger.debug(
        "Computed collaborative scores",
        extra={
            "user_id": uid,
            "num_neighbors": len(neighbors),
            "num_candidates": len(candidates),
            "compute_time_ms": round((time.time() - start_time) * 1000, 2),
        },
    )

    return CollaborativeScores(
        scores=candidates,
        had_vector=True,
        source=CandidateSource.NEIGHBORS,
    )
