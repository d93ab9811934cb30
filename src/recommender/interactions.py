"""Implicit interaction events and per-user preference vectors.

The store is append-only: events are never removed, and user vectors only
grow. A single lock serializes mutation and full-scan reads so that neighbor
search and popularity aggregation never observe a half-applied event.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Union

import pandas as pd

from src.recommender.sparse import SparseVector
from src.recommender.text import canonical_id

# Configure module logger
logger = logging.getLogger(__name__)


class InteractionType(str, Enum):
    """Kinds of implicit feedback, strongest last."""

    VIEW = "view"
    CART = "cart"
    PURCHASE = "purchase"

    @property
    def weight(self) -> float:
        return INTERACTION_WEIGHTS[self]


INTERACTION_WEIGHTS: Dict[InteractionType, float] = {
    InteractionType.VIEW: 1.0,
    InteractionType.CART: 3.0,
    InteractionType.PURCHASE: 5.0,
}


@dataclass(frozen=True)
class Interaction:
    """One recorded user->product event (canonical ids)."""

    user_id: str
    product_id: str
    type: InteractionType
    timestamp: float


@dataclass(frozen=True)
class EventResult:
    """Outcome of registering an event.

    ``ignored`` is set when the event referenced an unknown product; this is a
    normal outcome, not an error.
    """

    accepted: bool
    ignored: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {"accepted": self.accepted, "ignored": self.ignored}


class InteractionStore:
    """Append-only event log with derived user and popularity vectors."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._interactions: List[Interaction] = []
        self._user_vectors: Dict[str, SparseVector] = {}
        self._popularity = SparseVector()

    def register_event(
        self,
        user_id: str,
        product_id: str,
        interaction_type: Union[InteractionType, str],
        is_known_product: Callable[[str], bool],
        timestamp: Optional[float] = None,
    ) -> EventResult:
        """Record an interaction and update the derived vectors.

        Args:
            user_id: Raw user identifier (canonicalized here).
            product_id: Raw product identifier (canonicalized here).
            interaction_type: view, cart or purchase.
            is_known_product: Predicate telling whether a canonical product id
                exists in the current catalog.
            timestamp: Event time in seconds since the epoch; defaults to now.

        Returns:
            EventResult(accepted=True) when recorded, or
            EventResult(accepted=False, ignored=True) for a blank user id or an
            unknown product, in which case nothing is mutated.

        Raises:
            ValueError: If interaction_type is not a known type.
        """
        if isinstance(interaction_type, InteractionType):
            kind = interaction_type
        else:
            kind = InteractionType(str(interaction_type).strip().lower())
        uid = canonical_id(user_id)
        pid = canonical_id(product_id)

        if not uid:
            logger.debug(f"Ignoring {kind.value} event with a blank user id")
            return EventResult(accepted=False, ignored=True)

        if not pid or not is_known_product(pid):
            logger.debug(f"Ignoring {kind.value} event for unknown product '{pid}'")
            return EventResult(accepted=False, ignored=True)

        interaction = Interaction(
            user_id=uid,
            product_id=pid,
            type=kind,
            timestamp=self._clock() if timestamp is None else float(timestamp),
        )

        with self._lock:
            self._interactions.append(interaction)
            vector = self._user_vectors.get(uid)
            if vector is None:
                vector = SparseVector()
                self._user_vectors[uid] = vector
            vector.add(pid, kind.weight)
            self._popularity.add(pid, kind.weight)

        return EventResult(accepted=True)

    def user_vector(self, user_id: str) -> Optional[SparseVector]:
        """Copy of a user's preference vector, or None if the user is unknown."""
        uid = canonical_id(user_id)
        with self._lock:
            vector = self._user_vectors.get(uid)
            return vector.copy() if vector is not None else None

    def seen_products(self, user_id: str) -> Set[str]:
        vector = self.user_vector(user_id)
        return set(vector.keys()) if vector is not None else set()

    def user_vectors(self) -> Dict[str, SparseVector]:
        """Consistent copy of every user vector, for full scans."""
        with self._lock:
            return {uid: vector.copy() for uid, vector in self._user_vectors.items()}

    def popularity(self) -> SparseVector:
        """Summed interaction weight per product across all users."""
        with self._lock:
            return self._popularity.copy()

    @property
    def interaction_count(self) -> int:
        with self._lock:
            return len(self._interactions)

    @property
    def user_count(self) -> int:
        with self._lock:
            return len(self._user_vectors)


def load_events_csv(csv_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Load interaction events from a CSV file.

    Expects the columns ``user_id``, ``product_id`` and ``type``; a
    ``timestamp`` column (seconds since the epoch) is optional. Rows with an
    unknown type or a blank id are skipped.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If a required column is missing.
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"Events file not found: {csv_path}")

    logger.info(f"Loading events from {csv_path}")
    df = pd.read_csv(csv_file, dtype={"user_id": str, "product_id": str, "type": str})

    required_columns = {"user_id", "product_id", "type"}
    if not required_columns.issubset(df.columns):
        missing = required_columns - set(df.columns)
        raise ValueError(f"Events CSV missing required columns: {missing}")

    valid_types = {kind.value for kind in InteractionType}
    df = df.dropna(subset=list(required_columns))
    df = df[df["type"].str.strip().str.lower().isin(valid_types)]

    events = []
    for row in df.to_dict("records"):
        timestamp = row.get("timestamp")
        events.append({
            "user_id": row["user_id"],
            "product_id": row["product_id"],
            "type": row["type"].strip().lower(),
            "timestamp": None if timestamp is None or pd.isna(timestamp) else float(timestamp),
        })

    logger.info(f"Loaded {len(events)} events")
    return events
