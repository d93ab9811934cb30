"""Sparse key->weight vectors used for user preferences and score maps."""

import math
from typing import Dict, Iterator, List, Mapping, Optional, Tuple


class SparseVector:
    """Mapping from string keys to float weights.

    Missing keys read as 0. Used for user preference vectors (product_id ->
    accumulated interaction weight), the global popularity vector, and the
    score maps flowing through the blend layer.
    """

    __slots__ = ("_weights",)

    def __init__(self, weights: Optional[Mapping[str, float]] = None):
        self._weights: Dict[str, float] = dict(weights) if weights else {}

    def __len__(self) -> int:
        return len(self._weights)

    def __contains__(self, key: object) -> bool:
        return key in self._weights

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SparseVector):
            return NotImplemented
        return self._weights == other._weights

    def __repr__(self) -> str:
        return f"SparseVector({self._weights!r})"

    def get(self, key: str, default: float = 0.0) -> float:
        return self._weights.get(key, default)

    def keys(self):
        return self._weights.keys()

    def items(self):
        return self._weights.items()

    def to_dict(self) -> Dict[str, float]:
        return dict(self._weights)

    def copy(self) -> "SparseVector":
        return SparseVector(self._weights)

    def add(self, key: str, weight: float) -> None:
        """Accumulate weight on a key, creating the entry if needed."""
        self._weights[key] = self._weights.get(key, 0.0) + weight

    def set_max(self, key: str, weight: float) -> None:
        """Keep the larger of the current and the given weight for a key."""
        current = self._weights.get(key)
        if current is None or weight > current:
            self._weights[key] = weight

    def remove(self, key: str) -> None:
        self._weights.pop(key, None)

    def merge(self, other: "SparseVector", factor: float = 1.0) -> None:
        """Add ``factor * other`` into this vector in place."""
        for key, weight in other.items():
            self.add(key, factor * weight)

    def scaled(self, factor: float) -> "SparseVector":
        return SparseVector({key: weight * factor for key, weight in self.items()})

    def squared_norm(self) -> float:
        return sum(weight * weight for weight in self._weights.values())

    def norm(self) -> float:
        return math.sqrt(self.squared_norm())

    def dot(self, other: "SparseVector") -> float:
        """Dot product, iterating the smaller vector and probing the larger."""
        smaller, larger = (self, other) if len(self) < len(other) else (other, self)
        total = 0.0
        for key, weight in smaller.items():
            other_weight = larger.get(key)
            if other_weight:
                total += weight * other_weight
        return total

    def max_value(self) -> float:
        if not self._weights:
            return 0.0
        return max(self._weights.values())

    def normalized_to_max(self) -> "SparseVector":
        """Rescale so the largest weight becomes 1.

        A vector whose maximum is not positive contributes nothing and comes
        back empty.
        """
        peak = self.max_value()
        if peak <= 0:
            return SparseVector()
        return self.scaled(1.0 / peak)

    def ranked(self, limit: Optional[int] = None) -> List[Tuple[str, float]]:
        """Entries sorted by weight descending, ties broken by key ascending."""
        ranking = sorted(self._weights.items(), key=lambda item: (-item[1], item[0]))
        if limit is not None:
            ranking = ranking[:limit]
        return ranking
