"""Cosine similarity for dense content vectors and sparse preference vectors.

Every function here returns 0 when either operand has zero magnitude, so
callers never see NaN or a division error.
"""

import logging
import math

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from src.recommender.sparse import SparseVector

# Configure module logger
logger = logging.getLogger(__name__)


def dense_cosine(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity between two dense vectors.

    Vectors of different shapes come from different content models and score 0.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        logger.warning(f"Cannot compare vectors of shapes {a.shape} and {b.shape}, similarity is 0")
        return 0.0

    norm_a = float(np.dot(a, a))
    norm_b = float(np.dot(b, b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return float(np.dot(a, b) / np.sqrt(norm_a * norm_b))


def sparse_cosine(a: SparseVector, b: SparseVector) -> float:
    """Cosine similarity between two sparse vectors."""
    norm_a = a.squared_norm()
    norm_b = b.squared_norm()
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return a.dot(b) / math.sqrt(norm_a * norm_b)


def cosine_to_all(vector: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of one vector against every row of a matrix.

    Args:
        vector: Dense vector of length n_features.
        matrix: Dense matrix of shape (n_rows, n_features).

    Returns:
        Array of n_rows similarities. Rows (or a query vector) with zero
        magnitude score 0.
    """
    n_rows = matrix.shape[0]
    if n_rows == 0 or matrix.shape[1] == 0:
        return np.zeros(n_rows, dtype=np.float64)

    return cosine_similarity(np.asarray(vector).reshape(1, -1), matrix)[0]
