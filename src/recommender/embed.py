"""TF-IDF product vectors for content-based recommendations.

Builds one unit-normalized term vector per product from its title, categories
and price, using a vocabulary indexed in first-seen order.
"""

import logging
from typing import Dict, Optional, Sequence

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer

from src.recommender.catalog import Product
from src.recommender.similarity import cosine_to_all
from src.recommender.text import tokenize

# Configure module logger
logger = logging.getLogger(__name__)


class TfidfModel:
    """Vocabulary, IDF weights and dense product vectors.

    Immutable after construction: queries never change the vocabulary, the IDF
    values or the stored vectors. Rebuilding after a catalog change means
    building a new model.
    """

    def __init__(
        self,
        vocabulary: Dict[str, int],
        idf: np.ndarray,
        product_ids: Sequence[str],
        embeddings: np.ndarray,
        vectorizer: Optional[TfidfVectorizer] = None,
    ):
        """Initialize.
        """
        self.vocabulary = dict(vocabulary)
        self.idf = idf
        self.product_ids = list(product_ids)
        self.embeddings = embeddings
        self.vectorizer = vectorizer
        self.product_id_to_idx = {pid: idx for idx, pid in enumerate(self.product_ids)}

        self.idf.setflags(write=False)
        self.embeddings.setflags(write=False)

        logger.info(
            f"Initialized TfidfModel: {len(self.product_ids)} products, "
            f"vocabulary_size={self.vocabulary_size}"
        )

    @property
    def vocabulary_size(self) -> int:
        return len(self.vocabulary)

    def get_embedding(self, product_id: str) -> Optional[np.ndarray]:
        """Get the vector for a product.
        """
        idx = self.product_id_to_idx.get(product_id)
        if idx is None:
            return None
        return self.embeddings[idx]

    def vectors(self) -> Dict[str, np.ndarray]:
        """Mapping product_id -> dense vector."""
        return {pid: self.embeddings[idx] for pid, idx in self.product_id_to_idx.items()}

    def transform(self, text: str) -> np.ndarray:
        """Vectorize free text with the model's vocabulary and IDF.

        Tokens outside the vocabulary are dropped. If nothing is left the
        result is the zero vector.
        """
        if self.vectorizer is None or self.vocabulary_size == 0:
            return np.zeros(self.vocabulary_size, dtype=np.float64)
        return self.vectorizer.transform([text]).toarray()[0]

    def similarities_to_vector(self, vector: np.ndarray) -> Dict[str, float]:
        """Cosine similarity of every product to a dense vector."""
        scores = cosine_to_all(vector, self.embeddings)
        return {pid: float(scores[idx]) for pid, idx in self.product_id_to_idx.items()}

    def similarities_to_product(self, product_id: str) -> Dict[str, float]:
        """Similarity of every other product to the given one.

        Returns an empty mapping for an unknown product. The product itself is
        never part of the result.
        """
        emb = self.get_embedding(product_id)
        if emb is None:
            logger.warning(f"Product {product_id} not found in content model")
            return {}

        scores = self.similarities_to_vector(emb)
        scores.pop(product_id, None)
        return scores

    def similarities_to_text(self, text: str) -> Dict[str, float]:
        """Similarity of every product to a free-text query."""
        return self.similarities_to_vector(self.transform(text))


def build_vocabulary(tokenized_documents: Sequence[Sequence[str]]) -> Dict[str, int]:
    """Assign every distinct token the next index, in first-seen order."""
    vocabulary: Dict[str, int] = {}
    for tokens in tokenized_documents:
        for token in tokens:
            if token not in vocabulary:
                vocabulary[token] = len(vocabulary)
    return vocabulary


def build_tfidf_model(products: Sequence[Product]) -> TfidfModel:
    """Build the content model for a catalog snapshot.

    Each product becomes the document ``"<title> <categories> <price:.2f>"``
    (the price is included so numeric query terms can match). Weights are
    ``tf * idf`` with ``tf = count / document length`` and the smoothed
    ``idf = ln((N + 1) / (df + 1)) + 1``; each vector is then L2-normalized.
    Because of that normalization, dividing raw counts by the document length
    does not change the result, so scikit-learn's raw-count TF gives the same
    vectors.

    Args:
        products: Catalog snapshot. May be empty.

    Returns:
        A new TfidfModel. Products whose text tokenizes to nothing get the
        zero vector.
    """
    logger.info(f"Building TF-IDF model for {len(products)} products")

    product_ids = [product.product_id for product in products]
    documents = [product.document() for product in products]
    vocabulary = build_vocabulary([tokenize(doc) for doc in documents])

    if not vocabulary:
        logger.warning("Catalog produced an empty vocabulary, all content vectors are empty")
        return TfidfModel(
            vocabulary={},
            idf=np.zeros(0, dtype=np.float64),
            product_ids=product_ids,
            embeddings=np.zeros((len(products), 0), dtype=np.float64),
        )

    vectorizer = TfidfVectorizer(
        analyzer=tokenize,
        vocabulary=vocabulary,
        norm="l2",
        use_idf=True,
        smooth_idf=True,
        sublinear_tf=False,
        dtype=np.float64,
    )
    embeddings = vectorizer.fit_transform(documents).toarray()

    logger.info(f"TF-IDF vocabulary size: {len(vocabulary)}")

    return TfidfModel(
        vocabulary=vocabulary,
        idf=np.array(vectorizer.idf_, dtype=np.float64),
        product_ids=product_ids,
        embeddings=embeddings,
        vectorizer=vectorizer,
    )
