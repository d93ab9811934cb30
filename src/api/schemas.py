"""Request and response models for the BlendRec API."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductOut(BaseModel):
    product_id: str
    title: str
    categories: List[str]
    price: float


class ScoredProductOut(ProductOut):
    """A recommended product.

    Attributes:
        score: Similarity or collaborative score, rounded to 4 decimals.
    """

    score: float = Field(..., description="Score rounded to 4 decimals")


class BlendItemOut(ScoredProductOut):
    reasons: List[str] = Field(
        default_factory=list,
        description="similar_to:<product_id>, match_query, neighbors, popular, bias_category",
    )


class EventIn(BaseModel):
    """An implicit interaction event."""

    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    type: Literal["view", "cart", "purchase"]
    timestamp: Optional[float] = Field(default=None, description="Seconds since the epoch")


class EventResultOut(BaseModel):
    accepted: bool
    ignored: bool = False


class StatusResponse(BaseModel):
    status: str
    num_products: int
    vocabulary_size: int
    num_users: int
    num_interactions: int
    catalog_built_at: Optional[str] = None
    metrics: Dict = Field(default_factory=dict)
