"""BlendRec: hybrid product recommendation engine.

This package scores catalog products against each other and against users,
combining TF-IDF content similarity with user-based collaborative filtering.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: content model, interaction store and blending logic
"""

__version__ = "0.1.0"
