"""Custom exceptions for the BlendRec API.

Defines specific exception types for better error handling and reporting.
The scoring engine itself does not raise for missing data; these exceptions
cover the HTTP boundary (bad requests, catalog loading, startup state).
"""

from typing import Any, Dict, Optional


class BlendRecException(Exception):
    """Base exception for BlendRec errors."""

    error = "Internal error"

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message, "details": self.details}


class InvalidRequestError(BlendRecException):
    """Raised when a request is well-formed but cannot be served."""

    error = "Invalid request"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=400, details=details)


class ProductNotFoundError(BlendRecException):
    """Raised when a product lookup by id fails."""

    error = "Product not found"

    def __init__(self, product_id: str):
        super().__init__(
            message=f"Product '{product_id}' is not in the catalog.",
            status_code=404,
            details={"product_id": product_id},
        )


class CatalogNotFoundError(BlendRecException):
    """Raised when the catalog file cannot be found."""

    error = "Catalog not found"

    def __init__(self, catalog_path: str):
        super().__init__(
            message=f"Catalog not found at '{catalog_path}'.",
            status_code=503,
            details={"catalog_path": catalog_path},
        )


class CatalogLoadError(BlendRecException):
    """Raised when the catalog fails to load."""

    error = "Catalog load failed"

    def __init__(self, catalog_path: str, error: Exception):
        super().__init__(
            message=f"Failed to load catalog from '{catalog_path}': {error}",
            status_code=500,
            details={
                "catalog_path": catalog_path,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )


class EngineNotReadyError(BlendRecException):
    """Raised when a request arrives before the engine has been built."""

    error = "Engine not ready"

    def __init__(self):
        super().__init__(
            message="Recommendation engine is not initialized yet.",
            status_code=503,
        )
