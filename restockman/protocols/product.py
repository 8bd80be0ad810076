"""
Product Validation Protocol — Interface for catalog checks before restock.

Restockman defines this protocol, the catalog (or any other product
system) implements it. Stock is only ever received for products the
catalog considers stockable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class ProductValidationResult:
    """Result of product validation."""

    valid: bool
    product_name: str | None = None
    message: str | None = None
    error_code: str | None = None  # "inactive", "unavailable", etc.


@runtime_checkable
class ProductValidator(Protocol):
    """
    Protocol for product validation.

    Implementations decide whether a product may receive new stock.
    """

    def validate_product(self, product: Any) -> ProductValidationResult:
        """
        Validate that a product exists and can be restocked.

        Args:
            product: Catalog model instance

        Returns:
            ProductValidationResult with status and details
        """
        ...
