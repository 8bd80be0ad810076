"""
Noop Product Validator — Stub adapter for development and testing.

Every product is considered stockable.

Usage in settings.py:
    RESTOCKMAN = {
        "PRODUCT_VALIDATOR": "restockman.adapters.noop.NoopProductValidator",
    }

WARNING: Do NOT use in production. It will accept stock for inactive or
discontinued products.
"""

from __future__ import annotations

from restockman.protocols.product import ProductValidationResult


class NoopProductValidator:
    """No-operation product validator. Always valid."""

    def validate_product(self, product) -> ProductValidationResult:
        return ProductValidationResult(valid=True, product_name=str(product))
