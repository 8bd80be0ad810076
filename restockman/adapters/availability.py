"""
Availability Product Validator — default adapter.

Works with any catalog model by duck typing:
- ``is_active`` (bool), when present, must be True
- ``status`` (str), when present, must be "available"

Products that have neither attribute are accepted.
"""

from __future__ import annotations

from restockman.protocols.product import ProductValidationResult

AVAILABLE_STATUS = 'available'


class AvailabilityProductValidator:
    """Reject inactive or unavailable products."""

    def validate_product(self, product) -> ProductValidationResult:
        if product is None or getattr(product, 'pk', None) is None:
            return ProductValidationResult(
                valid=False,
                message="Product does not exist",
                error_code="not_found",
            )

        name = str(product)

        if getattr(product, 'is_active', True) is False:
            return ProductValidationResult(
                valid=False,
                product_name=name,
                message=f"Product '{name}' is inactive",
                error_code="inactive",
            )

        status = getattr(product, 'status', None)
        if status is not None and status != AVAILABLE_STATUS:
            return ProductValidationResult(
                valid=False,
                product_name=name,
                message=f"Product '{name}' is {status}",
                error_code="unavailable",
            )

        return ProductValidationResult(valid=True, product_name=name)
