"""
Restockman Protocols.

Defines interfaces for external system integration.
"""

from restockman.protocols.product import (
    ProductValidationResult,
    ProductValidator,
)

__all__ = [
    "ProductValidationResult",
    "ProductValidator",
]
