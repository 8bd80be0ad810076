"""
Restockman Adapters.

Implementations of protocols for external systems, and the loader that
picks the configured one.

Usage:
    from restockman.adapters import get_product_validator

    validator = get_product_validator()
    result = validator.validate_product(product)

Settings:
    RESTOCKMAN = {
        "PRODUCT_VALIDATOR": "restockman.adapters.noop.NoopProductValidator",
    }
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from restockman.conf import restockman_settings
from restockman.protocols.product import ProductValidator

logger = logging.getLogger(__name__)


# Cached validator instance, keyed by dotted path
_lock = threading.Lock()
_product_validator: tuple[str, ProductValidator] | None = None


def get_product_validator() -> ProductValidator:
    """
    Return the configured product validator.

    Raises:
        ImproperlyConfigured: If PRODUCT_VALIDATOR is empty or import fails
    """
    global _product_validator

    validator_path = restockman_settings.PRODUCT_VALIDATOR
    cached = _product_validator
    if cached is not None and cached[0] == validator_path:
        return cached[1]

    with _lock:
        if not validator_path:
            raise ImproperlyConfigured(
                "RESTOCKMAN['PRODUCT_VALIDATOR'] must be configured. "
                "Example: 'restockman.adapters.noop.NoopProductValidator'"
            )

        try:
            validator_class = import_string(validator_path)
        except ImportError as e:
            raise ImproperlyConfigured(
                f"Failed to import product validator '{validator_path}': {e}"
            ) from e

        validator = validator_class()
        _product_validator = (validator_path, validator)
        logger.debug("Loaded product validator: %s", validator_path)
        return validator


def reset_product_validator() -> None:
    """Reset the cached validator. Useful for testing."""
    global _product_validator
    _product_validator = None


__all__ = [
    "get_product_validator",
    "reset_product_validator",
]
