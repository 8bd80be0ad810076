"""
Inventory position resolution — one position per (product, branch).
"""

import logging

from django.contrib.contenttypes.models import ContentType
from django.db import IntegrityError

from restockman.conf import restockman_settings
from restockman.exceptions import ConflictError
from restockman.models.inventory import InventoryPosition

logger = logging.getLogger('restockman')


class PositionResolver:
    """Find or lazily create inventory positions."""

    @classmethod
    def get_position(cls, product, branch) -> InventoryPosition | None:
        """Existing position for product at branch, or None."""
        ct = ContentType.objects.get_for_model(product)
        return InventoryPosition.objects.filter(
            content_type=ct, object_id=product.pk, branch=branch,
        ).first()

    @classmethod
    def resolve(cls, product, branch, user=None) -> InventoryPosition:
        """
        Position for product at branch, created with zero stock if missing.

        Raises:
            ConflictError('INVENTORY_CONFLICT'): creation failed and the
                row still cannot be read back
        """
        position, _ = cls.get_or_create_position(product, branch, user=user)
        return position

    @classmethod
    def get_or_create_position(cls, product, branch,
                               user=None) -> tuple[InventoryPosition, bool]:
        """
        Like resolve(), also reporting whether the row was created.

        Concurrency:
            - get_or_create() inserts under a savepoint
            - A concurrent insert of the same (product, branch) hits the
              unique constraint and is re-read instead of failing
        """
        ct = ContentType.objects.get_for_model(product)

        try:
            position, created = InventoryPosition.objects.get_or_create(
                content_type=ct,
                object_id=product.pk,
                branch=branch,
                defaults={
                    'quantity': 0,
                    'reserved_quantity': 0,
                    'low_stock_threshold': restockman_settings.DEFAULT_LOW_STOCK_THRESHOLD,
                    'min_stock_level': restockman_settings.DEFAULT_MIN_STOCK_LEVEL,
                    'location': restockman_settings.DEFAULT_LOCATION,
                    'created_by': user,
                    'updated_by': user,
                },
            )
        except IntegrityError as e:
            raise ConflictError(
                'INVENTORY_CONFLICT',
                product_id=product.pk,
                branch_id=branch.pk,
            ) from e

        if created:
            logger.info(
                "inventory.created",
                extra={
                    "inventory_id": position.pk,
                    "product": str(product),
                    "branch": branch.code,
                },
            )
        return position, created
