"""
InventoryPosition model — On-hand quantity of a product at a branch.
"""

from decimal import Decimal

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.db.models import F, Q, Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _


class InventoryPositionQuerySet(models.QuerySet):
    """QuerySet with helper filters for inventory positions."""

    def for_product(self, product):
        """Filter positions for a specific product."""
        ct = ContentType.objects.get_for_model(product)
        return self.filter(content_type=ct, object_id=product.pk)

    def at_branch(self, branch):
        """Filter by branch."""
        return self.filter(branch=branch)

    def low_stock(self):
        """Positions whose available quantity is at or below the threshold."""
        return self.filter(
            quantity__lte=F('reserved_quantity') + F('low_stock_threshold')
        )


class InventoryPosition(models.Model):
    """
    Aggregate stock record for one (product, branch) pair.

    Batches, movements and restock records all point back here.

    Invariants:
    - quantity >= 0
    - quantity == sum of active batch quantities once a restock or
      retirement completes (see reconcile())
    - Created lazily on first restock, never deleted
    """

    # Generic reference to product (agnostic)
    content_type = models.ForeignKey(
        ContentType,
        on_delete=models.PROTECT,
        verbose_name=_('Product type'),
    )
    object_id = models.PositiveIntegerField(
        verbose_name=_('Product ID'),
    )
    product = GenericForeignKey('content_type', 'object_id')

    branch = models.ForeignKey(
        'restockman.Branch',
        on_delete=models.PROTECT,
        related_name='positions',
        verbose_name=_('Branch'),
    )

    quantity = models.IntegerField(
        default=0,
        verbose_name=_('On hand'),
    )
    reserved_quantity = models.IntegerField(
        default=0,
        verbose_name=_('Reserved'),
    )
    low_stock_threshold = models.IntegerField(
        default=10,
        verbose_name=_('Low stock threshold'),
    )
    min_stock_level = models.IntegerField(
        default=10,
        verbose_name=_('Minimum stock level'),
    )
    max_stock_level = models.IntegerField(
        null=True,
        blank=True,
        verbose_name=_('Maximum stock level'),
    )
    cost_per_unit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Cost per unit'),
        help_text=_('Cost of the latest restock (or weighted average).'),
    )
    last_restock_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Last restock'),
    )
    location = models.CharField(
        max_length=100,
        blank=True,
        default='',
        verbose_name=_('Location'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Created by'),
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Updated by'),
    )

    objects = InventoryPositionQuerySet.as_manager()

    class Meta:
        verbose_name = _('Inventory')
        verbose_name_plural = _('Inventory')
        constraints = [
            models.UniqueConstraint(
                fields=['content_type', 'object_id', 'branch'],
                name='unique_inventory_per_product_branch',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name='inventory_quantity_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['content_type', 'object_id'], name='restockman_inv_product_idx'),
            models.Index(fields=['branch'], name='restockman_inv_branch_idx'),
        ]

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def available_quantity(self) -> int:
        """On hand minus reserved."""
        return self.quantity - self.reserved_quantity

    @property
    def is_low_stock(self) -> bool:
        return self.available_quantity <= self.low_stock_threshold

    # ══════════════════════════════════════════════════════════════
    # METHODS
    # ══════════════════════════════════════════════════════════════

    def batch_total(self) -> int:
        """Sum of active batch quantities, the value quantity should hold."""
        return self.batches.filter(is_active=True).aggregate(
            t=Coalesce(Sum('quantity'), 0)
        )['t']

    def __str__(self) -> str:
        return f"{self.product} [{self.branch.code}]: {self.quantity}"
