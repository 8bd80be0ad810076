"""
Batch model — one received shipment of a product at a branch.

Each restock creates a new Batch rather than topping up an existing one,
so every unit on hand can be traced back to a supplier, a cost and an
expiration date.

Usage:
    Batch.objects.active().for_inventory(position).fifo()
    Batch.objects.active().expired(today)
"""

from datetime import date, timedelta

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _

from restockman.models.enums import BatchStatus, ExpirationStatus


class BatchQuerySet(models.QuerySet):
    """Custom QuerySet for Batch with convenience filters."""

    def active(self):
        """Batches still counted as stock on hand."""
        return self.filter(is_active=True)

    def for_inventory(self, position):
        return self.filter(inventory=position)

    def fifo(self):
        """Next to expire first; ties by creation order."""
        return self.order_by('expiration_date', 'created_at', 'pk')

    def expired(self, today: date | None = None):
        """Batches past their expiration date."""
        from restockman.expiry import business_today
        today = today or business_today()
        return self.filter(expiration_date__lt=today)

    def expiring(self, today: date | None = None, within_days: int | None = None):
        """Batches expiring between today and today + within_days (inclusive)."""
        from restockman.conf import restockman_settings
        from restockman.expiry import business_today

        today = today or business_today()
        if within_days is None:
            within_days = restockman_settings.EXPIRING_WINDOW_DAYS
        return self.filter(
            expiration_date__gte=today,
            expiration_date__lte=today + timedelta(days=within_days),
        )


class Batch(models.Model):
    """
    Dated, cost-bearing lot of stock attached to an InventoryPosition.

    Lifecycle:
        ACTIVE --(retire, only once expired)--> REMOVED

    Rules:
    - batch_number is unique across the system
    - expiration_date > received_date
    - quantity is never changed after creation
    """

    inventory = models.ForeignKey(
        'restockman.InventoryPosition',
        on_delete=models.PROTECT,
        related_name='batches',
        verbose_name=_('Inventory'),
    )

    batch_number = models.CharField(
        max_length=100,
        unique=True,
        verbose_name=_('Batch number'),
        help_text=_('Unique lot identifier used for traceability.'),
    )
    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))

    # Dates
    received_date = models.DateField(verbose_name=_('Received'))
    expiration_date = models.DateField(
        db_index=True,
        verbose_name=_('Expires'),
        help_text=_('Last day the batch can be sold or used'),
    )

    cost_per_unit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name=_('Cost per unit'),
    )

    # Supplier (fixed schema)
    supplier_name = models.CharField(max_length=255, verbose_name=_('Supplier'))
    supplier_contact = models.CharField(
        max_length=100, blank=True, default='', verbose_name=_('Supplier contact'),
    )
    supplier_email = models.EmailField(
        blank=True, default='', verbose_name=_('Supplier email'),
    )
    purchase_order_ref = models.CharField(
        max_length=100, blank=True, default='', verbose_name=_('Purchase order'),
    )

    status = models.CharField(
        max_length=20,
        choices=BatchStatus.choices,
        default=BatchStatus.ACTIVE,
        verbose_name=_('Status'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))
    retired_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Retired at'))

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created at'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Updated at'))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Created by'),
    )

    objects = BatchQuerySet.as_manager()

    class Meta:
        verbose_name = _('Batch')
        verbose_name_plural = _('Batches')
        ordering = ['expiration_date', 'created_at']
        permissions = [
            ('retire_batch', _('Can retire expired batches')),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(expiration_date__gt=F('received_date')),
                name='batch_expires_after_received',
            ),
        ]
        indexes = [
            models.Index(
                fields=['inventory', 'is_active', 'expiration_date'],
                name='restockman_batch_fifo_idx',
            ),
        ]

    def days_until_expiration(self, today: date | None = None) -> int:
        from restockman.expiry import days_until
        return days_until(self.expiration_date, today)

    def expiration_status(self, today: date | None = None) -> ExpirationStatus:
        from restockman.expiry import expiration_status
        return expiration_status(self.expiration_date, today)

    def is_expired(self, today: date | None = None) -> bool:
        """Is this batch past its expiration date?"""
        return self.expiration_status(today) == ExpirationStatus.EXPIRED

    def __str__(self) -> str:
        return f"Batch {self.batch_number} (exp:{self.expiration_date})"
