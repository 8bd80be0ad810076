"""
RestockRecord model — Immutable procurement history, one per restock.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class RestockRecord(models.Model):
    """
    Procurement audit entry written by every successful restock.

    Snapshots the supplier and purchase-order details as they were at
    receipt, independently of later edits to the batch.
    """

    inventory = models.ForeignKey(
        'restockman.InventoryPosition',
        on_delete=models.PROTECT,
        related_name='restock_records',
        verbose_name=_('Inventory'),
    )
    batch = models.OneToOneField(
        'restockman.Batch',
        on_delete=models.PROTECT,
        related_name='restock_record',
        verbose_name=_('Batch'),
    )

    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))
    cost_per_unit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name=_('Cost per unit'),
    )

    supplier_name = models.CharField(max_length=255, verbose_name=_('Supplier'))
    supplier_contact = models.CharField(max_length=100, blank=True, default='')
    supplier_email = models.EmailField(blank=True, default='')
    purchase_order_ref = models.CharField(
        max_length=100, blank=True, default='', verbose_name=_('Purchase order'),
    )
    received_date = models.DateField(verbose_name=_('Received'))
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Performed by'),
    )

    class Meta:
        verbose_name = _('Restock record')
        verbose_name_plural = _('Restock history')
        ordering = ['timestamp', 'pk']

    @property
    def total_cost(self):
        return self.quantity * self.cost_per_unit

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError("Restock records are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Restock records are immutable.")

    def __str__(self) -> str:
        return f"+{self.quantity} {self.batch_id} from {self.supplier_name}"
