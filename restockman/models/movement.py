"""
Movement model — Immutable ledger of quantity changes.
"""

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restockman.models.enums import MovementType


class Movement(models.Model):
    """
    Immutable record of an inventory quantity change.

    Rules:
    - NEVER update() or delete()
    - quantity_after == quantity_before + quantity_change
    - Corrections are new ADJUSTMENT movements
    """

    inventory = models.ForeignKey(
        'restockman.InventoryPosition',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Inventory'),
    )
    movement_type = models.CharField(
        max_length=20,
        choices=MovementType.choices,
        verbose_name=_('Type'),
    )

    quantity_change = models.IntegerField(
        verbose_name=_('Change'),
        help_text=_('Positive = in, negative = out'),
    )
    quantity_before = models.IntegerField(verbose_name=_('Before'))
    quantity_after = models.IntegerField(verbose_name=_('After'))

    # Batch that caused the change (None for adjustments)
    batch = models.ForeignKey(
        'restockman.Batch',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Batch'),
    )

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
        verbose_name = _('Movement')
        verbose_name_plural = _('Movements')
        ordering = ['timestamp', 'pk']
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_after=F('quantity_before') + F('quantity_change')),
                name='movement_quantity_balances',
            ),
        ]
        indexes = [
            models.Index(fields=['inventory', 'timestamp'], name='restockman_move_inv_ts_idx'),
        ]

    def save(self, *args, **kwargs):
        """Save movement. Existing movements cannot be changed."""
        if self.pk:
            raise ValueError(
                "Movements are immutable. "
                "To correct, create a new ADJUSTMENT movement."
            )

        if self.quantity_after != self.quantity_before + self.quantity_change:
            raise ValueError(
                f"Unbalanced movement: {self.quantity_before} + "
                f"{self.quantity_change} != {self.quantity_after}"
            )

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Movements are never deleted."""
        raise ValueError(
            "Movements are immutable. "
            "To reverse, create a new ADJUSTMENT movement."
        )

    def __str__(self) -> str:
        signal = '+' if self.quantity_change > 0 else ''
        return f"{self.movement_type} {signal}{self.quantity_change} | {self.notes}"
