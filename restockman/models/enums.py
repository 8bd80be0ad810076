"""
Enums for Restockman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class BatchStatus(models.TextChoices):
    """
    Batch lifecycle status.

    ACTIVE:  Stock on hand, counted in the position quantity.
    REMOVED: Retired after expiration. Terminal, never reactivated.
    """
    ACTIVE = 'active', _('Active')
    REMOVED = 'removed', _('Removed')


class MovementType(models.TextChoices):
    """Kind of quantity change recorded in the movement ledger."""
    RESTOCK = 'restock', _('Restock')          # New batch received
    RETIRE = 'retire', _('Retire')             # Expired batch removed
    ADJUSTMENT = 'adjustment', _('Adjustment') # Reconciliation correction


class ExpirationStatus(models.TextChoices):
    """Derived freshness of a batch. Never stored."""
    FRESH = 'fresh', _('Fresh')
    EXPIRING = 'expiring', _('Expiring soon')
    EXPIRED = 'expired', _('Expired')
