"""
Branch model — Where inventory is held.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Branch(models.Model):
    """
    A store or warehouse that holds inventory.

    Branches are stable entities, created during system setup.
    Each (product, branch) pair owns at most one InventoryPosition.

    Examples:
        Branch.objects.create(code='main', name='Main Warehouse', is_default=True)
        Branch.objects.create(code='cebu', name='Cebu Branch')
    """

    code = models.SlugField(
        unique=True,
        max_length=50,
        verbose_name=_('Code'),
        help_text=_('Unique identifier (e.g. main, cebu)'),
    )
    name = models.CharField(
        max_length=100,
        verbose_name=_('Name'),
    )
    address = models.CharField(
        max_length=255,
        blank=True,
        default='',
        verbose_name=_('Address'),
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Active'),
    )
    is_default = models.BooleanField(
        default=False,
        verbose_name=_('Default branch'),
        help_text=_('Target branch when a restock does not name one.'),
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_('Metadata'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Branch')
        verbose_name_plural = _('Branches')
        ordering = ['code']

    @classmethod
    def get_default(cls) -> 'Branch | None':
        """Default active branch, if one is configured."""
        return cls.objects.filter(is_default=True, is_active=True).first()

    def __str__(self) -> str:
        return self.name
