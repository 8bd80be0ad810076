"""
Batch ledger — read-only FIFO views over active batches.

Nothing here writes. Expiration status and priority are derived on
every call from a single "today", so a list is never computed against
two different dates.
"""

import re
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date
from typing import Any

from restockman.conf import restockman_settings
from restockman.exceptions import NotFoundError
from restockman.expiry import business_today, days_until, status_for_days
from restockman.models.batch import Batch
from restockman.models.enums import ExpirationStatus
from restockman.models.inventory import InventoryPosition


@dataclass(frozen=True)
class LedgerEntry:
    """An active batch annotated for FIFO consumption."""

    batch: Batch
    days_until_expiration: int
    expiration_status: ExpirationStatus
    priority_order: int  # 1 = next to expire = consumed first

    @property
    def is_expired(self) -> bool:
        return self.expiration_status == ExpirationStatus.EXPIRED

    def as_dict(self) -> dict[str, Any]:
        batch = self.batch
        return {
            'id': batch.pk,
            'inventory_id': batch.inventory_id,
            'batch_number': batch.batch_number,
            'quantity': batch.quantity,
            'received_date': batch.received_date.isoformat(),
            'expiration_date': batch.expiration_date.isoformat(),
            'cost_per_unit': str(batch.cost_per_unit),
            'supplier_name': batch.supplier_name,
            'supplier_info': {
                'contact': batch.supplier_contact,
                'email': batch.supplier_email,
                'purchase_order_ref': batch.purchase_order_ref,
            },
            'status': batch.status,
            'is_active': batch.is_active,
            'days_until_expiration': self.days_until_expiration,
            'expiration_status': str(self.expiration_status),
            'priority_order': self.priority_order,
        }


def _annotate(batches: Iterable[Batch], today: date) -> Iterator[LedgerEntry]:
    """
    Rank FIFO-ordered batches within their inventory position.

    Expects every active batch of each position, ordered by
    (inventory, expiration_date, created_at, pk).
    """
    window = restockman_settings.EXPIRING_WINDOW_DAYS
    ranks: dict[int, int] = defaultdict(int)
    for batch in batches:
        ranks[batch.inventory_id] += 1
        days = days_until(batch.expiration_date, today)
        yield LedgerEntry(
            batch=batch,
            days_until_expiration=days,
            expiration_status=status_for_days(days, window),
            priority_order=ranks[batch.inventory_id],
        )


class BatchLedger:
    """Read-only batch query methods."""

    @classmethod
    def iter_batches(cls, position, today: date | None = None) -> Iterator[LedgerEntry]:
        """
        Active batches of one position, FIFO-ordered and annotated.

        Lazy: the query runs on first iteration. Call again for a fresh
        view; nothing is cached between calls.

        Args:
            position: InventoryPosition or its pk
            today: Business date (None = today in BUSINESS_TIMEZONE)

        Raises:
            NotFoundError('INVENTORY_NOT_FOUND'): unknown position pk
        """
        position_id = cls._position_id(position)
        today = today or business_today()
        queryset = Batch.objects.active().for_inventory(position_id).fifo()
        yield from _annotate(queryset.iterator(), today)

    @classmethod
    def batches(cls, position, today: date | None = None) -> list[LedgerEntry]:
        """List active batches of one position (see iter_batches)."""
        return list(cls.iter_batches(position, today))

    @classmethod
    def expiring(cls, within_days: int | None = None, branch=None,
                 today: date | None = None) -> list[LedgerEntry]:
        """
        Active batches expiring from today to today + within_days, across positions.

        priority_order is still the rank within each batch's own position.
        """
        today = today or business_today()
        if within_days is None:
            within_days = restockman_settings.EXPIRING_WINDOW_DAYS
        hits = Batch.objects.active().expiring(today, within_days)
        return cls._across_positions(hits, branch, today)

    @classmethod
    def expired(cls, branch=None, today: date | None = None) -> list[LedgerEntry]:
        """Active batches already past expiration, across positions."""
        today = today or business_today()
        hits = Batch.objects.active().expired(today)
        return cls._across_positions(hits, branch, today)

    @classmethod
    def suggest_batch_number(cls, code: str, today: date | None = None) -> str:
        """
        Next free batch number for a product code: "<CODE>-<YEAR>-<NNN>".

        Only a suggestion; uniqueness is still enforced at restock time.
        """
        today = today or business_today()
        prefix = f"{(code or 'BATCH').strip().upper()}-{today.year}-"
        pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

        taken = Batch.objects.filter(
            batch_number__startswith=prefix
        ).values_list('batch_number', flat=True)

        highest = 0
        for number in taken:
            match = pattern.match(number)
            if match:
                highest = max(highest, int(match.group(1)))
        return f"{prefix}{highest + 1:03d}"

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _position_id(cls, position) -> int:
        if isinstance(position, InventoryPosition):
            return position.pk
        try:
            exists = InventoryPosition.objects.filter(pk=position).exists()
        except (TypeError, ValueError):
            exists = False
        if not exists:
            raise NotFoundError('INVENTORY_NOT_FOUND', inventory_id=position)
        return position

    @classmethod
    def _across_positions(cls, hits, branch, today: date) -> list[LedgerEntry]:
        if branch is not None:
            hits = hits.filter(inventory__branch=branch)
        hit_ids = set(hits.values_list('pk', flat=True))
        if not hit_ids:
            return []

        siblings = Batch.objects.active().filter(
            inventory__in=hits.values('inventory')
        ).select_related('inventory').order_by(
            'inventory', 'expiration_date', 'created_at', 'pk'
        )
        entries = [
            entry for entry in _annotate(siblings, today)
            if entry.batch.pk in hit_ids
        ]
        entries.sort(key=lambda e: (e.batch.expiration_date, e.batch.created_at, e.batch.pk))
        return entries
