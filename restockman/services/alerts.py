"""
Stock audit — low stock checks and quantity reconciliation.

Usage:
    from restockman import ledger

    for position in ledger.low_stock(branch):
        ...

    report = ledger.reconcile(position, fix=True, user=admin)
"""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from restockman.models.enums import MovementType
from restockman.models.inventory import InventoryPosition
from restockman.models.movement import Movement

logger = logging.getLogger('restockman')


@dataclass(frozen=True)
class ReconcileReport:
    """On-hand quantity compared with the sum of active batches."""

    position: InventoryPosition
    on_hand: int
    batch_total: int
    movement: Movement | None = None

    @property
    def drift(self) -> int:
        return self.batch_total - self.on_hand

    @property
    def is_consistent(self) -> bool:
        return self.drift == 0


class StockAudit:
    """Low stock and reconciliation methods."""

    @classmethod
    def low_stock(cls, branch=None) -> list[InventoryPosition]:
        """
        Positions whose available quantity is at or below their threshold.

        Each hit is logged as "inventory.low_stock".
        """
        qs = InventoryPosition.objects.low_stock().select_related('branch')
        if branch is not None:
            qs = qs.at_branch(branch)

        triggered = list(qs.order_by('branch__code', 'pk'))
        for position in triggered:
            logger.warning(
                "inventory.low_stock",
                extra={
                    "inventory_id": position.pk,
                    "branch": position.branch.code,
                    "available": position.available_quantity,
                    "threshold": position.low_stock_threshold,
                },
            )
        return triggered

    @classmethod
    def reconcile(cls, position: InventoryPosition, fix: bool = False,
                  user=None) -> ReconcileReport:
        """
        Compare on-hand quantity with the sum of active batch quantities.

        Use for:
        - Integrity audit
        - Repair after a restock left partial rows behind
        - Debug

        With fix=True the quantity is set to the batch total through an
        ADJUSTMENT movement.
        """
        with transaction.atomic():
            locked = InventoryPosition.objects.select_for_update().get(pk=position.pk)
            on_hand = locked.quantity
            batch_total = locked.batch_total()

            if on_hand == batch_total:
                return ReconcileReport(position=locked, on_hand=on_hand, batch_total=batch_total)

            logger.warning(
                "inventory.drift",
                extra={
                    "inventory_id": locked.pk,
                    "on_hand": on_hand,
                    "batch_total": batch_total,
                    "diff": batch_total - on_hand,
                    "fix": fix,
                },
            )

            movement = None
            if fix:
                InventoryPosition.objects.filter(pk=locked.pk).update(
                    quantity=batch_total,
                    updated_at=timezone.now(),
                    updated_by=user,
                )
                movement = Movement.objects.create(
                    inventory=locked,
                    movement_type=MovementType.ADJUSTMENT,
                    quantity_change=batch_total - on_hand,
                    quantity_before=on_hand,
                    quantity_after=batch_total,
                    notes=f"Reconcile: {on_hand} → {batch_total}",
                    user=user,
                )
                locked.refresh_from_db()
                logger.info(
                    "inventory.reconciled",
                    extra={"inventory_id": locked.pk, "quantity": batch_total},
                )

        return ReconcileReport(
            position=locked,
            on_hand=on_hand,
            batch_total=batch_total,
            movement=movement,
        )
