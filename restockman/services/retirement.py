"""
Batch retirement — remove an expired batch from stock.

Transition: ACTIVE → REMOVED, allowed only once the batch has expired.
Decrements the position, deactivates the batch and appends a RETIRE
movement inside one transaction.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from restockman.conf import restockman_settings
from restockman.exceptions import (
    AuthorizationError,
    NotFoundError,
    PreconditionError,
    StorageError,
    ValidationError,
)
from restockman.expiry import business_today
from restockman.models.batch import Batch
from restockman.models.enums import BatchStatus, MovementType
from restockman.models.inventory import InventoryPosition
from restockman.models.movement import Movement

logger = logging.getLogger('restockman')


@dataclass(frozen=True)
class RetirementResult:
    """Outcome of a successful retirement."""

    batch: Batch
    position: InventoryPosition
    movement: Movement


class BatchRetirement:
    """Batch retirement operation."""

    @classmethod
    def retire(cls, batch, user, reason: str,
               today: date | None = None) -> RetirementResult:
        """
        Retire an expired batch.

        Args:
            batch: Batch or its pk
            user: Acting admin; needs RESTOCKMAN["RETIRE_PERMISSION"]
            reason: Recorded as the movement notes
            today: Business date (None = today in BUSINESS_TIMEZONE)

        Raises:
            AuthorizationError: no user, or user lacks the permission
            ValidationError('REQUIRED'): empty reason
            NotFoundError('BATCH_NOT_FOUND')
            PreconditionError('BATCH_NOT_ACTIVE'): already removed
            PreconditionError('BATCH_NOT_EXPIRED'): fresh or expiring
            PreconditionError('INSUFFICIENT_QUANTITY'): position holds
                less than the batch (run reconcile first)
            StorageError: database failure, nothing was changed

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on the batch, then the position
        """
        cls._authorize(user)

        reason = (reason or '').strip()
        if not reason:
            raise ValidationError('reason', 'REQUIRED')

        today = today or business_today()
        batch_id = batch.pk if isinstance(batch, Batch) else batch

        try:
            with transaction.atomic():
                try:
                    locked = Batch.objects.select_for_update().get(pk=batch_id)
                except (Batch.DoesNotExist, TypeError, ValueError):
                    raise NotFoundError('BATCH_NOT_FOUND', batch_id=batch_id)

                if not locked.is_active:
                    raise PreconditionError(
                        'BATCH_NOT_ACTIVE',
                        batch_id=locked.pk,
                        status=locked.status,
                    )

                if not locked.is_expired(today):
                    allowed_from = locked.expiration_date + timedelta(days=1)
                    raise PreconditionError(
                        'BATCH_NOT_EXPIRED',
                        f"Batch {locked.batch_number} expires on "
                        f"{locked.expiration_date.isoformat()} and cannot be retired "
                        f"before {allowed_from.isoformat()}",
                        batch_id=locked.pk,
                        expiration_date=locked.expiration_date.isoformat(),
                        days_until_expiration=locked.days_until_expiration(today),
                    )

                position = InventoryPosition.objects.select_for_update().get(
                    pk=locked.inventory_id
                )
                before = position.quantity
                if before < locked.quantity:
                    raise PreconditionError(
                        'INSUFFICIENT_QUANTITY',
                        batch_id=locked.pk,
                        on_hand=before,
                        batch_quantity=locked.quantity,
                    )

                now = timezone.now()
                InventoryPosition.objects.filter(pk=position.pk).update(
                    quantity=F('quantity') - locked.quantity,
                    updated_at=now,
                    updated_by=user,
                )

                locked.is_active = False
                locked.status = BatchStatus.REMOVED
                locked.retired_at = now
                locked.save(update_fields=['is_active', 'status', 'retired_at', 'updated_at'])

                movement = Movement.objects.create(
                    inventory=position,
                    movement_type=MovementType.RETIRE,
                    quantity_change=-locked.quantity,
                    quantity_before=before,
                    quantity_after=before - locked.quantity,
                    batch=locked,
                    notes=reason,
                    user=user,
                )
        except DatabaseError as e:
            logger.error(
                "batch.retire_failed",
                extra={"batch_id": batch_id, "error": str(e)},
            )
            raise StorageError('STORAGE_FAILURE', batch_id=batch_id, error=str(e)) from e

        position.refresh_from_db()
        logger.info(
            "batch.retired",
            extra={
                "batch_id": locked.pk,
                "batch_number": locked.batch_number,
                "inventory_id": position.pk,
                "qty": locked.quantity,
                "quantity_after": position.quantity,
                "reason": reason,
            },
        )
        return RetirementResult(batch=locked, position=position, movement=movement)

    @classmethod
    def _authorize(cls, user) -> None:
        if user is None or not getattr(user, 'is_authenticated', False):
            raise AuthorizationError('ACTOR_REQUIRED')

        permission = restockman_settings.RETIRE_PERMISSION
        if permission and not user.has_perm(permission):
            raise AuthorizationError(
                'PERMISSION_DENIED',
                permission=permission,
                user_id=user.pk,
            )
