"""
Restock coordinator — the only writer of batches, movements and restock records.

One restock runs these steps in order, each gated on the previous one:

    1. validate          field rules, product availability, batch number
    2. resolve_position  find or create the (product, branch) position
    3. check_batch_number  re-check uniqueness right before the insert
    4. create_batch      insert the Batch row
    5. update_position   lock the position, add quantity, set cost
    6. record_movement   append the RESTOCK movement
    7. record_history    append the RestockRecord

With RESTOCKMAN["ATOMIC_RESTOCK"] (default) steps 2-7 share one database
transaction and a failure leaves nothing behind. Without it every step
commits on its own and a failure is reported with the ids of the rows
already written, for manual reconciliation. Nothing is ever deleted to
compensate.

rolled_back only describes the transaction opened here. When the caller
already holds one (ATOMIC_REQUESTS, an outer transaction.atomic()), the
step savepoints are released into it, and the caller's own rollback
still discards the rows listed in partially_created.
"""

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from time import monotonic
from typing import Any

from django.contrib.contenttypes.models import ContentType
from django.db import DatabaseError, IntegrityError, models, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restockman.adapters import get_product_validator
from restockman.conf import restockman_settings
from restockman.exceptions import (
    ConflictError,
    NotFoundError,
    RestockError,
    StorageError,
    ValidationError,
)
from restockman.expiry import business_today
from restockman.models.batch import Batch
from restockman.models.branch import Branch
from restockman.models.enums import BatchStatus, MovementType
from restockman.models.inventory import InventoryPosition
from restockman.models.movement import Movement
from restockman.models.restock_record import RestockRecord
from restockman.services.positions import PositionResolver
from restockman.validation import check_batch_number_available, clean_restock

logger = logging.getLogger('restockman')

CENTS = Decimal('0.01')


class RestockStep(models.TextChoices):
    """Restock steps, in execution order."""
    VALIDATE = 'validate', _('Validate input')
    RESOLVE_POSITION = 'resolve_position', _('Resolve inventory record')
    CHECK_BATCH_NUMBER = 'check_batch_number', _('Check batch number')
    CREATE_BATCH = 'create_batch', _('Create batch')
    UPDATE_POSITION = 'update_position', _('Update inventory quantity')
    RECORD_MOVEMENT = 'record_movement', _('Record movement')
    RECORD_HISTORY = 'record_history', _('Record restock history')


class CostMethod(models.TextChoices):
    LATEST = 'latest', _('Latest restock cost')
    WEIGHTED_AVERAGE = 'weighted_average', _('Weighted average')


@dataclass(frozen=True, kw_only=True)
class RestockRequest:
    """
    Input for one restock.

    Either product (+ branch, or the default branch) or an existing
    inventory position must be given. Numbers and dates may arrive as
    strings; validation parses them.
    """

    product: Any = None
    branch: Branch | None = None
    inventory: Any = None  # InventoryPosition or its pk
    quantity: Any = None
    cost_per_unit: Any = None
    expiration_date: Any = None
    received_date: Any = None
    supplier_name: str = ''
    supplier_contact: str = ''
    supplier_email: str = ''
    batch_number: str = ''
    purchase_order_ref: str = ''
    notes: str = ''


@dataclass(frozen=True)
class RestockResult:
    """Outcome of a successful restock."""

    batch: Batch
    position: InventoryPosition
    movement: Movement
    restock_record: RestockRecord
    previous_quantity: int
    position_created: bool = False

    @property
    def batch_id(self) -> int:
        return self.batch.pk

    @property
    def quantity_added(self) -> int:
        return self.batch.quantity

    @property
    def total_cost(self) -> Decimal:
        return self.batch.quantity * self.batch.cost_per_unit

    def as_dict(self) -> dict[str, Any]:
        return {
            'batch_id': self.batch.pk,
            'inventory_id': self.position.pk,
            'previous_quantity': self.previous_quantity,
            'new_quantity': self.position.quantity,
            'quantity_added': self.quantity_added,
            'cost_per_unit': str(self.position.cost_per_unit),
            'total_cost': str(self.total_cost),
            'position_created': self.position_created,
        }


@dataclass
class RestockProgress:
    """Rows written so far by one restock run."""

    position_id: int | None = None
    position_created: bool = False
    batch_id: int | None = None
    movement_id: int | None = None
    restock_record_id: int | None = None
    completed: list[str] = field(default_factory=list)

    def created_rows(self) -> dict[str, Any]:
        rows: dict[str, Any] = {}
        if self.position_id is not None:
            rows['position_id'] = self.position_id
            rows['position_created'] = self.position_created
        for key in ('batch_id', 'movement_id', 'restock_record_id'):
            value = getattr(self, key)
            if value is not None:
                rows[key] = value
        return rows


class _Deadline:
    """Whole-restock time budget, checked between steps."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self.started = monotonic()

    def check(self, step: str) -> None:
        if not self.seconds:
            return
        elapsed = monotonic() - self.started
        if elapsed > self.seconds:
            raise StorageError(
                'DEADLINE_EXCEEDED',
                elapsed=round(elapsed, 3),
                deadline=self.seconds,
                step=step,
            )


class RestockCoordinator:
    """Restock operation."""

    @classmethod
    def restock(cls, request: RestockRequest, user=None,
                today: date | None = None) -> RestockResult:
        """
        Receive a new batch into inventory.

        Args:
            request: RestockRequest
            user: Acting admin (attributed on every written row)
            today: Business date (None = today in BUSINESS_TIMEZONE)

        Returns:
            RestockResult with the new batch and the updated position

        Raises:
            ValidationError: bad input (no writes)
            NotFoundError: product unavailable or inventory record missing
            ConflictError: batch number taken or position creation race
            StorageError: a database call failed or the deadline passed

            Every error carries .step and .partially_created.
        """
        today = today or business_today()
        atomic = restockman_settings.ATOMIC_RESTOCK
        deadline = _Deadline(restockman_settings.RESTOCK_DEADLINE_SECONDS)
        progress = RestockProgress()

        def run(step, fn):
            try:
                deadline.check(step)
                with transaction.atomic():
                    value = fn()
            except RestockError as e:
                cls._fail(e, step, progress, request, rolled_back=atomic)
            except IntegrityError as e:
                if step == RestockStep.CREATE_BATCH:
                    error = ConflictError('BATCH_NUMBER_TAKEN', batch_number=cleaned.batch_number)
                else:
                    error = StorageError('STORAGE_FAILURE', error=str(e))
                cls._fail(error, step, progress, request, rolled_back=atomic, cause=e)
            except DatabaseError as e:
                error = StorageError('STORAGE_FAILURE', error=str(e))
                cls._fail(error, step, progress, request, rolled_back=atomic, cause=e)
            progress.completed.append(step)
            return value

        # Step 1: nothing written yet, so never rolled back
        try:
            cleaned = clean_restock(request, today)
            product, branch, inventory = cls._resolve_target(cleaned)
            check_batch_number_available(cleaned.batch_number)
        except RestockError as e:
            cls._fail(e, RestockStep.VALIDATE, progress, request, rolled_back=False)
        progress.completed.append(RestockStep.VALIDATE)

        logger.info(
            "restock.started",
            extra={
                "product": str(product),
                "branch": branch.code,
                "qty": cleaned.quantity,
                "batch_number": cleaned.batch_number,
                "atomic": atomic,
            },
        )

        with transaction.atomic() if atomic else nullcontext():
            # Step 2
            def resolve_position():
                if inventory is not None:
                    return inventory, False
                return PositionResolver.get_or_create_position(product, branch, user=user)

            position, created = run(RestockStep.RESOLVE_POSITION, resolve_position)
            progress.position_id = position.pk
            progress.position_created = created

            # Step 3
            run(RestockStep.CHECK_BATCH_NUMBER,
                lambda: check_batch_number_available(cleaned.batch_number))

            # Step 4
            batch = run(RestockStep.CREATE_BATCH, lambda: Batch.objects.create(
                inventory=position,
                batch_number=cleaned.batch_number,
                quantity=cleaned.quantity,
                received_date=cleaned.received_date,
                expiration_date=cleaned.expiration_date,
                cost_per_unit=cleaned.cost_per_unit,
                supplier_name=cleaned.supplier_name,
                supplier_contact=cleaned.supplier_contact,
                supplier_email=cleaned.supplier_email,
                purchase_order_ref=cleaned.purchase_order_ref,
                status=BatchStatus.ACTIVE,
                is_active=True,
                created_by=user,
            ))
            progress.batch_id = batch.pk

            # Step 5
            before, after = run(
                RestockStep.UPDATE_POSITION,
                lambda: cls._add_quantity(position, cleaned, user),
            )

            # Step 6
            movement = run(RestockStep.RECORD_MOVEMENT, lambda: Movement.objects.create(
                inventory=position,
                movement_type=MovementType.RESTOCK,
                quantity_change=cleaned.quantity,
                quantity_before=before,
                quantity_after=after,
                batch=batch,
                notes=cleaned.notes or f"Restock from {cleaned.supplier_name}",
                user=user,
            ))
            progress.movement_id = movement.pk

            # Step 7
            record = run(RestockStep.RECORD_HISTORY, lambda: RestockRecord.objects.create(
                inventory=position,
                batch=batch,
                quantity=cleaned.quantity,
                cost_per_unit=cleaned.cost_per_unit,
                supplier_name=cleaned.supplier_name,
                supplier_contact=cleaned.supplier_contact,
                supplier_email=cleaned.supplier_email,
                purchase_order_ref=cleaned.purchase_order_ref,
                received_date=cleaned.received_date,
                notes=cleaned.notes,
                user=user,
            ))
            progress.restock_record_id = record.pk

        position.refresh_from_db()
        result = RestockResult(
            batch=batch,
            position=position,
            movement=movement,
            restock_record=record,
            previous_quantity=before,
            position_created=created,
        )
        logger.info(
            "restock.completed",
            extra={
                "inventory_id": position.pk,
                "batch_id": batch.pk,
                "qty": cleaned.quantity,
                "quantity_before": before,
                "quantity_after": after,
                "total_cost": str(result.total_cost),
            },
        )
        return result

    @classmethod
    def receive(cls, quantity, product, branch: Branch | None = None, *,
                user=None, today: date | None = None, **fields) -> RestockResult:
        """
        Shortcut for restock() with keyword fields.

        Usage:
            ledger.receive(20, product, branch, cost_per_unit='15.00',
                           expiration_date='2024-06-10', received_date='2024-01-10',
                           supplier_name='ABC Trading', batch_number='B-2024-001')
        """
        request = RestockRequest(quantity=quantity, product=product, branch=branch, **fields)
        return cls.restock(request, user=user, today=today)

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _resolve_target(cls, cleaned: RestockRequest):
        """Work out (product, branch, existing position) and check the product."""
        inventory = cleaned.inventory
        product = cleaned.product
        branch = cleaned.branch

        if inventory is not None:
            inventory_id = inventory.pk if isinstance(inventory, InventoryPosition) else inventory
            try:
                inventory = InventoryPosition.objects.select_related('branch').filter(
                    pk=inventory_id
                ).first()
            except (TypeError, ValueError):
                inventory = None
            if inventory is None:
                raise NotFoundError('INVENTORY_NOT_FOUND', inventory_id=inventory_id)

            if product is not None and (
                inventory.object_id != product.pk
                or inventory.content_type_id != ContentType.objects.get_for_model(product).pk
            ):
                raise ValidationError('inventory', 'INVENTORY_MISMATCH', inventory_id=inventory.pk)
            if branch is not None and inventory.branch_id != branch.pk:
                raise ValidationError('inventory', 'INVENTORY_MISMATCH', inventory_id=inventory.pk)

            product = inventory.product
            branch = inventory.branch
        elif branch is None:
            branch = Branch.get_default()
            if branch is None:
                raise ValidationError('branch', 'REQUIRED')

        validation = get_product_validator().validate_product(product)
        if not validation.valid:
            raise NotFoundError(
                'PRODUCT_UNAVAILABLE',
                validation.message,
                reason=validation.error_code,
            )

        return product, branch, inventory

    @classmethod
    def _add_quantity(cls, position: InventoryPosition, cleaned: RestockRequest,
                      user) -> tuple[int, int]:
        """
        Increase on-hand quantity under a row lock.

        The batch from step 4 is already active, so a weighted average
        over active batches includes it.
        """
        locked = InventoryPosition.objects.select_for_update().get(pk=position.pk)
        before = locked.quantity
        after = before + cleaned.quantity

        InventoryPosition.objects.filter(pk=locked.pk).update(
            quantity=F('quantity') + cleaned.quantity,
            cost_per_unit=cls._new_cost(locked, cleaned),
            last_restock_date=cleaned.received_date,
            updated_at=timezone.now(),
            updated_by=user,
        )
        return before, after

    @classmethod
    def _new_cost(cls, position: InventoryPosition, cleaned: RestockRequest) -> Decimal:
        if restockman_settings.COST_METHOD != CostMethod.WEIGHTED_AVERAGE:
            return cleaned.cost_per_unit

        active = position.batches.filter(is_active=True).values_list('quantity', 'cost_per_unit')
        units = sum(quantity for quantity, _ in active)
        if not units:
            return cleaned.cost_per_unit
        value = sum((quantity * cost for quantity, cost in active), Decimal('0'))
        return (value / units).quantize(CENTS, rounding=ROUND_HALF_UP)

    @classmethod
    def _fail(cls, error: RestockError, step: str, progress: RestockProgress,
              request: RestockRequest, rolled_back: bool, cause: Exception | None = None):
        """Annotate, log and raise a step failure."""
        rows = progress.created_rows()
        error.annotate(step, rows, rolled_back=rolled_back and bool(rows))

        # Rows left behind need an operator
        log = logger.error if rows and not error.rolled_back else logger.warning
        log(
            "restock.step_failed",
            extra={
                "step": str(step),
                "code": error.code,
                "kind": error.kind,
                "batch_number": str(request.batch_number or ''),
                "partially_created": rows,
                "rolled_back": error.rolled_back,
                "completed": list(progress.completed),
            },
        )
        if cause is not None:
            raise error from cause
        raise error
