"""
Tests for low stock checks and reconciliation.
"""

import logging

import pytest

from restockman import ledger
from restockman.models import InventoryPosition, Movement, MovementType


pytestmark = pytest.mark.django_db


class TestLowStock:
    """Tests for ledger.low_stock()."""

    def test_at_threshold_is_low(self, restock):
        result = restock(quantity=10)

        assert result.position.is_low_stock
        assert ledger.low_stock() == [result.position]

    def test_above_threshold_is_not_low(self, restock):
        result = restock(quantity=11)

        assert not result.position.is_low_stock
        assert ledger.low_stock() == []

    def test_reserved_counts_against_available(self, restock):
        result = restock(quantity=15)
        InventoryPosition.objects.filter(pk=result.position.pk).update(reserved_quantity=6)

        assert ledger.low_stock() == [result.position]

    def test_filter_by_branch(self, restock, branch, other_branch):
        restock(batch_number='B-MAIN', quantity=5)
        cebu = restock(batch_number='B-CEBU', quantity=5, branch=other_branch)

        assert ledger.low_stock(other_branch) == [cebu.position]

    def test_hits_logged(self, restock, caplog):
        result = restock(quantity=5)

        with caplog.at_level(logging.WARNING, logger='restockman'):
            ledger.low_stock()

        record = next(r for r in caplog.records if r.getMessage() == 'inventory.low_stock')
        assert record.inventory_id == result.position.pk
        assert record.available == 5


class TestReconcile:
    """Tests for ledger.reconcile()."""

    def test_consistent_position(self, restock):
        result = restock()

        report = ledger.reconcile(result.position)

        assert report.is_consistent
        assert report.on_hand == report.batch_total == 20
        assert report.movement is None

    def test_drift_reported_without_fix(self, restock):
        result = restock()
        InventoryPosition.objects.filter(pk=result.position.pk).update(quantity=25)

        report = ledger.reconcile(result.position)

        assert report.drift == -5
        assert not report.is_consistent
        assert report.movement is None
        assert InventoryPosition.objects.get(pk=result.position.pk).quantity == 25

    def test_fix_writes_adjustment(self, restock, admin):
        result = restock()
        InventoryPosition.objects.filter(pk=result.position.pk).update(quantity=25)

        report = ledger.reconcile(result.position, fix=True, user=admin)

        assert report.position.quantity == 20
        movement = report.movement
        assert movement.movement_type == MovementType.ADJUSTMENT
        assert movement.quantity_before == 25
        assert movement.quantity_change == -5
        assert movement.quantity_after == 20
        assert movement.batch is None
        assert movement.user == admin
        assert Movement.objects.filter(movement_type=MovementType.ADJUSTMENT).count() == 1

    def test_fix_is_idempotent(self, restock):
        result = restock()
        InventoryPosition.objects.filter(pk=result.position.pk).update(quantity=0)

        ledger.reconcile(result.position, fix=True)
        report = ledger.reconcile(result.position, fix=True)

        assert report.is_consistent
        assert Movement.objects.filter(movement_type=MovementType.ADJUSTMENT).count() == 1
