"""
Tests for the read-only batch ledger.
"""

from datetime import date

import pytest

from restockman import ledger
from restockman.exceptions import NotFoundError
from restockman.models import Batch, ExpirationStatus, InventoryPosition


pytestmark = pytest.mark.django_db


class TestBatches:
    """Tests for ledger.batches()."""

    def test_fifo_order_regardless_of_insertion(self, restock, today):
        """Batches are ordered by expiration, not by when they arrived."""
        later = restock(batch_number='B-MAR', expiration_date=date(2024, 3, 1))
        restock(batch_number='B-FEB', expiration_date=date(2024, 2, 1))

        entries = ledger.batches(later.position, today=today)

        assert [e.batch.batch_number for e in entries] == ['B-FEB', 'B-MAR']
        assert [e.priority_order for e in entries] == [1, 2]

    def test_same_expiration_ties_by_creation(self, restock, today):
        first = restock(batch_number='B-1', expiration_date=date(2024, 4, 1))
        restock(batch_number='B-2', expiration_date=date(2024, 4, 1))
        restock(batch_number='B-3', expiration_date=date(2024, 4, 1))

        entries = ledger.batches(first.position, today=today)

        assert [e.batch.batch_number for e in entries] == ['B-1', 'B-2', 'B-3']
        assert [e.priority_order for e in entries] == [1, 2, 3]

    def test_statuses_derived_from_today(self, restock, today):
        """today = 2024-01-15, window = 7 days."""
        result = restock(batch_number='B-OLD', expiration_date=date(2024, 1, 12))
        restock(batch_number='B-TODAY', expiration_date=date(2024, 1, 15))
        restock(batch_number='B-EDGE', expiration_date=date(2024, 1, 22))
        restock(batch_number='B-FRESH', expiration_date=date(2024, 1, 23))

        entries = {e.batch.batch_number: e for e in ledger.batches(result.position, today=today)}

        assert entries['B-OLD'].days_until_expiration == -3
        assert entries['B-OLD'].expiration_status == ExpirationStatus.EXPIRED
        assert entries['B-OLD'].is_expired
        assert entries['B-TODAY'].days_until_expiration == 0
        assert entries['B-TODAY'].expiration_status == ExpirationStatus.EXPIRING
        assert entries['B-EDGE'].expiration_status == ExpirationStatus.EXPIRING
        assert entries['B-FRESH'].days_until_expiration == 8
        assert entries['B-FRESH'].expiration_status == ExpirationStatus.FRESH

    def test_retired_batches_excluded(self, restock, admin, today):
        expired = restock(batch_number='B-EXP', expiration_date=date(2024, 1, 12))
        restock(batch_number='B-OK', expiration_date=date(2024, 5, 1))

        ledger.retire(expired.batch, user=admin, reason='Expired', today=today)
        entries = ledger.batches(expired.position, today=today)

        assert [e.batch.batch_number for e in entries] == ['B-OK']
        assert entries[0].priority_order == 1

    def test_repeated_reads_identical(self, restock, today):
        result = restock(batch_number='B-A', expiration_date=date(2024, 2, 1))
        restock(batch_number='B-B', expiration_date=date(2024, 3, 1))

        first = [e.as_dict() for e in ledger.batches(result.position, today=today)]
        second = [e.as_dict() for e in ledger.batches(result.position, today=today)]

        assert first == second

    def test_accepts_position_pk(self, restock, today):
        result = restock()

        entries = ledger.batches(result.position.pk, today=today)

        assert len(entries) == 1

    def test_empty_position(self, product, branch, today):
        position = ledger.resolve(product, branch)

        assert ledger.batches(position, today=today) == []

    def test_unknown_position(self, today):
        with pytest.raises(NotFoundError) as exc:
            ledger.batches(999999, today=today)

        assert exc.value.code == 'INVENTORY_NOT_FOUND'
        assert exc.value.kind == 'not_found'

    def test_malformed_position_id(self, today):
        with pytest.raises(NotFoundError) as exc:
            ledger.batches('abc', today=today)

        assert exc.value.code == 'INVENTORY_NOT_FOUND'

    def test_iter_batches_is_lazy(self, restock, today, django_assert_num_queries):
        result = restock()

        with django_assert_num_queries(0):
            entries = ledger.iter_batches(result.position, today=today)

        assert next(entries).batch.pk == result.batch.pk

    def test_other_positions_not_mixed(self, restock, other_product, today):
        mine = restock(batch_number='B-MINE')
        restock(batch_number='B-OTHER', product=other_product)

        entries = ledger.batches(mine.position, today=today)

        assert [e.batch.batch_number for e in entries] == ['B-MINE']


class TestLedgerEntry:

    def test_as_dict(self, restock, today):
        result = restock(
            supplier_email='sales@abc.ph',
            supplier_contact='0917 555 0101',
            purchase_order_ref='PO-77',
        )

        data = ledger.batches(result.position, today=today)[0].as_dict()

        assert data['batch_number'] == 'B-2024-001'
        assert data['quantity'] == 20
        assert data['cost_per_unit'] == '15.00'
        assert data['expiration_date'] == '2024-06-10'
        assert data['supplier_info'] == {
            'contact': '0917 555 0101',
            'email': 'sales@abc.ph',
            'purchase_order_ref': 'PO-77',
        }
        assert data['expiration_status'] == 'fresh'
        assert data['priority_order'] == 1


class TestExpiringAndExpired:
    """Tests for cross-position expiry queries."""

    def test_expiring_window(self, restock, other_product, today):
        restock(batch_number='B-SOON', expiration_date=date(2024, 1, 20))
        restock(batch_number='B-LATER', expiration_date=date(2024, 2, 20))
        restock(batch_number='B-OTHER-SOON', product=other_product,
                expiration_date=date(2024, 1, 16))
        restock(batch_number='B-GONE', expiration_date=date(2024, 1, 12))

        entries = ledger.expiring(today=today)

        assert [e.batch.batch_number for e in entries] == ['B-OTHER-SOON', 'B-SOON']

    def test_expiring_custom_window(self, restock, today):
        restock(batch_number='B-LATER', expiration_date=date(2024, 2, 20))

        assert ledger.expiring(within_days=7, today=today) == []
        assert len(ledger.expiring(within_days=60, today=today)) == 1

    def test_priority_within_own_position(self, restock, today):
        restock(batch_number='B-GONE', expiration_date=date(2024, 1, 12))
        restock(batch_number='B-SOON', expiration_date=date(2024, 1, 20))

        entries = ledger.expiring(today=today)

        assert entries[0].batch.batch_number == 'B-SOON'
        assert entries[0].priority_order == 2

    def test_expired(self, restock, today):
        restock(batch_number='B-GONE', expiration_date=date(2024, 1, 12))
        restock(batch_number='B-TODAY', expiration_date=date(2024, 1, 15))

        entries = ledger.expired(today=today)

        assert [e.batch.batch_number for e in entries] == ['B-GONE']
        assert entries[0].is_expired

    def test_filter_by_branch(self, restock, other_branch, today):
        restock(batch_number='B-MAIN', expiration_date=date(2024, 1, 12))
        restock(batch_number='B-CEBU', branch=other_branch, expiration_date=date(2024, 1, 12))

        entries = ledger.expired(branch=other_branch, today=today)

        assert [e.batch.batch_number for e in entries] == ['B-CEBU']


class TestSuggestBatchNumber:

    def test_first_number(self, db, today):
        assert ledger.suggest_batch_number('para500', today=today) == 'PARA500-2024-001'

    def test_next_after_highest(self, restock, today):
        restock(batch_number='PARA500-2024-001')
        restock(batch_number='PARA500-2024-007')
        restock(batch_number='PARA500-2023-050')
        restock(batch_number='PARA500-2024-X')

        assert ledger.suggest_batch_number('PARA500', today=today) == 'PARA500-2024-008'

    def test_suggestion_is_free(self, restock, today):
        restock(batch_number='PARA500-2024-001')

        suggestion = ledger.suggest_batch_number('PARA500', today=today)

        assert not Batch.objects.filter(batch_number=suggestion).exists()


class TestPositions:

    def test_resolve_creates_once(self, product, branch):
        first = ledger.resolve(product, branch)
        second = ledger.resolve(product, branch)

        assert first.pk == second.pk
        assert InventoryPosition.objects.count() == 1

    def test_get_position_missing(self, product, branch):
        assert ledger.get_position(product, branch) is None
