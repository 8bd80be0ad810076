"""
Tests for restock input validation.

These rules run before any write, so most tests need no database.
"""

from datetime import date
from decimal import Decimal

import pytest

from restockman.exceptions import ConflictError, ValidationError
from restockman.services.restock import RestockRequest
from restockman.validation import (
    check_batch_number_available,
    clean_cost_per_unit,
    clean_expiration_date,
    clean_quantity,
    clean_received_date,
    clean_restock,
    clean_supplier_email,
    to_date,
)


TODAY = date(2024, 1, 15)


def valid_request(**overrides):
    fields = {
        'product': object(),
        'quantity': '20',
        'cost_per_unit': '15.00',
        'expiration_date': '2024-06-10',
        'received_date': '2024-01-10',
        'supplier_name': '  ABC Trading ',
        'batch_number': 'B-2024-001',
    }
    fields.update(overrides)
    return RestockRequest(**fields)


def assert_rejected(exc_info, field, code):
    assert exc_info.value.field == field
    assert exc_info.value.code == code
    assert exc_info.value.kind == 'validation'


class TestQuantity:
    """Tests for clean_quantity()."""

    def test_parses_string(self):
        assert clean_quantity('20') == 20

    def test_whole_decimal_accepted(self):
        assert clean_quantity(Decimal('5.0')) == 5

    @pytest.mark.parametrize('value, code', [
        (None, 'REQUIRED'),
        ('', 'REQUIRED'),
        ('abc', 'NOT_A_NUMBER'),
        ('NaN', 'NOT_A_NUMBER'),
        (True, 'NOT_A_NUMBER'),
        (0, 'NOT_POSITIVE'),
        (-5, 'NOT_POSITIVE'),
        ('2.5', 'NOT_A_WHOLE_NUMBER'),
        (1_000_001, 'TOO_LARGE'),
    ])
    def test_rejected(self, value, code):
        with pytest.raises(ValidationError) as exc:
            clean_quantity(value)

        assert_rejected(exc, 'quantity', code)

    def test_maximum_accepted(self):
        assert clean_quantity(1_000_000) == 1_000_000


class TestCostPerUnit:
    """Tests for clean_cost_per_unit()."""

    def test_zero_allowed(self):
        """Free samples are received at zero cost."""
        assert clean_cost_per_unit(0) == Decimal('0.00')

    def test_rounded_to_cents(self):
        assert clean_cost_per_unit('15.005') == Decimal('15.01')

    @pytest.mark.parametrize('value, code', [
        (None, 'REQUIRED'),
        ('ten', 'NOT_A_NUMBER'),
        ('-0.01', 'NEGATIVE'),
        ('1000000.01', 'TOO_LARGE'),
    ])
    def test_rejected(self, value, code):
        with pytest.raises(ValidationError) as exc:
            clean_cost_per_unit(value)

        assert_rejected(exc, 'cost_per_unit', code)


class TestDates:
    """Tests for received and expiration date rules."""

    def test_to_date_accepts_iso_string(self):
        assert to_date('received_date', '2024-01-10') == date(2024, 1, 10)

    @pytest.mark.parametrize('value', ['2024-13-01', '10/01/2024', 'yesterday'])
    def test_to_date_rejects_garbage(self, value):
        with pytest.raises(ValidationError) as exc:
            to_date('received_date', value)

        assert_rejected(exc, 'received_date', 'INVALID_DATE')

    def test_expiration_equal_to_received_rejected(self):
        with pytest.raises(ValidationError) as exc:
            clean_expiration_date('2024-01-10', '2024-01-10')

        assert_rejected(exc, 'expiration_date', 'EXPIRES_BEFORE_RECEIVED')

    def test_expiration_before_received_rejected(self):
        with pytest.raises(ValidationError) as exc:
            clean_expiration_date(date(2024, 1, 9), date(2024, 1, 10))

        assert_rejected(exc, 'expiration_date', 'EXPIRES_BEFORE_RECEIVED')

    def test_expiration_one_day_after_received_accepted(self):
        assert clean_expiration_date('2024-01-11', '2024-01-10') == date(2024, 1, 11)

    def test_expiration_beyond_shelf_life_rejected(self):
        with pytest.raises(ValidationError) as exc:
            clean_expiration_date('2030-01-01', '2024-01-10')

        assert_rejected(exc, 'expiration_date', 'EXPIRATION_TOO_FAR')

    def test_received_in_future_rejected(self):
        with pytest.raises(ValidationError) as exc:
            clean_received_date('2024-01-16', TODAY)

        assert_rejected(exc, 'received_date', 'DATE_IN_FUTURE')

    def test_received_today_accepted(self):
        assert clean_received_date(TODAY, TODAY) == TODAY

    def test_received_too_old_rejected(self):
        with pytest.raises(ValidationError) as exc:
            clean_received_date('2022-12-31', TODAY)

        assert_rejected(exc, 'received_date', 'DATE_TOO_OLD')


class TestSupplierEmail:

    def test_blank_allowed(self):
        assert clean_supplier_email('') == ''
        assert clean_supplier_email(None) == ''

    def test_valid_email_trimmed(self):
        assert clean_supplier_email(' sales@abc.ph ') == 'sales@abc.ph'

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError) as exc:
            clean_supplier_email('not-an-email')

        assert_rejected(exc, 'supplier_email', 'INVALID_EMAIL')


class TestCleanRestock:
    """Tests for clean_restock()."""

    def test_returns_cleaned_copy(self):
        cleaned = clean_restock(valid_request(), TODAY)

        assert cleaned.quantity == 20
        assert cleaned.cost_per_unit == Decimal('15.00')
        assert cleaned.expiration_date == date(2024, 6, 10)
        assert cleaned.received_date == date(2024, 1, 10)
        assert cleaned.supplier_name == 'ABC Trading'

    def test_product_required(self):
        with pytest.raises(ValidationError) as exc:
            clean_restock(valid_request(product=None), TODAY)

        assert_rejected(exc, 'product', 'REQUIRED')

    def test_inventory_stands_in_for_product(self):
        cleaned = clean_restock(valid_request(product=None, inventory=1), TODAY)

        assert cleaned.inventory == 1

    def test_blank_supplier_rejected(self):
        with pytest.raises(ValidationError) as exc:
            clean_restock(valid_request(supplier_name='   '), TODAY)

        assert_rejected(exc, 'supplier_name', 'REQUIRED')

    def test_supplier_name_too_long(self):
        with pytest.raises(ValidationError) as exc:
            clean_restock(valid_request(supplier_name='x' * 256), TODAY)

        assert_rejected(exc, 'supplier_name', 'TOO_LONG')

    def test_blank_batch_number_rejected(self):
        with pytest.raises(ValidationError) as exc:
            clean_restock(valid_request(batch_number=''), TODAY)

        assert_rejected(exc, 'batch_number', 'REQUIRED')

    def test_batch_number_too_long(self):
        with pytest.raises(ValidationError) as exc:
            clean_restock(valid_request(batch_number='B' * 101), TODAY)

        assert_rejected(exc, 'batch_number', 'TOO_LONG')

    def test_first_failing_rule_wins(self):
        """Quantity is checked before cost."""
        with pytest.raises(ValidationError) as exc:
            clean_restock(valid_request(quantity=0, cost_per_unit=-1), TODAY)

        assert exc.value.field == 'quantity'

    def test_error_serializes(self):
        with pytest.raises(ValidationError) as exc:
            clean_restock(valid_request(quantity='-3'), TODAY)

        data = exc.value.as_dict()
        assert data['code'] == 'NOT_POSITIVE'
        assert data['kind'] == 'validation'
        assert data['data']['field'] == 'quantity'
        assert data['data']['value'] == '-3'


@pytest.mark.django_db
class TestBatchNumberAvailable:

    def test_free_number_passes(self):
        check_batch_number_available('B-FREE')

    def test_taken_number_conflicts(self, restock):
        restock(batch_number='B-TAKEN')

        with pytest.raises(ConflictError) as exc:
            check_batch_number_available('B-TAKEN')

        assert exc.value.code == 'BATCH_NUMBER_TAKEN'
        assert exc.value.kind == 'conflict'
