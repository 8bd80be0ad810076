"""
Restock validation — pure rule checks run before any write.

Rules run in a fixed order and the first failure raises a field-tagged
ValidationError, so a rejected restock never leaves partial state.

Usage:
    cleaned = clean_restock(request, today=business_today())
    check_batch_number_available(cleaned.batch_number)
"""

import dataclasses
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.utils.dateparse import parse_date

from restockman.conf import restockman_settings
from restockman.exceptions import ConflictError, ValidationError
from restockman.expiry import business_today

CENTS = Decimal('0.01')

SUPPLIER_NAME_MAX_LENGTH = 255
BATCH_NUMBER_MAX_LENGTH = 100
SHORT_TEXT_MAX_LENGTH = 100


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def to_decimal(field: str, value) -> Decimal:
    """Parse a required numeric input."""
    if _is_blank(value):
        raise ValidationError(field, 'REQUIRED')
    if isinstance(value, bool):
        raise ValidationError(field, 'NOT_A_NUMBER', value=value)
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(field, 'NOT_A_NUMBER', value=value)
    if not number.is_finite():
        raise ValidationError(field, 'NOT_A_NUMBER', value=value)
    return number


def to_date(field: str, value) -> date:
    """Parse a required date (date instance or YYYY-MM-DD string)."""
    if _is_blank(value):
        raise ValidationError(field, 'REQUIRED')
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value).strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(field, 'INVALID_DATE', value=value)
    return parsed


def clean_quantity(value) -> int:
    number = to_decimal('quantity', value)
    if number <= 0:
        raise ValidationError('quantity', 'NOT_POSITIVE', value=number)
    if number != number.to_integral_value():
        raise ValidationError('quantity', 'NOT_A_WHOLE_NUMBER', value=number)
    if number > restockman_settings.MAX_QUANTITY:
        raise ValidationError(
            'quantity', 'TOO_LARGE',
            value=number, maximum=restockman_settings.MAX_QUANTITY,
        )
    return int(number)


def clean_cost_per_unit(value) -> Decimal:
    number = to_decimal('cost_per_unit', value)
    if number < 0:
        raise ValidationError('cost_per_unit', 'NEGATIVE', value=number)
    if number > restockman_settings.MAX_COST_PER_UNIT:
        raise ValidationError(
            'cost_per_unit', 'TOO_LARGE',
            value=number, maximum=restockman_settings.MAX_COST_PER_UNIT,
        )
    return number.quantize(CENTS, rounding=ROUND_HALF_UP)


def clean_expiration_date(value, received_value) -> date:
    """
    Expiration must be after the received date and within the shelf-life bound.

    The ordering check is skipped when the received date itself is
    unusable; clean_received_date() reports that next.
    """
    expiration = to_date('expiration_date', value)
    try:
        received = to_date('received_date', received_value)
    except ValidationError:
        return expiration

    if expiration <= received:
        raise ValidationError(
            'expiration_date', 'EXPIRES_BEFORE_RECEIVED',
            expiration_date=expiration, received_date=received,
        )

    latest = received + timedelta(days=restockman_settings.MAX_SHELF_LIFE_DAYS)
    if expiration > latest:
        raise ValidationError(
            'expiration_date', 'EXPIRATION_TOO_FAR',
            expiration_date=expiration, latest=latest,
        )
    return expiration


def clean_received_date(value, today: date | None = None) -> date:
    today = today or business_today()
    received = to_date('received_date', value)

    if received > today:
        raise ValidationError('received_date', 'DATE_IN_FUTURE', received_date=received)

    earliest = today - timedelta(days=restockman_settings.MAX_RECEIVED_AGE_DAYS)
    if received < earliest:
        raise ValidationError(
            'received_date', 'DATE_TOO_OLD',
            received_date=received, earliest=earliest,
        )
    return received


def clean_text(field: str, value, max_length: int, required: bool = True) -> str:
    """Trim a text input and enforce presence and length."""
    text = '' if value is None else str(value).strip()
    if required and not text:
        raise ValidationError(field, 'REQUIRED')
    if len(text) > max_length:
        raise ValidationError(field, 'TOO_LONG', max_length=max_length)
    return text


def clean_supplier_email(value) -> str:
    email = clean_text('supplier_email', value, 254, required=False)
    if email:
        try:
            validate_email(email)
        except DjangoValidationError:
            raise ValidationError('supplier_email', 'INVALID_EMAIL', value=email)
    return email


def clean_restock(request, today: date | None = None):
    """
    Validate a RestockRequest and return a cleaned copy.

    Order: product, quantity, cost_per_unit, expiration_date,
    received_date, supplier_name, batch_number, then the optional
    supplier details.

    Raises:
        ValidationError: first failing rule, tagged with its field
    """
    today = today or business_today()

    if request.product is None and request.inventory is None:
        raise ValidationError('product', 'REQUIRED')

    quantity = clean_quantity(request.quantity)
    cost_per_unit = clean_cost_per_unit(request.cost_per_unit)
    expiration_date = clean_expiration_date(request.expiration_date, request.received_date)
    received_date = clean_received_date(request.received_date, today)
    supplier_name = clean_text('supplier_name', request.supplier_name, SUPPLIER_NAME_MAX_LENGTH)
    batch_number = clean_text('batch_number', request.batch_number, BATCH_NUMBER_MAX_LENGTH)

    return dataclasses.replace(
        request,
        quantity=quantity,
        cost_per_unit=cost_per_unit,
        expiration_date=expiration_date,
        received_date=received_date,
        supplier_name=supplier_name,
        batch_number=batch_number,
        supplier_email=clean_supplier_email(request.supplier_email),
        supplier_contact=clean_text(
            'supplier_contact', request.supplier_contact, SHORT_TEXT_MAX_LENGTH, required=False,
        ),
        purchase_order_ref=clean_text(
            'purchase_order_ref', request.purchase_order_ref, SHORT_TEXT_MAX_LENGTH, required=False,
        ),
        notes='' if request.notes is None else str(request.notes).strip(),
    )


def check_batch_number_available(batch_number: str) -> None:
    """
    Fast-path uniqueness check against the store.

    The unique constraint on Batch.batch_number stays the authority;
    a racing insert still fails there and is mapped to ConflictError.

    Raises:
        ConflictError('BATCH_NUMBER_TAKEN')
    """
    from restockman.models.batch import Batch

    if Batch.objects.filter(batch_number=batch_number).exists():
        raise ConflictError('BATCH_NUMBER_TAKEN', batch_number=batch_number)
