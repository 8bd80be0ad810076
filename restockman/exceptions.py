"""
Exceptions for Restockman.

All errors are RestockError subclasses with a structured code for
programmatic handling and a taxonomy ``kind`` for callers that only
care about the class of failure.
"""

from decimal import Decimal
from typing import Any

from django.utils.translation import gettext_lazy as _


class RestockError(Exception):
    """
    Structured exception for batch and restock operations.

    Usage:
        try:
            ledger.restock(request, user=admin)
        except RestockError as e:
            if e.kind == 'conflict':
                print("Please choose a different batch number")
            print(e.step, e.partially_created)

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
        step: Restock step that failed (None outside a restock)
        partially_created: Ids of rows written before the failure
        rolled_back: True when those rows were discarded by the transaction
    """

    kind = 'error'

    _default_messages = {
        'UNKNOWN': _('Failed to process restock operation'),
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = str(message or self._default_messages.get(code) or code)
        self.data = data
        self.step: str | None = None
        self.partially_created: dict[str, Any] = {}
        self.rolled_back = False
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def annotate(self, step: str, partially_created: dict[str, Any],
                 rolled_back: bool = False) -> 'RestockError':
        """Attach restock progress to the error (returns self)."""
        self.step = step
        self.partially_created = dict(partially_created)
        self.rolled_back = rolled_back
        return self

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'kind': self.kind,
            'message': self.message,
            'step': self.step,
            'partially_created': self.partially_created,
            'rolled_back': self.rolled_back,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            },
        }


class ValidationError(RestockError):
    """Input fails a validation rule. No writes occurred."""

    kind = 'validation'

    _default_messages = {
        'REQUIRED': _('This field is required'),
        'NOT_A_NUMBER': _('Must be a number'),
        'NOT_A_WHOLE_NUMBER': _('Must be a whole number'),
        'NOT_POSITIVE': _('Must be greater than 0'),
        'NEGATIVE': _('Must be greater than or equal to 0'),
        'TOO_LARGE': _('Value is too large'),
        'TOO_LONG': _('Value is too long'),
        'INVALID_DATE': _('Enter a valid date (YYYY-MM-DD)'),
        'INVALID_EMAIL': _('Enter a valid email address'),
        'DATE_IN_FUTURE': _('Received date cannot be in the future'),
        'DATE_TOO_OLD': _('Received date is too far in the past'),
        'EXPIRES_BEFORE_RECEIVED': _('Expiration date must be after the received date'),
        'EXPIRATION_TOO_FAR': _('Expiration date seems unusually far in the future'),
        'INVENTORY_MISMATCH': _('Inventory record does not match product and branch'),
    }

    def __init__(self, field: str, code: str, message: str | None = None, **data):
        self.field = field
        super().__init__(code, message, field=field, **data)

    def __str__(self) -> str:
        return f"[{self.code}] {self.field}: {self.message}"


class ConflictError(RestockError):
    """Uniqueness constraint or concurrent-creation race. Re-fetch and retry."""

    kind = 'conflict'

    _default_messages = {
        'BATCH_NUMBER_TAKEN': _('A batch with this number already exists. '
                                'Please use a different batch number.'),
        'INVENTORY_CONFLICT': _('Inventory record was modified concurrently. '
                                'Please refresh and try again.'),
    }


class PreconditionError(RestockError):
    """Operation attempted against an object in the wrong state."""

    kind = 'precondition'

    _default_messages = {
        'BATCH_NOT_ACTIVE': _('Batch is not active'),
        'BATCH_NOT_EXPIRED': _('Batch has not expired yet'),
        'INSUFFICIENT_QUANTITY': _('On-hand quantity is lower than the batch quantity'),
    }


class NotFoundError(RestockError):
    """Referenced product, inventory record or batch does not exist."""

    kind = 'not_found'

    _default_messages = {
        'BATCH_NOT_FOUND': _('Batch not found'),
        'INVENTORY_NOT_FOUND': _('Inventory record not found'),
        'PRODUCT_UNAVAILABLE': _('Product not found or unavailable'),
    }


class StorageError(RestockError):
    """Underlying store call failed. Retryable."""

    kind = 'storage'

    _default_messages = {
        'STORAGE_FAILURE': _('The inventory store is unavailable. Please try again.'),
        'DEADLINE_EXCEEDED': _('The restock operation took too long and was stopped'),
    }


class AuthorizationError(RestockError):
    """Acting user is not allowed to perform the operation."""

    kind = 'forbidden'

    _default_messages = {
        'ACTOR_REQUIRED': _('Authentication required. Please log in again.'),
        'PERMISSION_DENIED': _('You do not have permission to perform this operation.'),
    }
