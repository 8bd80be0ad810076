"""
Django Restockman — batch ledger and restock engine.

Tracks stock as dated, cost-bearing batches per product and branch,
with FIFO ordering by expiration date and an audited restock flow.

Usage:
    from restockman import ledger, RestockError

    result = ledger.restock(request, user=admin)
    ledger.batches(result.position)    # FIFO-ordered entries
    ledger.retire(batch, user=admin, reason='Expired on shelf')
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'ledger':
        from restockman.service import Ledger
        return Ledger
    elif name == 'RestockError':
        from restockman.exceptions import RestockError
        return RestockError
    elif name == 'RestockRequest':
        from restockman.services.restock import RestockRequest
        return RestockRequest
    elif name == 'Branch':
        from restockman.models.branch import Branch
        return Branch
    elif name == 'InventoryPosition':
        from restockman.models.inventory import InventoryPosition
        return InventoryPosition
    elif name == 'Batch':
        from restockman.models.batch import Batch
        return Batch
    elif name == 'Movement':
        from restockman.models.movement import Movement
        return Movement
    elif name == 'RestockRecord':
        from restockman.models.restock_record import RestockRecord
        return RestockRecord
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'ledger',
    'RestockError',
    'RestockRequest',
    'Branch',
    'InventoryPosition',
    'Batch',
    'Movement',
    'RestockRecord',
]

__version__ = '0.1.0'
