"""
Ledger Service — The single public interface for batch inventory.

Usage:
    from restockman import ledger, RestockError, RestockRequest

    result = ledger.restock(RestockRequest(
        product=product, branch=branch, quantity=20, cost_per_unit='15.00',
        expiration_date='2024-06-10', received_date='2024-01-10',
        supplier_name='ABC Trading', batch_number='B-2024-001',
    ), user=admin)

    ledger.batches(result.position)           # FIFO entries, priority 1..N
    ledger.retire(batch, user=admin, reason='Expired')
"""

from restockman.services.alerts import StockAudit
from restockman.services.ledger import BatchLedger
from restockman.services.positions import PositionResolver
from restockman.services.restock import RestockCoordinator
from restockman.services.retirement import BatchRetirement


class Ledger(
    BatchLedger,
    PositionResolver,
    RestockCoordinator,
    BatchRetirement,
    StockAudit,
):
    """
    Single interface for all batch inventory operations.

    Reads (batches, expiring, expired, low_stock) never write.
    Writes (restock, retire, reconcile) go through the services that own
    the audit trail; nothing else creates batches or movements.
    """
