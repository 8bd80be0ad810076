"""
Restockman services — modular organization of inventory operations.

    from restockman.services import BatchLedger, PositionResolver, RestockCoordinator
"""

from restockman.services.alerts import StockAudit
from restockman.services.ledger import BatchLedger
from restockman.services.positions import PositionResolver
from restockman.services.restock import RestockCoordinator
from restockman.services.retirement import BatchRetirement

__all__ = [
    'BatchLedger',
    'PositionResolver',
    'RestockCoordinator',
    'BatchRetirement',
    'StockAudit',
]
