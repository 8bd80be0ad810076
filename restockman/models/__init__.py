"""
Restockman Models.

Core models for batch inventory:
- Branch: Where stock is held
- InventoryPosition: On-hand quantity per product and branch
- Batch: Dated, cost-bearing lot (FIFO by expiration)
- Movement: Immutable ledger of quantity changes
- RestockRecord: Immutable procurement history
"""

from restockman.models.batch import Batch
from restockman.models.branch import Branch
from restockman.models.enums import BatchStatus, ExpirationStatus, MovementType
from restockman.models.inventory import InventoryPosition
from restockman.models.movement import Movement
from restockman.models.restock_record import RestockRecord

__all__ = [
    'BatchStatus',
    'ExpirationStatus',
    'MovementType',
    'Branch',
    'InventoryPosition',
    'Batch',
    'Movement',
    'RestockRecord',
]
