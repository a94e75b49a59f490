from .inventory import Item, StockMovement, MOVEMENT_TYPES
from .sales import Sale, SaleLine, PAYMENT_METHODS
from .documents import InvoiceCounter, INVOICE_COUNTER_ID

__all__ = [
    'Item', 'StockMovement', 'MOVEMENT_TYPES',
    'Sale', 'SaleLine', 'PAYMENT_METHODS',
    'InvoiceCounter', 'INVOICE_COUNTER_ID',
]
