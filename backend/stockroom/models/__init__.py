from .auth import User
from .inventory import Product, Warehouse, Transfer
from .documents import Receipt, ReceiptLine, DeliveryOrder

__all__ = [
    'User',
    'Product', 'Warehouse', 'Transfer',
    'Receipt', 'ReceiptLine', 'DeliveryOrder',
]
