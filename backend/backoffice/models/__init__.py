from .catalog import Category, Product, Supplier, Customer, PaymentMethod
from .sales import Order, OrderItem
from .purchasing import Purchase, PurchaseItem, Payable, PayablePayment
from .inventory import InventoryAdjustment, InventoryAdjustmentItem, StockMovement
from .ledger import Transaction

__all__ = [
    'Category', 'Product', 'Supplier', 'Customer', 'PaymentMethod',
    'Order', 'OrderItem',
    'Purchase', 'PurchaseItem', 'Payable', 'PayablePayment',
    'InventoryAdjustment', 'InventoryAdjustmentItem', 'StockMovement',
    'Transaction',
]
