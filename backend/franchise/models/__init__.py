"""ORM models. Importing this package registers every table on ``Base.metadata``."""
from .base import Base
from .tenant import HeadOffice, Store
from .product import Product
from .order import Order, OrderItem
from .wallet import Wallet, LedgerEntry
from .topup import TopupRequest
from .bank_transaction import BankTransaction
from .audit import AuditLog

__all__ = [
    'Base', 'HeadOffice', 'Store', 'Product', 'Order', 'OrderItem', 'Wallet',
    'LedgerEntry', 'TopupRequest', 'BankTransaction', 'AuditLog',
]
