from .clients import Client
from .inventory import Product, Warehouse
from .invoices import Invoice, InvoiceItem
from .treasury import Transaction
from .settings import Settings

__all__ = [
    'Client',
    'Product', 'Warehouse',
    'Invoice', 'InvoiceItem',
    'Transaction',
    'Settings',
]
