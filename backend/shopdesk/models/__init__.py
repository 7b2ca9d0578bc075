from .storage import KeyValueEntry, InvoiceSequence
from .entities import Product, Customer, Invoice, InvoiceItem, INVOICE_STATUSES

__all__ = [
    'KeyValueEntry', 'InvoiceSequence',
    'Product', 'Customer', 'Invoice', 'InvoiceItem', 'INVOICE_STATUSES',
]
