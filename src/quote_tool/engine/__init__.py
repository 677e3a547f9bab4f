"""Engine subpackage - core pricing logic and data contracts."""
from .pricing_engine import PricingEngine, compute_item_subtotal, compute_totals
from .models import Document, LineItem, PriceBook, Result, Totals, DEFAULT_PRICE_BOOK

__all__ = [
    'PricingEngine',
    'compute_item_subtotal',
    'compute_totals',
    'Document',
    'LineItem',
    'PriceBook',
    'Result',
    'Totals',
    'DEFAULT_PRICE_BOOK',
]
