"""
Quote Tool Package

Quotes, invoices and an install pipeline for a sign-printing shop.
Prices line items from an editable price book and rolls them up into
document totals (items → install → discount → tax → total).
"""

__version__ = "1.0.0"
