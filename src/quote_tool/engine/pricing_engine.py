"""
Pricing Engine - item subtotals and document totals for quotes/invoices.

The two pure functions, ``compute_item_subtotal`` and ``compute_totals``,
are the whole pricing contract: given the same item/document and price book
they return the same figures, and they never raise. Missing price-book keys
and malformed numbers price at zero.

``PricingEngine`` wraps them for callers that also want a step-by-step
trace and warnings (API, UI breakdowns).
"""
from typing import Optional

from .models import (
    DEFAULT_PRICE_BOOK,
    Document,
    LineItem,
    LineResult,
    PriceBook,
    Result,
    Totals,
    as_number,
)


MINIMUM_ITEM_CHARGE = 25.0


def compute_item_subtotal(item: LineItem, price_book: PriceBook) -> float:
    """
    Price one line item.

    sqft items: area price, plus lamination, doubled when double sided,
    plus grommets, floored at the minimum charge, times quantity.
    unit items: flat price, doubled when double sided, times quantity.
    Any other unit type prices at 0.
    """
    qty = as_number(item.qty)

    if item.unit_type == "sqft":
        area = max(0.0, as_number(item.width_ft) * as_number(item.height_ft))
        base = area * price_book.sqft_rate(item.type)
        if item.lamination:
            base += area * price_book.option("lamination_per_sqft")
        # doubling happens after lamination and before grommets
        if item.double_sided:
            base *= 2
        grommets = as_number(item.grommets)
        if grommets > 0:
            base += grommets * price_book.option("grommet_each")
        base = max(base, MINIMUM_ITEM_CHARGE)
        return base * qty

    if item.unit_type == "unit":
        single = price_book.unit_price(item.type)
        if item.double_sided:
            single *= 2
        return single * qty

    return 0.0


def compute_totals(document: Document, price_book: PriceBook) -> Totals:
    """
    Aggregate a document's figures.

    Order is fixed: items, install, discount, taxable base, tax, total.
    A percent discount is taken on items + install; the discount is removed
    before tax; install is taxed only when the job says so; total is summed
    from the raw components and floored at zero.
    """
    items_subtotal = sum(
        (compute_item_subtotal(item, price_book) for item in document.items), 0.0
    )
    install_total = as_number(document.job.hours) * as_number(document.job.hourly_rate)

    if document.discount_mode == "percent":
        discount = (items_subtotal + install_total) * (as_number(document.discount) / 100)
    else:
        discount = as_number(document.discount)

    taxable_base = (
        items_subtotal
        + (install_total if document.job.tax_install else 0.0)
        - discount
    )
    tax = max(0.0, taxable_base) * as_number(document.tax_rate)
    total = max(0.0, items_subtotal + install_total - discount + tax)

    return Totals(
        items_subtotal=items_subtotal,
        install_total=install_total,
        discount=discount,
        tax=tax,
        total=total,
    )


class PricingEngine:
    """
    Prices documents against one price book snapshot with traceability.

    The engine holds nothing but the price book; swap it with
    ``with_price_book`` to price against an edited book.
    """

    def __init__(self, price_book: Optional[PriceBook] = None):
        self.price_book = price_book or DEFAULT_PRICE_BOOK

    def with_price_book(self, price_book: PriceBook) -> "PricingEngine":
        return PricingEngine(price_book)

    def item_subtotal(self, item: LineItem) -> float:
        return compute_item_subtotal(item, self.price_book)

    def totals(self, document: Document) -> Totals:
        return compute_totals(document, self.price_book)

    def calculate(self, document: Document) -> Result:
        """
        Price a document and record how every figure was reached.

        Figures come from the pure functions; the trace only describes them.
        """
        totals = compute_totals(document, self.price_book)
        result = Result(document_id=document.id, number=document.number, totals=totals)

        for item in document.items:
            line = self._calculate_line(item)
            result.lines.append(line)
            for warning in line.warnings:
                result.add_warning(warning)

        job = document.job
        result.add_trace("Items", f"{len(result.lines)} line(s)", f"${totals.items_subtotal:.2f}")
        result.add_trace(
            "Install",
            f"{as_number(job.hours):g} h × ${as_number(job.hourly_rate):.2f}",
            f"${totals.install_total:.2f}",
        )
        if document.discount_mode == "percent":
            result.add_trace(
                "Discount",
                f"{as_number(document.discount):g}% of items + install",
                f"${totals.discount:.2f}",
            )
        else:
            result.add_trace("Discount", "Fixed amount", f"${totals.discount:.2f}")
        result.add_trace(
            "Tax",
            f"{as_number(document.tax_rate) * 100:g}% "
            + ("(install taxed)" if job.tax_install else "(install not taxed)"),
            f"${totals.tax:.2f}",
        )
        result.add_trace("Total", "Items + install - discount + tax", f"${totals.total:.2f}")
        return result

    def _calculate_line(self, item: LineItem) -> LineResult:
        """Build the trace for one line; the subtotal comes from the pure rule."""
        book = self.price_book
        line = LineResult(
            item_id=item.id,
            label=item.label or item.type,
            subtotal=compute_item_subtotal(item, book),
        )

        if item.unit_type == "sqft":
            if item.type not in book.sqft:
                line.warnings.append(f"Unknown sqft type '{item.type}' priced at $0.00/ft²")
            area = max(0.0, as_number(item.width_ft) * as_number(item.height_ft))
            base = area * book.sqft_rate(item.type)
            line.add_trace("Area", f"{as_number(item.width_ft):g} × {as_number(item.height_ft):g} ft", f"{area:g} ft²")
            line.add_trace("Material", f"{item.type} @ ${book.sqft_rate(item.type):.2f}/ft²", f"${base:.2f}")
            if item.lamination:
                base += area * book.option("lamination_per_sqft")
                line.add_trace("Lamination", f"${book.option('lamination_per_sqft'):.2f}/ft²", f"${base:.2f}")
            if item.double_sided:
                base *= 2
                line.add_trace("Double sided", "Base × 2", f"${base:.2f}")
            if as_number(item.grommets) > 0:
                base += as_number(item.grommets) * book.option("grommet_each")
                line.add_trace("Grommets", f"{item.grommets} × ${book.option('grommet_each'):.2f}", f"${base:.2f}")
            if base < MINIMUM_ITEM_CHARGE:
                line.add_trace("Minimum", f"Raised to ${MINIMUM_ITEM_CHARGE:.2f} minimum", f"${MINIMUM_ITEM_CHARGE:.2f}")
        elif item.unit_type == "unit":
            if item.type not in book.unit:
                line.warnings.append(f"Unknown unit type '{item.type}' priced at $0.00")
            single = book.unit_price(item.type)
            line.add_trace("Unit price", item.type, f"${single:.2f}")
            if item.double_sided:
                line.add_trace("Double sided", "Unit price × 2", f"${single * 2:.2f}")
        else:
            line.warnings.append(f"Unknown pricing rule '{item.unit_type}' for item {item.id}; priced at $0.00")
            return line

        line.add_trace("Extension", f"Quantity {as_number(item.qty):g}", f"${line.subtotal:.2f}")
        return line
