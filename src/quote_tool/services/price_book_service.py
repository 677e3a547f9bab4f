"""
Price Book Service - load, save and edit the shop's price book.

Every edit returns (and persists) a new ``PriceBook`` snapshot; existing
snapshots held by callers are never modified.
"""
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..engine.models import DEFAULT_PRICE_BOOK, DISCOUNT_MODES, PriceBook, as_number


logger = logging.getLogger(__name__)


def _rate(value) -> float:
    """Parse an edited rate: unusable input is 0, negatives clamp to 0."""
    return max(0.0, as_number(value))


class PriceBookService:
    """Service for managing the price book file."""

    def __init__(self, price_book_path: Path):
        self.price_book_path = Path(price_book_path)

    def load(self) -> PriceBook:
        """Read the price book; the defaults apply until one is saved."""
        if not self.price_book_path.exists():
            return DEFAULT_PRICE_BOOK
        with open(self.price_book_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return PriceBook.from_dict(data)

    def save(self, book: PriceBook) -> PriceBook:
        self.price_book_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.price_book_path, 'w', encoding='utf-8') as f:
            json.dump(book.to_dict(), f, indent=2)
        logger.info("Price book saved to %s", self.price_book_path)
        return book

    def replace_all(self, data: dict) -> PriceBook:
        """Save a whole edited price book, clamping every rate to >= 0."""
        book = PriceBook.from_dict(data)
        mode = (data.get("document") or {}).get("discount_mode")
        if mode is not None and mode not in DISCOUNT_MODES:
            raise ValueError(f"Discount mode must be one of {', '.join(DISCOUNT_MODES)}")
        return self.save(replace(
            book,
            sqft={k: _rate(v) for k, v in book.sqft.items()},
            unit={k: _rate(v) for k, v in book.unit.items()},
            options={k: _rate(v) for k, v in book.options.items()},
            install={k: _rate(v) for k, v in book.install.items()},
            document={**book.document, "tax_rate": _rate(book.tax_rate)},
        ))

    def reset(self) -> PriceBook:
        """Restore the default price book."""
        return self.save(DEFAULT_PRICE_BOOK)

    def set_sqft_rate(self, item_type: str, rate) -> PriceBook:
        book = self.load()
        return self.save(replace(book, sqft={**book.sqft, item_type: _rate(rate)}))

    def set_unit_price(self, item_type: str, price) -> PriceBook:
        book = self.load()
        return self.save(replace(book, unit={**book.unit, item_type: _rate(price)}))

    def set_option(self, name: str, rate) -> PriceBook:
        if name not in DEFAULT_PRICE_BOOK.options:
            raise ValueError(f"Unknown option '{name}'")
        book = self.load()
        return self.save(replace(book, options={**book.options, name: _rate(rate)}))

    def set_install(self, hourly_rate=None, crew_min_hours=None) -> PriceBook:
        book = self.load()
        install = dict(book.install)
        if hourly_rate is not None:
            install["hourly_rate"] = _rate(hourly_rate)
        if crew_min_hours is not None:
            install["crew_min_hours"] = _rate(crew_min_hours)
        return self.save(replace(book, install=install))

    def set_document_defaults(self, tax_rate=None, discount_mode: Optional[str] = None) -> PriceBook:
        if discount_mode is not None and discount_mode not in DISCOUNT_MODES:
            raise ValueError(f"Discount mode must be one of {', '.join(DISCOUNT_MODES)}")
        book = self.load()
        document = dict(book.document)
        if tax_rate is not None:
            document["tax_rate"] = _rate(tax_rate)
        if discount_mode is not None:
            document["discount_mode"] = discount_mode
        return self.save(replace(book, document=document))
