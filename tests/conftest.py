import os
import sys
from datetime import datetime, timezone

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quote_tool.engine.models import DEFAULT_PRICE_BOOK, LineItem, PriceBook
from quote_tool.services.document_service import DocumentService
from quote_tool.services.numbering import DocumentNumberer
from quote_tool.services.price_book_service import PriceBookService


FIXED_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


def make_item(**overrides) -> LineItem:
    """A plain sqft item; override any field."""
    fields = dict(id="it1", type="Banner", label="Test", unit_type="sqft",
                  width_ft=1, height_ft=1, qty=1)
    fields.update(overrides)
    return LineItem(**fields)


@pytest.fixture
def price_book():
    return DEFAULT_PRICE_BOOK


@pytest.fixture
def simple_book():
    """Round numbers for hand-checkable figures."""
    return PriceBook(
        sqft={"Panel": 10.0},
        unit={"Sign": 5.0, "Hundred": 100.0, "Ten": 10.0},
        options={"lamination_per_sqft": 4.0, "grommet_each": 0.5},
        install={"hourly_rate": 25.0, "crew_min_hours": 2.0},
        document={"tax_rate": 0.1, "discount_mode": "amount"},
    )


@pytest.fixture
def numberer(tmp_path):
    return DocumentNumberer(tmp_path / "counters.json", clock=lambda: FIXED_NOW)


@pytest.fixture
def price_book_service(tmp_path):
    return PriceBookService(tmp_path / "price_book.json")


@pytest.fixture
def document_service(tmp_path, numberer, price_book_service):
    return DocumentService(
        tmp_path / "documents.json",
        numberer,
        price_book_service.load,
        clock=lambda: FIXED_NOW,
    )
