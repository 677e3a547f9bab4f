import pytest

from quote_tool.engine import compute_item_subtotal
from quote_tool.engine.models import LineItem
from quote_tool.engine.pricing_engine import MINIMUM_ITEM_CHARGE

from conftest import make_item


@pytest.mark.parametrize("width, height", [(0, 4), (4, 0), (0, 0)])
@pytest.mark.parametrize("qty", [1, 2, 7])
def test_zero_dimension_hits_minimum(simple_book, width, height, qty):
    item = make_item(type="Panel", width_ft=width, height_ft=height, qty=qty)
    assert compute_item_subtotal(item, simple_book) == 25 * qty


def test_negative_width_same_as_zero(simple_book):
    negative = make_item(type="Panel", width_ft=-3, height_ft=4, qty=2, lamination=True)
    zero = make_item(type="Panel", width_ft=0, height_ft=4, qty=2, lamination=True)
    assert compute_item_subtotal(negative, simple_book) == compute_item_subtotal(zero, simple_book)


def test_both_dimensions_negative_clamped_after_multiplying(simple_book):
    """(-2) x (-3) is a positive area; the clamp applies to the product."""
    item = make_item(type="Panel", width_ft=-2, height_ft=-3)
    assert compute_item_subtotal(item, simple_book) == 60.0


def test_double_sided_doubles_lamination(simple_book):
    item = make_item(type="Panel", width_ft=1, height_ft=2, lamination=True, double_sided=True)
    # (2*10 + 2*4) * 2
    assert compute_item_subtotal(item, simple_book) == 56.0


def test_grommets_added_after_doubling(simple_book):
    item = make_item(type="Panel", width_ft=1, height_ft=2, lamination=True,
                     double_sided=True, grommets=10)
    assert compute_item_subtotal(item, simple_book) == 61.0


def test_minimum_applies_before_quantity(simple_book):
    """qty 3 of a $5 cut prices at the minimum three times."""
    item = make_item(type="Panel", width_ft=0.5, height_ft=1, qty=3)
    assert compute_item_subtotal(item, simple_book) == 75.0


def test_grommets_count_toward_minimum(simple_book):
    item = make_item(type="Panel", width_ft=1, height_ft=2, grommets=4)
    # 20 + 2 = 22 -> 25
    assert compute_item_subtotal(item, simple_book) == MINIMUM_ITEM_CHARGE


def test_unit_item_has_no_minimum(simple_book):
    item = make_item(unit_type="unit", type="Sign", qty=1)
    assert compute_item_subtotal(item, simple_book) == 5.0


def test_unit_item_double_sided(simple_book):
    item = make_item(unit_type="unit", type="Sign", qty=3, double_sided=True)
    assert compute_item_subtotal(item, simple_book) == 30.0


def test_unit_item_ignores_dimensions_and_options(simple_book):
    item = make_item(unit_type="unit", type="Sign", width_ft=10, height_ft=10,
                     lamination=True, grommets=20)
    assert compute_item_subtotal(item, simple_book) == 5.0


def test_unknown_unit_type_is_zero(simple_book):
    item = make_item(unit_type="linear_ft", type="Panel", width_ft=3, height_ft=3)
    assert compute_item_subtotal(item, simple_book) == 0.0


def test_missing_price_book_key_prices_at_zero(simple_book):
    sqft = make_item(type="NotInBook", width_ft=5, height_ft=5)
    unit = make_item(unit_type="unit", type="NotInBook", qty=2)
    assert compute_item_subtotal(sqft, simple_book) == 25.0
    assert compute_item_subtotal(unit, simple_book) == 0.0


def test_malformed_numbers_degrade_to_zero(simple_book):
    item = LineItem(id="x", type="Panel", unit_type="sqft",
                    width_ft="wide", height_ft=None, qty="two")
    assert compute_item_subtotal(item, simple_book) == 0.0


def test_item_from_loose_json(simple_book):
    item = LineItem.from_dict({
        "id": "a1", "type": "Panel", "unitType": "sqft",
        "width_ft": "2", "height_ft": 3, "qty": None, "grommets": "",
    })
    assert item.qty == 0
    assert compute_item_subtotal(item, simple_book) == 0.0


def test_pure_and_repeatable(simple_book):
    item = make_item(type="Panel", width_ft=1.3, height_ft=2.7, lamination=True,
                     double_sided=True, grommets=3, qty=4)
    first = compute_item_subtotal(item, simple_book)
    for _ in range(5):
        assert compute_item_subtotal(item, simple_book) == first
