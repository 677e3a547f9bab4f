"""Display helpers shared by the UI, API and exports."""
import math

from .engine.models import LineItem, as_number


def money(value) -> str:
    """US-dollar display string; unusable values show as $0.00."""
    if value is None:
        return "$0.00"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "$0.00"
    if math.isnan(number):
        return "$0.00"
    if number < 0:
        return f"-${-number:,.2f}"
    return f"${number:,.2f}"


def describe_item(item: LineItem) -> str:
    """Detail column text for a printed line."""
    parts = [item.type]
    if item.unit_type == "sqft":
        parts.append(f"{item.area:.1f} ft²")
        if item.double_sided:
            parts.append("double-sided")
        if item.lamination:
            parts.append("lamination")
        if as_number(item.grommets):
            parts.append(f"{item.grommets} grommets")
    elif item.double_sided:
        parts.append("double-sided")
    return " • ".join(parts)
