"""
Data models for the quote/invoice pricing engine.

Uses frozen dataclasses so price books and documents behave as immutable
snapshots: every edit produces a new value via ``dataclasses.replace``.
``from_dict``/``to_dict`` translate to and from the persisted JSON shape
(camelCase field names) so saved documents keep interoperating.
"""
import math
from dataclasses import dataclass, field, replace
from typing import Any, Optional


UNIT_TYPES = ("sqft", "unit")
DISCOUNT_MODES = ("amount", "percent")
KINDS = ("Quote", "Invoice")
STATUSES = (
    "Draft",
    "Quoted",
    "Approved",
    "Scheduled",
    "Installed",
    "Invoiced",
    "Paid",
)


class InvalidDocumentError(ValueError):
    """Raised when a consumed value is not a usable document."""


def as_number(value: Any) -> float:
    """Coerce a loosely-typed numeric field to float; anything unusable is 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def as_count(value: Any) -> float:
    """Counts stay whole numbers unless the stored value is fractional."""
    number = as_number(value)
    return int(number) if number.is_integer() else number


def _rates(raw: Any) -> dict[str, float]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): as_number(v) for k, v in raw.items()}


@dataclass(frozen=True)
class PriceBook:
    """Snapshot of unit prices and surcharge rates."""
    sqft: dict[str, float] = field(default_factory=dict)
    unit: dict[str, float] = field(default_factory=dict)
    options: dict[str, float] = field(default_factory=dict)
    install: dict[str, float] = field(default_factory=dict)
    document: dict[str, Any] = field(default_factory=dict)

    def sqft_rate(self, item_type: str) -> float:
        return as_number(self.sqft.get(item_type, 0))

    def unit_price(self, item_type: str) -> float:
        return as_number(self.unit.get(item_type, 0))

    def option(self, name: str) -> float:
        return as_number(self.options.get(name, 0))

    @property
    def hourly_rate(self) -> float:
        return as_number(self.install.get("hourly_rate", 0))

    @property
    def crew_min_hours(self) -> float:
        return as_number(self.install.get("crew_min_hours", 0))

    @property
    def tax_rate(self) -> float:
        return as_number(self.document.get("tax_rate", 0))

    @property
    def discount_mode(self) -> str:
        mode = self.document.get("discount_mode", "amount")
        return mode if mode in DISCOUNT_MODES else "amount"

    def item_types(self, unit_type: str) -> list[str]:
        """Item type names available for a pricing rule."""
        if unit_type == "sqft":
            return list(self.sqft)
        if unit_type == "unit":
            return list(self.unit)
        return []

    def to_dict(self) -> dict:
        return {
            "sqft": dict(self.sqft),
            "unit": dict(self.unit),
            "options": dict(self.options),
            "install": dict(self.install),
            "document": dict(self.document),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PriceBook":
        """Build a price book, falling back to the defaults for missing sections."""
        data = data if isinstance(data, dict) else {}
        defaults = DEFAULT_PRICE_BOOK
        document = dict(defaults.document)
        if isinstance(data.get("document"), dict):
            raw_doc = data["document"]
            if "tax_rate" in raw_doc:
                document["tax_rate"] = as_number(raw_doc["tax_rate"])
            if raw_doc.get("discount_mode") in DISCOUNT_MODES:
                document["discount_mode"] = raw_doc["discount_mode"]
        return cls(
            sqft=_rates(data["sqft"]) if "sqft" in data else dict(defaults.sqft),
            unit=_rates(data["unit"]) if "unit" in data else dict(defaults.unit),
            options={**defaults.options, **_rates(data.get("options"))},
            install={**defaults.install, **_rates(data.get("install"))},
            document=document,
        )


DEFAULT_PRICE_BOOK = PriceBook(
    sqft={
        "Banner": 8.0,
        "PVC_6mm": 20.0,
        "PVC_9mm": 24.0,
        "PVC_12mm": 30.0,
        "PVC_15mm": 36.0,
        "Dibond_4mm": 28.0,
    },
    unit={
        "AFrame_White": 225.0,
        "AFrame_Black": 225.0,
        "StandUpBanner": 180.0,
    },
    options={"lamination_per_sqft": 4.0, "grommet_each": 0.5},
    install={"hourly_rate": 75.0, "crew_min_hours": 2.0},
    document={"tax_rate": 0.05, "discount_mode": "amount"},
)


@dataclass(frozen=True)
class LineItem:
    """One priced row on a document."""
    id: str
    type: str
    label: str = ""
    unit_type: str = "sqft"
    width_ft: float = 0.0
    height_ft: float = 0.0
    qty: float = 1
    double_sided: bool = False
    lamination: bool = False
    grommets: float = 0
    unit_price: Optional[float] = None  # None means "auto from book"

    @property
    def area(self) -> float:
        """Raw area as displayed; the pricing rule clamps it separately."""
        return as_number(self.width_ft) * as_number(self.height_ft)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "width_ft": self.width_ft,
            "height_ft": self.height_ft,
            "qty": self.qty,
            "doubleSided": self.double_sided,
            "lamination": self.lamination,
            "grommets": self.grommets,
            "unitPrice": self.unit_price,
            "unitType": self.unit_type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        unit_price = data.get("unitPrice")
        return cls(
            id=str(data.get("id") or ""),
            type=str(data.get("type") or ""),
            label=str(data.get("label") or ""),
            unit_type=str(data.get("unitType") or ""),
            width_ft=as_number(data.get("width_ft")),
            height_ft=as_number(data.get("height_ft")),
            qty=as_count(data.get("qty")),
            double_sided=bool(data.get("doubleSided", False)),
            lamination=bool(data.get("lamination", False)),
            grommets=as_count(data.get("grommets")),
            unit_price=None if unit_price is None else as_number(unit_price),
        )


@dataclass(frozen=True)
class Customer:
    name: str = ""
    email: str = ""
    phone: str = ""
    billing_address: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "billingAddress": self.billing_address,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Customer":
        data = data if isinstance(data, dict) else {}
        return cls(
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            phone=str(data.get("phone") or ""),
            billing_address=str(data.get("billingAddress") or ""),
        )


@dataclass(frozen=True)
class Job:
    """Installation sub-record of a document."""
    site_address: str = ""
    install_date: str = ""
    crew: tuple[str, ...] = ()
    hours: float = 0.0
    hourly_rate: float = 0.0
    tax_install: bool = False

    def to_dict(self) -> dict:
        return {
            "siteAddress": self.site_address,
            "installDate": self.install_date,
            "crew": list(self.crew),
            "hours": self.hours,
            "hourlyRate": self.hourly_rate,
            "taxInstall": self.tax_install,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Job":
        data = data if isinstance(data, dict) else {}
        crew = data.get("crew") or []
        return cls(
            site_address=str(data.get("siteAddress") or ""),
            install_date=str(data.get("installDate") or ""),
            crew=tuple(str(c) for c in crew) if isinstance(crew, (list, tuple)) else (),
            hours=as_number(data.get("hours")),
            hourly_rate=as_number(data.get("hourlyRate")),
            tax_install=bool(data.get("taxInstall", False)),
        )


@dataclass(frozen=True)
class Document:
    """A quote or an invoice; both share one shape, told apart by ``kind``."""
    id: str
    kind: str = "Quote"
    number: str = ""
    status: str = "Draft"
    created_at: str = ""
    updated_at: str = ""
    customer: Customer = field(default_factory=Customer)
    job: Job = field(default_factory=Job)
    terms: str = ""
    notes: str = ""
    tax_rate: float = 0.0
    discount: float = 0.0
    discount_mode: str = "amount"
    items: tuple[LineItem, ...] = ()

    def with_items(self, items) -> "Document":
        return replace(self, items=tuple(items))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "number": self.number,
            "status": self.status,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "customer": self.customer.to_dict(),
            "job": self.job.to_dict(),
            "terms": self.terms,
            "notes": self.notes,
            "taxRate": self.tax_rate,
            "discount": self.discount,
            "discountMode": self.discount_mode,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Document":
        """
        Build a document from its persisted JSON shape.

        Lenient about every field except identity: a value without an ``id``
        is rejected.
        """
        if not isinstance(data, dict) or not data.get("id"):
            raise InvalidDocumentError("Not a valid document")
        items = data.get("items") or []
        if not isinstance(items, (list, tuple)):
            items = ()
        return cls(
            id=str(data["id"]),
            kind=str(data.get("kind") or "Quote"),
            number=str(data.get("number") or ""),
            status=str(data.get("status") or "Draft"),
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
            customer=Customer.from_dict(data.get("customer")),
            job=Job.from_dict(data.get("job")),
            terms=str(data.get("terms") or ""),
            notes=str(data.get("notes") or ""),
            tax_rate=as_number(data.get("taxRate")),
            discount=as_number(data.get("discount")),
            discount_mode=str(data.get("discountMode") or "amount"),
            items=tuple(
                LineItem.from_dict(it) for it in items if isinstance(it, dict)
            ),
        )


@dataclass(frozen=True)
class Totals:
    """Computed figures for a document. Never stored on the document."""
    items_subtotal: float
    install_total: float
    discount: float
    tax: float
    total: float

    def to_dict(self) -> dict:
        return {
            "itemsSubtotal": self.items_subtotal,
            "installTotal": self.install_total,
            "discount": self.discount,
            "tax": self.tax,
            "total": self.total,
        }


@dataclass
class TraceStep:
    """A single step in a pricing trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class LineResult:
    """Priced line with the steps that produced its subtotal."""
    item_id: str
    label: str
    subtotal: float
    trace: list[TraceStep] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class Result:
    """Complete result of pricing one document."""
    document_id: str
    number: str
    totals: Totals
    lines: list[LineResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable result trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)
