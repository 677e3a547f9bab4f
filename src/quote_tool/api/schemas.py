"""
Pydantic request/response models for the API.

Field names follow the persisted document JSON (camelCase where the saved
files use it) so clients can post saved documents as they are.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field


class LineItemIn(BaseModel):
    id: str = ""
    type: str = ""
    label: str = ""
    width_ft: float = 0
    height_ft: float = 0
    qty: float = 1
    doubleSided: bool = False
    lamination: bool = False
    grommets: float = 0
    unitPrice: Optional[float] = None
    unitType: str = "sqft"


class CustomerIn(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    billingAddress: str = ""


class JobIn(BaseModel):
    siteAddress: str = ""
    installDate: str = ""
    crew: list[str] = Field(default_factory=list)
    hours: float = 0
    hourlyRate: float = 0
    taxInstall: bool = False


class DocumentIn(BaseModel):
    """A document as posted by a client; ``id`` is required by the store."""
    id: Optional[str] = None
    kind: Literal["Quote", "Invoice"] = "Quote"
    number: str = ""
    status: str = "Draft"
    createdAt: str = ""
    updatedAt: str = ""
    customer: CustomerIn = Field(default_factory=CustomerIn)
    job: JobIn = Field(default_factory=JobIn)
    terms: str = ""
    notes: str = ""
    taxRate: float = 0
    discount: float = 0
    discountMode: Literal["amount", "percent"] = "amount"
    items: list[LineItemIn] = Field(default_factory=list)


class TotalsOut(BaseModel):
    itemsSubtotal: float
    installTotal: float
    discount: float
    tax: float
    total: float


class ItemSubtotalOut(BaseModel):
    id: str
    subtotal: float


class StatusUpdate(BaseModel):
    status: str


class ImportRequest(BaseModel):
    """Raw text of an exported document file."""
    content: str


class PriceBookIn(BaseModel):
    sqft: dict[str, float] = Field(default_factory=dict)
    unit: dict[str, float] = Field(default_factory=dict)
    options: dict[str, float] = Field(default_factory=dict)
    install: dict[str, float] = Field(default_factory=dict)
    document: dict[str, float | str] = Field(default_factory=dict)


class PipelineRow(BaseModel):
    status: str
    count: int
    value: float
    pct: int
