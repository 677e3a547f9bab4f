"""
Document Service - persistence and editing for quotes and invoices.

Documents are kept newest-first in a JSON file using the persisted
document shape, so files exported from or imported into the tool stay
interchangeable. All edits return new ``Document`` snapshots.
"""
import json
import logging
import secrets
import string
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from ..engine.models import (
    STATUSES,
    Customer,
    Document,
    InvalidDocumentError,
    Job,
    LineItem,
    PriceBook,
)
from .numbering import DocumentNumberer


logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_lowercase + string.digits
DEFAULT_TERMS = "50% deposit to schedule. Balance due upon installation."


class DocumentStoreError(ValueError):
    """Raised for store operations that cannot be carried out."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when no saved document has the requested id."""


def new_id() -> str:
    """Opaque 7-character identity token."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(7))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class DocumentService:
    """Service for managing saved documents."""

    def __init__(
        self,
        documents_path: Path,
        numberer: DocumentNumberer,
        price_book_provider: Callable[[], PriceBook],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.documents_path = Path(documents_path)
        self.numberer = numberer
        self.price_book_provider = price_book_provider
        self.clock = clock or _utc_now

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def _read_raw(self) -> list[dict]:
        if not self.documents_path.exists():
            return []
        with open(self.documents_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data if isinstance(data, list) else []

    def _write_documents(self, documents: list[Document]):
        """Rewrite the store; stored entries without an id are carried over as-is."""
        unidentified = [
            raw for raw in self._read_raw()
            if not (isinstance(raw, dict) and raw.get("id"))
        ]
        if unidentified:
            logger.warning(
                "Keeping %d stored entries without an id in %s",
                len(unidentified), self.documents_path,
            )
        self.documents_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.documents_path, 'w', encoding='utf-8') as f:
            json.dump([d.to_dict() for d in documents] + unidentified, f, indent=2)

    def list_documents(self) -> list[Document]:
        """All saved documents, newest first. Entries without an id are skipped."""
        documents = []
        for raw in self._read_raw():
            try:
                documents.append(Document.from_dict(raw))
            except InvalidDocumentError:
                logger.warning("Skipping stored entry without an id in %s", self.documents_path)
        return documents

    def get(self, document_id: str) -> Document:
        for doc in self.list_documents():
            if doc.id == document_id:
                return doc
        raise DocumentNotFoundError(f"Document '{document_id}' not found")

    def save(self, document: Document) -> Document:
        """Insert or replace by id, stamping ``updatedAt``."""
        entry = replace(document, updated_at=_iso(self.clock()))
        documents = self.list_documents()
        for i, existing in enumerate(documents):
            if existing.id == entry.id:
                documents[i] = entry
                break
        else:
            documents.insert(0, entry)
        self._write_documents(documents)
        logger.info("%s saved: %s", entry.kind, entry.number)
        return entry

    def delete(self, document_id: str) -> bool:
        documents = self.list_documents()
        remaining = [d for d in documents if d.id != document_id]
        if len(remaining) == len(documents):
            raise DocumentNotFoundError(f"Document '{document_id}' not found")
        self._write_documents(remaining)
        return True

    def set_status(self, document_id: str, status: str) -> Document:
        """Move a saved document to any pipeline status."""
        if status not in STATUSES:
            raise ValueError(f"Unknown status '{status}'")
        doc = self.get(document_id)
        return self.save(replace(doc, status=status))

    # ------------------------------------------------------------------
    # Creation and conversion
    # ------------------------------------------------------------------

    def new_quote(self, customer: Optional[Customer] = None, items=()) -> Document:
        """A blank Draft quote using the current price book defaults."""
        book = self.price_book_provider()
        now = self.clock()
        return Document(
            id=new_id(),
            kind="Quote",
            number=self.numberer.next_number("Quote"),
            status="Draft",
            created_at=_iso(now),
            updated_at=_iso(now),
            customer=customer or Customer(),
            job=Job(
                install_date=now.date().isoformat(),
                hours=book.crew_min_hours,
                hourly_rate=book.hourly_rate,
                tax_install=True,
            ),
            terms=DEFAULT_TERMS,
            tax_rate=book.tax_rate,
            discount=0.0,
            discount_mode=book.discount_mode,
            items=tuple(items),
        )

    def demo_quote(self) -> Document:
        """The sample document shown on first launch."""
        doc = self.new_quote(
            customer=Customer(
                name="Top 1 Toys (Demo)",
                email="orders@top1toys.sx",
                phone="+1 721-555-0101",
                billing_address="Sky Building, Welfare Rd, Cole Bay",
            ),
            items=(
                LineItem(
                    id=new_id(),
                    type="PVC_12mm",
                    label="12mm PVC panel 4ft x 3ft",
                    unit_type="sqft",
                    width_ft=4,
                    height_ft=3,
                    qty=2,
                    lamination=True,
                ),
                LineItem(
                    id=new_id(),
                    type="AFrame_White",
                    label="A-Frame sidewalk sign (white)",
                    unit_type="unit",
                    qty=1,
                    double_sided=True,
                ),
            ),
        )
        return replace(
            doc,
            job=replace(
                doc.job,
                site_address="Sky Building Rooftop, Cole Bay",
                crew=("Joel", "Camilo"),
            ),
            notes="Rooftop bracket weld + sign mount per sketch.",
        )

    def convert_to_invoice(self, document: Document) -> Document:
        """Turn a quote into an invoice with a fresh invoice number."""
        number = self.numberer.next_number("Invoice")
        return replace(document, kind="Invoice", number=number, status="Invoiced")

    # ------------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------------

    @staticmethod
    def new_item() -> LineItem:
        return LineItem(
            id=new_id(),
            type="Banner",
            label="Custom banner",
            unit_type="sqft",
            width_ft=4,
            height_ft=2,
            qty=1,
            grommets=10,
        )

    def add_item(self, document: Document, item: Optional[LineItem] = None) -> Document:
        return document.with_items([*document.items, item or self.new_item()])

    @staticmethod
    def remove_item(document: Document, item_id: str) -> Document:
        return document.with_items(it for it in document.items if it.id != item_id)

    @staticmethod
    def update_item(document: Document, item_id: str, **changes) -> Document:
        return document.with_items(
            replace(it, **changes) if it.id == item_id else it for it in document.items
        )

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_json(self, text: str) -> Document:
        """Import one exported document; it is prepended to the saved list."""
        try:
            data = json.loads(text or "{}")
        except json.JSONDecodeError as e:
            raise InvalidDocumentError("Invalid JSON") from e
        doc = Document.from_dict(data)

        documents = self.list_documents()
        documents.insert(0, doc)
        self._write_documents(documents)
        logger.info("Imported %s %s", doc.kind, doc.number or doc.id)
        return doc

    @staticmethod
    def export_document(document: Document) -> str:
        """One document as the JSON file that import_json reads back."""
        return json.dumps(document.to_dict(), indent=2)

    def export_json(self) -> str:
        documents = self.list_documents()
        if not documents:
            raise DocumentStoreError("No saved documents yet")
        return json.dumps([d.to_dict() for d in documents], indent=2)
