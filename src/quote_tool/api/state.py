"""
Shared service instances for the API.

Built once per application by ``create_app`` and reached from route
handlers through the ``get_state`` dependency.
"""
from dataclasses import dataclass

from fastapi import Request

from ..config.settings import Settings
from ..engine import PricingEngine
from ..services.document_service import DocumentService
from ..services.numbering import DocumentNumberer
from ..services.price_book_service import PriceBookService


@dataclass
class AppState:
    settings: Settings
    price_books: PriceBookService
    numberer: DocumentNumberer
    documents: DocumentService

    @classmethod
    def build(cls, settings: Settings) -> 'AppState':
        price_books = PriceBookService(settings.price_book_file)
        numberer = DocumentNumberer(settings.counters_file)
        documents = DocumentService(settings.documents_file, numberer, price_books.load)
        return cls(
            settings=settings,
            price_books=price_books,
            numberer=numberer,
            documents=documents,
        )

    def engine(self) -> PricingEngine:
        """Engine bound to the price book currently on disk."""
        return PricingEngine(self.price_books.load())


def get_state(request: Request) -> AppState:
    return request.app.state.services
