import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from quote_tool import __version__
from quote_tool.config.settings import Settings, get_settings
from quote_tool.engine import Document, LineItem, compute_item_subtotal
from quote_tool.api.documents_api import router as documents_router
from quote_tool.api.schemas import DocumentIn, ItemSubtotalOut, LineItemIn, PriceBookIn, TotalsOut
from quote_tool.api.state import AppState, get_state


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Application factory; pass ``settings`` to point at another data dir."""
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    app = FastAPI(
        title="Quote Tool API",
        description="Quotes, invoices and install pipeline for the sign shop",
        version=__version__,
    )
    app.state.services = AppState.build(settings)

    # Enable CORS for frontend development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(documents_router)

    @app.get("/")
    async def root():
        return {"status": "online", "message": "Quote Tool API Active"}

    @app.post("/pricing/item", response_model=ItemSubtotalOut)
    async def price_item(item: LineItemIn, state: AppState = Depends(get_state)):
        """Subtotal for one line item against the current price book."""
        line = LineItem.from_dict(item.model_dump())
        return {"id": line.id, "subtotal": compute_item_subtotal(line, state.price_books.load())}

    @app.post("/pricing/totals", response_model=TotalsOut)
    async def price_document(document: DocumentIn, state: AppState = Depends(get_state)):
        """Totals for an unsaved document; identity is not required here."""
        data = document.model_dump()
        data["id"] = data.get("id") or "unsaved"
        return state.engine().totals(Document.from_dict(data)).to_dict()

    @app.post("/pricing/trace")
    async def trace_document(document: DocumentIn, state: AppState = Depends(get_state)):
        """Totals plus the step-by-step pricing trace and warnings."""
        data = document.model_dump()
        data["id"] = data.get("id") or "unsaved"
        result = state.engine().calculate(Document.from_dict(data))
        return {
            "totals": result.totals.to_dict(),
            "lines": [
                {"id": line.item_id, "label": line.label, "subtotal": line.subtotal,
                 "trace": line.get_trace_text()}
                for line in result.lines
            ],
            "warnings": result.warnings,
            "trace": result.get_trace_text(),
        }

    @app.get("/price-book")
    async def get_price_book(state: AppState = Depends(get_state)):
        return state.price_books.load().to_dict()

    @app.put("/price-book")
    async def put_price_book(book: PriceBookIn, state: AppState = Depends(get_state)):
        try:
            saved = state.price_books.replace_all(book.model_dump(exclude_unset=True))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return saved.to_dict()

    @app.get("/system/status")
    async def get_status(state: AppState = Depends(get_state)):
        return {
            "engine_active": True,
            "data_dir": str(state.settings.data_dir),
            "documents": len(state.documents.list_documents()),
            "price_book_saved": state.settings.price_book_file.exists(),
        }

    return app


app = create_app()
