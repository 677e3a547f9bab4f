"""
Documents API - FastAPI router for quotes, invoices and the pipeline.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from ..engine.models import Document, InvalidDocumentError
from ..reports.pipeline import pipeline_stats
from ..services.document_service import DocumentNotFoundError, DocumentStoreError
from .schemas import DocumentIn, ImportRequest, PipelineRow, StatusUpdate, TotalsOut
from .state import AppState, get_state

router = APIRouter(tags=["documents"])


def _load(state: AppState, document_id: str) -> Document:
    try:
        return state.documents.get(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# Endpoints

@router.get("/documents")
async def list_documents(state: AppState = Depends(get_state)):
    """List saved documents, newest first."""
    return [doc.to_dict() for doc in state.documents.list_documents()]


@router.post("/documents")
async def create_quote(state: AppState = Depends(get_state)):
    """Create and save a blank quote with the next quote number."""
    doc = state.documents.save(state.documents.new_quote())
    return doc.to_dict()


@router.get("/documents/export", response_class=PlainTextResponse)
async def export_documents(state: AppState = Depends(get_state)):
    """Export every saved document as a JSON array."""
    try:
        return PlainTextResponse(state.documents.export_json(), media_type="application/json")
    except DocumentStoreError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/documents/import")
async def import_document(request: ImportRequest, state: AppState = Depends(get_state)):
    """Import one exported document file."""
    try:
        doc = state.documents.import_json(request.content)
    except InvalidDocumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return doc.to_dict()


@router.get("/documents/{document_id}")
async def get_document(document_id: str, state: AppState = Depends(get_state)):
    return _load(state, document_id).to_dict()


@router.put("/documents/{document_id}")
async def save_document(document_id: str, payload: DocumentIn, state: AppState = Depends(get_state)):
    """Save (insert or replace) a document under ``document_id``."""
    data = payload.model_dump()
    data["id"] = document_id
    doc = state.documents.save(Document.from_dict(data))
    return doc.to_dict()


@router.delete("/documents/{document_id}")
async def delete_document(document_id: str, state: AppState = Depends(get_state)):
    try:
        state.documents.delete(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "message": f"Document '{document_id}' deleted"}


@router.get("/documents/{document_id}/totals", response_model=TotalsOut)
async def document_totals(document_id: str, state: AppState = Depends(get_state)):
    """Totals for a saved document against the current price book."""
    doc = _load(state, document_id)
    return state.engine().totals(doc).to_dict()


@router.post("/documents/{document_id}/status")
async def update_status(document_id: str, update: StatusUpdate, state: AppState = Depends(get_state)):
    try:
        doc = state.documents.set_status(document_id, update.status)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return doc.to_dict()


@router.post("/documents/{document_id}/convert")
async def convert_to_invoice(document_id: str, state: AppState = Depends(get_state)):
    """Convert a saved quote into an invoice and save it."""
    doc = _load(state, document_id)
    invoice = state.documents.save(state.documents.convert_to_invoice(doc))
    return invoice.to_dict()


@router.get("/pipeline", response_model=list[PipelineRow])
async def get_pipeline(state: AppState = Depends(get_state)):
    """Count and value of saved documents per status."""
    stats = pipeline_stats(state.documents.list_documents(), state.price_books.load())
    return stats.to_dict(orient="records")
