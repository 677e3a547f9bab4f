#!/usr/bin/env python
"""
Pipeline export - writes per-document totals to CSV and prints the
value-by-status summary.

Usage:
    python scripts/export_pipeline.py
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from quote_tool.config.settings import get_settings
from quote_tool.formatting import money
from quote_tool.reports.pipeline import export_pipeline_csv, pipeline_stats
from quote_tool.services.document_service import DocumentService
from quote_tool.services.numbering import DocumentNumberer
from quote_tool.services.price_book_service import PriceBookService


def main():
    settings = get_settings()
    price_books = PriceBookService(settings.price_book_file)
    documents = DocumentService(
        settings.documents_file,
        DocumentNumberer(settings.counters_file),
        price_books.load,
    )

    print("=" * 60)
    print("PIPELINE EXPORT")
    print("=" * 60)
    print()

    saved = documents.list_documents()
    if not saved:
        print("No saved documents yet.")
        sys.exit(1)

    book = price_books.load()
    output = export_pipeline_csv(saved, book, settings.pipeline_export)

    print(f"Documents: {len(saved)}")
    print(f"Output: {output}")
    print()
    print("Value by status:")
    for row in pipeline_stats(saved, book).itertuples():
        print(f"  {row.status:<10} {money(row.value):>14}")


if __name__ == "__main__":
    main()
