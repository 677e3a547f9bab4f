"""
Pipeline reporting - saved documents grouped by status.

Values are always recomputed from each document and the price book in
effect; nothing is read from stored totals.
"""
import logging
import math
from pathlib import Path
from typing import Iterable

import pandas as pd

from ..engine.models import STATUSES, Document, PriceBook
from ..engine.pricing_engine import compute_totals


logger = logging.getLogger(__name__)

STATS_COLUMNS = ['status', 'count', 'value', 'pct']
DOCUMENT_COLUMNS = [
    'number', 'kind', 'status', 'customer', 'updated_at',
    'items_subtotal', 'install_total', 'discount', 'tax', 'total',
]


def pipeline_by_status(documents: Iterable[Document]) -> dict[str, list[Document]]:
    """Documents grouped under every pipeline status, in pipeline order."""
    groups: dict[str, list[Document]] = {status: [] for status in STATUSES}
    for doc in documents:
        if doc.status in groups:
            groups[doc.status].append(doc)
    return groups


def documents_frame(documents: Iterable[Document], price_book: PriceBook) -> pd.DataFrame:
    """One row per document with its freshly computed totals."""
    rows = []
    for doc in documents:
        totals = compute_totals(doc, price_book)
        rows.append({
            'number': doc.number,
            'kind': doc.kind,
            'status': doc.status,
            'customer': doc.customer.name,
            'updated_at': doc.updated_at,
            'items_subtotal': totals.items_subtotal,
            'install_total': totals.install_total,
            'discount': totals.discount,
            'tax': totals.tax,
            'total': totals.total,
        })
    return pd.DataFrame(rows, columns=DOCUMENT_COLUMNS)


def pipeline_stats(documents: Iterable[Document], price_book: PriceBook) -> pd.DataFrame:
    """
    Count and value per status.

    ``pct`` scales each status value against the largest one (at least 1)
    for bar charts.
    """
    df = documents_frame(documents, price_book)
    df = df[df['status'].isin(STATUSES)]

    grouped = df.groupby('status')['total'].agg(['count', 'sum'])
    stats = pd.DataFrame({'status': list(STATUSES)})
    stats['count'] = stats['status'].map(grouped['count']).fillna(0).astype(int)
    stats['value'] = stats['status'].map(grouped['sum']).fillna(0.0).astype(float)

    max_value = max(1.0, float(stats['value'].max()))
    # half-up rounding, not banker's
    stats['pct'] = [int(math.floor(v / max_value * 100 + 0.5)) for v in stats['value']]
    return stats[STATS_COLUMNS]


def export_pipeline_csv(documents: Iterable[Document], price_book: PriceBook, output_path: Path) -> Path:
    """Write the per-document totals to CSV."""
    df = documents_frame(documents, price_book)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)
    logger.info("Pipeline export written to %s (%d documents)", output_path, len(df))
    return output_path
