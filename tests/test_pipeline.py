from dataclasses import replace

import pandas as pd
import pytest

from quote_tool.engine.models import STATUSES, Document
from quote_tool.formatting import describe_item, money
from quote_tool.reports.pipeline import (
    documents_frame,
    export_pipeline_csv,
    pipeline_by_status,
    pipeline_stats,
)

from conftest import make_item


def unit_doc(doc_id, status, item_type="Hundred", qty=1):
    return Document(
        id=doc_id,
        number=f"LVQ-2026-{doc_id}",
        status=status,
        items=(make_item(unit_type="unit", type=item_type, qty=qty),),
    )


@pytest.fixture
def docs():
    return [
        unit_doc("0001", "Draft"),
        unit_doc("0002", "Draft", qty=2),
        unit_doc("0003", "Paid", qty=4),
        unit_doc("0004", "Lost"),
    ]


def test_grouped_by_status(docs):
    groups = pipeline_by_status(docs)
    assert list(groups) == list(STATUSES)
    assert [d.id for d in groups["Draft"]] == ["0001", "0002"]
    assert [d.id for d in groups["Paid"]] == ["0003"]
    assert groups["Quoted"] == []
    assert sum(len(v) for v in groups.values()) == 3


def test_stats(docs, simple_book):
    stats = pipeline_stats(docs, simple_book).set_index("status")
    assert list(stats.index) == list(STATUSES)
    assert stats.loc["Draft", "count"] == 2
    assert stats.loc["Draft", "value"] == 300.0
    assert stats.loc["Paid", "value"] == 400.0
    assert stats.loc["Paid", "pct"] == 100
    assert stats.loc["Draft", "pct"] == 75
    assert stats.loc["Approved", "value"] == 0.0


def test_stats_empty(simple_book):
    stats = pipeline_stats([], simple_book)
    assert len(stats) == len(STATUSES)
    assert stats["value"].sum() == 0
    assert (stats["pct"] == 0).all()


def test_stats_follow_price_book(docs, simple_book):
    """Values are recomputed, so a price change moves the pipeline."""
    cheaper = replace(simple_book, unit={**simple_book.unit, "Hundred": 50.0})
    stats = pipeline_stats(docs, cheaper).set_index("status")
    assert stats.loc["Paid", "value"] == 200.0


def test_documents_frame_and_csv(docs, simple_book, tmp_path):
    df = documents_frame(docs, simple_book)
    assert list(df["total"]) == [100.0, 200.0, 400.0, 100.0]

    path = export_pipeline_csv(docs, simple_book, tmp_path / "out" / "pipeline.csv")
    reloaded = pd.read_csv(path)
    assert list(reloaded["number"]) == list(df["number"])


@pytest.mark.parametrize("value, expected", [
    (0, "$0.00"),
    (1486.8, "$1,486.80"),
    (-5, "-$5.00"),
    (None, "$0.00"),
    (float("nan"), "$0.00"),
    ("abc", "$0.00"),
])
def test_money(value, expected):
    assert money(value) == expected


def test_describe_item():
    sqft = make_item(type="PVC_12mm", width_ft=4, height_ft=3, double_sided=True,
                     lamination=True, grommets=10)
    assert describe_item(sqft) == "PVC_12mm • 12.0 ft² • double-sided • lamination • 10 grommets"

    unit = make_item(unit_type="unit", type="AFrame_White", double_sided=True)
    assert describe_item(unit) == "AFrame_White • double-sided"
