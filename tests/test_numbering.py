import json
import threading

from quote_tool.services.numbering import DocumentNumberer, format_number


def test_first_quote_then_second(numberer):
    assert numberer.next_number("Quote") == "LVQ-2026-0001"
    assert numberer.next_number("Quote") == "LVQ-2026-0002"


def test_invoice_counter_independent(numberer):
    numberer.next_number("Quote")
    numberer.next_number("Quote")
    assert numberer.next_number("Invoice") == "LVI-2026-0001"


def test_counter_is_per_year(numberer):
    assert numberer.next_number("Quote", year=2025) == "LVQ-2025-0001"
    assert numberer.next_number("Quote", year=2026) == "LVQ-2026-0001"
    assert numberer.next_number("Quote", year=2025) == "LVQ-2025-0002"


def test_counter_persisted_before_return(tmp_path, numberer):
    numberer.next_number("Quote")
    numberer.next_number("Invoice")

    stored = json.loads((tmp_path / "counters.json").read_text(encoding="utf-8"))
    assert stored == {"Invoice-2026": 1, "Quote-2026": 1}

    # a fresh instance continues from the file
    again = DocumentNumberer(tmp_path / "counters.json", clock=numberer.clock)
    assert again.next_number("Quote") == "LVQ-2026-0002"


def test_peek_does_not_increment(numberer):
    assert numberer.peek("Quote") == 0
    numberer.next_number("Quote")
    assert numberer.peek("Quote") == 1
    assert numberer.peek("Quote") == 1


def test_format_number():
    assert format_number("Quote", 2026, 7) == "LVQ-2026-0007"
    assert format_number("Invoice", 2026, 12345) == "LVI-2026-12345"
    assert format_number("Estimate", 2026, 1) == "LVQ-2026-0001"


def test_concurrent_callers_get_distinct_numbers(numberer):
    issued = []
    lock = threading.Lock()

    def worker():
        for _ in range(5):
            number = numberer.next_number("Quote")
            with lock:
                issued.append(number)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(issued) == 40
    assert sorted(issued) == [f"LVQ-2026-{n:04d}" for n in range(1, 41)]
