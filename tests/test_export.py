from __future__ import annotations

import asyncio
import csv
import io
import json

import pytest

from finassist.downloads import swap_extension
from finassist.export import build_csv, wait_for
from finassist.pdf_table import PdfCapability

EXPENSES = [
    {"name": "Ravi", "amount": 1200.5, "category": "Rent", "note": 'March "advance"'},
    {"name": "Meera", "amount": 80, "category": "Food", "note": None},
]


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps = 0

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps += 1
        self.now += seconds


def _seed(store, key="tfm_expenses", records=EXPENSES):
    store.set_item(key, json.dumps(records))


# wait_for ---------------------------------------------------------------------


def test_wait_for_times_out_without_raising() -> None:
    clock = FakeClock()
    result = asyncio.run(wait_for(lambda: False, timeout=4.0, interval=0.08, clock=clock, sleep=clock.sleep))
    assert result is False
    assert clock.now > 4.0
    assert 50 <= clock.sleeps <= 52


def test_wait_for_returns_once_condition_holds() -> None:
    clock = FakeClock()
    checks = iter([False, False, True])
    result = asyncio.run(wait_for(lambda: next(checks), clock=clock, sleep=clock.sleep))
    assert result is True
    assert clock.sleeps == 2


def test_wait_for_treats_errors_as_unavailable() -> None:
    clock = FakeClock()

    def broken():
        raise RuntimeError("not loaded")

    assert asyncio.run(wait_for(broken, clock=clock, sleep=clock.sleep)) is False
    assert clock.sleeps == 0


# export_list_as_pdf -----------------------------------------------------------


@pytest.mark.parametrize("raw", [None, "[]", "not json", '{"a": 1}'])
def test_empty_collection_produces_nothing(make_runtime, store, raw) -> None:
    if raw is not None:
        store.set_item("tfm_expenses", raw)
    runtime = make_runtime()

    asyncio.run(runtime.export_list_as_pdf("tfm_expenses", "expenses.pdf"))

    assert runtime.downloader.downloads == []
    assert runtime.notifier.notices == [("warning", "No data to export for tfm_expenses")]


def test_unavailable_renderer_falls_back_to_text(make_runtime, store) -> None:
    _seed(store)
    runtime = make_runtime(capability=PdfCapability.unavailable())

    asyncio.run(runtime.export_list_as_pdf("tfm_expenses", "expenses.pdf"))

    [download] = runtime.downloader.downloads
    assert download.filename == "expenses.txt"
    assert download.mime == "text/plain;charset=utf-8"
    assert json.loads(download.text()) == EXPENSES
    [(level, message)] = runtime.notifier.notices
    assert level == "info"
    assert "JSON text" in message


def test_text_fallback_failure_is_reported(make_runtime, store, failing_downloader) -> None:
    _seed(store)
    runtime = make_runtime(downloader=failing_downloader)

    asyncio.run(runtime.export_list_as_pdf("tfm_expenses", "expenses.pdf"))

    assert runtime.notifier.notices == [("error", "Export failed: disk full")]


def test_ready_renderer_produces_pdf(make_runtime, store, recording_backend) -> None:
    _seed(store)
    runtime = make_runtime(capability=PdfCapability.ready(recording_backend))

    asyncio.run(runtime.export_list_as_pdf("tfm_expenses", "expenses.pdf"))

    [download] = runtime.downloader.downloads
    assert download.filename == "expenses.pdf"
    assert download.mime == "application/pdf"
    assert download.content == b"%PDF-recorded"
    assert runtime.notifier.notices == []
    texts = [text for _, _, _, text in recording_backend.canvases[0].strings]
    assert texts[0] == "expenses"
    assert 'March "advance"' in texts


def test_renderer_loaded_during_wait_is_used(make_runtime, store, recording_backend) -> None:
    _seed(store)
    capability = PdfCapability.unavailable()
    runtime = make_runtime(capability=capability, pdf_wait_timeout=5.0, pdf_wait_interval=0.001)

    async def scenario():
        loop = asyncio.get_running_loop()
        loop.call_later(0.01, setattr, capability, "backend", recording_backend)
        await runtime.export_list_as_pdf("tfm_expenses", "expenses.pdf")

    asyncio.run(scenario())

    assert [d.filename for d in runtime.downloader.downloads] == ["expenses.pdf"]


def test_render_failure_falls_back_to_csv(make_runtime, store, broken_backend) -> None:
    _seed(store)
    runtime = make_runtime(capability=PdfCapability.ready(broken_backend))

    asyncio.run(runtime.export_list_as_pdf("tfm_expenses", "expenses.pdf"))

    [download] = runtime.downloader.downloads
    assert download.filename == "expenses.csv"
    assert download.text().splitlines()[0] == "name,amount,category,note"
    assert runtime.notifier.notices == [("warning", "PDF export problem, trying CSV instead.")]


def test_render_and_csv_failure_is_reported(make_runtime, store, broken_backend, failing_downloader) -> None:
    _seed(store)
    runtime = make_runtime(capability=PdfCapability.ready(broken_backend), downloader=failing_downloader)

    asyncio.run(runtime.export_list_as_pdf("tfm_expenses", "expenses.pdf"))

    assert runtime.notifier.notices == [
        ("warning", "PDF export problem, trying CSV instead."),
        ("error", "Export failed: disk full"),
    ]


# CSV --------------------------------------------------------------------------


def test_csv_doubles_quotes_and_reparses(make_runtime) -> None:
    runtime = make_runtime()
    header = ["name", "amount", "note"]

    runtime.download_array_as_csv(EXPENSES, "expenses.csv", header)

    [download] = runtime.downloader.downloads
    assert download.mime == "text/csv;charset=utf-8"
    text = download.text()
    assert '"March ""advance"""' in text
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == header
    assert rows[1] == ["Ravi", "1200.5", 'March "advance"']
    assert rows[2] == ["Meera", "80", ""]


def test_csv_cell_coercion() -> None:
    records = [{"flag": True, "tags": ["a", "b"], "missing": None}]
    text = build_csv(records, ["flag", "tags", "missing", "absent"])
    assert text == 'flag,tags,missing,absent\n"true","[""a"",""b""]","",""'


def test_csv_empty_input_shows_notice(make_runtime) -> None:
    runtime = make_runtime()
    runtime.download_array_as_csv([], "empty.csv", ["name"])
    assert runtime.downloader.downloads == []
    assert runtime.notifier.notices == [("warning", "No data")]


def test_csv_delivery_failure_is_reported(make_runtime, failing_downloader) -> None:
    runtime = make_runtime(downloader=failing_downloader)
    runtime.download_array_as_csv(EXPENSES, "expenses.csv", ["name"])
    assert runtime.notifier.notices == [("error", "Export failed: disk full")]


@pytest.mark.parametrize(
    "filename, extension, expected",
    [("report.pdf", ".txt", "report.txt"), ("REPORT.PDF", ".csv", "REPORT.csv"), ("report", ".txt", "report.txt")],
)
def test_swap_extension(filename, extension, expected) -> None:
    assert swap_extension(filename, extension) == expected
