"""Tests for the bulk orchestrator."""

from unittest.mock import MagicMock

import pytest

from wrapped_builder.errors import GenerationError
from wrapped_builder.generator.sanitizer import SanitizedReport
from wrapped_builder.processor.bulk import BulkJob, BulkOrchestrator, BulkResult
from wrapped_builder.schema.models import ColumnMapping, MappedTo
from wrapped_builder.schema.themes import get_theme


@pytest.fixture
def rows():
    return [
        {"Name": "Jane", "Visits": "42"},
        {"Name": "", "Visits": "7"},
        {"Name": "Bob", "Visits": "3"},
    ]


@pytest.fixture
def mappings():
    return [ColumnMapping("Name", MappedTo.NAME), ColumnMapping("Visits", MappedTo.METADATA)]


@pytest.fixture
def generate():
    return MagicMock(side_effect=lambda req: SanitizedReport(
        report=f"report for {req.customer.name}",
        slides=[{"type": "intro", "title": req.customer.name}],
    ))


class TestBulkOrchestrator:
    def test_one_report_per_row_in_order(self, rows, mappings, generate):
        result = BulkOrchestrator(generate, sleep=MagicMock()).run(rows, mappings)
        assert [r.customer.name for r in result.reports] == ["Jane", "Customer 2", "Bob"]
        assert result.failures == []

    def test_sleeps_after_every_row(self, rows, mappings, generate):
        sleep = MagicMock()
        BulkOrchestrator(generate, delay=1.0, sleep=sleep).run(rows, mappings)
        assert sleep.call_count == 3
        assert all(c.args == (1.0,) for c in sleep.call_args_list)

    def test_calls_are_sequential(self, rows, mappings):
        events = []

        def generate(req):
            events.append(("generate", req.customer.name))
            return SanitizedReport(report="", slides=[])

        BulkOrchestrator(generate, sleep=lambda s: events.append(("sleep", s))).run(rows, mappings)
        assert [e[0] for e in events] == ["generate", "sleep"] * 3

    def test_progress(self, rows, mappings, generate):
        progress = MagicMock()
        BulkOrchestrator(generate, sleep=MagicMock(), on_progress=progress).run(rows, mappings)
        assert [c.args for c in progress.call_args_list] == [(1, 3), (2, 3), (3, 3)]

    def test_failed_row_recorded_and_skipped(self, rows, mappings):
        def generate(req):
            if req.customer.name == "Customer 2":
                raise GenerationError("Failed to generate report", "rate limited")
            return SanitizedReport(report="ok", slides=[])

        sleep = MagicMock()
        result = BulkOrchestrator(generate, sleep=sleep).run(rows, mappings)
        assert [r.customer.name for r in result.reports] == ["Jane", "Bob"]
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert (failure.index, failure.customer_name) == (1, "Customer 2")
        assert failure.message == "Failed to generate report"
        assert sleep.call_count == 3

    def test_unexpected_error_does_not_stop_run(self, rows, mappings):
        generate = MagicMock(side_effect=[RuntimeError("boom"),
                                          SanitizedReport("a"), SanitizedReport("b")])
        result = BulkOrchestrator(generate, sleep=MagicMock()).run(rows, mappings)
        assert result.processed == 3
        assert result.summary() == "2 generated, 1 failed"

    def test_empty_rows(self, mappings, generate):
        sleep = MagicMock()
        result = BulkOrchestrator(generate, sleep=sleep).run([], mappings)
        assert result.reports == []
        generate.assert_not_called()
        sleep.assert_not_called()

    def test_job_context_shared(self, rows, mappings, generate):
        theme = get_theme("Forest")
        job = BulkJob(business_name="Acme", business_type="Gym", theme=theme, month=11, year=2024)
        BulkOrchestrator(generate, sleep=MagicMock()).run(rows, mappings, job)
        requests = [c.args[0] for c in generate.call_args_list]
        assert all(r.business_name == "Acme" and r.theme is theme for r in requests)
        assert requests[0].period == "November 2024"

    def test_metadata_reaches_request(self, rows, mappings, generate):
        BulkOrchestrator(generate, sleep=MagicMock()).run(rows, mappings)
        assert generate.call_args_list[0].args[0].customer.metadata == {"Visits": "42"}


class TestBulkResult:
    def test_to_dict(self, rows, mappings, generate):
        result = BulkOrchestrator(generate, sleep=MagicMock()).run(rows[:1], mappings)
        d = result.to_dict()
        assert d["reports"][0]["customer"]["name"] == "Jane"
        assert d["reports"][0]["slides"] == [{"type": "intro", "title": "Jane"}]
        assert d["failures"] == []

    def test_empty(self):
        assert BulkResult().processed == 0
