"""Bulk orchestrator - generates a report for every row, one at a time.

Rows are processed strictly in order with a fixed delay after every row
(including the last) so the generation service is never hit in parallel.
A failed row is logged and recorded as a failure; it never stops the run.

Usage::

    orchestrator = BulkOrchestrator(generator.generate, delay=1.0)
    result = orchestrator.run(rows, mappings, job)
    result.reports    # successful GeneratedReports, in row order
    result.failures   # BulkFailure entries for rows that errored
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from wrapped_builder.generator.prompt import ReportRequest
from wrapped_builder.generator.sanitizer import SanitizedReport
from wrapped_builder.processor.transform import build_customer
from wrapped_builder.schema.models import ColumnMapping, Customer, GeneratedReport, RawRow, Theme
from wrapped_builder.schema.themes import DEFAULT_THEME


_LOGGER = logging.getLogger(__name__)

DEFAULT_DELAY = 1.0


@dataclass
class BulkJob:
    """Business context shared by every report in a run."""
    business_name: str = ""
    business_type: str = ""
    business_context: str = ""
    business_url: str = ""
    theme: Theme = DEFAULT_THEME
    month: int | None = None
    year: int | None = None

    def request_for(self, customer: Customer) -> ReportRequest:
        period = {}
        if self.month is not None:
            period["month"] = self.month
        if self.year is not None:
            period["year"] = self.year
        return ReportRequest(
            customer=customer,
            business_name=self.business_name,
            business_type=self.business_type,
            business_context=self.business_context,
            business_url=self.business_url,
            theme=self.theme,
            **period,
        )


@dataclass
class BulkFailure:
    """A row whose generation raised."""
    index: int
    customer_name: str
    message: str

    def to_dict(self) -> dict:
        return {"index": self.index, "customer": self.customer_name, "error": self.message}


@dataclass
class BulkResult:
    reports: list[GeneratedReport] = field(default_factory=list)
    failures: list[BulkFailure] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.reports) + len(self.failures)

    def summary(self) -> str:
        return f"{len(self.reports)} generated, {len(self.failures)} failed"

    def to_dict(self) -> dict:
        return {
            "reports": [r.to_dict() for r in self.reports],
            "failures": [f.to_dict() for f in self.failures],
        }


class BulkOrchestrator:
    """Sequential, rate-limited generation over all rows.

    Parameters
    ----------
    generate : callable
        ``ReportRequest -> SanitizedReport``; usually
        ``ReportGenerator.generate``.
    delay : float
        Seconds to wait after each row.
    sleep : callable
        Injected for tests; defaults to :func:`time.sleep`.
    on_progress : callable, optional
        Called with ``(completed, total)`` after each row.
    """

    def __init__(self, generate: Callable[[ReportRequest], SanitizedReport],
                 delay: float = DEFAULT_DELAY, sleep: Callable[[float], None] = time.sleep,
                 on_progress: Callable[[int, int], None] | None = None) -> None:
        self.generate = generate
        self.delay = delay
        self.sleep = sleep
        self.on_progress = on_progress

    def run(self, rows: list[RawRow], mappings: list[ColumnMapping],
            job: BulkJob | None = None) -> BulkResult:
        job = job or BulkJob()
        total = len(rows)
        result = BulkResult()
        _LOGGER.info("Starting bulk generation for %d row(s)", total)

        for i, row in enumerate(rows):
            customer = build_customer(row, mappings, fallback_name=f"Customer {i + 1}")
            try:
                generated = self.generate(job.request_for(customer))
            except Exception as exc:
                _LOGGER.error("Error generating report for %s: %s", customer.name, exc)
                result.failures.append(BulkFailure(i, customer.name, str(exc)))
            else:
                result.reports.append(GeneratedReport(
                    customer=customer,
                    report=generated.report,
                    slides=generated.slides,
                ))

            if self.on_progress is not None:
                self.on_progress(i + 1, total)
            self.sleep(self.delay)

        _LOGGER.info("Bulk generation finished: %s", result.summary())
        return result
