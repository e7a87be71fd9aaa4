"""Workflow session state.

A single immutable ``SessionState`` carries everything the upload → mapping →
preview → generating → complete workflow needs.  Every transition returns a
new state; illegal transitions raise ``ValueError`` so a caller cannot, for
example, start a bulk run before a sample was previewed.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from .models import ColumnMapping, GeneratedReport, IngestResult, Theme
from .themes import DEFAULT_THEME


class WorkflowStep(Enum):
    UPLOAD = "upload"
    MAPPING = "mapping"
    PREVIEW = "preview"
    GENERATING = "generating"
    COMPLETE = "complete"


@dataclass(frozen=True)
class BusinessProfile:
    """Business details shared by every report in a session."""
    name: str = ""
    type: str = ""
    context: str = ""
    url: str = ""
    logo_url: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.name.strip() and self.type.strip())


@dataclass(frozen=True)
class SessionState:
    step: WorkflowStep = WorkflowStep.UPLOAD
    business: BusinessProfile = field(default_factory=BusinessProfile)
    upload: IngestResult = field(default_factory=IngestResult)
    mappings: tuple[ColumnMapping, ...] = ()
    theme: Theme = DEFAULT_THEME
    sample_report: str = ""
    sample_slides: tuple[dict, ...] | None = None
    progress: tuple[int, int] = (0, 0)
    reports: tuple[GeneratedReport, ...] = ()
    error: str | None = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def row_count(self) -> int:
        return len(self.upload.rows)

    @property
    def can_generate_sample(self) -> bool:
        return (
            self.step in (WorkflowStep.MAPPING, WorkflowStep.PREVIEW)
            and self.business.complete
            and self.row_count > 0
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _expect(self, *steps: WorkflowStep) -> None:
        if self.step not in steps:
            allowed = ", ".join(s.value for s in steps)
            raise ValueError(
                f"Cannot do this from step '{self.step.value}' (allowed: {allowed})"
            )

    def with_business(self, business: BusinessProfile) -> "SessionState":
        return replace(self, business=business)

    def with_upload(self, upload: IngestResult,
                    mappings: list[ColumnMapping]) -> "SessionState":
        """Store an ingested file and its initial mappings; go to mapping."""
        self._expect(WorkflowStep.UPLOAD, WorkflowStep.MAPPING)
        return replace(
            self,
            step=WorkflowStep.MAPPING,
            upload=upload,
            mappings=tuple(mappings),
            error=None,
        )

    def with_mappings(self, mappings: list[ColumnMapping]) -> "SessionState":
        self._expect(WorkflowStep.MAPPING)
        return replace(self, mappings=tuple(mappings))

    def with_theme(self, theme: Theme) -> "SessionState":
        return replace(self, theme=theme)

    def with_sample(self, report: str, slides: list[dict] | None) -> "SessionState":
        """Record the first-row preview and move to the preview step."""
        self._expect(WorkflowStep.MAPPING, WorkflowStep.PREVIEW)
        return replace(
            self,
            step=WorkflowStep.PREVIEW,
            sample_report=report,
            sample_slides=tuple(slides) if slides is not None else None,
            error=None,
        )

    def back_to_mapping(self) -> "SessionState":
        self._expect(WorkflowStep.PREVIEW, WorkflowStep.COMPLETE)
        return replace(self, step=WorkflowStep.MAPPING)

    def start_bulk(self) -> "SessionState":
        self._expect(WorkflowStep.PREVIEW, WorkflowStep.COMPLETE)
        return replace(
            self,
            step=WorkflowStep.GENERATING,
            progress=(0, self.row_count),
            reports=(),
        )

    def with_progress(self, current: int, total: int) -> "SessionState":
        self._expect(WorkflowStep.GENERATING)
        return replace(self, progress=(current, total))

    def with_bulk_result(self, reports: list[GeneratedReport]) -> "SessionState":
        self._expect(WorkflowStep.GENERATING)
        return replace(self, step=WorkflowStep.COMPLETE, reports=tuple(reports))

    def with_error(self, message: str) -> "SessionState":
        """Record an error without changing step."""
        return replace(self, error=message)
