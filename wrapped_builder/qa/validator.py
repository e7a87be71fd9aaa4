"""QA validator - checks a generated slide list before it is shown or exported.

Works on the raw slide dictionaries returned by the sanitizer so problems the
typed models would silently drop (unknown slide types, unparsed numbers) are
still reported.

Usage::

    from wrapped_builder.qa.validator import DeckValidator

    result = DeckValidator(theme).validate(report.slides)
    assert result.passed, result.report()
"""

from dataclasses import dataclass, field
from typing import Any

from wrapped_builder.schema.models import SlideKind, Theme, VISUAL_KINDS
from wrapped_builder.schema.themes import DEFAULT_THEME


MIN_SLIDES = 6
MAX_SLIDES = 8

_KINDS = {k.value: k for k in SlideKind}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Issue:
    """A single QA issue found during validation."""
    severity: str       # "error" or "warning"
    slide_index: int    # -1 for deck-level issues
    category: str       # e.g. "slide_count", "unknown_type", "gradient"
    message: str

    def __str__(self) -> str:
        loc = "deck" if self.slide_index < 0 else f"slide {self.slide_index + 1}"
        return f"[{self.severity.upper()}] {loc}: {self.message}"


@dataclass
class QAResult:
    """Aggregated result of QA validation."""
    issues: list[Issue] = field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def passed(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return f"QA {status}: {len(self.errors)} error(s), {len(self.warnings)} warning(s)"

    def report(self) -> str:
        """Multi-line report of all issues."""
        return "\n".join([self.summary()] + [f"  {issue}" for issue in self.issues])


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# DeckValidator
# ---------------------------------------------------------------------------

class DeckValidator:
    """Validates slide dictionaries against a theme.

    Parameters
    ----------
    theme : Theme
        Every slide's gradient must be one of this theme's gradients.
    """

    def __init__(self, theme: Theme = DEFAULT_THEME) -> None:
        self.theme = theme

    def validate(self, slides: list[dict] | None) -> QAResult:
        result = QAResult()
        if not slides:
            result.issues.append(Issue("error", -1, "empty", "Deck has no slides"))
            return result

        count = len(slides)
        if not MIN_SLIDES <= count <= MAX_SLIDES:
            result.issues.append(Issue(
                "warning", -1, "slide_count",
                f"Deck has {count} slides, expected {MIN_SLIDES}-{MAX_SLIDES}",
            ))

        kinds = [self._check_slide(i, slide, result) for i, slide in enumerate(slides)]
        if not any(k in VISUAL_KINDS for k in kinds):
            result.issues.append(Issue(
                "warning", -1, "no_visual",
                "Deck has no chart, grid, or leaderboard slide",
            ))
        return result

    # ------------------------------------------------------------------
    # Per-slide checks
    # ------------------------------------------------------------------

    def _check_slide(self, index: int, slide: Any, result: QAResult) -> SlideKind | None:
        if not isinstance(slide, dict):
            result.issues.append(Issue("error", index, "type_error", "Slide is not an object"))
            return None

        kind = _KINDS.get(slide.get("type"))
        if kind is None:
            result.issues.append(Issue(
                "error", index, "unknown_type", f"Unknown slide type {slide.get('type')!r}",
            ))

        gradient = slide.get("gradient")
        if gradient not in self.theme.gradients:
            result.issues.append(Issue(
                "error", index, "gradient",
                f"Gradient {gradient!r} is not part of theme {self.theme.name}",
            ))

        chart = slide.get("chartData")
        if kind in VISUAL_KINDS and not isinstance(chart, dict):
            result.issues.append(Issue(
                "warning", index, "chart_missing", f"{kind.value} slide has no chartData",
            ))
        elif isinstance(chart, dict):
            self._check_chart(index, kind, chart, result)
        return kind

    def _check_chart(self, index: int, kind: SlideKind | None, chart: dict,
                     result: QAResult) -> None:
        fields: list[tuple[str, Any]] = []
        if kind == SlideKind.LEADERBOARD:
            fields = [("position", chart.get("position")), ("total", chart.get("total"))]
        elif kind == SlideKind.CHART and chart.get("type") == "progress":
            fields = [("percentage", chart.get("percentage"))]
        elif kind == SlideKind.CHART and chart.get("type") == "bars":
            data = chart.get("data") if isinstance(chart.get("data"), list) else []
            fields = [(f"data[{i}].value", item.get("value") if isinstance(item, dict) else item)
                      for i, item in enumerate(data)]

        for name, value in fields:
            if not _is_number(value):
                result.issues.append(Issue(
                    "error", index, "not_numeric",
                    f"chartData.{name} is {value!r}, expected a number",
                ))


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

def validate_slides(slides: list[dict] | None, theme: Theme = DEFAULT_THEME) -> QAResult:
    """One-shot convenience: validate a slide list against a theme."""
    return DeckValidator(theme).validate(slides)
