"""Report response sanitizer - parses model output into a slide list.

The generation service is asked for a bare JSON array but routinely wraps it
in markdown fences or returns numbers as decorated strings ("85%",
"3,200kg", "Rank #45").  This module:

- strips ```json / ``` fences
- parses the remainder as JSON; anything but a list gives ``slides=None``
- coerces leaderboard ``position``/``total`` to ints (defaults 1 / 100)
- coerces chart ``percentage`` and bar ``value`` to numbers (default 0)
- optionally pins each slide's ``gradient`` to the theme's gradients

Sanitizing an already-sanitized list returns an identical list.
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any


_LOGGER = logging.getLogger(__name__)

_FENCE_JSON_RE = re.compile(r"```json\n?")
_FENCE_RE = re.compile(r"```\n?")
_NON_DIGIT_RE = re.compile(r"\D")
_NON_NUMERIC_RE = re.compile(r"[^\d.]")
_LEADING_FLOAT_RE = re.compile(r"\d+\.?\d*|\.\d+")

DEFAULT_POSITION = 1
DEFAULT_TOTAL = 100
DEFAULT_CHART_VALUE = 0
FALLBACK_REPORT = "Error generating report"


@dataclass
class SanitizedReport:
    """Display text plus the parsed slide list (``None`` if unparseable)."""
    report: str
    slides: list[dict] | None = None

    def to_dict(self) -> dict:
        return {"report": self.report, "slides": self.slides}


# ---------------------------------------------------------------------------
# Numeric coercion
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_int(value: Any, default: int) -> int:
    """Keep only the digits of *value* and parse them; falsy -> *default*.

    "Rank #45" -> 45, "1,250" -> 1250, "N/A" -> default, "0" -> default.
    Numbers are truncated directly (45.0 -> 45).
    """
    if _is_number(value):
        return int(value) if math.isfinite(value) and int(value) else default
    digits = _NON_DIGIT_RE.sub("", str(value))
    return int(digits) if digits and int(digits) else default


def coerce_float(value: Any, default: float = DEFAULT_CHART_VALUE) -> float:
    """Keep digits and dots, parse the leading number; falsy -> *default*.

    "85%" -> 85, "3,200kg" -> 3200, "12.5 hrs" -> 12.5, "N/A" -> default.
    Numbers pass through unchanged. Integral results come back as ``int``.
    """
    if _is_number(value):
        if not value or not math.isfinite(value):
            return default
        return int(value) if float(value).is_integer() else value
    cleaned = _NON_NUMERIC_RE.sub("", str(value))
    match = _LEADING_FLOAT_RE.match(cleaned)
    if not match:
        return default
    number = float(match.group(0))
    if not number:
        return default
    return int(number) if number.is_integer() else number


# ---------------------------------------------------------------------------
# Slide fixes
# ---------------------------------------------------------------------------

def _fix_leaderboard(chart: dict) -> dict:
    chart = dict(chart)
    chart["position"] = coerce_int(chart.get("position"), DEFAULT_POSITION)
    chart["total"] = coerce_int(chart.get("total"), DEFAULT_TOTAL)
    return chart


def _fix_chart(chart: dict) -> dict:
    chart = dict(chart)
    if chart.get("type") == "progress":
        chart["percentage"] = coerce_float(chart.get("percentage"))
    if chart.get("type") == "bars" and isinstance(chart.get("data"), list):
        chart["data"] = [
            {**item, "value": coerce_float(item.get("value"))} if isinstance(item, dict) else item
            for item in chart["data"]
        ]
    return chart


def sanitize_slide(slide: Any, index: int = 0, gradients=None) -> Any:
    """Return a cleaned copy of one slide; non-dict entries pass through."""
    if not isinstance(slide, dict):
        return slide
    slide = dict(slide)
    chart = slide.get("chartData")
    if isinstance(chart, dict):
        if slide.get("type") == "leaderboard":
            slide["chartData"] = _fix_leaderboard(chart)
        elif slide.get("type") == "chart":
            slide["chartData"] = _fix_chart(chart)
    if gradients and slide.get("gradient") not in gradients:
        slide["gradient"] = gradients[index % len(gradients)]
    return slide


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def strip_fences(text: str) -> str:
    """Remove markdown code fences and surrounding whitespace."""
    return _FENCE_RE.sub("", _FENCE_JSON_RE.sub("", text)).strip()


def sanitize_slides(slides: list, gradients=None) -> list:
    return [sanitize_slide(s, i, gradients) for i, s in enumerate(slides)]


def sanitize_response(text: str | None, gradients=None) -> SanitizedReport:
    """Parse and clean the generation service's raw text.

    Args:
        text: Raw response content.
        gradients: Optional theme gradients every slide must use.

    Returns:
        SanitizedReport whose ``report`` is the fence-stripped text and whose
        ``slides`` is the cleaned list, or ``None`` when the text is not a
        JSON array.
    """
    report = strip_fences(text or FALLBACK_REPORT)
    try:
        parsed = json.loads(report)
    except ValueError:
        _LOGGER.info("Could not parse response as JSON, returning as text")
        return SanitizedReport(report=report, slides=None)
    if not isinstance(parsed, list):
        _LOGGER.info("Response JSON is %s, not a slide list", type(parsed).__name__)
        return SanitizedReport(report=report, slides=None)
    return SanitizedReport(report=report, slides=sanitize_slides(parsed, gradients))
