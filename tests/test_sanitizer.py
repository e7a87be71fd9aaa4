"""Tests for the report response sanitizer."""

import json

import pytest

from wrapped_builder.generator.sanitizer import (
    FALLBACK_REPORT,
    coerce_float,
    coerce_int,
    sanitize_response,
    sanitize_slides,
    strip_fences,
)
from wrapped_builder.schema.themes import DEFAULT_THEME


GRADIENTS = DEFAULT_THEME.gradients


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------

class TestCoerceInt:
    @pytest.mark.parametrize("value, expected", [
        ("Rank #45", 45),
        ("1,250", 1250),
        (500, 500),
        ("45th", 45),
    ])
    def test_digits(self, value, expected):
        assert coerce_int(value, 1) == expected

    @pytest.mark.parametrize("value", ["N/A", "", None, "0", 0, 0.0, True])
    def test_default(self, value):
        assert coerce_int(value, 100) == 100

    @pytest.mark.parametrize("value, expected", [
        (45.0, 45),
        (500.0, 500),
        (12.9, 12),
        (1e3, 1000),
    ])
    def test_float_truncated(self, value, expected):
        assert coerce_int(value, 1) == expected


class TestCoerceFloat:
    @pytest.mark.parametrize("value, expected", [
        ("85%", 85),
        ("3,200kg", 3200),
        ("12.5 hrs", 12.5),
        (42, 42),
        (7.25, 7.25),
    ])
    def test_numbers(self, value, expected):
        assert coerce_float(value) == expected

    @pytest.mark.parametrize("value", ["N/A", "", None, "0"])
    def test_default(self, value):
        assert coerce_float(value) == 0

    def test_integral_becomes_int(self):
        assert isinstance(coerce_float("85%"), int)
        assert isinstance(coerce_float(85.0), int)

    @pytest.mark.parametrize("value", [5e-05, 1.5e-10, 0.001])
    def test_small_float_passes_through(self, value):
        assert coerce_float(value) == value

    def test_zero_float_gives_default(self):
        assert coerce_float(0.0) == 0


# ---------------------------------------------------------------------------
# Fences
# ---------------------------------------------------------------------------

class TestStripFences:
    def test_json_fence(self):
        assert strip_fences('```json\n[1, 2]\n```') == "[1, 2]"

    def test_plain_fence(self):
        assert strip_fences('```\n[]\n```\n') == "[]"

    def test_no_fence(self):
        assert strip_fences("  [] ") == "[]"


# ---------------------------------------------------------------------------
# sanitize_response
# ---------------------------------------------------------------------------

def _deck():
    return [
        {"type": "intro", "title": "Your November Wrapped", "gradient": GRADIENTS[0]},
        {"type": "leaderboard", "gradient": GRADIENTS[1],
         "chartData": {"position": "Rank #45", "total": "500 members", "category": "Visits"}},
        {"type": "chart", "gradient": GRADIENTS[2],
         "chartData": {"type": "progress", "percentage": "85%", "label": "Goal"}},
        {"type": "chart", "gradient": GRADIENTS[3],
         "chartData": {"type": "bars", "data": [
             {"label": "Strength", "value": "3,200kg"},
             {"label": "Cardio", "value": "N/A"},
         ]}},
    ]


class TestSanitizeResponse:
    def test_fenced_array(self):
        text = "```json\n" + json.dumps(_deck()) + "\n```"
        result = sanitize_response(text)
        assert len(result.slides) == 4
        assert result.report == json.dumps(_deck())

    def test_leaderboard_coerced(self):
        slides = sanitize_response(json.dumps(_deck())).slides
        assert slides[1]["chartData"]["position"] == 45
        assert slides[1]["chartData"]["total"] == 500
        assert slides[1]["chartData"]["category"] == "Visits"

    def test_leaderboard_defaults(self):
        deck = [{"type": "leaderboard", "chartData": {"position": "N/A", "total": "lots"}}]
        chart = sanitize_response(json.dumps(deck)).slides[0]["chartData"]
        assert chart["position"] == 1
        assert chart["total"] == 100

    def test_progress_coerced(self):
        slides = sanitize_response(json.dumps(_deck())).slides
        assert slides[2]["chartData"]["percentage"] == 85

    def test_bars_coerced(self):
        slides = sanitize_response(json.dumps(_deck())).slides
        values = [d["value"] for d in slides[3]["chartData"]["data"]]
        assert values == [3200, 0]

    def test_other_slides_untouched(self):
        slides = sanitize_response(json.dumps(_deck())).slides
        assert slides[0] == _deck()[0]

    def test_idempotent(self):
        once = sanitize_response(json.dumps(_deck()), gradients=GRADIENTS).slides
        twice = sanitize_slides(once, gradients=GRADIENTS)
        assert twice == once

    def test_float_leaderboard_fields(self):
        deck = [{"type": "leaderboard", "chartData": {"position": 45.0, "total": 500.0}}]
        chart = sanitize_response(json.dumps(deck)).slides[0]["chartData"]
        assert (chart["position"], chart["total"]) == (45, 500)

    def test_float_bar_value(self):
        deck = [{"type": "chart", "chartData": {"type": "bars", "data": [
            {"label": "Spin", "value": 12.5},
            {"label": "Yoga", "value": 3.0},
        ]}}]
        data = sanitize_response(json.dumps(deck)).slides[0]["chartData"]["data"]
        assert [d["value"] for d in data] == [12.5, 3]

    def test_idempotent_with_tiny_percentage(self):
        deck = [{"type": "chart", "chartData": {"type": "progress", "percentage": 0.00005}}]
        once = sanitize_slides(deck)
        assert once[0]["chartData"]["percentage"] == 0.00005
        assert sanitize_slides(once) == once

    def test_prose_gives_no_slides(self):
        result = sanitize_response("Sorry, I can't help with that.")
        assert result.slides is None
        assert result.report == "Sorry, I can't help with that."

    def test_json_object_gives_no_slides(self):
        assert sanitize_response('{"slides": []}').slides is None

    def test_empty_text_uses_fallback(self):
        result = sanitize_response("")
        assert result.report == FALLBACK_REPORT
        assert result.slides is None

    def test_unknown_gradient_pinned_to_theme(self):
        deck = [{"type": "intro", "gradient": "bg-sparkles"},
                {"type": "stat", "gradient": "bg-sparkles"}]
        slides = sanitize_response(json.dumps(deck), gradients=GRADIENTS).slides
        assert [s["gradient"] for s in slides] == [GRADIENTS[0], GRADIENTS[1]]

    def test_theme_gradient_kept(self):
        deck = [{"type": "intro", "gradient": GRADIENTS[3]}]
        slides = sanitize_response(json.dumps(deck), gradients=GRADIENTS).slides
        assert slides[0]["gradient"] == GRADIENTS[3]

    def test_non_dict_entries_pass_through(self):
        assert sanitize_response("[1, \"two\"]").slides == [1, "two"]

    def test_to_dict(self):
        assert sanitize_response("[]").to_dict() == {"report": "[]", "slides": []}
