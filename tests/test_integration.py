"""End-to-end integration tests.

Exercises the full pipeline with a fake chat client:
    CSV upload → auto_map → build_customer → ReportGenerator →
    sanitize → DeckValidator → Slideshow export → PPTX deck

The fake model answers the way real ones do: fenced JSON, decorated numbers,
and gradients that are not in the theme.
"""

import io
import json
from unittest.mock import MagicMock

import pytest
from pptx import Presentation

from wrapped_builder.config import Settings
from wrapped_builder.generator.client import ReportGenerator
from wrapped_builder.generator.pptx_builder import build_presentation
from wrapped_builder.generator.prompt import ReportRequest
from wrapped_builder.generator.renderer import SlideRenderer
from wrapped_builder.generator.slideshow import Slideshow, load_slides
from wrapped_builder.processor.bulk import BulkJob, BulkOrchestrator
from wrapped_builder.processor.ingestion import ingest
from wrapped_builder.processor.mapper import auto_map
from wrapped_builder.processor.transform import build_customer
from wrapped_builder.qa.validator import DeckValidator
from wrapped_builder.schema.models import MappedTo
from wrapped_builder.schema.themes import get_theme


CSV = (
    "Full Name,E-mail,Phone,Last Visit Date,Visits,Favourite Class\n"
    "Jane Doe,jane@x.com,555-0101,2024-11-28,42,Spin\n"
    "Bob Smith,bob@x.com,,2024-11-02,0,\n"
    ",,,,,\n"
)


# ---------------------------------------------------------------------------
# Fake model output
# ---------------------------------------------------------------------------

def _model_answer(name):
    slides = [
        {"type": "intro", "title": "Your November Wrapped", "subtitle": f"{name}, let's go!",
         "gradient": "from-black to-black"},
        {"type": "stat", "mainStat": "42", "statLabel": "Visits", "icon": "💪"},
        {"type": "chart", "title": "Activity", "chartData": {"type": "bars", "data": [
            {"label": "Spin", "value": "25 classes"},
            {"label": "Yoga", "value": "N/A"},
        ]}},
        {"type": "chart", "title": "Consistency", "chartData": {
            "type": "progress", "percentage": "85%", "label": "Monthly Goal"}},
        {"type": "grid", "title": "At a Glance", "chartData": {"items": [
            {"icon": "🔥", "value": "28", "label": "Day Streak"},
            {"icon": "⭐", "value": "16", "label": "Classes"},
        ]}},
        {"type": "leaderboard", "title": "Your Rank", "chartData": {
            "position": "Rank #45", "total": "500 members", "label": "Most Visits"}},
        {"type": "comparison", "title": "That's like climbing", "mainStat": "3 Everests!",
         "comparison": "42 spin classes = 3 Everests", "icon": "🏔️"},
        {"type": "closing", "title": "See you in December!", "subtitle": "Keep it up"},
    ]
    return "```json\n" + json.dumps(slides) + "\n```"


def _fake_chat():
    chat = MagicMock()

    def create(messages, **kwargs):
        prompt = messages[0]["content"]
        name = "Jane Doe" if "Jane Doe" in prompt else "Bob Smith"
        return MagicMock(choices=[MagicMock(message=MagicMock(content=_model_answer(name)))])

    chat.chat.completions.create.side_effect = create
    return chat


@pytest.fixture
def upload():
    return ingest(CSV.encode(), filename="members.csv")


@pytest.fixture
def theme():
    return get_theme("Sunset")


@pytest.fixture
def generator():
    return ReportGenerator(Settings(api_key="k"), client=_fake_chat())


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class TestPipeline:
    def test_ingest_and_map(self, upload):
        assert len(upload.rows) == 2
        roles = [m.mapped_to for m in auto_map(upload.columns)]
        assert roles == [
            MappedTo.NAME, MappedTo.EMAIL, MappedTo.PHONE,
            MappedTo.TRANSACTION, MappedTo.METADATA, MappedTo.METADATA,
        ]

    def test_customer_keeps_zero_and_drops_blanks(self, upload):
        bob = build_customer(upload.rows[1], auto_map(upload.columns))
        assert bob.name == "Bob Smith"
        assert bob.phone is None
        assert bob.metadata == {"Visits": "0"}

    def test_single_report(self, upload, theme, generator):
        customer = build_customer(upload.rows[0], auto_map(upload.columns))
        request = ReportRequest(customer=customer, business_name="Acme", business_type="Gym",
                                theme=theme, month=11, year=2024)
        result = generator.generate(request)

        assert len(result.slides) == 8
        assert not result.report.startswith("```")
        assert all(s["gradient"] in theme.gradients for s in result.slides)
        assert result.slides[2]["chartData"]["data"] == [
            {"label": "Spin", "value": 25},
            {"label": "Yoga", "value": 0},
        ]
        assert result.slides[3]["chartData"]["percentage"] == 85
        assert result.slides[5]["chartData"]["position"] == 45
        assert result.slides[5]["chartData"]["total"] == 500

        qa = DeckValidator(theme).validate(result.slides)
        assert qa.passed, qa.report()
        assert qa.issues == []

    def test_prompt_carries_customer_data(self, upload, theme, generator):
        customer = build_customer(upload.rows[0], auto_map(upload.columns))
        generator.generate(ReportRequest(customer=customer, business_name="Acme",
                                         business_type="Gym", theme=theme))
        prompt = generator.client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert "Jane Doe" in prompt
        assert "Spin" in prompt
        assert theme.gradients[0] in prompt

    def test_export_and_deck(self, upload, theme, generator):
        customer = build_customer(upload.rows[0], auto_map(upload.columns))
        result = generator.generate(ReportRequest(customer=customer, business_name="Acme",
                                                  business_type="Gym", theme=theme))
        slides = load_slides(result.slides)

        show = Slideshow(slides, customer.name, business_name="Acme", theme=theme,
                         renderer=SlideRenderer(theme, "Acme", scale=1), settle_delay=0)
        exported = show.export_all(sleep=lambda s: None)
        assert [e.filename for e in exported][-1] == "Jane Doe-slide-8.png"
        assert all(e.png.startswith(b"\x89PNG") for e in exported)

        prs = Presentation(io.BytesIO(build_presentation(slides, theme, "Acme")))
        assert len(prs.slides) == 8

    def test_bulk_run(self, upload, theme, generator):
        job = BulkJob(business_name="Acme", business_type="Gym", theme=theme)
        result = BulkOrchestrator(generator.generate, sleep=lambda s: None).run(
            upload.rows, auto_map(upload.columns), job,
        )
        assert [r.customer.name for r in result.reports] == ["Jane Doe", "Bob Smith"]
        assert result.reports[1].slides[0]["subtitle"] == "Bob Smith, let's go!"
        assert result.failures == []
