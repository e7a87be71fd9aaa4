"""Tests for the CLI entry point (wrapped_builder.cli).

Covers argument parsing, the inspect and themes commands, mapping overrides,
and the sample/bulk pipelines with the report generator patched out.
"""

import json
from unittest.mock import patch

import pytest

from wrapped_builder.cli import _parse_overrides, _slug, build_parser, main
from wrapped_builder.config import Settings
from wrapped_builder.errors import GenerationError
from wrapped_builder.generator.sanitizer import SanitizedReport
from wrapped_builder.schema.models import MappedTo


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def parser():
    return build_parser()


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "customers.csv"
    path.write_text("Member,Email,Visits\nJane Doe,jane@x.com,42\nBob,bob@x.com,7\n")
    return path


@pytest.fixture
def settings():
    return Settings(api_key="test-key", bulk_delay=0, settle_delay=0)


@pytest.fixture
def fake_generator(sample_slides):
    """Patch ReportGenerator in the CLI; yields the generator instance."""
    with patch("wrapped_builder.cli.ReportGenerator") as cls:
        instance = cls.return_value
        instance.generate.return_value = SanitizedReport(
            report=json.dumps(sample_slides[:2]), slides=sample_slides[:2],
        )
        yield instance


@pytest.fixture
def env(settings):
    with patch.object(Settings, "from_env", return_value=settings):
        yield settings


def _gen_args(csv_file, *extra):
    return [str(csv_file), "--business-name", "Acme Gym", "--business-type", "Gym", *extra]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class TestParser:
    def test_command_required(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args([])

    def test_sample_defaults(self, parser):
        args = parser.parse_args(["sample", "x.csv", "--business-name", "A", "--business-type", "B"])
        assert args.theme == "Vibrant"
        assert args.map is None
        assert 1 <= args.month <= 12

    def test_business_type_required(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args(["bulk", "x.csv", "--business-name", "A"])

    def test_month_range(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args(["sample", "x.csv", "--business-name", "A",
                               "--business-type", "B", "--month", "13"])

    def test_repeatable_map(self, parser):
        args = parser.parse_args(["bulk", "x.csv", "--business-name", "A", "--business-type", "B",
                                  "--map", "Member=name", "--map", "Notes=ignore"])
        assert args.map == ["Member=name", "Notes=ignore"]

    def test_serve_defaults(self, parser):
        args = parser.parse_args(["serve"])
        assert (args.host, args.port) == ("127.0.0.1", 8000)


class TestHelpers:
    def test_parse_overrides(self):
        assert _parse_overrides(["Member=name", "Notes=IGNORE"]) == [
            ("Member", MappedTo.NAME),
            ("Notes", MappedTo.IGNORE),
        ]

    def test_parse_overrides_bad_role(self, capsys):
        with pytest.raises(SystemExit):
            _parse_overrides(["Member=boss"])
        assert "Unknown role" in capsys.readouterr().err

    def test_parse_overrides_missing_equals(self):
        with pytest.raises(SystemExit):
            _parse_overrides(["Member"])

    def test_slug(self):
        assert _slug("Jane O'Neil / VIP") == "Jane_O_Neil_VIP"
        assert _slug("???") == "customer"


# ---------------------------------------------------------------------------
# inspect / themes
# ---------------------------------------------------------------------------

class TestInspect:
    def test_lists_mapping(self, csv_file, capsys):
        main(["inspect", str(csv_file)])
        out = capsys.readouterr().out
        assert "Rows:     2" in out
        assert "Email" in out and "email" in out
        assert "metadata: 2" in out

    def test_missing_file(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["inspect", str(tmp_path / "nope.csv")])

    def test_unsupported_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hi")
        with pytest.raises(SystemExit):
            main(["inspect", str(path)])


class TestThemes:
    def test_lists_presets(self, env, capsys):
        main(["themes"])
        out = capsys.readouterr().out
        assert "Vibrant" in out
        assert "Monochrome" in out


# ---------------------------------------------------------------------------
# sample
# ---------------------------------------------------------------------------

class TestSample:
    def test_prints_slides_json(self, csv_file, env, fake_generator, sample_slides, capsys):
        main(["sample", *_gen_args(csv_file)])
        assert json.loads(capsys.readouterr().out) == sample_slides[:2]

    def test_uses_first_row(self, csv_file, env, fake_generator):
        main(["sample", *_gen_args(csv_file, "--map", "Member=name")])
        request = fake_generator.generate.call_args.args[0]
        assert request.customer.name == "Jane Doe"
        assert request.customer.email == "jane@x.com"
        assert request.business_name == "Acme Gym"

    def test_map_override_changes_customer(self, csv_file, env, fake_generator):
        main(["sample", *_gen_args(csv_file, "--map", "Member=ignore")])
        request = fake_generator.generate.call_args.args[0]
        assert request.customer.name == "Sample Customer"
        assert "Member" not in request.customer.metadata

    def test_unknown_override_column(self, csv_file, env, fake_generator):
        with pytest.raises(SystemExit):
            main(["sample", *_gen_args(csv_file, "--map", "Nope=name")])

    def test_theme_and_period(self, csv_file, env, fake_generator):
        main(["sample", *_gen_args(csv_file, "--theme", "ocean", "--month", "3", "--year", "2025")])
        request = fake_generator.generate.call_args.args[0]
        assert request.theme.name == "Ocean"
        assert request.period == "March 2025"

    def test_custom_theme_needs_both_colors(self, csv_file, env, fake_generator):
        with pytest.raises(SystemExit):
            main(["sample", *_gen_args(csv_file, "--primary", "#112233")])

    def test_custom_theme_short_hex_and_named(self, csv_file, env, fake_generator):
        main(["sample", *_gen_args(csv_file, "--primary", "#fff", "--accent", "red")])
        request = fake_generator.generate.call_args.args[0]
        assert request.theme.name == "Custom"
        assert request.theme.gradients[0] == "bg-gradient-to-br from-[#fff] to-[red]"

    def test_custom_theme_bad_color(self, csv_file, env, fake_generator, capsys):
        with pytest.raises(SystemExit):
            main(["sample", *_gen_args(csv_file, "--primary", "nope", "--accent", "#000")])
        assert "Invalid color" in capsys.readouterr().err
        fake_generator.generate.assert_not_called()

    def test_unknown_theme(self, csv_file, env, fake_generator):
        with pytest.raises(SystemExit):
            main(["sample", *_gen_args(csv_file, "--theme", "Neon")])

    def test_exports_pngs_and_pptx(self, csv_file, env, fake_generator, tmp_path):
        out = tmp_path / "out"
        deck = tmp_path / "deck.pptx"
        main(["sample", *_gen_args(csv_file, "-o", str(out), "--pptx", str(deck))])
        names = sorted(p.name for p in out.iterdir())
        assert names == ["Sample Customer-slide-1.png", "Sample Customer-slide-2.png"]
        assert deck.read_bytes()[:2] == b"PK"

    def test_prose_response_printed(self, csv_file, env, fake_generator, capsys):
        fake_generator.generate.return_value = SanitizedReport(report="Just text", slides=None)
        main(["sample", *_gen_args(csv_file)])
        assert capsys.readouterr().out.strip() == "Just text"

    def test_generation_error_exits(self, csv_file, env, fake_generator, capsys):
        fake_generator.generate.side_effect = GenerationError("Failed to generate report", "429")
        with pytest.raises(SystemExit):
            main(["sample", *_gen_args(csv_file)])
        assert "Failed to generate report: 429" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# bulk
# ---------------------------------------------------------------------------

class TestBulk:
    def test_one_report_per_row(self, csv_file, env, fake_generator, capsys):
        main(["bulk", *_gen_args(csv_file, "--map", "Member=name")])
        captured = capsys.readouterr()
        data = json.loads(captured.out)
        assert [r["customer"]["name"] for r in data["reports"]] == ["Jane Doe", "Bob"]
        assert "Generated 2/2" in captured.err
        assert fake_generator.generate.call_count == 2

    def test_requires_api_key(self, csv_file, fake_generator, capsys):
        with patch.object(Settings, "from_env", return_value=Settings(api_key=None)):
            with pytest.raises(SystemExit):
                main(["bulk", *_gen_args(csv_file)])
        assert "GROQ_API_KEY" in capsys.readouterr().err
        fake_generator.generate.assert_not_called()

    def test_partial_failure_continues(self, csv_file, env, fake_generator, sample_slides, capsys):
        fake_generator.generate.side_effect = [
            GenerationError("Failed to generate report", "timeout"),
            SanitizedReport(report="[]", slides=sample_slides[:1]),
        ]
        main(["bulk", *_gen_args(csv_file, "--map", "Member=name")])
        captured = capsys.readouterr()
        data = json.loads(captured.out)
        assert [r["customer"]["name"] for r in data["reports"]] == ["Bob"]
        assert data["failures"][0]["customer"] == "Jane Doe"
        assert "Row 1 (Jane Doe)" in captured.err

    def test_all_failed_exits(self, csv_file, env, fake_generator):
        fake_generator.generate.side_effect = GenerationError("Failed to generate report", "x")
        with pytest.raises(SystemExit):
            main(["bulk", *_gen_args(csv_file)])

    def test_output_dir_layout(self, csv_file, env, fake_generator, tmp_path):
        out = tmp_path / "bulk"
        main(["bulk", *_gen_args(csv_file, "--map", "Member=name", "-o", str(out), "--pptx")])
        assert (out / "Jane_Doe" / "Jane Doe-slide-1.png").exists()
        assert (out / "Bob" / "deck.pptx").exists()
        summary = json.loads((out / "summary.json").read_text())
        assert len(summary["reports"]) == 2
