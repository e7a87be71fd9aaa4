"""PPTX builder - exports a customer's slide deck as an editable PowerPoint file.

Each ReportSlide becomes one portrait (9:16) slide: a full-bleed gradient
rectangle resolved from the slide's gradient token, centered text boxes for
the title / stat / subtitle fields, and native python-pptx shapes for the
visual payloads (bar chart, doughnut for progress, table for the grid, text
stack for the leaderboard).

Usage::

    from wrapped_builder.generator.pptx_builder import PPTXBuilder

    builder = PPTXBuilder(theme)
    pptx_bytes = builder.build(slides, business_name="Acme Gym")
"""

import io
from pathlib import Path

from pptx import Presentation
from pptx.chart.data import CategoryChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Inches, Pt

from wrapped_builder.schema.models import (
    BarsChart,
    GridData,
    LeaderboardData,
    ProgressChart,
    ReportSlide,
    SlideKind,
    Theme,
)
from wrapped_builder.schema.themes import DEFAULT_THEME, resolve_gradient


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

WIDTH_IN = 7.5
HEIGHT_IN = 13.333
MARGIN_IN = 0.6
FONT = "Arial"

_WHITE = RGBColor(0xFF, 0xFF, 0xFF)
_TRACK = RGBColor(0xD9, 0xD9, 0xD9)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _rgb(color: tuple[int, int, int]) -> RGBColor:
    return RGBColor(*color)


def _add_text(slide, text: str, top: float, height: float, size_pt: float,
              bold: bool = False, width: float | None = None) -> None:
    """Centered, wrapped white text box spanning the content width."""
    width = width if width is not None else WIDTH_IN - 2 * MARGIN_IN
    left = (WIDTH_IN - width) / 2
    txbox = slide.shapes.add_textbox(Inches(left), Inches(top), Inches(width), Inches(height))
    tf = txbox.text_frame
    tf.word_wrap = True
    tf.vertical_anchor = MSO_ANCHOR.MIDDLE
    p = tf.paragraphs[0]
    p.alignment = PP_ALIGN.CENTER
    run = p.add_run()
    run.text = text
    run.font.name = FONT
    run.font.size = Pt(size_pt)
    run.font.bold = bold
    run.font.color.rgb = _WHITE


# ---------------------------------------------------------------------------
# PPTXBuilder
# ---------------------------------------------------------------------------

class PPTXBuilder:
    """Builds a PowerPoint deck from a list of report slides.

    Parameters
    ----------
    theme : Theme
        Resolves gradient tokens to background colors.
    """

    def __init__(self, theme: Theme = DEFAULT_THEME) -> None:
        self.theme = theme

    def build(self, slides: list[ReportSlide], business_name: str = "") -> bytes:
        """Build the PPTX and return it as bytes."""
        prs = Presentation()
        prs.slide_width = Inches(WIDTH_IN)
        prs.slide_height = Inches(HEIGHT_IN)

        for slide in slides:
            self._build_slide(prs, slide, business_name)

        buf = io.BytesIO()
        prs.save(buf)
        return buf.getvalue()

    def build_to_file(self, slides: list[ReportSlide], path: str | Path,
                      business_name: str = "") -> None:
        Path(path).write_bytes(self.build(slides, business_name))

    # ------------------------------------------------------------------
    # Slide builders
    # ------------------------------------------------------------------

    def _build_slide(self, prs, report_slide: ReportSlide, business_name: str) -> None:
        layout = prs.slide_layouts[6]  # Blank layout
        slide = prs.slides.add_slide(layout)
        self._apply_background(slide, report_slide.gradient)

        s = report_slide
        top = 3.0
        if s.kind in (SlideKind.INTRO, SlideKind.ACHIEVEMENT, SlideKind.CLOSING):
            if s.icon:
                _add_text(slide, s.icon, top, 1.4, 60)
            _add_text(slide, s.title or "", top + 1.6, 2.0, 34, bold=True)
            if s.subtitle:
                _add_text(slide, s.subtitle, top + 3.8, 1.8, 20)
            if s.kind == SlideKind.CLOSING and business_name:
                _add_text(slide, business_name, top + 5.8, 0.8, 16)
        elif s.kind == SlideKind.STAT:
            if s.icon:
                _add_text(slide, s.icon, top, 1.4, 60)
            _add_text(slide, s.main_stat or "", top + 1.6, 2.2, 80, bold=True)
            _add_text(slide, s.stat_label or "", top + 4.0, 1.2, 24, bold=True)
        elif s.kind == SlideKind.COMPARISON:
            if s.icon:
                _add_text(slide, s.icon, top, 1.2, 54)
            _add_text(slide, s.title or "", top + 1.4, 1.2, 26, bold=True)
            _add_text(slide, s.main_stat or "", top + 2.8, 1.8, 54, bold=True)
            _add_text(slide, s.comparison or "", top + 4.8, 1.6, 20)
        else:
            if s.title:
                _add_text(slide, s.title, 1.6, 1.4, 28, bold=True)
            self._render_chart(slide, s.chart_data)

    def _apply_background(self, slide, token: str) -> None:
        """Full-slide rectangle with a two-stop diagonal gradient."""
        start, end = resolve_gradient(token, self.theme)
        shape = slide.shapes.add_shape(
            MSO_SHAPE.RECTANGLE, 0, 0, Inches(WIDTH_IN), Inches(HEIGHT_IN),
        )
        shape.line.fill.background()
        fill = shape.fill
        fill.gradient()
        fill.gradient_angle = 45
        stops = fill.gradient_stops
        stops[0].color.rgb = _rgb(start)
        stops[-1].color.rgb = _rgb(end)

    # ------------------------------------------------------------------
    # Chart payloads
    # ------------------------------------------------------------------

    def _render_chart(self, slide, chart) -> None:
        renderers = {
            BarsChart: self._render_bars,
            ProgressChart: self._render_progress,
            GridData: self._render_grid,
            LeaderboardData: self._render_leaderboard,
        }
        renderer = renderers.get(type(chart))
        if renderer is not None:
            renderer(slide, chart)

    def _render_bars(self, slide, chart: BarsChart) -> None:
        if not chart.data:
            return
        chart_data = CategoryChartData()
        # Bar charts draw categories bottom-up; reverse to keep list order.
        items = list(reversed(chart.data))
        chart_data.categories = [item.label for item in items]
        chart_data.add_series("Value", tuple(item.value for item in items))

        frame = slide.shapes.add_chart(
            XL_CHART_TYPE.BAR_CLUSTERED,
            Inches(MARGIN_IN), Inches(3.4),
            Inches(WIDTH_IN - 2 * MARGIN_IN), Inches(1.2 * len(items) + 1.0),
            chart_data,
        )
        plot_chart = frame.chart
        plot_chart.has_legend = False
        plot = plot_chart.plots[0]
        plot.has_data_labels = True
        plot.data_labels.font.color.rgb = _WHITE
        plot.data_labels.font.size = Pt(14)
        series = plot.series[0]
        series.format.fill.solid()
        series.format.fill.fore_color.rgb = _WHITE
        plot_chart.category_axis.tick_labels.font.color.rgb = _WHITE
        plot_chart.category_axis.tick_labels.font.size = Pt(14)
        plot_chart.value_axis.visible = False
        plot_chart.value_axis.has_major_gridlines = False

    def _render_progress(self, slide, chart: ProgressChart) -> None:
        pct = max(0.0, min(100.0, float(chart.percentage)))
        chart_data = CategoryChartData()
        chart_data.categories = ["Done", "Remaining"]
        chart_data.add_series("Progress", (pct, 100.0 - pct))

        size = WIDTH_IN - 2 * MARGIN_IN - 1.0
        top = 3.4
        frame = slide.shapes.add_chart(
            XL_CHART_TYPE.DOUGHNUT,
            Inches((WIDTH_IN - size) / 2), Inches(top),
            Inches(size), Inches(size),
            chart_data,
        )
        doughnut = frame.chart
        doughnut.has_legend = False
        points = doughnut.plots[0].series[0].points
        for idx, color in enumerate((_WHITE, _TRACK)):
            points[idx].format.fill.solid()
            points[idx].format.fill.fore_color.rgb = color

        _add_text(slide, f"{chart.percentage:g}%", top + size / 2 - 0.6, 1.2, 40, bold=True)
        if chart.label:
            _add_text(slide, chart.label, top + size + 0.2, 0.8, 18)

    def _render_grid(self, slide, chart: GridData) -> None:
        items = chart.items[:4]
        if not items:
            return
        rows = (len(items) + 1) // 2
        width = WIDTH_IN - 2 * MARGIN_IN
        table_shape = slide.shapes.add_table(
            rows, 2, Inches(MARGIN_IN), Inches(3.4),
            Inches(width), Inches(2.4 * rows),
        )
        table = table_shape.table
        for i in range(rows * 2):
            cell = table.cell(i // 2, i % 2)
            cell.vertical_anchor = MSO_ANCHOR.MIDDLE
            cell.fill.solid()
            cell.fill.fore_color.rgb = _rgb(resolve_gradient(self.theme.gradients[0], self.theme)[1])
            if i >= len(items):
                continue
            item = items[i]
            tf = cell.text_frame
            tf.word_wrap = True
            lines = ((item.icon, 24, False), (item.value, 26, True), (item.label, 12, False))
            for j, (text, size_pt, bold) in enumerate(lines):
                p = tf.paragraphs[0] if j == 0 else tf.add_paragraph()
                p.alignment = PP_ALIGN.CENTER
                run = p.add_run()
                run.text = text
                run.font.name = FONT
                run.font.size = Pt(size_pt)
                run.font.bold = bold
                run.font.color.rgb = _WHITE

    def _render_leaderboard(self, slide, chart: LeaderboardData) -> None:
        top = 3.4
        _add_text(slide, f"#{chart.position:,}", top, 2.0, 72, bold=True)
        _add_text(slide, f"out of {chart.total:,}", top + 2.0, 0.8, 20)
        _add_text(slide, chart.badge, top + 3.2, 0.9, 22, bold=True)


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

def build_presentation(slides: list[ReportSlide], theme: Theme = DEFAULT_THEME,
                       business_name: str = "") -> bytes:
    """One-shot convenience: build a PPTX from report slides."""
    return PPTXBuilder(theme).build(slides, business_name)
