"""Chart components - draws the visual slide payloads onto a Pillow canvas.

Each component paints inside a bounding box on an ``ImageDraw`` created in
"RGBA" mode, so translucent white fills blend with the gradient below.

Supported components:
    progress_ring: ring filled to a percentage, number in the middle
    bar_chart: labelled horizontal bars scaled to the largest value
    comparison_grid: 2x2 tiles of icon / value / label
    leaderboard: rank, field size, percentile bar, and "Top X% in <category>" badge

Usage:
    from wrapped_builder.generator.charts import draw_chart

    draw_chart(draw, box, slide.chart_data, fonts)
"""

from __future__ import annotations

from wrapped_builder.schema.models import (
    BarsChart,
    GridData,
    LeaderboardData,
    ProgressChart,
)


WHITE = (255, 255, 255, 255)
TRACK = (255, 255, 255, 64)
TILE = (255, 255, 255, 46)
MUTED = (255, 255, 255, 200)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def format_number(value: float) -> str:
    """Whole numbers without decimals, others with up to one place."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.1f}"


def text_size(draw, text: str, font) -> tuple[int, int]:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    return right - left, bottom - top


def center_text(draw, cx: float, y: float, text: str, font, fill=WHITE) -> int:
    """Draw *text* horizontally centered on *cx*; return its height."""
    w, h = text_size(draw, text, font)
    draw.text((cx - w / 2, y), text, font=font, fill=fill)
    return h


def chart_height(chart, width: int) -> int:
    """Vertical space a chart needs on a canvas *width* pixels wide."""
    if isinstance(chart, ProgressChart):
        return int(width * 0.62)
    if isinstance(chart, BarsChart):
        return int(width * 0.14) * max(1, len(chart.data))
    if isinstance(chart, GridData):
        rows = max(1, (min(len(chart.items), 4) + 1) // 2)
        return int(width * 0.34) * rows
    if isinstance(chart, LeaderboardData):
        return int(width * 0.78)
    return 0


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

def progress_ring(draw, box, chart: ProgressChart, fonts) -> None:
    x0, y0, x1, y1 = box
    label_h = text_size(draw, chart.label or "Ag", fonts.get(18))[1]
    size = min(x1 - x0, (y1 - y0) - label_h * 2)
    cx = (x0 + x1) / 2
    ring = [cx - size / 2, y0, cx + size / 2, y0 + size]
    stroke = max(4, int(size * 0.08))

    pct = max(0.0, min(100.0, float(chart.percentage)))
    draw.arc(ring, start=0, end=360, fill=TRACK, width=stroke)
    if pct > 0:
        draw.arc(ring, start=-90, end=-90 + 360 * pct / 100, fill=WHITE, width=stroke)

    number = f"{format_number(pct)}%"
    big = fonts.get(44, bold=True)
    nh = text_size(draw, number, big)[1]
    center_text(draw, cx, y0 + size / 2 - nh / 2 - nh * 0.15, number, big)
    if chart.label:
        center_text(draw, cx, y0 + size + label_h, chart.label, fonts.get(18), MUTED)


def bar_chart(draw, box, chart: BarsChart, fonts) -> None:
    x0, y0, x1, y1 = box
    if not chart.data:
        return
    row_h = (y1 - y0) / len(chart.data)
    label_font = fonts.get(16, bold=True)
    top_value = chart.max_value

    y = y0
    for bar in chart.data:
        _, label_h = text_size(draw, bar.label, label_font)
        value_text = format_number(bar.value)
        value_w, _ = text_size(draw, value_text, label_font)
        draw.text((x0, y), bar.label, font=label_font, fill=WHITE)
        draw.text((x1 - value_w, y), value_text, font=label_font, fill=WHITE)

        track_top = y + label_h + row_h * 0.12
        track_h = max(6, int(row_h * 0.28))
        radius = track_h // 2
        draw.rounded_rectangle([x0, track_top, x1, track_top + track_h], radius=radius, fill=TRACK)
        fraction = bar.value / top_value if top_value > 0 else 0
        fill_right = x0 + (x1 - x0) * max(0.0, min(1.0, fraction))
        if fill_right - x0 >= track_h:
            draw.rounded_rectangle([x0, track_top, fill_right, track_top + track_h],
                                   radius=radius, fill=WHITE)
        y += row_h


def comparison_grid(draw, box, chart: GridData, fonts) -> None:
    x0, y0, x1, y1 = box
    rows = max(1, (min(len(chart.items), 4) + 1) // 2)
    gap = int((x1 - x0) * 0.04)
    cell_w = ((x1 - x0) - gap) / 2
    cell_h = (y1 - y0) / rows - gap
    for i, item in enumerate(chart.items[:4]):
        col, row = i % 2, i // 2
        cx0 = x0 + col * (cell_w + gap)
        cy0 = y0 + row * (cell_h + gap)
        draw.rounded_rectangle([cx0, cy0, cx0 + cell_w, cy0 + cell_h],
                               radius=int(gap * 1.5), fill=TILE)
        cx = cx0 + cell_w / 2
        y = cy0 + cell_h * 0.12
        y += center_text(draw, cx, y, item.icon, fonts.get(26)) + cell_h * 0.06
        y += center_text(draw, cx, y, item.value, fonts.get(28, bold=True)) + cell_h * 0.06
        center_text(draw, cx, y, item.label, fonts.get(14), MUTED)


def leaderboard(draw, box, chart: LeaderboardData, fonts) -> None:
    x0, y0, x1, _ = box
    s = fonts.scale
    cx = (x0 + x1) / 2
    y = y0
    y += center_text(draw, cx, y, "🏅", fonts.get(48)) + 12 * s
    y += center_text(draw, cx, y, f"#{chart.position:,}", fonts.get(72, bold=True)) + 10 * s
    y += center_text(draw, cx, y, f"out of {chart.total:,}", fonts.get(20), MUTED) + 18 * s

    track_h = max(6, int(8 * s))
    draw.rounded_rectangle([x0, y, x1, y + track_h], radius=track_h // 2, fill=TRACK)
    fill_right = x0 + (x1 - x0) * max(0.0, min(100.0, chart.percentile)) / 100
    if fill_right - x0 >= track_h:
        draw.rounded_rectangle([x0, y, fill_right, y + track_h], radius=track_h // 2, fill=WHITE)
    y += track_h + 18 * s

    badge = chart.badge
    badge_font = fonts.get(20, bold=True)
    bw, bh = text_size(draw, badge, badge_font)
    pad_x, pad_y = bh, bh * 0.6
    draw.rounded_rectangle(
        [cx - bw / 2 - pad_x, y, cx + bw / 2 + pad_x, y + bh + pad_y * 2],
        radius=int((bh + pad_y * 2) / 2), fill=TILE,
    )
    center_text(draw, cx, y + pad_y - bh * 0.1, badge, badge_font)


_COMPONENTS = {
    ProgressChart: progress_ring,
    BarsChart: bar_chart,
    GridData: comparison_grid,
    LeaderboardData: leaderboard,
}


def draw_chart(draw, box, chart, fonts) -> bool:
    """Draw *chart* inside *box*; return False when it has no component."""
    component = _COMPONENTS.get(type(chart))
    if component is None:
        return False
    component(draw, box, chart, fonts)
    return True
