"""Slide renderer - draws one ReportSlide as a portrait PNG.

Every slide is a 9:16 card with a diagonal gradient background resolved from
its gradient token, a vertically centered stack of content specific to the
slide's kind, and progress dots along the bottom edge.

Layouts by kind:
    intro / achievement: icon, title, subtitle
    closing: icon, title, subtitle, business name
    stat: icon, big number, label
    comparison: icon, title, big number, comparison text
    chart / grid / leaderboard: title plus a chart component
"""

from __future__ import annotations

import base64
import io
import logging
import textwrap
from dataclasses import dataclass
from typing import Callable

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from wrapped_builder.generator.charts import MUTED, WHITE, chart_height, draw_chart, text_size
from wrapped_builder.schema.models import ReportSlide, SlideKind, Theme
from wrapped_builder.schema.themes import DEFAULT_THEME, TAILWIND_COLORS, parse_color, resolve_gradient


_LOGGER = logging.getLogger(__name__)

BASE_SIZE = (450, 800)
DEFAULT_SCALE = 2

_DEFAULT_ICONS = {
    SlideKind.INTRO: "🎉",
    SlideKind.STAT: "📊",
    SlideKind.COMPARISON: "🔥",
    SlideKind.ACHIEVEMENT: "🏆",
    SlideKind.CLOSING: "💪",
}

_REGULAR_FONTS = ("DejaVuSans.ttf", "Arial.ttf")
_BOLD_FONTS = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf")


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

class Fonts:
    """Scaled, cached TrueType fonts with Pillow's built-in font as fallback."""

    def __init__(self, scale: float = DEFAULT_SCALE) -> None:
        self.scale = scale
        self._cache: dict[tuple[int, bool], ImageFont.ImageFont] = {}

    def get(self, size_pt: int, bold: bool = False):
        px = int(size_pt * self.scale)
        key = (px, bold)
        if key not in self._cache:
            self._cache[key] = self._load(px, bold)
        return self._cache[key]

    @staticmethod
    def _load(px: int, bold: bool):
        for name in (_BOLD_FONTS if bold else _REGULAR_FONTS):
            try:
                return ImageFont.truetype(name, px)
            except OSError:
                continue
        _LOGGER.debug("No TrueType font found, using Pillow's default at %dpx", px)
        return ImageFont.load_default(size=px)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def gradient_background(size: tuple[int, int], start, end) -> Image.Image:
    """Top-left to bottom-right linear blend between two RGB colors."""
    w, h = size
    xs = np.linspace(0.0, 1.0, w)[None, :]
    ys = np.linspace(0.0, 1.0, h)[:, None]
    t = ((xs + ys) / 2.0)[..., None]
    pixels = np.asarray(start, dtype=float) * (1 - t) + np.asarray(end, dtype=float) * t
    return Image.fromarray(pixels.round().astype(np.uint8))


def text_fill(token: str | None):
    """RGBA fill for a ``textColor`` token ("text-white", "#ffcc00", ...)."""
    if not token or token == "text-white":
        return WHITE
    name = token.removeprefix("text-")
    if name in TAILWIND_COLORS:
        return (*parse_color(TAILWIND_COLORS[name]), 255)
    try:
        return (*parse_color(name), 255)
    except ValueError:
        return WHITE


def png_bytes(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def data_uri(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


@dataclass
class _Block:
    height: float
    paint: Callable[[ImageDraw.ImageDraw, float], None]
    gap_after: float = 0


# ---------------------------------------------------------------------------
# SlideRenderer
# ---------------------------------------------------------------------------

class SlideRenderer:
    """Renders slides for one customer deck.

    Parameters
    ----------
    theme : Theme
        Supplies fallback colors when a gradient token is unrecognised.
    business_name : str
        Printed on the closing slide.
    logo : PIL.Image.Image, optional
        Watermark drawn in the top-left corner.
    size : tuple[int, int]
        Card size before scaling.
    scale : int
        Pixel multiplier for sharper exports.
    """

    def __init__(self, theme: Theme = DEFAULT_THEME, business_name: str = "",
                 logo: Image.Image | None = None, size=BASE_SIZE,
                 scale: int = DEFAULT_SCALE) -> None:
        self.theme = theme
        self.business_name = business_name
        self.logo = logo
        self.scale = scale
        self.width = int(size[0] * scale)
        self.height = int(size[1] * scale)
        self.margin = int(self.width * 0.1)
        self.fonts = Fonts(scale)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, slide: ReportSlide, index: int = 0, total: int = 1) -> Image.Image:
        """Draw *slide* as slide *index* of *total*."""
        start, end = resolve_gradient(slide.gradient, self.theme)
        image = gradient_background((self.width, self.height), start, end)
        draw = ImageDraw.Draw(image, "RGBA")

        blocks = self._blocks(draw, slide)
        content_h = sum(b.height + b.gap_after for b in blocks)
        y = max(self.margin, (self.height - content_h) / 2)
        for block in blocks:
            block.paint(draw, y)
            y += block.height + block.gap_after

        if slide.kind == SlideKind.INTRO:
            self._hint(draw, "Tap to continue →")
        self._dots(draw, index, total)
        if self.logo is not None:
            self._watermark(image)
        return image

    def render_png(self, slide: ReportSlide, index: int = 0, total: int = 1) -> bytes:
        return png_bytes(self.render(slide, index, total))

    # ------------------------------------------------------------------
    # Content blocks
    # ------------------------------------------------------------------

    def _text(self, draw, text: str | None, size_pt: int, bold: bool = False,
              fill=WHITE, gap_pt: int = 16) -> list[_Block]:
        if not text:
            return []
        font = self.fonts.get(size_pt, bold)
        lines = self._wrap(draw, text, font)
        line_h = text_size(draw, "Ag", font)[1] * 1.25
        cx = self.width / 2

        def paint(d, y):
            for i, line in enumerate(lines):
                w = text_size(d, line, font)[0]
                d.text((cx - w / 2, y + i * line_h), line, font=font, fill=fill)

        return [_Block(height=line_h * len(lines), paint=paint,
                       gap_after=gap_pt * self.scale)]

    def _wrap(self, draw, text: str, font) -> list[str]:
        max_w = self.width - 2 * self.margin
        if text_size(draw, text, font)[0] <= max_w:
            return [text]
        avg = max(1.0, text_size(draw, text, font)[0] / len(text))
        return textwrap.wrap(text, width=max(4, int(max_w / avg))) or [text]

    def _chart(self, slide: ReportSlide) -> list[_Block]:
        chart = slide.chart_data
        if chart is None:
            return []
        h = chart_height(chart, self.width)
        x0, x1 = self.margin, self.width - self.margin

        def paint(d, y):
            draw_chart(d, (x0, y, x1, y + h), chart, self.fonts)

        return [_Block(height=h, paint=paint)]

    def _blocks(self, draw, slide: ReportSlide) -> list[_Block]:
        fill = text_fill(slide.text_color)
        icon = slide.icon or _DEFAULT_ICONS.get(slide.kind)
        kind = slide.kind

        if kind in (SlideKind.INTRO, SlideKind.ACHIEVEMENT):
            return (self._text(draw, icon, 64, gap_pt=24)
                    + self._text(draw, slide.title, 34, bold=True, fill=fill)
                    + self._text(draw, slide.subtitle, 20, fill=fill))
        if kind == SlideKind.STAT:
            return (self._text(draw, icon, 70, gap_pt=24)
                    + self._text(draw, slide.main_stat, 84, bold=True, fill=fill)
                    + self._text(draw, slide.stat_label, 24, bold=True, fill=fill))
        if kind == SlideKind.COMPARISON:
            return (self._text(draw, icon, 60, gap_pt=24)
                    + self._text(draw, slide.title, 28, bold=True, fill=fill, gap_pt=24)
                    + self._text(draw, slide.main_stat, 56, bold=True, fill=fill, gap_pt=24)
                    + self._text(draw, slide.comparison, 20, fill=fill))
        if kind == SlideKind.CHART:
            return (self._text(draw, slide.title, 28, bold=True, fill=fill, gap_pt=32)
                    + self._chart(slide))
        if kind == SlideKind.GRID:
            return (self._text(draw, slide.title, 24, bold=True, fill=fill, gap_pt=24)
                    + self._chart(slide))
        if kind == SlideKind.LEADERBOARD:
            return self._chart(slide)
        if kind == SlideKind.CLOSING:
            return (self._text(draw, icon, 60, gap_pt=24)
                    + self._text(draw, slide.title, 34, bold=True, fill=fill, gap_pt=24)
                    + self._text(draw, slide.subtitle, 24, fill=fill, gap_pt=32)
                    + self._text(draw, self.business_name, 18, fill=MUTED))
        return self._text(draw, slide.title, 28, bold=True, fill=fill)

    # ------------------------------------------------------------------
    # Chrome
    # ------------------------------------------------------------------

    def _hint(self, draw, text: str) -> None:
        font = self.fonts.get(14)
        w, h = text_size(draw, text, font)
        y = self.height - 32 * self.scale - h * 2
        draw.text(((self.width - w) / 2, y), text, font=font, fill=(255, 255, 255, 128))

    def _dots(self, draw, index: int, total: int) -> None:
        if total <= 0:
            return
        s = self.scale
        dot, wide, gap = 8 * s, 32 * s, 8 * s
        row_w = wide + (total - 1) * dot + (total - 1) * gap
        x = (self.width - row_w) / 2
        y = self.height - 16 * s - dot
        for i in range(total):
            w = wide if i == index else dot
            fill = WHITE if i == index else (255, 255, 255, 102)
            draw.rounded_rectangle([x, y, x + w, y + dot], radius=dot // 2, fill=fill)
            x += w + gap

    def _watermark(self, image: Image.Image) -> None:
        logo = self.logo.convert("RGBA")
        target_h = 48 * self.scale
        ratio = target_h / max(1, logo.height)
        logo = logo.resize((max(1, int(logo.width * ratio)), target_h))
        offset = 24 * self.scale
        image.paste(logo, (offset, offset), logo)
