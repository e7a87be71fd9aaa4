"""Slideshow - navigation state and image export for one customer's deck.

The deck is a clamped cursor over the slide list: ``next`` stops at the last
slide, ``previous`` at the first, and tapping the slide body advances.
Exports always render the *current* slide, so exporting the whole deck walks
the cursor through every index in order, waiting a settle delay after each
move before capturing.

Usage::

    show = Slideshow.from_dicts(result.slides, customer_name="Jane Doe",
                                business_name="Acme", theme=theme)
    show.next()
    png = show.export_current()          # Jane Doe-slide-2.png
    show.save_all("out/jane")            # every slide, in order
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from wrapped_builder.generator.renderer import SlideRenderer, data_uri
from wrapped_builder.schema.models import ReportSlide, Theme
from wrapped_builder.schema.themes import DEFAULT_THEME


_LOGGER = logging.getLogger(__name__)

SETTLE_DELAY = 0.5


def load_slides(slides: list[dict]) -> list[ReportSlide]:
    """Parse slide dicts, dropping entries with an unknown or missing type."""
    parsed: list[ReportSlide] = []
    for i, raw in enumerate(slides or []):
        if not isinstance(raw, dict):
            _LOGGER.warning("Skipping slide %d: not an object", i + 1)
            continue
        try:
            parsed.append(ReportSlide.from_dict(raw))
        except ValueError:
            _LOGGER.warning("Skipping slide %d: unknown type %r", i + 1, raw.get("type"))
    return parsed


def export_filename(customer_name: str, index: int) -> str:
    """``<customerName>-slide-<index+1>.png`` with path separators replaced."""
    safe = customer_name.replace("/", "-").replace("\\", "-")
    return f"{safe}-slide-{index + 1}.png"


@dataclass
class ExportedSlide:
    filename: str
    png: bytes

    @property
    def data_uri(self) -> str:
        return data_uri(self.png)


class Slideshow:
    """Interactive deck over a non-empty slide list.

    Parameters
    ----------
    slides : list[ReportSlide]
        The deck, in display order.
    customer_name : str
        Used for export file names.
    logo : PIL.Image.Image, optional
        Watermark passed to the default renderer.
    renderer : SlideRenderer, optional
        Built from *theme*, *business_name*, and *logo* when not given.
    settle_delay : float
        Seconds to wait after each cursor move in :meth:`export_all`.
    """

    def __init__(self, slides: list[ReportSlide], customer_name: str,
                 business_name: str = "", theme: Theme = DEFAULT_THEME,
                 logo=None, renderer: SlideRenderer | None = None,
                 settle_delay: float = SETTLE_DELAY) -> None:
        if not slides:
            raise ValueError("A slideshow needs at least one slide")
        self.slides = list(slides)
        self.customer_name = customer_name
        self.renderer = renderer or SlideRenderer(
            theme=theme, business_name=business_name, logo=logo,
        )
        self.settle_delay = settle_delay
        self.index = 0

    @classmethod
    def from_dicts(cls, slides: list[dict], customer_name: str, **kwargs) -> "Slideshow":
        return cls(load_slides(slides), customer_name, **kwargs)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.slides)

    @property
    def current(self) -> ReportSlide:
        return self.slides[self.index]

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == len(self.slides) - 1

    @property
    def counter(self) -> str:
        return f"{self.index + 1} / {len(self.slides)}"

    def next(self) -> int:
        if not self.is_last:
            self.index += 1
        return self.index

    def previous(self) -> int:
        if not self.is_first:
            self.index -= 1
        return self.index

    def tap(self) -> int:
        """Tapping the slide body advances, like :meth:`next`."""
        return self.next()

    def go_to(self, index: int) -> int:
        self.index = max(0, min(index, len(self.slides) - 1))
        return self.index

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_current(self) -> ExportedSlide:
        png = self.renderer.render_png(self.current, self.index, len(self.slides))
        return ExportedSlide(filename=export_filename(self.customer_name, self.index), png=png)

    def export_all(self, sleep=time.sleep) -> list[ExportedSlide]:
        """Visit every slide in order, settle, and export it."""
        exported: list[ExportedSlide] = []
        for i in range(len(self.slides)):
            self.go_to(i)
            sleep(self.settle_delay)
            exported.append(self.export_current())
        return exported

    def save_all(self, directory: str | Path, sleep=time.sleep) -> list[Path]:
        """Export every slide and write the PNGs into *directory*."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        paths: list[Path] = []
        for item in self.export_all(sleep=sleep):
            path = directory / item.filename
            path.write_bytes(item.png)
            paths.append(path)
        _LOGGER.info("Saved %d slide(s) to %s", len(paths), directory)
        return paths
