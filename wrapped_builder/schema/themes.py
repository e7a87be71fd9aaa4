"""Theme presets and gradient-token resolution.

Gradients are stored as Tailwind-style class tokens
(``bg-gradient-to-br from-purple-600 to-blue-600``) because that is what the
generation service is told to echo back on every slide.  For rendering, each
token is resolved to a start and end RGB color:

- Named colors (``from-teal-500``) use the Tailwind palette below
- Arbitrary colors (``from-[#0ea5e9]``, ``from-[#fff]``, ``from-[red]``) are
  parsed with Pillow's ``ImageColor``
- Anything unrecognised falls back to the theme's brand colors
"""

import re

from PIL import ImageColor

from .models import Theme


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

PRESET_THEMES: tuple[Theme, ...] = (
    Theme(
        name="Vibrant",
        gradients=(
            "bg-gradient-to-br from-purple-600 to-blue-600",
            "bg-gradient-to-br from-orange-500 to-pink-600",
            "bg-gradient-to-br from-green-500 to-teal-600",
            "bg-gradient-to-br from-yellow-500 to-red-600",
            "bg-gradient-to-br from-indigo-600 to-purple-700",
        ),
        primary_color="#8b5cf6",
        accent_color="#ec4899",
    ),
    Theme(
        name="Ocean",
        gradients=(
            "bg-gradient-to-br from-blue-600 to-cyan-500",
            "bg-gradient-to-br from-teal-500 to-blue-600",
            "bg-gradient-to-br from-cyan-400 to-blue-700",
            "bg-gradient-to-br from-blue-500 to-indigo-600",
            "bg-gradient-to-br from-sky-400 to-blue-600",
        ),
        primary_color="#0ea5e9",
        accent_color="#06b6d4",
    ),
    Theme(
        name="Sunset",
        gradients=(
            "bg-gradient-to-br from-orange-500 to-red-600",
            "bg-gradient-to-br from-yellow-400 to-orange-600",
            "bg-gradient-to-br from-red-500 to-pink-600",
            "bg-gradient-to-br from-amber-500 to-red-500",
            "bg-gradient-to-br from-orange-600 to-rose-600",
        ),
        primary_color="#f97316",
        accent_color="#dc2626",
    ),
    Theme(
        name="Forest",
        gradients=(
            "bg-gradient-to-br from-green-600 to-emerald-700",
            "bg-gradient-to-br from-lime-500 to-green-700",
            "bg-gradient-to-br from-emerald-500 to-teal-600",
            "bg-gradient-to-br from-green-500 to-cyan-600",
            "bg-gradient-to-br from-teal-600 to-green-700",
        ),
        primary_color="#10b981",
        accent_color="#14b8a6",
    ),
    Theme(
        name="Royal",
        gradients=(
            "bg-gradient-to-br from-purple-700 to-indigo-800",
            "bg-gradient-to-br from-indigo-600 to-purple-700",
            "bg-gradient-to-br from-violet-600 to-purple-700",
            "bg-gradient-to-br from-purple-600 to-fuchsia-700",
            "bg-gradient-to-br from-indigo-700 to-violet-800",
        ),
        primary_color="#7c3aed",
        accent_color="#6366f1",
    ),
    Theme(
        name="Monochrome",
        gradients=(
            "bg-gradient-to-br from-gray-800 to-gray-900",
            "bg-gradient-to-br from-slate-700 to-gray-900",
            "bg-gradient-to-br from-gray-700 to-slate-900",
            "bg-gradient-to-br from-zinc-800 to-gray-900",
            "bg-gradient-to-br from-neutral-800 to-slate-900",
        ),
        primary_color="#1f2937",
        accent_color="#4b5563",
    ),
)

DEFAULT_THEME = PRESET_THEMES[0]


def get_theme(name: str, themes=PRESET_THEMES) -> Theme:
    """Look up a theme by name (case-insensitive).

    Raises:
        KeyError: If no theme has that name.
    """
    for theme in themes:
        if theme.name.lower() == name.lower():
            return theme
    raise KeyError(
        f"Unknown theme '{name}'. "
        f"Valid themes: {', '.join(t.name for t in themes)}"
    )


def custom_theme(primary: str, accent: str) -> Theme:
    """Build the "Custom" theme from two brand colors.

    Raises:
        ValueError: If either color cannot be parsed.
    """
    return validate_theme(Theme(
        name="Custom",
        gradients=(
            f"bg-gradient-to-br from-[{primary}] to-[{accent}]",
            f"bg-gradient-to-br from-[{accent}] to-[{primary}]",
            f"bg-gradient-to-br from-purple-600 to-[{primary}]",
            f"bg-gradient-to-br from-[{primary}] to-pink-600",
            f"bg-gradient-to-br from-blue-600 to-[{accent}]",
        ),
        primary_color=primary,
        accent_color=accent,
    ))


def theme_from_payload(payload: dict | None) -> Theme:
    """Theme sent by a client, or the default when absent or gradient-less.

    Raises:
        ValueError: If the theme carries a color that cannot be parsed.
    """
    if not payload or not payload.get("gradients"):
        return DEFAULT_THEME
    return validate_theme(Theme.from_dict(payload))


# ---------------------------------------------------------------------------
# Gradient token resolution
# ---------------------------------------------------------------------------

TAILWIND_COLORS: dict[str, str] = {
    "amber-500": "#f59e0b",
    "blue-500": "#3b82f6",
    "blue-600": "#2563eb",
    "blue-700": "#1d4ed8",
    "cyan-400": "#22d3ee",
    "cyan-500": "#06b6d4",
    "cyan-600": "#0891b2",
    "emerald-500": "#10b981",
    "emerald-700": "#047857",
    "fuchsia-700": "#a21caf",
    "gray-700": "#374151",
    "gray-800": "#1f2937",
    "gray-900": "#111827",
    "green-500": "#22c55e",
    "green-600": "#16a34a",
    "green-700": "#15803d",
    "indigo-600": "#4f46e5",
    "indigo-700": "#4338ca",
    "indigo-800": "#3730a3",
    "lime-500": "#84cc16",
    "neutral-800": "#262626",
    "orange-500": "#f97316",
    "orange-600": "#ea580c",
    "pink-600": "#db2777",
    "purple-600": "#9333ea",
    "purple-700": "#7e22ce",
    "red-500": "#ef4444",
    "red-600": "#dc2626",
    "rose-600": "#e11d48",
    "sky-400": "#38bdf8",
    "slate-700": "#334155",
    "slate-900": "#0f172a",
    "teal-500": "#14b8a6",
    "teal-600": "#0d9488",
    "violet-600": "#7c3aed",
    "violet-800": "#5b21b6",
    "yellow-400": "#facc15",
    "yellow-500": "#eab308",
    "zinc-800": "#27272a",
}

_STOP_RE = re.compile(r"\b(from|to)-(\[[^\]]+\]|[a-z]+-\d{2,3})")


def parse_color(color: str) -> tuple[int, int, int]:
    """Convert any CSS color Pillow understands ('#fff', '#0ea5e9', 'red') to RGB.

    Raises:
        ValueError: If *color* is not a recognisable color.
    """
    try:
        return ImageColor.getrgb(color)[:3]
    except (ValueError, AttributeError, TypeError):
        raise ValueError(f"Invalid color {color!r}") from None


def validate_theme(theme: Theme) -> Theme:
    """Return *theme* unchanged, or raise ValueError naming its first bad color."""
    parse_color(theme.primary_color)
    parse_color(theme.accent_color)
    for token in theme.gradients:
        for _, raw in _STOP_RE.findall(token):
            if raw.startswith("["):
                parse_color(raw[1:-1])
    return theme


def _stop_rgb(raw: str) -> tuple[int, int, int] | None:
    if raw.startswith("["):
        try:
            return parse_color(raw[1:-1])
        except ValueError:
            return None
    hex_color = TAILWIND_COLORS.get(raw)
    return parse_color(hex_color) if hex_color else None


def resolve_gradient(token: str, theme: Theme = DEFAULT_THEME):
    """Resolve a gradient token to ``(start_rgb, end_rgb)``.

    Stops that cannot be parsed are skipped, leaving the theme's brand color
    for that edge.
    """
    start, end = parse_color(theme.primary_color), parse_color(theme.accent_color)
    for edge, raw in _STOP_RE.findall(token or ""):
        rgb = _stop_rgb(raw)
        if rgb is None:
            continue
        if edge == "from":
            start = rgb
        else:
            end = rgb
    return start, end
