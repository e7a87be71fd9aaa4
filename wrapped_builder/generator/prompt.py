"""Report request builder - turns a customer and business profile into a prompt.

Two steps:
- ``fetch_website_context``: best-effort scrape of the business website,
  reduced to at most ``limit`` characters of visible text.  Never raises.
- ``build_prompt``: deterministic prompt text containing the business
  context, the customer's metadata, and a catalog of slide templates whose
  gradients are cycled from the theme.
"""

import calendar
import json
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import date

import requests

from wrapped_builder.schema.models import Customer, Theme
from wrapped_builder.schema.themes import DEFAULT_THEME


_LOGGER = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; ReportBuilder/1.0)"
DEFAULT_FETCH_TIMEOUT = 5.0
DEFAULT_CONTEXT_CHARS = 2000
MAX_FETCH_BYTES = 256 * 1024
FETCH_CHUNK_BYTES = 8192

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Website context
# ---------------------------------------------------------------------------

def html_to_text(html: str, limit: int = DEFAULT_CONTEXT_CHARS) -> str:
    """Strip scripts, styles, and tags; collapse whitespace; truncate."""
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _SPACE_RE.sub(" ", text).strip()
    return text[:limit]


def _read_capped(response, max_bytes: int, deadline: float) -> bytes:
    """Read at most *max_bytes* of the body, stopping once *deadline* passes."""
    chunks: list[bytes] = []
    size = 0
    for chunk in response.iter_content(chunk_size=FETCH_CHUNK_BYTES):
        chunks.append(chunk)
        size += len(chunk)
        if size >= max_bytes or time.monotonic() >= deadline:
            break
    return b"".join(chunks)[:max_bytes]


def fetch_website_context(url: str | None, timeout: float = DEFAULT_FETCH_TIMEOUT,
                          limit: int = DEFAULT_CONTEXT_CHARS, session=None,
                          max_bytes: int = MAX_FETCH_BYTES) -> str:
    """Fetch visible text from *url*, or ``""`` on any failure.

    The body is streamed and only the first *max_bytes* are read, so a slow
    or oversized page cannot hold the request past *timeout*.
    """
    if not url:
        return ""
    http = session or requests
    deadline = time.monotonic() + timeout
    try:
        response = http.get(url, headers={"User-Agent": USER_AGENT},
                            timeout=timeout, stream=True)
    except requests.RequestException as exc:
        _LOGGER.warning("Error fetching website %s: %s", url, exc)
        return ""
    try:
        if not response.ok:
            _LOGGER.warning("Website %s returned HTTP %s", url, response.status_code)
            return ""
        body = _read_capped(response, max_bytes, deadline)
    except requests.RequestException as exc:
        _LOGGER.warning("Error reading website %s: %s", url, exc)
        return ""
    finally:
        response.close()
    return html_to_text(body.decode(response.encoding or "utf-8", errors="replace"), limit)


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

def _current_month() -> int:
    return date.today().month


def _current_year() -> int:
    return date.today().year


@dataclass
class ReportRequest:
    """Everything needed to generate one customer's report."""
    customer: Customer
    business_name: str = ""
    business_type: str = ""
    business_context: str = ""
    business_url: str = ""
    theme: Theme = DEFAULT_THEME
    month: int = field(default_factory=_current_month)
    year: int = field(default_factory=_current_year)

    @property
    def period(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month]

    @property
    def next_month_name(self) -> str:
        return calendar.month_name[self.month % 12 + 1]


# ---------------------------------------------------------------------------
# Prompt assembly
# ---------------------------------------------------------------------------

def metadata_block(customer: Customer) -> str:
    """The ``- key: value`` stats block, or ``""`` when there is no metadata."""
    if not customer.metadata:
        return ""
    lines = [f"- {key}: {value}" for key, value in customer.metadata.items()]
    return ("\nAdditional Customer Stats (use these for creative comparisons!):\n"
            + "\n".join(lines))


def _example(obj: dict) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


def slide_catalog(request: ReportRequest) -> str:
    """The numbered catalog of slide templates with cycled gradients."""
    g = request.theme.gradient_for
    first = request.customer.first_name

    intro = _example({
        "type": "intro",
        "title": f"Your {request.month_name} Wrapped",
        "subtitle": f"{first}, let's celebrate!",
        "icon": "🎉",
        "gradient": g(0),
    })
    stat = _example({
        "type": "stat",
        "mainStat": "45",
        "statLabel": "Workouts Completed",
        "icon": "💪",
        "gradient": g(1),
    })
    bars = _example({
        "type": "chart",
        "title": "Your Activity Breakdown",
        "gradient": g(2),
        "chartData": {
            "type": "bars",
            "data": [
                {"label": "Strength", "value": 25},
                {"label": "Cardio", "value": 18},
                {"label": "Yoga", "value": 10},
            ],
        },
    })
    progress = _example({
        "type": "chart",
        "title": "Consistency Score",
        "gradient": g(2),
        "chartData": {"type": "progress", "percentage": 85, "label": "Monthly Goal"},
    })
    grid = _example({
        "type": "grid",
        "title": "Your Stats at a Glance",
        "gradient": g(3),
        "chartData": {
            "items": [
                {"icon": "🔥", "value": "28", "label": "Day Streak"},
                {"icon": "⚡", "value": "3.2k", "label": "Kg Lifted"},
                {"icon": "🏆", "value": "Top 10%", "label": "Rank"},
                {"icon": "⭐", "value": "16", "label": "Classes"},
            ],
        },
    })
    leaderboard = _example({
        "type": "leaderboard",
        "gradient": g(4),
        "chartData": {"position": 45, "total": 500, "category": "Workout Consistency"},
    })
    comparison = _example({
        "type": "comparison",
        "title": "That's like lifting",
        "mainStat": "2 Elephants!",
        "comparison": "3,200kg = 2 baby elephants 🐘",
        "icon": "🐘",
        "gradient": g(5),
    })
    achievement = _example({
        "type": "achievement",
        "title": "Elite Status Unlocked!",
        "subtitle": "Only 12% hit 30+ days",
        "icon": "🏆",
        "gradient": g(6),
    })
    closing = _example({
        "type": "closing",
        "title": f"{request.next_month_name} Awaits!",
        "subtitle": "Let's make it even better",
        "icon": "🚀",
        "gradient": g(7),
    })

    return "\n\n".join([
        f"1. INTRO slide:\n{intro}",
        f"2. STAT slide (big number):\n{stat}",
        f"3. CHART slide (with visual chart):\n{bars}\n\nOR progress ring:\n{progress}",
        f"4. GRID slide (2x2 stats):\n{grid}",
        f"5. LEADERBOARD slide:\n{leaderboard}",
        f"6. COMPARISON slide:\n{comparison}",
        f"7. ACHIEVEMENT slide:\n{achievement}",
        f"8. CLOSING slide:\n{closing}",
    ])


RULES = (
    "Create 6-8 slides using a MIX of the above types",
    "Use ACTUAL numbers from metadata - be specific!",
    "Include at least 1-2 chart/grid/leaderboard slides for visual interest",
    "Use creative comparisons for fun facts",
    "Vary gradients - cycle through: {gradients}",
    "Use emojis that match the content",
    "Make stats shareable and brag-worthy!",
    "Keep text SHORT and PUNCHY",
)


def build_prompt(request: ReportRequest, website_context: str = "") -> str:
    """Assemble the full generation prompt for one customer."""
    business = [
        f"- Business Type: {request.business_type or 'Service Business'}",
        f"- Business Name: {request.business_name or 'Our Business'}",
        f"- Report Period: {request.period}",
    ]
    if request.business_context:
        business.append(f"- About the Business: {request.business_context}")
    if website_context:
        business.append(f"- Website Content: {website_context}")

    gradients = ", ".join(request.theme.gradients)
    rules = "\n".join(
        f"{i}. {rule.format(gradients=gradients)}" for i, rule in enumerate(RULES, start=1)
    )

    return (
        'You are creating a fun, visual "Year Wrapped" style report for a customer. '
        "Generate a JSON structure with 6-8 slides that tell their story through data.\n\n"
        "Business Context:\n"
        + "\n".join(business)
        + "\n\nCustomer Data:\n"
        + f"Name: {request.customer.name}\n"
        + metadata_block(request.customer)
        + "\n\nCreate a JSON array of slides with various types. "
        "You MUST use the actual numbers from the metadata above!\n\n"
        "Available slide types and their structures:\n\n"
        + slide_catalog(request)
        + "\n\nRULES:\n"
        + rules
        + "\n\nReturn ONLY the JSON array, nothing else."
    )
