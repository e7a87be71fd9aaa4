"""Core models - the contract between ingestion, generation, and rendering.

Defines the typed structure of everything that flows through the pipeline:
column mappings, customers, themes, and the slide variants returned by the
generation service. Wire dictionaries use the camelCase keys of the HTTP API
(``originalName``, ``mainStat``, ``chartData`` ...); attributes are snake_case.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


RawRow = dict[str, Any]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class MappedTo(Enum):
    """Semantic role assigned to an input column."""
    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    TRANSACTION = "transaction"
    METADATA = "metadata"        # Extra info used for fun stats
    IGNORE = "ignore"


class TransactionKind(Enum):
    """Sub-type of a transaction column."""
    DATE = "date"
    AMOUNT = "amount"
    SERVICE = "service"


class SlideKind(Enum):
    """The eight slide variants the generation service may return."""
    INTRO = "intro"
    STAT = "stat"
    CHART = "chart"
    GRID = "grid"
    LEADERBOARD = "leaderboard"
    COMPARISON = "comparison"
    ACHIEVEMENT = "achievement"
    CLOSING = "closing"


VISUAL_KINDS = frozenset({SlideKind.CHART, SlideKind.GRID, SlideKind.LEADERBOARD})


def _number(value: Any, default: float = 0) -> float:
    """Return *value* if it is already numeric, else *default*."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value
    return default


# ---------------------------------------------------------------------------
# Ingestion and mapping
# ---------------------------------------------------------------------------

@dataclass
class IngestResult:
    """Rows and header-ordered column names read from an upload."""
    rows: list[RawRow] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.rows and not self.columns

    def to_dict(self) -> dict:
        return {"rows": self.rows, "columns": self.columns}


@dataclass
class ColumnMapping:
    """Role assignment for a single input column."""
    original_name: str
    mapped_to: MappedTo = MappedTo.METADATA
    sub_type: TransactionKind | None = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "originalName": self.original_name,
            "mappedTo": self.mapped_to.value,
        }
        if self.sub_type:
            d["subType"] = self.sub_type.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "ColumnMapping":
        return cls(
            original_name=d["originalName"],
            mapped_to=MappedTo(d.get("mappedTo", "metadata")),
            sub_type=TransactionKind(d["subType"]) if d.get("subType") else None,
        )


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------

DEFAULT_CUSTOMER_NAME = "Customer"


@dataclass
class Customer:
    """A normalized customer record built from one row."""
    name: str
    email: str | None = None
    phone: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            self.name = DEFAULT_CUSTOMER_NAME

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0]

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"name": self.name, "metadata": dict(self.metadata)}
        if self.email:
            d["email"] = self.email
        if self.phone:
            d["phone"] = self.phone
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Customer":
        return cls(
            name=d.get("name") or DEFAULT_CUSTOMER_NAME,
            email=d.get("email"),
            phone=d.get("phone"),
            metadata=dict(d.get("metadata") or {}),
        )


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Theme:
    """A named set of five gradient tokens plus two brand colors."""
    name: str
    gradients: tuple[str, ...]
    primary_color: str
    accent_color: str

    def gradient_for(self, position: int) -> str:
        """Gradient for slide *position*, cycling through the set."""
        return self.gradients[position % len(self.gradients)]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "gradients": list(self.gradients),
            "primaryColor": self.primary_color,
            "accentColor": self.accent_color,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Theme":
        gradients = tuple(d.get("gradients") or ())
        if not gradients:
            raise ValueError("Theme needs at least one gradient")
        return cls(
            name=d.get("name", "Custom"),
            gradients=gradients,
            primary_color=d.get("primaryColor", "#8b5cf6"),
            accent_color=d.get("accentColor", "#ec4899"),
        )


# ---------------------------------------------------------------------------
# Chart payloads
# ---------------------------------------------------------------------------

@dataclass
class BarItem:
    label: str
    value: float

    def to_dict(self) -> dict:
        return {"label": self.label, "value": self.value}


@dataclass
class BarsChart:
    """Horizontal bars, each scaled against the largest value."""
    data: list[BarItem] = field(default_factory=list)

    @property
    def max_value(self) -> float:
        return max((b.value for b in self.data), default=0)

    def to_dict(self) -> dict:
        return {"type": "bars", "data": [b.to_dict() for b in self.data]}


@dataclass
class ProgressChart:
    """A progress ring showing a single percentage."""
    percentage: float
    label: str = ""

    def to_dict(self) -> dict:
        return {"type": "progress", "percentage": self.percentage, "label": self.label}


@dataclass
class GridItem:
    icon: str
    value: str
    label: str

    def to_dict(self) -> dict:
        return {"icon": self.icon, "value": self.value, "label": self.label}


@dataclass
class GridData:
    """Up to four stat tiles in a 2x2 grid."""
    items: list[GridItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"items": [i.to_dict() for i in self.items]}


@dataclass
class LeaderboardData:
    position: int
    total: int
    category: str = ""

    @property
    def percentile(self) -> float:
        """Share of the field at or below this rank, 0 when the field is empty."""
        if self.total <= 0:
            return 0.0
        return (self.total - self.position + 1) / self.total * 100

    @property
    def top_percent(self) -> int:
        """Percentile rounded half up, e.g. 45 of 500 -> Top 91%."""
        return math.floor(self.percentile + 0.5)

    @property
    def badge(self) -> str:
        text = f"Top {self.top_percent}%"
        return f"{text} in {self.category}" if self.category else text

    def to_dict(self) -> dict:
        return {"position": self.position, "total": self.total, "category": self.category}


ChartData = BarsChart | ProgressChart | GridData | LeaderboardData


def _parse_chart_data(kind: SlideKind, d: Any) -> ChartData | None:
    if not isinstance(d, dict):
        return None
    if kind == SlideKind.CHART:
        if d.get("type") == "bars":
            data = d.get("data") if isinstance(d.get("data"), list) else []
            return BarsChart(data=[
                BarItem(label=str(item.get("label", "")), value=_number(item.get("value")))
                for item in data if isinstance(item, dict)
            ])
        if d.get("type") == "progress":
            return ProgressChart(
                percentage=_number(d.get("percentage")),
                label=str(d.get("label", "")),
            )
        return None
    if kind == SlideKind.GRID:
        items = d.get("items") if isinstance(d.get("items"), list) else []
        return GridData(items=[
            GridItem(
                icon=str(item.get("icon", "")),
                value=str(item.get("value", "")),
                label=str(item.get("label", "")),
            )
            for item in items if isinstance(item, dict)
        ])
    if kind == SlideKind.LEADERBOARD:
        return LeaderboardData(
            position=int(_number(d.get("position"), 1)),
            total=int(_number(d.get("total"), 100)),
            category=str(d.get("category", "")),
        )
    return None


# ---------------------------------------------------------------------------
# ReportSlide
# ---------------------------------------------------------------------------

@dataclass
class ReportSlide:
    """One slide of a generated report.

    Only the fields relevant to the slide's ``kind`` are populated; the rest
    stay ``None``.  ``chart_data`` is set for chart, grid, and leaderboard
    slides.
    """
    kind: SlideKind
    gradient: str = ""
    title: str | None = None
    subtitle: str | None = None
    main_stat: str | None = None
    stat_label: str | None = None
    comparison: str | None = None
    icon: str | None = None
    text_color: str | None = None
    chart_data: ChartData | None = None

    @property
    def is_visual(self) -> bool:
        return self.kind in VISUAL_KINDS

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"type": self.kind.value, "gradient": self.gradient}
        for key, value in (
            ("title", self.title),
            ("subtitle", self.subtitle),
            ("mainStat", self.main_stat),
            ("statLabel", self.stat_label),
            ("comparison", self.comparison),
            ("icon", self.icon),
            ("textColor", self.text_color),
        ):
            if value is not None:
                d[key] = value
        if self.chart_data is not None:
            d["chartData"] = self.chart_data.to_dict()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "ReportSlide":
        """Build a slide from the generation service's JSON.

        Raises:
            ValueError: If ``type`` is missing or not a known slide kind.
        """
        kind = SlideKind(d.get("type"))

        def text(key):
            value = d.get(key)
            return None if value is None else str(value)

        return cls(
            kind=kind,
            gradient=str(d.get("gradient") or ""),
            title=text("title"),
            subtitle=text("subtitle"),
            main_stat=text("mainStat"),
            stat_label=text("statLabel"),
            comparison=text("comparison"),
            icon=text("icon"),
            text_color=text("textColor"),
            chart_data=_parse_chart_data(kind, d.get("chartData")),
        )


# ---------------------------------------------------------------------------
# GeneratedReport
# ---------------------------------------------------------------------------

@dataclass
class GeneratedReport:
    """Result for one customer of a bulk run."""
    customer: Customer
    report: str
    slides: list[dict] | None = None

    def to_dict(self) -> dict:
        return {
            "customer": self.customer.to_dict(),
            "report": self.report,
            "slides": self.slides,
        }
