"""Schema package - typed models shared by every pipeline stage.

- models.py: Core dataclasses (ColumnMapping, Customer, Theme, ReportSlide, ...)
- themes.py: Preset themes, custom themes, gradient-token resolution
- session.py: Immutable workflow session state
- loader.py: YAML serialization for theme catalogs
"""

from .loader import load_themes, save_themes, theme_catalog
from .models import (
    BarItem,
    BarsChart,
    ColumnMapping,
    Customer,
    GeneratedReport,
    GridData,
    GridItem,
    IngestResult,
    LeaderboardData,
    MappedTo,
    ProgressChart,
    RawRow,
    ReportSlide,
    SlideKind,
    Theme,
    TransactionKind,
    VISUAL_KINDS,
)
from .session import BusinessProfile, SessionState, WorkflowStep
from .themes import (
    DEFAULT_THEME,
    PRESET_THEMES,
    custom_theme,
    get_theme,
    parse_color,
    resolve_gradient,
    theme_from_payload,
    validate_theme,
)

__all__ = [
    # Models
    "BarItem",
    "BarsChart",
    "ColumnMapping",
    "Customer",
    "GeneratedReport",
    "GridData",
    "GridItem",
    "IngestResult",
    "LeaderboardData",
    "MappedTo",
    "ProgressChart",
    "RawRow",
    "ReportSlide",
    "SlideKind",
    "Theme",
    "TransactionKind",
    "VISUAL_KINDS",
    # Session
    "BusinessProfile",
    "SessionState",
    "WorkflowStep",
    # Themes
    "DEFAULT_THEME",
    "PRESET_THEMES",
    "custom_theme",
    "get_theme",
    "parse_color",
    "resolve_gradient",
    "theme_from_payload",
    "validate_theme",
    # Loader
    "load_themes",
    "save_themes",
    "theme_catalog",
]
