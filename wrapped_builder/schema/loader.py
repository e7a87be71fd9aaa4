"""Theme loader - YAML serialization and deserialization for theme catalogs.

Lets brand themes live next to the deployment as human-readable YAML instead
of being limited to the built-in presets.
"""

from pathlib import Path

import yaml

from .models import Theme
from .themes import PRESET_THEMES, validate_theme


def save_themes(themes, path: str | Path) -> None:
    """Serialize a sequence of Themes to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"themes": [t.to_dict() for t in themes]}
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_themes(path: str | Path) -> list[Theme]:
    """Deserialize a theme catalog from a YAML file."""
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return [validate_theme(Theme.from_dict(t)) for t in data.get("themes", [])]


def theme_catalog(path: str | Path | None = None) -> list[Theme]:
    """Built-in presets followed by any themes defined in *path*."""
    themes = list(PRESET_THEMES)
    if path:
        themes.extend(load_themes(path))
    return themes
