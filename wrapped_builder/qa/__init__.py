"""QA validation package for the report builder.

Checks generated slide decks before they are shown or exported: slide
count, known slide types, theme gradients, and numeric chart fields.
"""

from .validator import (
    DeckValidator,
    Issue,
    QAResult,
    validate_slides,
)

__all__ = [
    "DeckValidator",
    "Issue",
    "QAResult",
    "validate_slides",
]
