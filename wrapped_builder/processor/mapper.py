"""Column mapper - assigns a semantic role to every uploaded column.

Classification is a case-insensitive substring match against keyword sets,
checked in a fixed precedence order.  The first match wins; unmatched
columns default to ``metadata`` (never ``ignore``) so that every column can
feed the fun stats in a report.

Usage::

    from wrapped_builder.processor.mapper import auto_map, update_mapping

    mappings = auto_map(["Full Name", "E-mail", "Visits"])
    mappings = update_mapping(mappings, 2, MappedTo.IGNORE)
"""

from collections import Counter
from dataclasses import replace

from wrapped_builder.schema.models import ColumnMapping, MappedTo, TransactionKind


# ---------------------------------------------------------------------------
# Keyword rules, in precedence order
# ---------------------------------------------------------------------------

MAPPING_RULES: tuple[tuple[tuple[str, ...], MappedTo, TransactionKind | None], ...] = (
    (("name", "customer"), MappedTo.NAME, None),
    (("email", "mail"), MappedTo.EMAIL, None),
    (("phone", "mobile", "contact"), MappedTo.PHONE, None),
    (("date",), MappedTo.TRANSACTION, TransactionKind.DATE),
    (("amount", "price", "cost"), MappedTo.TRANSACTION, TransactionKind.AMOUNT),
    (("service", "product", "item"), MappedTo.TRANSACTION, TransactionKind.SERVICE),
)


def classify_column(column: str) -> ColumnMapping:
    """Heuristically classify a single column name."""
    lower = column.lower()
    for keywords, mapped_to, sub_type in MAPPING_RULES:
        if any(k in lower for k in keywords):
            return ColumnMapping(original_name=column, mapped_to=mapped_to, sub_type=sub_type)
    return ColumnMapping(original_name=column, mapped_to=MappedTo.METADATA)


def transaction_kind(column: str) -> TransactionKind | None:
    """Transaction sub-type implied by a column name, if any."""
    lower = column.lower()
    for keywords, mapped_to, sub_type in MAPPING_RULES:
        if mapped_to == MappedTo.TRANSACTION and any(k in lower for k in keywords):
            return sub_type
    return None


def auto_map(columns: list[str]) -> list[ColumnMapping]:
    """One mapping per column, in input order."""
    return [classify_column(c) for c in columns]


def update_mapping(mappings: list[ColumnMapping], index: int,
                   mapped_to: MappedTo) -> list[ColumnMapping]:
    """Return a copy of *mappings* with column *index* re-assigned.

    A column moved to ``transaction`` keeps its sub-type (or derives one from
    its name); any other role clears the sub-type.

    Raises:
        IndexError: If *index* is out of range.
    """
    if not 0 <= index < len(mappings):
        raise IndexError(f"Column index {index} out of range (0-{len(mappings) - 1})")
    current = mappings[index]
    if mapped_to == MappedTo.TRANSACTION:
        sub_type = current.sub_type or transaction_kind(current.original_name)
    else:
        sub_type = None
    updated = list(mappings)
    updated[index] = replace(current, mapped_to=mapped_to, sub_type=sub_type)
    return updated


def find_column(mappings: list[ColumnMapping], name: str) -> int:
    """Index of the mapping for column *name*.

    Raises:
        KeyError: If no mapping has that original name.
    """
    for i, m in enumerate(mappings):
        if m.original_name == name:
            return i
    raise KeyError(f"No column named '{name}'")


def mapping_summary(mappings: list[ColumnMapping]) -> dict[str, int]:
    """Count of columns per role, in role declaration order."""
    counts = Counter(m.mapped_to for m in mappings)
    return {role.value: counts.get(role, 0) for role in MappedTo}
