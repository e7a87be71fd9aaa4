"""Customer record builder - projects a raw row through the column mappings.

Only name, email, phone, and metadata reach the ``Customer``.  Columns mapped
to ``transaction`` are classified but not surfaced into the record, and
``ignore`` columns and blank cells are skipped.  When several columns map to
the same direct field the last one in column order wins.
"""

import math
from typing import Any

from wrapped_builder.schema.models import ColumnMapping, Customer, MappedTo, RawRow


SAMPLE_CUSTOMER_NAME = "Sample Customer"

_DIRECT_FIELDS = {
    MappedTo.NAME: "name",
    MappedTo.EMAIL: "email",
    MappedTo.PHONE: "phone",
}


def is_blank(value: Any) -> bool:
    """True for None, NaN, and empty or whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def build_customer(row: RawRow, mappings: list[ColumnMapping],
                   fallback_name: str = SAMPLE_CUSTOMER_NAME) -> Customer:
    """Build a Customer from one row.

    Args:
        row: Raw row keyed by original column name.
        mappings: One mapping per column.
        fallback_name: Used when no non-blank ``name`` column exists.
    """
    fields: dict[str, str] = {}
    metadata: dict[str, Any] = {}

    for mapping in mappings:
        if mapping.mapped_to == MappedTo.IGNORE:
            continue
        value = row.get(mapping.original_name)
        if is_blank(value):
            continue
        if mapping.mapped_to == MappedTo.METADATA:
            metadata[mapping.original_name] = value
        elif mapping.mapped_to in _DIRECT_FIELDS:
            fields[_DIRECT_FIELDS[mapping.mapped_to]] = str(value).strip()

    return Customer(
        name=fields.get("name") or fallback_name,
        email=fields.get("email"),
        phone=fields.get("phone"),
        metadata=metadata,
    )


def build_customers(rows: list[RawRow], mappings: list[ColumnMapping]) -> list[Customer]:
    """Build one Customer per row, numbering unnamed customers from 1."""
    return [
        build_customer(row, mappings, fallback_name=f"Customer {i + 1}")
        for i, row in enumerate(rows)
    ]
