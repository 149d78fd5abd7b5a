"""
Parsing of operator-typed field values.

Every field yields a FieldParseResult carrying either the parsed value or the
reason it was rejected, so no bad input is dropped without being reported.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..models.inventory import FieldParseResult, ItemUpdate


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a price-like value to Decimal.

    Floats go through ``str`` so 2.1 becomes Decimal("2.1") rather than its
    binary expansion.

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Decimal, or None if the value is not a finite number
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not result.is_finite():
        return None
    return result


def parse_int_field(field: str, raw: str, minimum: Optional[int] = None) -> FieldParseResult:
    """Parse a whole-number field. Blank input means "not supplied"."""
    text = raw.strip()
    if not text:
        return FieldParseResult(field=field, raw=raw, supplied=False)
    try:
        value = int(text)
    except ValueError:
        return FieldParseResult(field=field, raw=raw, error=f"'{text}' is not a whole number")
    if minimum is not None and value < minimum:
        return FieldParseResult(field=field, raw=raw, error=f"must be at least {minimum}")
    return FieldParseResult(field=field, raw=raw, value=value)


def parse_price_field(field: str, raw: str) -> FieldParseResult:
    """Parse a non-negative price. Blank input means "not supplied"."""
    text = raw.strip().lstrip("$")
    if not text:
        return FieldParseResult(field=field, raw=raw, supplied=False)
    value = to_decimal(text)
    if value is None:
        return FieldParseResult(field=field, raw=raw, error=f"'{text}' is not a number")
    if value < 0:
        return FieldParseResult(field=field, raw=raw, error="must not be negative")
    return FieldParseResult(field=field, raw=raw, value=value)


def parse_category_field(field: str, raw: str, categories: Sequence[str]) -> FieldParseResult:
    """
    Parse a category given either by its menu number (1-based) or its name.

    Args:
        field: Field name for reporting
        raw: Operator input
        categories: Allowed categories in menu order

    Returns:
        FieldParseResult with the canonical category name
    """
    text = raw.strip()
    if not text:
        return FieldParseResult(field=field, raw=raw, supplied=False)
    if text.isdigit():
        index = int(text)
        if 1 <= index <= len(categories):
            return FieldParseResult(field=field, raw=raw, value=categories[index - 1])
        return FieldParseResult(
            field=field, raw=raw, error=f"choose a number between 1 and {len(categories)}"
        )
    for category in categories:
        if category.lower() == text.lower():
            return FieldParseResult(field=field, raw=raw, value=category)
    return FieldParseResult(field=field, raw=raw, error=f"unknown category '{text}'")


def parse_text_field(field: str, raw: str) -> FieldParseResult:
    """Parse a single-line text field. Blank input means "not supplied"."""
    text = raw.strip()
    if not text:
        return FieldParseResult(field=field, raw=raw, supplied=False)
    return FieldParseResult(field=field, raw=raw, value=text)


def parse_item_update(
    raw_fields: Mapping[str, str],
    categories: Sequence[str]
) -> Tuple[ItemUpdate, List[FieldParseResult]]:
    """
    Parse operator input for an item update.

    Args:
        raw_fields: Field name to typed text; blank or missing fields are kept
        categories: Allowed categories in menu order

    Returns:
        Tuple of (ItemUpdate with the parsed fields, list of failed results)
    """
    results = [
        parse_int_field("product_id", raw_fields.get("product_id", ""), minimum=1),
        parse_text_field("name", raw_fields.get("name", "")),
        parse_category_field("category", raw_fields.get("category", ""), categories),
        parse_int_field("quantity", raw_fields.get("quantity", ""), minimum=0),
        parse_price_field("last_price", raw_fields.get("last_price", "")),
    ]

    values: Dict[str, Any] = {}
    failures = []
    for result in results:
        if not result.ok:
            failures.append(result)
        elif result.supplied:
            values[result.field] = result.value

    return ItemUpdate(**values), failures
