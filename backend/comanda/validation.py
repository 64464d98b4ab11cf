from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

from .errors import ValidationError


CENT = Decimal("0.01")

# Maximum price/amount: 99,999,999.99 (fits Numeric(10, 2))
MAX_MONEY = Decimal("99999999.99")


@dataclass(frozen=True)
class ItemInput:
    """Validated order line payload."""
    product_name: str
    quantity: int
    unit_price: Decimal
    notes: str | None = None


def parse_money(value: Any, field: str, *, allow_zero: bool = True) -> Decimal:
    """
    Coerce a monetary value to a cent-quantized Decimal.

    Accepts Decimal, int, float (via its string form) and numeric strings.
    Rejects bools, NaN/Infinity, negatives, and values past MAX_MONEY.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")

    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    if not allow_zero and amount == 0:
        raise ValidationError(f"{field} must be greater than 0")
    if amount > MAX_MONEY:
        raise ValidationError(f"{field} exceeds maximum of {MAX_MONEY}")
    return amount


def parse_quantity(value: Any, field: str = "quantity") -> int:
    # Integers - strict validation to reject floats and scientific notation
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
        quantity = int(value.strip())
    else:
        raise ValidationError(f"{field} must be an integer")
    if quantity < 1:
        raise ValidationError(f"{field} must be at least 1")
    return quantity


def require_text(value: Any, field: str, *, max_length: int = 255) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    text = str(value).strip()
    if len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def optional_text(value: Any, field: str, *, max_length: int = 1000) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def parse_choice(value: Any, field: str, choices: Iterable[str]) -> str:
    allowed = tuple(choices)
    if value is None:
        raise ValidationError(f"{field} is required")
    normalized = str(value).strip().upper()
    if normalized not in allowed:
        raise ValidationError(f"Invalid {field}: {value}. Must be one of {list(allowed)}")
    return normalized


def parse_item(data: Any, *, position: int | None = None) -> ItemInput:
    """Validate one item payload (dict or ItemInput)."""
    if isinstance(data, ItemInput):
        data = {
            "product_name": data.product_name,
            "quantity": data.quantity,
            "unit_price": data.unit_price,
            "notes": data.notes,
        }
    if not isinstance(data, dict):
        raise ValidationError("Each item must be an object")

    prefix = f"items[{position}]." if position is not None else ""
    price = data.get("unit_price", data.get("price"))
    return ItemInput(
        product_name=require_text(data.get("product_name"), f"{prefix}product_name", max_length=128),
        quantity=parse_quantity(data.get("quantity"), f"{prefix}quantity"),
        unit_price=parse_money(price, f"{prefix}unit_price"),
        notes=optional_text(data.get("notes"), f"{prefix}notes", max_length=255),
    )


def parse_items(items: Any) -> list[ItemInput]:
    if not items or not isinstance(items, (list, tuple)):
        raise ValidationError("Order must have at least one item")
    return [parse_item(item, position=i) for i, item in enumerate(items)]
