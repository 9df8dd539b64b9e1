from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import InvalidAmountError

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("1000000000.00")
_AMOUNT_TEXT = re.compile(r"[0-9]+(\.[0-9]+)?")


def parse_amount(raw: Any) -> int:
    """Validate a caller-supplied amount and return it in minor units.

    Accepts ints, floats, Decimals and plain decimal strings such as "12.50".
    Anything that is not a finite, positive value with at most two decimal
    places is rejected.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmountError("Invalid amount")

    try:
        if isinstance(raw, float):
            value = Decimal(repr(raw))
        elif isinstance(raw, (int, Decimal)):
            value = Decimal(raw)
        elif isinstance(raw, str) and _AMOUNT_TEXT.fullmatch(raw.strip()):
            value = Decimal(raw.strip())
        else:
            raise InvalidAmountError("Invalid amount")
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountError("Invalid amount") from exc

    if not value.is_finite() or value <= 0:
        raise InvalidAmountError("Invalid amount")
    if value > MAX_AMOUNT:
        raise InvalidAmountError("Amount exceeds the per-operation limit")
    if value != value.quantize(CENT):
        raise InvalidAmountError("Amount cannot have more than two decimal places")

    return int(value.scaleb(2))


def to_amount(minor_units: int) -> Decimal:
    return (Decimal(minor_units) / 100).quantize(CENT)
