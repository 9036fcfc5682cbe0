from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

_NON_DIGIT = re.compile(r"\D", re.ASCII)
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})", re.ASCII)
_ISO_DATETIME = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})", re.ASCII)


def only_digits(value: str) -> str:
    return _NON_DIGIT.sub("", value)


def mask_tax_id(value: str) -> str:
    """Format a CNPJ (14 digits) or CPF (11 digits).

    Any other digit count is returned digit-stripped, without a mask.
    """
    d = only_digits(value)
    if len(d) == 14:
        return f"{d[:2]}.{d[2:5]}.{d[5:8]}/{d[8:12]}-{d[12:]}"
    if len(d) == 11:
        return f"{d[:3]}.{d[3:6]}.{d[6:9]}-{d[9:]}"
    return d


def mask_postal_code(value: str) -> str:
    """Format an 8-digit CEP as NNNNN-NNN."""
    d = only_digits(value)
    if len(d) == 8:
        return f"{d[:5]}-{d[5:]}"
    return d


def mask_phone(value: str) -> str:
    """Format a phone with area code: (NN) NNNNN-NNNN or (NN) NNNN-NNNN."""
    d = only_digits(value)
    if len(d) == 11:
        return f"({d[:2]}) {d[2:7]}-{d[7:]}"
    if len(d) == 10:
        return f"({d[:2]}) {d[2:6]}-{d[6:]}"
    return d


def mask_date(value: str) -> str:
    """Reorder an ISO date prefix to DD/MM/YYYY; anything else passes through."""
    m = _ISO_DATE.match(value)
    if not m:
        return value
    year, month, day = m.groups()
    return f"{day}/{month}/{year}"


def mask_datetime(value: str) -> str:
    """Reorder an ISO datetime prefix to DD/MM/YYYY HH:MM:SS; anything else passes through."""
    m = _ISO_DATETIME.match(value)
    if not m:
        return value
    year, month, day, hour, minute, second = m.groups()
    return f"{day}/{month}/{year} {hour}:{minute}:{second}"


def mask_classification_code(value: str) -> str:
    """Group a 6-digit cTribNac as NN.NN.NN."""
    d = only_digits(value)
    if len(d) == 6:
        return f"{d[:2]}.{d[2:4]}.{d[4:]}"
    return d


# Widest integer part in the NFS-e decimal types (TDec_1502 and friends)
MAX_INTEGER_DIGITS = 15

_CENTS = Decimal("0.01")


def _br_number(value: Decimal) -> str:
    # Out-of-range values show as zero, like any other unreadable amount
    if not value.is_finite() or (value and value.adjusted() >= MAX_INTEGER_DIGITS):
        value = Decimal(0)
    # Half-up rounding; the "+ 0" turns a negative zero into a positive one
    value = value.quantize(_CENTS, rounding=ROUND_HALF_UP) + 0
    return f"{value:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def format_brl(value: Decimal | str) -> str:
    """Format a numeric value as R$ X.XXX,XX."""
    return f"R$ {_br_number(Decimal(value))}"


def format_percent(value: Decimal | str) -> str:
    """Format a numeric value as X.XXX,XX %."""
    return f"{_br_number(Decimal(value))} %"
