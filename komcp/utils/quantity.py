"""Resource quantities (``500m``, ``256Gi``, ``2e3``) and human-readable formatting."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from fractions import Fraction

_BINARY_SUFFIXES = {"Ki": 1024, "Mi": 1024**2, "Gi": 1024**3, "Ti": 1024**4, "Pi": 1024**5, "Ei": 1024**6}
_DECIMAL_SUFFIXES = {"n": -9, "u": -6, "m": -3, "": 0, "k": 3, "M": 6, "G": 9, "T": 12, "P": 15, "E": 18}
_DECIMAL_BY_EXPONENT = {exp: suffix for suffix, exp in _DECIMAL_SUFFIXES.items()}

_NUMBER_RE = re.compile(r"([+-]?)([0-9]+\.?[0-9]*|\.[0-9]+)(.*)", re.DOTALL)
_EXPONENT_RE = re.compile(r"[eE]([+-]?[0-9]+)")

_NANO = 10**9


class QuantityFormat(str, Enum):
    """How a quantity was written and is rendered."""

    DECIMAL_EXPONENT = "DecimalExponent"
    BINARY_SI = "BinarySI"
    DECIMAL_SI = "DecimalSI"


def _round_away(value: Fraction) -> int:
    return math.ceil(value) if value >= 0 else math.floor(value)


@dataclass(frozen=True)
class Quantity:
    """An exact amount together with its preferred notation."""

    amount: Fraction
    format: QuantityFormat = QuantityFormat.DECIMAL_SI

    def value(self) -> int:
        """The amount rounded to an integer, away from zero."""
        return _round_away(self.amount)

    def __str__(self) -> str:
        if self.amount == 0:
            return "0"
        fmt = self.format
        if fmt is QuantityFormat.BINARY_SI:
            if -1024 < self.amount < 1024 or self.amount.denominator != 1:
                fmt = QuantityFormat.DECIMAL_SI
            else:
                number = int(self.amount)
                for suffix, multiple in reversed(_BINARY_SUFFIXES.items()):
                    if number % multiple == 0:
                        return f"{number // multiple}{suffix}"
                return str(number)

        mantissa = int(self.amount * _NANO)
        exponent = -9
        limit = 18 if fmt is QuantityFormat.DECIMAL_SI else None
        while mantissa % 1000 == 0 and (limit is None or exponent < limit):
            mantissa //= 1000
            exponent += 3
        if fmt is QuantityFormat.DECIMAL_SI:
            return f"{mantissa}{_DECIMAL_BY_EXPONENT[exponent]}"
        return str(mantissa) if exponent == 0 else f"{mantissa}e{exponent}"


def parse_quantity(text: str) -> Quantity:
    """Parse a quantity such as ``500m``, ``8127096Ki`` or ``1.5e3``."""
    match = _NUMBER_RE.fullmatch(text)
    if not match:
        raise ValueError(f"quantities must match the regular expression: {text!r}")
    sign, digits, suffix = match.groups()
    amount = Fraction(Decimal(digits))

    if suffix in _BINARY_SUFFIXES:
        amount *= _BINARY_SUFFIXES[suffix]
        fmt = QuantityFormat.BINARY_SI
    elif suffix in _DECIMAL_SUFFIXES:
        amount *= Fraction(10) ** _DECIMAL_SUFFIXES[suffix]
        fmt = QuantityFormat.DECIMAL_SI
    elif exp_match := _EXPONENT_RE.fullmatch(suffix):
        amount *= Fraction(10) ** int(exp_match.group(1))
        fmt = QuantityFormat.DECIMAL_EXPONENT
    else:
        raise ValueError(f"unable to parse quantity's suffix: {text!r}")

    if sign == "-":
        amount = -amount
    scaled = amount * _NANO
    if scaled.denominator != 1:
        amount = Fraction(_round_away(scaled), _NANO)
    return Quantity(amount, fmt)


def _scaled(value: int, base: int, suffixes: tuple[str, str, str, str]) -> str:
    for power, suffix in zip((4, 3, 2, 1), suffixes):
        unit = base**power
        if value >= unit:
            return f"{value / unit:.2f}{suffix}"
    return str(value)


def format_resource(quantity: Quantity) -> str:
    """Render a quantity in a short human-readable form.

    Binary quantities use Ki/Mi/Gi/Ti, decimal ones K/M/G/T, both with two
    decimals; exponent quantities keep their canonical notation.
    """
    value = quantity.value()
    if quantity.format is QuantityFormat.BINARY_SI:
        return _scaled(value, 1024, ("Ti", "Gi", "Mi", "Ki"))
    if quantity.format is QuantityFormat.DECIMAL_SI:
        return _scaled(value, 1000, ("T", "G", "M", "K"))
    return str(quantity)