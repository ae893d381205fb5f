# wire_format.py
#
# Numeric text formatting shared by query replies and the telemetry line.
# Rounding is half away from zero on the exact binary value, so 0.125 -> "0.13"
# and 2.5 -> "3", matching the reference ground-station parsers.

from decimal import Decimal, ROUND_HALF_UP


def format_fixed(value: float, digits: int) -> str:
    # Fixed-point text with exactly `digits` decimals.
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(float(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_trimmed(value: float, min_digits: int = 2, max_digits: int = 6) -> str:
    # Up to max_digits decimals, trailing zeros removed down to min_digits.
    text = format_fixed(value, max_digits)
    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) < min_digits:
        fraction = fraction.ljust(min_digits, "0")
    return f"{whole}.{fraction}"
