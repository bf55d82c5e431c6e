"""Cell value formatting.

`format_value` is a pure function of (value, header). Rules are looked up by
the header lower-cased and stripped of sort glyphs; a value no rule claims is
returned untouched (not stringified).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from statline.resolve.headers import normalize_header

_LEADING_FLOAT_RE = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_ACCOUNTING_RE = re.compile(r"\((.*)\)")
_NOT_NUMERIC_CHARS_RE = re.compile(r"[^\d.-]")


# ---------------------------------------------------------------------------
# Number parsing
# ---------------------------------------------------------------------------


def parse_number(value: Any) -> float | None:
    """Leading-number parse: ``"74.70%"`` -> 74.7, ``"12-5"`` -> 12.0, ``"A"`` -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_FLOAT_RE.match(str(value).lstrip())
        if match is None:
            return None
        number = float(match.group().replace("Infinity", "inf"))
    return None if math.isnan(number) else number


def parse_accounting(text: Any) -> float | None:
    """Parse display text where ``"(5.25)"`` means ``-5.25``.

    Separators, currency and percent signs are ignored.
    """
    if text is None:
        return None
    stripped = str(text).strip()
    match = _ACCOUNTING_RE.fullmatch(stripped)
    body = match.group(1) if match else stripped
    number = parse_number(_NOT_NUMERIC_CHARS_RE.sub("", body))
    if number is None:
        return None
    return -abs(number) if match else number


def is_negative(text: Any) -> bool:
    number = parse_accounting(text)
    return number is not None and number < 0


def _float_text(value: float) -> str:
    """Browser number text: positional between 1e-7 and 1e21, ``1e-7`` style outside."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    power = int(exponent)
    if -7 < power < 21:
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def display_text(value: Any) -> str:
    """Stringify a cell value the way the page shows it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _float_text(value)
    return str(value)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


class FormatKind(str, Enum):
    FIXED = "fixed"
    THOUSANDS = "thousands"


@dataclass(frozen=True, slots=True)
class FormatRule:
    name: str
    headers: frozenset[str]
    kind: FormatKind = FormatKind.FIXED
    decimals: int = 0

    def render(self, number: float, original: Any) -> str:
        if self.kind is FormatKind.THOUSANDS:
            # Already comma-formatted upstream; re-parsing would truncate at the comma.
            if isinstance(original, str) and "," in original:
                return original
            if not math.isfinite(number):
                return display_text(original)
            return f"{math.floor(number + 0.5):,}"
        if not math.isfinite(number):
            return _float_text(number)
        return f"{number:.{self.decimals}f}"


PERCENT_HEADERS: frozenset[str] = frozenset({"returning"})

# Order matters only for readability; header sets are disjoint.
FORMAT_RULES: tuple[FormatRule, ...] = (
    FormatRule("ratings", frozenset({"win%", "sos", "npi"}), decimals=3),
    FormatRule("height", frozenset({"height"}), decimals=2),
    FormatRule(
        "roster_turnover",
        frozenset({"surp gone", "exp gone", "transfers in", "5th"}),
        kind=FormatKind.THOUSANDS,
    ),
    FormatRule(
        "npi_model",
        frozenset(
            {
                "npi value",
                "value old",
                "value diff",
                "lowest counting win",
                "next game win npi",
                "potential increase",
                "next game loss npi",
            }
        ),
        decimals=3,
    ),
    FormatRule(
        "results_model",
        frozenset({"value of results", "overall wins massey", "eff", "underlying", "stat", "stdev"}),
        decimals=2,
    ),
)

_RULES_BY_HEADER: dict[str, FormatRule] = {h: rule for rule in FORMAT_RULES for h in rule.headers}


def rule_for(header: str) -> FormatRule | None:
    return _RULES_BY_HEADER.get(normalize_header(header))


def _as_percentage(value: Any) -> str | None:
    if isinstance(value, str) and "%" in value:
        number = parse_number(value.replace("%", ""))
    elif isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 1:
        return f"{value * 100:.2f}%"
    else:
        number = parse_number(value)
    return None if number is None else f"{number:.2f}%"


def format_value(value: Any, header: str) -> Any:
    """Format a resolved value for ``header``; zero is a value, not empty."""
    if value is None or (isinstance(value, str) and value == ""):
        return ""

    clean = normalize_header(header)
    if clean in PERCENT_HEADERS:
        percentage = _as_percentage(value)
        if percentage is not None:
            return percentage

    number = parse_number(value)
    if number is not None:
        rule = _RULES_BY_HEADER.get(clean)
        if rule is not None:
            return rule.render(number, value)

    return value


__all__ = [
    "FORMAT_RULES",
    "PERCENT_HEADERS",
    "FormatKind",
    "FormatRule",
    "display_text",
    "format_value",
    "is_negative",
    "parse_accounting",
    "parse_number",
    "rule_for",
]
