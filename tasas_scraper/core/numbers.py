"""
Normalization utilities for Colombian rate disclosures.

Handles:
- Locale-ambiguous numbers (12,50 / 1.234,56 / 12.50)
- UVR spreads ("UVR + 6,50%", "6,50% + UVR")
- Effective annual percentages ("Desde 11,50% E.A.")
- Spanish prose dates ("1 de diciembre de 2025")
"""

import re
from datetime import date
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class ParseError(ValueError):
    """Raised when a text fragment holds no recognizable number."""


SPANISH_MONTHS = {
    "enero": 1, "febrero": 2, "marzo": 3, "abril": 4, "mayo": 5, "junio": 6,
    "julio": 7, "agosto": 8, "septiembre": 9, "setiembre": 9, "octubre": 10,
    "noviembre": 11, "diciembre": 12,
}

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")

_SPREAD_PATTERNS = [
    re.compile(r"UVR\s*\+\s*([\d.,]+)\s*%?", re.IGNORECASE),  # "UVR + 6,50%"
    re.compile(r"([\d.,]+)\s*%?\s*\+\s*UVR", re.IGNORECASE),  # "6,50% + UVR"
]

_ANNUAL_MARKERS = re.compile(r"E\.?\s*A\.?|Desde", re.IGNORECASE)


def parse_locale_number(text: str) -> float:
    """
    Parse a locale-formatted number into a float.

    If a comma is present, or more than one dot, the Colombian convention
    applies (dots are thousands separators, the comma is the decimal
    mark); otherwise a single dot is the decimal mark. Trailing text
    after the first well-formed number is ignored.

    Examples:
        "1.234,56" -> 1234.56
        "1.234.567" -> 1234567.0
        "12,50%" -> 12.5
        "12.50" -> 12.5

    Raises:
        ParseError: If no digit sequence is found
    """
    if text is None:
        raise ParseError("Failed to parse number: None")

    cleaned = re.sub(r"\s+", "", str(text)).replace("%", "")
    if "," in cleaned or cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)

    match = _NUMBER_RE.search(cleaned)
    if not match:
        raise ParseError(f"Failed to parse number: {text!r}")

    return float(match.group(0))


def parse_index_spread(text: str) -> float:
    """
    Extract the spread from "UVR + N%" or "N% + UVR".

    Raises:
        ParseError: If neither form is present
    """
    for pattern in _SPREAD_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return parse_locale_number(match.group(1))

    raise ParseError(f"Failed to parse UVR spread: {text!r}")


def parse_annual_percent(text: str) -> float:
    """Parse "12,00% E.A." or "Desde 11,50%" into a percentage."""
    return parse_locale_number(_ANNUAL_MARKERS.sub("", text or ""))


def parse_optional_number(text: Optional[str]) -> Optional[float]:
    """Like parse_locale_number, but returns None for blank or unparseable text."""
    if not text or not text.strip():
        return None
    try:
        return parse_locale_number(text)
    except ParseError:
        return None


def collapse_spaces(text: str) -> str:
    """Remove all whitespace, rejoining tokens split by PDF extraction."""
    return re.sub(r"\s+", "", text or "")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace (including NBSP) into single spaces."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text.replace("\u00a0", " ")).strip()


def parse_spanish_date(text: str) -> Optional[date]:
    """
    Parse a Spanish date.

    Supported formats:
    - "1 de diciembre de 2025"
    - "01/12/2025" and "01-12-2025" (day first)

    Returns:
        date or None if no date is recognized
    """
    if not text:
        return None

    match = re.search(r"(\d{1,2})\s+de\s+([a-záéíóú]+)\s+(?:de(?:l)?\s+)?(\d{4})", text, re.IGNORECASE)
    if match:
        day, month_name, year = match.groups()
        month = SPANISH_MONTHS.get(month_name.lower())
        if month:
            try:
                return date(int(year), month, int(day))
            except ValueError as e:
                logger.warning("invalid_date", text=text, error=str(e))
                return None

    match = re.search(r"(\d{1,2})[/-](\d{1,2})[/-](\d{4})", text)
    if match:
        day, month, year = match.groups()
        try:
            return date(int(year), int(month), int(day))
        except ValueError as e:
            logger.warning("invalid_date", text=text, error=str(e))
            return None

    return None
