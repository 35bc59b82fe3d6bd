"""Stateless helpers for reading scanner XML payloads."""
from __future__ import annotations

import re
from typing import Optional
from xml.etree.ElementTree import Element

# Marks the end of the "<command>,<XML>," envelope.
ENVELOPE_MARKER = "<XML>,"

DEFAULT_FALLBACK = "---"

_NON_NUMERIC = re.compile(r"[^0-9.]")


def attr(element: Element, name: str, fallback: str = DEFAULT_FALLBACK) -> str:
    """Read an attribute, returning fallback if it is missing or empty."""
    value = element.get(name)
    return value if value else fallback


def parse_int(raw: Optional[str]) -> Optional[int]:
    """Parse an integer attribute value, None if absent or not an integer."""
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def parse_frequency(raw: Optional[str]) -> Optional[float]:
    """Parse a frequency such as "154.4150MHz" into MHz.

    Returns:
        Frequency in MHz, or None if the value is absent, "---", or does not
        parse once non-numeric characters are removed
    """
    if not raw or raw == DEFAULT_FALLBACK:
        return None
    cleaned = _NON_NUMERIC.sub("", raw)
    try:
        return float(cleaned)
    except ValueError:
        return None


def extract_xml_payload(raw_data: Optional[str]) -> Optional[str]:
    """Strip the "<command>,<XML>," envelope from a response.

    Returns:
        The XML text, or None if the data is empty or is not XML
    """
    if not raw_data or not raw_data.strip():
        return None

    data = raw_data.strip()

    marker = data.find(ENVELOPE_MARKER)
    if marker >= 0:
        data = data[marker + len(ENVELOPE_MARKER):].strip()
        if not data:
            return None

    return data if data.startswith("<") else None
