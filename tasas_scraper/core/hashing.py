"""
Content hashing for change detection and stable offer ids.
"""

import hashlib
from typing import Union

OFFER_ID_LENGTH = 16


def sha256_hex(content: Union[str, bytes]) -> str:
    """
    SHA-256 hex digest of text or raw bytes.

    Text is encoded as UTF-8 first, so hashing a decoded HTML page and
    hashing its UTF-8 bytes give the same digest.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def _format_rate(rate_from: float) -> str:
    # 12.0 and 12 must collapse to the same key
    value = float(rate_from)
    return str(int(value)) if value.is_integer() else repr(value)


def generate_offer_id(
    bank_id: str,
    product_type: str,
    currency_index: str,
    segment: str,
    channel: str,
    rate_from: float,
) -> str:
    """
    Generate a stable offer id from its discriminating fields.

    Hash is based on:
    - bank, product type, currency index, segment, channel
    - rate_from: lower bound of the E.A. rate or UVR spread

    Args:
        bank_id: Bank identifier (e.g., "bbva")
        product_type: "hipotecario" or "leasing"
        currency_index: "COP" or "UVR"
        segment: "VIS", "NO_VIS" or "UNKNOWN"
        channel: "DIGITAL", "BRANCH" or "UNSPECIFIED"
        rate_from: Lower bound of the published rate

    Returns:
        First 16 hex characters of the SHA-256 digest
    """
    parts = [
        getattr(bank_id, "value", bank_id),
        getattr(product_type, "value", product_type),
        getattr(currency_index, "value", currency_index),
        getattr(segment, "value", segment),
        getattr(channel, "value", channel),
        _format_rate(rate_from),
    ]
    key = "|".join(str(p) for p in parts)

    return sha256_hex(key)[:OFFER_ID_LENGTH]
