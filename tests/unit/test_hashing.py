"""Tests for content hashing and offer ids."""

import re

from tasas_scraper.core.hashing import generate_offer_id, sha256_hex
from tasas_scraper.core.models import BankId, Channel, CurrencyIndex, ProductType, Segment


def _offer_id(**overrides):
    fields = {
        "bank_id": BankId.BBVA,
        "product_type": ProductType.HIPOTECARIO,
        "currency_index": CurrencyIndex.COP,
        "segment": Segment.VIS,
        "channel": Channel.UNSPECIFIED,
        "rate_from": 9.77,
    }
    fields.update(overrides)
    return generate_offer_id(**fields)


class TestSha256Hex:
    """Tests for sha256_hex."""

    def test_text_and_bytes_match(self):
        """Test that text hashes like its UTF-8 bytes."""
        assert sha256_hex("Crédito") == sha256_hex("Crédito".encode("utf-8"))

    def test_length(self):
        """Test the digest is 64 hex characters."""
        assert re.fullmatch(r"[0-9a-f]{64}", sha256_hex(b"%PDF-1.4"))


class TestGenerateOfferId:
    """Tests for generate_offer_id."""

    def test_sixteen_hex_chars(self):
        """Test id format."""
        assert re.fullmatch(r"[0-9a-f]{16}", _offer_id())

    def test_deterministic(self):
        """Test that identical inputs yield identical ids."""
        assert _offer_id() == _offer_id()

    def test_rate_change_changes_id(self):
        """Test that a different rate_from yields a new id."""
        assert _offer_id(rate_from=9.77) != _offer_id(rate_from=9.78)

    def test_each_field_discriminates(self):
        """Test that changing any discriminating field changes the id."""
        base = _offer_id()
        assert _offer_id(bank_id=BankId.ITAU) != base
        assert _offer_id(product_type=ProductType.LEASING) != base
        assert _offer_id(currency_index=CurrencyIndex.UVR) != base
        assert _offer_id(segment=Segment.NO_VIS) != base
        assert _offer_id(channel=Channel.DIGITAL) != base

    def test_enum_and_string_inputs_match(self):
        """Test that enum members and their values give the same id."""
        assert _offer_id() == generate_offer_id("bbva", "hipotecario", "COP", "VIS", "UNSPECIFIED", 9.77)

    def test_integral_rates_collapse(self):
        """Test that 12 and 12.0 give the same id."""
        assert _offer_id(rate_from=12) == _offer_id(rate_from=12.0)
