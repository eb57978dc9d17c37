"""Tests for the bank catalog."""

import pytest

from tasas_scraper.core.catalog import BANK_NAMES, BANK_URLS, bank_name
from tasas_scraper.core.models import BankId


class TestCatalog:
    """Tests for bank names and URLs."""

    def test_every_bank_listed(self):
        assert set(BANK_NAMES) == set(BankId)
        assert set(BANK_URLS) == set(BankId)

    def test_urls_are_https(self):
        assert all(url.startswith("https://") for url in BANK_URLS.values())

    def test_bank_name(self):
        assert bank_name(BankId.AVVILLAS) == "Banco AV Villas"
        assert bank_name("banco_de_occidente") == "Banco de Occidente"

    def test_read_only(self):
        """Test that the catalog cannot be modified at runtime."""
        with pytest.raises(TypeError):
            BANK_NAMES[BankId.BBVA] = "Otro"
