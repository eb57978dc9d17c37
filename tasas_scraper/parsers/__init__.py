"""
Bank parsers.

Each parser turns one bank's rate disclosure (HTML page or PDF) into
Offer records. All of them share the BankParser contract.

Parsers:
- BancolombiaParser, BancoPopularParser: HTML pages (CSS selectors)
- BbvaParser, ScotiabankColpatriaParser, BancoCajaSocialParser,
  AvvillasParser, ItauParser, BancoDeOccidenteParser: PDFs (regex)
"""

from typing import Iterable, Optional

from tasas_scraper.config.loader import ParserConfig
from tasas_scraper.core.http_client import HttpClient
from tasas_scraper.core.models import BankId

from .base import BankParser, Extraction, ExtractedRate, HtmlBankParser, PdfBankParser
from .avvillas import AvvillasParser
from .banco_caja_social import BancoCajaSocialParser
from .banco_de_occidente import BancoDeOccidenteParser
from .banco_popular import BancoPopularParser
from .bancolombia import BancolombiaParser
from .bbva import BbvaParser
from .itau import ItauParser
from .scotiabank_colpatria import ScotiabankColpatriaParser

# Registry order is the default run order and the ranking tie-break order
PARSERS: dict[BankId, type[BankParser]] = {
    BankId.BANCOLOMBIA: BancolombiaParser,
    BankId.BBVA: BbvaParser,
    BankId.SCOTIABANK_COLPATRIA: ScotiabankColpatriaParser,
    BankId.BANCO_CAJA_SOCIAL: BancoCajaSocialParser,
    BankId.AVVILLAS: AvvillasParser,
    BankId.ITAU: ItauParser,
    BankId.BANCO_POPULAR: BancoPopularParser,
    BankId.BANCO_DE_OCCIDENTE: BancoDeOccidenteParser,
}


def create_parser(
    bank_id: BankId,
    config: Optional[ParserConfig] = None,
    http_client: Optional[HttpClient] = None,
) -> BankParser:
    """
    Create the parser of one bank.

    Raises:
        KeyError: If no parser exists for the bank
    """
    try:
        parser_class = PARSERS[BankId(bank_id)]
    except (KeyError, ValueError):
        raise KeyError(f"No parser for bank: {getattr(bank_id, 'value', bank_id)}") from None
    return parser_class(config=config, http_client=http_client)


def create_all_parsers(
    config: Optional[ParserConfig] = None,
    http_client: Optional[HttpClient] = None,
    banks: Optional[Iterable[BankId]] = None,
) -> list[BankParser]:
    """
    Create parsers in run order.

    Args:
        config: Source toggle shared by all parsers
        http_client: Shared HTTP client
        banks: Optional subset (and order) of banks; registry order if None

    Returns:
        One parser per requested bank
    """
    bank_ids = list(banks) if banks is not None else list(PARSERS)
    return [create_parser(bank_id, config, http_client) for bank_id in bank_ids]


__all__ = [
    "BankParser",
    "HtmlBankParser",
    "PdfBankParser",
    "Extraction",
    "ExtractedRate",
    "AvvillasParser",
    "BancoCajaSocialParser",
    "BancoDeOccidenteParser",
    "BancoPopularParser",
    "BancolombiaParser",
    "BbvaParser",
    "ItauParser",
    "ScotiabankColpatriaParser",
    "PARSERS",
    "create_parser",
    "create_all_parsers",
]
