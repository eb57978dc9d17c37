"""
Orchestrator for the rate update pipeline.

Coordinates:
- Parser creation per enabled bank
- Concurrent (or sequential) parser execution
- Aggregation of offers and bank-scoped warnings
- Ranking computation
- Snapshot output
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import httpx
import structlog

from .config.loader import UpdaterSettings, load_settings
from .core.formatting import SCENARIO_LABELS, format_rate
from .core.http_client import HttpClient
from .core.models import BankId, BankParseResult, Offer, OffersDataset, Rankings, utc_now_iso
from .core.rankings import compute_rankings, mixes_metric_kinds
from .core.storage import write_snapshots
from .parsers import BankParser, create_all_parsers

logger = structlog.get_logger(__name__)


@dataclass
class UpdateResult:
    """Outcome of one pipeline run."""
    dataset: OffersDataset
    rankings: Rankings
    warnings: list[str] = field(default_factory=list)
    results: list[BankParseResult] = field(default_factory=list)
    failed_banks: list[BankId] = field(default_factory=list)


def build_dataset(results: Iterable[BankParseResult]) -> OffersDataset:
    """Concatenate offers of all banks, keeping bank order."""
    offers: list[Offer] = []
    for result in results:
        offers.extend(result.offers)
    return OffersDataset(generated_at=utc_now_iso(), offers=offers)


class RateUpdater:
    """
    Orchestrator for the update pipeline.

    A failing bank never stops the run: its error becomes a warning and
    the remaining banks are processed.
    """

    def __init__(
        self,
        settings: Optional[UpdaterSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize updater.

        Args:
            settings: Run settings (bundled settings.yml if not provided)
            transport: Optional httpx transport for the shared client
        """
        self.settings = settings or load_settings()
        self.transport = transport

        # Statistics
        self.stats = {
            "banks_processed": 0,
            "banks_failed": 0,
            "offers": 0,
            "warnings": 0,
        }

    def _create_client(self) -> HttpClient:
        return HttpClient(
            requests_per_second=self.settings.requests_per_second,
            timeout=self.settings.timeout,
            max_retries=self.settings.max_retries,
            user_agent=self.settings.user_agent,
            transport=self.transport,
        )

    async def run(
        self,
        banks: Optional[list[BankId]] = None,
        sequential: bool = False,
    ) -> UpdateResult:
        """
        Run every enabled parser and rank the aggregated offers.

        Args:
            banks: Optional subset of banks (None = settings.banks)
            sequential: Run parsers one after another instead of concurrently

        Returns:
            UpdateResult with dataset, rankings and bank-scoped warnings
        """
        bank_ids = list(banks) if banks else list(self.settings.banks)

        logger.info(
            "starting_update",
            banks=[b.value for b in bank_ids],
            fixtures=self.settings.use_fixtures,
            sequential=sequential,
        )

        async with self._create_client() as client:
            parsers = create_all_parsers(
                config=self.settings.parser_config(),
                http_client=client,
                banks=bank_ids,
            )

            if sequential:
                outcomes = [await self._run_parser(parser) for parser in parsers]
            else:
                outcomes = await asyncio.gather(
                    *(self._run_parser(parser) for parser in parsers)
                )

        results = []
        warnings = []
        failed = []
        for parser, outcome in zip(parsers, outcomes):
            prefix = f"[{parser.bank_id.value}] "
            if isinstance(outcome, BankParseResult):
                results.append(outcome)
                warnings.extend(prefix + warning for warning in outcome.warnings)
            else:
                failed.append(parser.bank_id)
                warnings.append(prefix + outcome)

        dataset = build_dataset(results)
        rankings = compute_rankings(dataset.offers)

        self.stats["banks_processed"] = len(results)
        self.stats["banks_failed"] = len(failed)
        self.stats["offers"] = len(dataset.offers)
        self.stats["warnings"] = len(warnings)

        logger.info("update_complete", **self.stats)

        return UpdateResult(
            dataset=dataset,
            rankings=rankings,
            warnings=warnings,
            results=results,
            failed_banks=failed,
        )

    async def _run_parser(self, parser: BankParser):
        """Run one parser; returns its result or the failure message."""
        try:
            return await parser.parse()
        except Exception as e:
            logger.error(
                "bank_failed",
                bank=parser.bank_id.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return f"Parser failed: {e}"

    def save(self, result: UpdateResult, data_dir: Optional[str] = None) -> dict[str, str]:
        """
        Validate and write the snapshots of a run.

        Raises:
            SchemaValidationError: If the dataset or rankings are invalid
        """
        return write_snapshots(
            Path(data_dir or self.settings.data_dir),
            result.dataset,
            result.rankings,
        )


def log_summary(result: UpdateResult) -> None:
    """Log offers per bank and the winner of each scenario."""
    offers_by_id = {offer.id: offer for offer in result.dataset.offers}

    for bank_result in result.results:
        logger.info(
            "bank_summary",
            bank=bank_result.bank_id.value,
            offers=len(bank_result.offers),
            warnings=len(bank_result.warnings),
        )

    for key, entries in result.rankings.scenarios.items():
        offer = offers_by_id.get(entries[0].offer_id)
        if offer is None:
            continue
        logger.info(
            "scenario_winner",
            scenario=SCENARIO_LABELS.get(key, key.value),
            bank=offer.bank_name,
            rate=format_rate(offer.rate),
            mixed_metrics=mixes_metric_kinds(entries),
        )

    for warning in result.warnings:
        logger.warning("run_warning", warning=warning)


async def run_updater(
    settings: Optional[UpdaterSettings] = None,
    banks: Optional[list[BankId]] = None,
    sequential: bool = False,
    save: bool = True,
) -> UpdateResult:
    """
    Convenience function to run the updater.

    Args:
        settings: Run settings
        banks: Optional subset of banks
        sequential: Disable concurrent parsing
        save: Write snapshots after the run

    Returns:
        UpdateResult
    """
    updater = RateUpdater(settings=settings)
    result = await updater.run(banks=banks, sequential=sequential)

    log_summary(result)

    if save:
        updater.save(result)

    return result
