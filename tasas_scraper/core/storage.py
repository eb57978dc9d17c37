"""
JSON snapshot storage.

Each run writes a timestamped pair of documents plus "latest" copies
that the web layer reads:

    offers-2025-12-01T10-00-00-000Z.json
    rankings-2025-12-01T10-00-00-000Z.json
    offers-latest.json
    rankings-latest.json
"""

import json
from pathlib import Path
from typing import Union

import structlog

from .models import OffersDataset, Rankings, utc_now_iso
from .schemas import SchemaValidationError, validate_dataset, validate_rankings

logger = structlog.get_logger(__name__)

OFFERS_LATEST = "offers-latest.json"
RANKINGS_LATEST = "rankings-latest.json"


def snapshot_timestamp(iso_timestamp: str) -> str:
    """Make an ISO timestamp safe for file names."""
    return iso_timestamp.replace(":", "-").replace(".", "-")


def _write_json(path: Path, data: dict) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def write_snapshots(
    data_dir: Union[str, Path],
    dataset: OffersDataset,
    rankings: Rankings,
) -> dict[str, str]:
    """
    Validate and persist a dataset and its rankings.

    Args:
        data_dir: Output directory (created if missing)
        dataset: Aggregated offers of the run
        rankings: Rankings computed from the same offers

    Returns:
        Mapping of document name to written path

    Raises:
        SchemaValidationError: If either document fails validation
    """
    offers_data = dataset.to_dict()
    rankings_data = rankings.to_dict()

    # Nothing is written unless both documents are valid
    validate_dataset(offers_data)
    validate_rankings(rankings_data)

    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)

    timestamp = snapshot_timestamp(dataset.generated_at)
    paths = {
        "offers": data_dir / f"offers-{timestamp}.json",
        "rankings": data_dir / f"rankings-{timestamp}.json",
        "offers_latest": data_dir / OFFERS_LATEST,
        "rankings_latest": data_dir / RANKINGS_LATEST,
    }

    _write_json(paths["offers"], offers_data)
    _write_json(paths["rankings"], rankings_data)
    _write_json(paths["offers_latest"], offers_data)
    _write_json(paths["rankings_latest"], rankings_data)

    logger.info(
        "snapshots_written",
        data_dir=str(data_dir),
        offers=len(dataset.offers),
        scenarios=len(rankings.scenarios),
    )

    return {name: str(path) for name, path in paths.items()}


def _read_json(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_offers(data_dir: Union[str, Path]) -> OffersDataset:
    """
    Load the latest offers dataset.

    A missing, unreadable or invalid file yields an empty dataset so
    readers can show a "no data available" state instead of failing.
    """
    path = Path(data_dir) / OFFERS_LATEST
    try:
        data = _read_json(path)
        validate_dataset(data)
        return OffersDataset.from_dict(data)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, SchemaValidationError) as e:
        logger.warning("offers_load_failed", path=str(path), error=str(e))
        return OffersDataset(generated_at=utc_now_iso(), offers=[])


def load_rankings(data_dir: Union[str, Path]) -> Rankings:
    """Load the latest rankings, or empty rankings when unavailable."""
    path = Path(data_dir) / RANKINGS_LATEST
    try:
        data = _read_json(path)
        validate_rankings(data)
        return Rankings.from_dict(data)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, SchemaValidationError) as e:
        logger.warning("rankings_load_failed", path=str(path), error=str(e))
        return Rankings(generated_at=utc_now_iso(), scenarios={})
