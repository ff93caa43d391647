"""
Reprocess script: reload a dataset file and rebuild its summary and analytics.

Usage:
    python -m rundash process
    python -m rundash process --year 2025

Use after upgrading rundash so that older files pick up new aggregate fields.
Activities are kept as stored; only the aggregates are recomputed.
"""
import argparse
import logging
import sys
from typing import List, Optional

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


def process(year: Optional[int] = None, data_dir: Optional[str] = None):
    """Recompute and save one dataset file. Returns the new Dataset."""
    from rundash.config import get_settings
    from rundash.dataset.merge import recompute
    from rundash.dataset.store import dataset_path, load_dataset, save_dataset

    settings = get_settings()
    path = dataset_path(data_dir or settings.data_dir, year)
    dataset = load_dataset(path)
    logger.info("Loaded %d activities from %s", len(dataset.activities), path)

    updated = recompute(dataset, rolling_window=settings.rolling_window)
    save_dataset(updated, path)
    return updated


def main(argv: Optional[List[str]] = None) -> None:
    from rundash.errors import PersistenceError

    parser = argparse.ArgumentParser(description="Recompute summary and analytics for a dataset")
    parser.add_argument("--year", type=int, default=None, help="Process running-data-<year>.json")
    parser.add_argument("--data-dir", default=None, help="Dataset directory (default: DATA_DIR)")
    args = parser.parse_args(argv)

    try:
        dataset = process(year=args.year, data_dir=args.data_dir)
    except PersistenceError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    logger.info(
        "Summary: %s runs, %s km, average pace %s",
        dataset.total_activities,
        dataset.summary.total_distance,
        dataset.summary.average_pace,
    )


if __name__ == "__main__":
    main()
