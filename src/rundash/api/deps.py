"""Shared FastAPI dependencies: data directory lookup and dataset loading."""
from pathlib import Path
from typing import Optional

from fastapi import HTTPException

from rundash.config import get_settings
from rundash.dataset.store import dataset_path, load_dataset
from rundash.errors import PersistenceError
from rundash.models.dataset import Dataset


def get_data_dir() -> Path:
    """FastAPI dependency returning the dataset directory. Overridden in tests."""
    return Path(get_settings().data_dir)


def load_or_404(data_dir: Path, year: Optional[int]) -> Dataset:
    path = dataset_path(data_dir, year)
    if not path.exists():
        raise HTTPException(status_code=404, detail=f"Dataset {path.name} not found")
    try:
        return load_dataset(path)
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
