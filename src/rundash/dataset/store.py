"""
JSON file persistence for datasets.

Layout under the data directory:

    running-data.json          full refetch output
    running-data-<year>.json   per-year files maintained by the add script

Failures surface as PersistenceError. There is no retry here; callers decide.
"""
import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from rundash.errors import PersistenceError
from rundash.models.dataset import Dataset

logger = logging.getLogger(__name__)

DATASET_FILE_NAME = "running-data.json"
YEAR_FILE_TEMPLATE = "running-data-{year}.json"


def _target_mode(path: Path) -> int:
    """Mode for the saved file: keep an existing file's mode, else 0o666 minus umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def dataset_path(data_dir: Union[str, Path], year: Optional[int] = None) -> Path:
    name = YEAR_FILE_TEMPLATE.format(year=year) if year is not None else DATASET_FILE_NAME
    return Path(data_dir) / name


def load_dataset(path: Union[str, Path]) -> Dataset:
    """
    Read and validate a dataset file.

    Raises:
        PersistenceError: file missing/unreadable, invalid JSON, or a document
                          that does not match the Dataset schema.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise PersistenceError(f"Dataset file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise PersistenceError(f"Could not read dataset {path}: {exc}") from exc

    try:
        return Dataset.model_validate(raw)
    except PydanticValidationError as exc:
        raise PersistenceError(f"Dataset {path} does not match the expected schema: {exc}") from exc


def save_dataset(dataset: Dataset, path: Union[str, Path]) -> Path:
    """
    Write a dataset as pretty-printed JSON.

    The file is written to a temporary sibling first and then moved into
    place, so readers never see a half-written document. The result keeps
    the mode of the file it replaces; a new file gets the umask default.
    """
    path = Path(path)
    payload = json.dumps(dataset.to_json_dict(), indent=2, ensure_ascii=False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.chmod(tmp_name, _target_mode(path))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise PersistenceError(f"Could not write dataset {path}: {exc}") from exc

    logger.info("Saved %d activities to %s", dataset.total_activities, path)
    return path


def load_gear_map(path: Optional[Union[str, Path]]) -> Dict[str, str]:
    """
    Read the optional gear_id → name JSON map. Missing path or file → {}.

    Raises:
        PersistenceError: the file exists but is not a JSON object.
    """
    if not path:
        return {}
    path = Path(path)
    if not path.exists():
        logger.info("Gear map %s not found; gear names will be empty", path)
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise PersistenceError(f"Could not read gear map {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise PersistenceError(f"Gear map {path} must be a JSON object")
    return {str(k): str(v) for k, v in data.items()}
