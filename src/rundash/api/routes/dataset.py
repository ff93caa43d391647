"""Whole-dataset read routes: the document, its summary and its analytics."""
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends

from rundash.api.deps import get_data_dir, load_or_404
from rundash.models.dataset import Analytics, Dataset, Summary

router = APIRouter()


@router.get("/dataset", response_model=Dataset)
def get_dataset(year: Optional[int] = None, data_dir: Path = Depends(get_data_dir)):
    """The full persisted document, as the dashboard reads it."""
    return load_or_404(data_dir, year)


@router.get("/summary", response_model=Summary)
def get_summary(year: Optional[int] = None, data_dir: Path = Depends(get_data_dir)):
    return load_or_404(data_dir, year).summary


@router.get("/analytics", response_model=Analytics)
def get_analytics(year: Optional[int] = None, data_dir: Path = Depends(get_data_dir)):
    """Analytics block; files written before analytics existed get an empty one."""
    return load_or_404(data_dir, year).analytics or Analytics()
