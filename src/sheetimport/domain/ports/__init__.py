"""Domain port definitions for adapters."""

from __future__ import annotations

from .data_source import DataSource
from .persistence import Repository
from .unit_of_work import ImportUnitOfWork

__all__ = [
    "DataSource",
    "ImportUnitOfWork",
    "Repository",
]
