"""Lesson progress module.

Provides:
- Resume position tracking
- Lesson completion with an exactly-once completion reward
"""

from .models import PROGRESS_TABLES_CQL, ProgressRecord
from .repository import CassandraProgressRepository, ProgressRepositoryInterface
from .service import ProgressService


__all__ = [
    "PROGRESS_TABLES_CQL",
    "CassandraProgressRepository",
    "ProgressRecord",
    "ProgressRepositoryInterface",
    "ProgressService",
]
