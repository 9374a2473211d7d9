"""
Read-only access to user-submitted hazard reports.

The reports themselves are owned by the reporting backend; this module only
defines the read contract the analytics need and an in-memory implementation
(optionally seeded from a JSON file) for local runs and tests.
"""
import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from pydantic import TypeAdapter

from oceanguard.schemas.reports import HazardReport

logger = logging.getLogger(__name__)


class HazardReportStore(Protocol):
    async def find_recent_hazard_reports(self, limit: int) -> List[HazardReport]:
        """Most recent reports first, at most `limit`."""
        ...

    async def list_hazard_reports(self) -> List[HazardReport]:
        ...


class InMemoryHazardReportStore:
    def __init__(self, reports: Optional[Iterable[HazardReport]] = None):
        self._reports: List[HazardReport] = list(reports or [])

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryHazardReportStore":
        """Load a JSON array of reports (camelCase or snake_case keys)."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        reports = TypeAdapter(List[HazardReport]).validate_python(raw)
        logger.info(f"Loaded {len(reports)} hazard reports from {path}")
        return cls(reports)

    async def find_recent_hazard_reports(self, limit: int) -> List[HazardReport]:
        ordered = sorted(self._reports, key=lambda report: report.created_at, reverse=True)
        return ordered[:limit]

    async def list_hazard_reports(self) -> List[HazardReport]:
        return list(self._reports)
