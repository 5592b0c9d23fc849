"""
Analysis Rescan Service
=======================
Backfills reliability statuses for stored analyses that were saved before
the layered parser existed (or before a schema change). Records still marked
``OK`` are re-parsed; only downgrades are written, and each write is guarded
so it only applies while the stored value is still ``OK``.

A persisted cursor (highest rowid already examined) lets repeated calls walk
the table instead of re-reading the same genuinely-OK rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.constants import RESCAN_BATCH_SIZE
from app.enums import ReliabilityStatus
from app.services.ai.response_parser import LayeredResponseParser

if TYPE_CHECKING:
    from app.domain.repositories import AnalysisRepository

logger = logging.getLogger(__name__)


@dataclass
class RescanSummary:
    scanned: int = 0
    updated: int = 0
    exhausted: bool = False
    cursor: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "scanned": self.scanned,
            "updated": self.updated,
            "exhausted": self.exhausted,
            "cursor": self.cursor,
        }


class AnalysisRescanService:
    """Re-parses stored analyses in small batches."""

    def __init__(
        self,
        analysis_repo: "AnalysisRepository",
        parser: LayeredResponseParser | None = None,
    ) -> None:
        self._repo = analysis_repo
        self._parser = parser or LayeredResponseParser()

    def rescan_batch(self, batch_size: int = RESCAN_BATCH_SIZE) -> RescanSummary:
        """
        Re-parse up to ``batch_size`` analyses still marked OK.

        Returns:
            RescanSummary; ``exhausted`` is True once fewer rows than requested
            were left to examine
        """
        batch_size = max(1, int(batch_size))
        cursor = self._repo.get_scan_cursor()
        rows = self._repo.fetch_unscanned(cursor, batch_size)

        summary = RescanSummary(scanned=len(rows), cursor=cursor)
        for rowid, record in rows:
            outcome = self._parser.parse(record.raw_response)
            if outcome.status != ReliabilityStatus.OK:
                if self._repo.update_status_if_ok(record.analysis_id, outcome.status):
                    summary.updated += 1
                    logger.info(
                        "parse_scan_updated: id=%s status=%s hash=%s",
                        record.analysis_id,
                        outcome.status,
                        outcome.content_hash,
                    )
            summary.cursor = max(summary.cursor, rowid)

        if summary.cursor != cursor:
            self._repo.set_scan_cursor(summary.cursor)
        summary.exhausted = len(rows) < batch_size

        logger.info(
            "parse_scan_complete: scanned=%d updated=%d exhausted=%s",
            summary.scanned,
            summary.updated,
            summary.exhausted,
        )
        return summary
