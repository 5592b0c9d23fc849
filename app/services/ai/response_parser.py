"""
Layered Response Parser
=======================
Turns the raw text returned by the AI provider into a
:class:`~app.schemas.analysis.PlantAnalysisResult` plus a coarse
:class:`~app.enums.ReliabilityStatus`.

Layers
------
1. Structured parse: the whole payload is validated against the pydantic
   schema (all fields optional, nulls fall back to defaults). Success -> ``OK``.
2. Tier-1 salvage: when the payload is truncated or otherwise broken, a fixed
   list of single-field regexes recovers the identification and health basics.
   Any hit -> ``PARTIAL`` (care plan, actions and issues are dropped).
3. Nothing recovered -> ``FAILED``.

Blank input is ``EMPTY``. The parser never raises; every log line after the
blank check carries ``hash=<content hash>`` so a stored response can be
correlated with its log trail.

Usage
-----
::

    outcome = parse_analysis_response(raw_text)
    if outcome.status is ReliabilityStatus.OK:
        print(outcome.result.identification.common_name)
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from app.constants import ParserConstants
from app.enums import ReliabilityStatus
from app.schemas.analysis import HealthAssessment, Identification, PlantAnalysisResult

logger = logging.getLogger(__name__)


# Tier-1 salvage patterns, one independent regex per field
_COMMON_NAME = re.compile(r'"commonName"\s*:\s*"([^"]+)"')
_SCIENTIFIC_NAME = re.compile(r'"scientificName"\s*:\s*"([^"]+)"')
_CONFIDENCE = re.compile(r'"confidence"\s*:\s*"([^"]+)"')
_SCORE = re.compile(r'"score"\s*:\s*(\d+)')
_SUMMARY = re.compile(r'"summary"\s*:\s*"([^"]+)"')


@dataclass
class ParseOutcome:
    """Result of parsing one raw AI response."""

    result: PlantAnalysisResult | None
    status: ReliabilityStatus
    content_hash: str | None = None
    salvaged_fields: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.status == ReliabilityStatus.OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": str(self.status),
            "content_hash": self.content_hash,
            "result": self.result.to_dict() if self.result else None,
            "salvaged_fields": list(self.salvaged_fields),
        }


def compute_content_hash(text: str) -> str:
    """First four bytes of the SHA-256 digest, hex encoded (8 chars)."""
    try:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
    except ValueError:
        # Digest unavailable (e.g. restricted crypto policy)
        return ParserConstants.PLACEHOLDER_HASH
    return digest[: ParserConstants.CONTENT_HASH_BYTES].hex()


def _salvage_score(text: str | None) -> int:
    if text is None:
        return ParserConstants.DEFAULT_HEALTH_SCORE
    try:
        return int(text)
    except ValueError:
        # Digit run past the int conversion limit
        return ParserConstants.DEFAULT_HEALTH_SCORE


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence (```json ... ```), if any."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [ln for ln in cleaned.split("\n") if not ln.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()
    return cleaned


class LayeredResponseParser:
    """Stateless two-tier parser for AI plant analysis responses."""

    def parse(self, raw_text: str | None) -> ParseOutcome:
        if raw_text is None or not raw_text.strip():
            logger.debug("Parse result: status=EMPTY")
            return ParseOutcome(result=None, status=ReliabilityStatus.EMPTY)

        content_hash = compute_content_hash(raw_text)

        result = self._parse_structured(raw_text, content_hash)
        if result is not None:
            logger.info("Parse result: status=OK hash=%s (structured parse succeeded)", content_hash)
            return ParseOutcome(result=result, status=ReliabilityStatus.OK, content_hash=content_hash)

        partial, fields = self._extract_tier1_fields(raw_text)
        if partial is not None:
            logger.info("analysis_parse_partial: hash=%s fields=[%s]", content_hash, ", ".join(fields))
            return ParseOutcome(
                result=partial,
                status=ReliabilityStatus.PARTIAL,
                content_hash=content_hash,
                salvaged_fields=fields,
            )

        logger.info("analysis_parse_failed: hash=%s", content_hash)
        return ParseOutcome(result=None, status=ReliabilityStatus.FAILED, content_hash=content_hash)

    # ------------------------------------------------------------------
    # Layer 1
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_structured(raw_text: str, content_hash: str) -> PlantAnalysisResult | None:
        try:
            data = json.loads(strip_code_fence(raw_text))
            return PlantAnalysisResult.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.debug(
                "Structured parse failed hash=%s, attempting Tier 1 fallback: %s",
                content_hash,
                str(exc).splitlines()[0] if str(exc) else type(exc).__name__,
            )
            return None
        except Exception as exc:
            # Oversized integers (ValueError), deep nesting (RecursionError) and the like
            logger.warning(
                "Structured parse aborted hash=%s, attempting Tier 1 fallback: %s",
                content_hash,
                type(exc).__name__,
            )
            return None

    # ------------------------------------------------------------------
    # Layer 2
    # ------------------------------------------------------------------

    @staticmethod
    def _first_match(pattern: re.Pattern[str], text: str) -> str | None:
        match = pattern.search(text)
        return match.group(1) if match else None

    def _extract_tier1_fields(self, raw_text: str) -> tuple[PlantAnalysisResult | None, list[str]]:
        common_name = self._first_match(_COMMON_NAME, raw_text)
        scientific_name = self._first_match(_SCIENTIFIC_NAME, raw_text)
        confidence = self._first_match(_CONFIDENCE, raw_text)
        score = self._first_match(_SCORE, raw_text)
        summary = self._first_match(_SUMMARY, raw_text)

        fields = [
            name
            for name, value in (
                ("commonName", common_name),
                ("scientificName", scientific_name),
                ("confidence", confidence),
                ("score", score),
                ("summary", summary),
            )
            if value is not None
        ]
        if not fields:
            return None, fields

        identification = None
        if common_name is not None or scientific_name is not None or confidence is not None:
            identification = Identification(
                common_name=common_name or ParserConstants.DEFAULT_COMMON_NAME,
                scientific_name=scientific_name or "",
                confidence=confidence or ParserConstants.DEFAULT_CONFIDENCE,
            )

        health = None
        if score is not None or summary is not None:
            health = HealthAssessment(
                score=_salvage_score(score),
                summary=summary or "",
            )

        result = PlantAnalysisResult(identification=identification, health_assessment=health)
        return result, fields


_default_parser = LayeredResponseParser()


def parse_analysis_response(raw_text: str | None) -> ParseOutcome:
    """Module-level convenience wrapper around :class:`LayeredResponseParser`."""
    return _default_parser.parse(raw_text)
