"""
AI Services
===========
Deterministic handling of the inputs around an AI plant analysis.

Services:
- PhotoQualityGate: blur / brightness / resolution heuristics before upload
- LayeredResponseParser: tiered parsing of the raw AI response text
"""

from app.services.ai.photo_quality_gate import PhotoQualityGate, QualityVerdict
from app.services.ai.response_parser import (
    LayeredResponseParser,
    ParseOutcome,
    compute_content_hash,
    parse_analysis_response,
)

__all__ = [
    "LayeredResponseParser",
    "ParseOutcome",
    "PhotoQualityGate",
    "QualityVerdict",
    "compute_content_hash",
    "parse_analysis_response",
]
