"""
Analysis Schemas
================

Pydantic models for the AI plant-analysis payload and the analysis API.

The AI payload is camelCase JSON in which every field is optional. Missing
fields and explicit ``null`` values both fall back to the documented
defaults; numbers are accepted where strings are expected and booleans may
arrive as ``"true"``/``"false"`` strings.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.constants import ParserConstants


class LenientModel(BaseModel):
    """Base model for AI payload blocks: nulls mean "use the default"."""

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the camelCase wire format."""
        return self.model_dump(by_alias=True)


# ============================================================================
# Identification & health
# ============================================================================

class Identification(LenientModel):
    common_name: str = Field(default=ParserConstants.DEFAULT_COMMON_NAME, alias="commonName")
    scientific_name: str = Field(default="", alias="scientificName")
    confidence: str = Field(default=ParserConstants.DEFAULT_CONFIDENCE, description="low | medium | high")
    notes: str = ""


class HealthIssue(LenientModel):
    name: str = ""
    severity: str = Field(default="low", description="low | medium | high")
    description: str = ""
    affected_area: str = Field(default="", alias="affectedArea")


class HealthAssessment(LenientModel):
    score: int = Field(default=ParserConstants.DEFAULT_HEALTH_SCORE, description="1-10")
    summary: str = ""
    issues: list[HealthIssue] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def coerce_score(cls, v):
        try:
            return int(float(v))
        except (TypeError, ValueError, OverflowError):
            return ParserConstants.DEFAULT_HEALTH_SCORE


class ImmediateAction(LenientModel):
    action: str = ""
    priority: str = Field(default="when_convenient", description="urgent | soon | when_convenient")
    detail: str = ""


# ============================================================================
# Care plan
# ============================================================================

class Watering(LenientModel):
    frequency: Optional[str] = None
    amount: Optional[str] = None
    notes: Optional[str] = None


class Light(LenientModel):
    ideal: str = ""
    current: str = ""
    adjustment: Optional[str] = None


class Fertilizer(LenientModel):
    type: Optional[str] = None
    frequency: Optional[str] = None
    next_application: Optional[str] = Field(default=None, alias="nextApplication")


class Pruning(LenientModel):
    needed: bool = False
    instructions: str = ""
    when: str = ""


class Repotting(LenientModel):
    needed: bool = False
    signs: str = ""
    recommended_pot_size: Optional[str] = Field(default=None, alias="recommendedPotSize")


class CarePlan(LenientModel):
    watering: Optional[Watering] = None
    light: Optional[Light] = None
    fertilizer: Optional[Fertilizer] = None
    pruning: Optional[Pruning] = None
    repotting: Optional[Repotting] = None
    seasonal: str = ""


class PlantAnalysisResult(LenientModel):
    """Structured result of one AI plant analysis."""

    identification: Optional[Identification] = None
    health_assessment: Optional[HealthAssessment] = Field(default=None, alias="healthAssessment")
    immediate_actions: list[ImmediateAction] = Field(default_factory=list, alias="immediateActions")
    care_plan: Optional[CarePlan] = Field(default=None, alias="carePlan")
    fun_fact: str = Field(default="", alias="funFact")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "identification": {
                    "commonName": "Monstera",
                    "scientificName": "Monstera deliciosa",
                    "confidence": "high",
                    "notes": "",
                },
                "healthAssessment": {"score": 7, "summary": "Good overall health", "issues": []},
                "immediateActions": [],
                "carePlan": {
                    "watering": {"frequency": "every 7-10 days", "amount": "Until drainage"},
                    "pruning": {"needed": "false"},
                },
                "funFact": "Its leaves develop holes as the plant matures.",
            }
        }
    )


# ============================================================================
# API requests
# ============================================================================

class RecordAnalysisRequest(BaseModel):
    """Body of POST /api/analyses."""

    plant_id: str = Field(..., min_length=1, max_length=64, description="Plant identifier")
    raw_response: Optional[str] = Field(default=None, description="Raw AI response text")
    photo_path: Optional[str] = Field(default=None, description="Stored photo used for the analysis")

    @field_validator("plant_id", mode="before")
    @classmethod
    def normalize_plant_id(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class RescanRequest(BaseModel):
    """Body of POST /api/analyses/rescan (optional)."""

    batch_size: Optional[int] = Field(default=None, ge=1, le=500, description="Records examined per batch")
