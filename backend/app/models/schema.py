from enum import Enum
from typing import List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class RiskLevel(str, Enum):
    SAFE = "SAFE"
    CAUTION = "CAUTION"
    SUSPICIOUS = "SUSPICIOUS"
    DANGEROUS = "DANGEROUS"
    CRITICAL = "CRITICAL"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class CamelModel(BaseModel):
    # wire format is camelCase, python side is snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------
# REQUEST MODELS
# -----------------------------
class MediaBlob(BaseModel):
    data: bytes
    mime_type: str
    filename: Optional[str] = None
    size: Optional[int] = None

    @model_validator(mode="after")
    def _default_size(self):
        if self.size is None:
            self.size = len(self.data)
        return self


class AnalysisRequest(BaseModel):
    media: Optional[MediaBlob] = None
    caption: Optional[str] = None

    @field_validator("caption")
    @classmethod
    def _blank_caption_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


# -----------------------------
# UPSTREAM ASSESSMENTS
# -----------------------------
class PropagandaFlag(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    technique: str
    description: str
    severity: Severity
    location: Optional[str] = None


class PropagandaAssessment(CamelModel):
    contextual_risk_score: float = Field(
        ge=0, le=100,
        validation_alias=AliasChoices("contextualRiskScore", "riskScore", "contextual_risk_score"),
    )
    risk_level: RiskLevel
    summary: str
    narrative_strategy: Optional[str] = None
    emotional_triggers: List[str] = Field(default_factory=list)
    flags: List[PropagandaFlag]


class AuthenticityAssessment(CamelModel):
    integrity_score: float = Field(ge=0, le=100)


# -----------------------------
# OUTPUT
# -----------------------------
class FusionReport(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    contextual_risk_score: float
    fusion_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    summary: str
    narrative_strategy: Optional[str] = None
    emotional_triggers: Tuple[str, ...] = ()
    flags: Tuple[PropagandaFlag, ...] = ()
    visual_integrity_score: Optional[float] = None
    visual_integrity_warning: Optional[str] = None
    rebuttal: Optional[str] = None


class ScoreBands(CamelModel):
    fusion: str
    contextual: str
    visual_integrity: Optional[str] = None


class AnalyzeResponse(CamelModel):
    report: FusionReport
    bands: ScoreBands
