# backend/app/services/fusion.py
"""
Fusion & escalation engine.
Combines the contextual propaganda score with the visual integrity score into
one report, escalates to CRITICAL when both signals are bad at once, and asks
for a rebuttal when the final level is CRITICAL.

fusion_score = round_half_up((contextual + (100 - integrity)) / 2)
"""

from typing import Optional
import logging
import math

from app.models.schema import (
    AuthenticityAssessment,
    FusionReport,
    PropagandaAssessment,
    RiskLevel,
)
from app.services.rebuttal import RebuttalGenerator

logger = logging.getLogger("fusion")

INTEGRITY_WARNING_THRESHOLD = 70
ESCALATION_CONTEXT_THRESHOLD = 85
AI_ARTIFACTS_WARNING = "Potential AI Artifacts Detected"
FALLBACK_REBUTTAL_CONTEXT = "The uploaded media content."


def round_half_up(value: float) -> int:
    # python's round() is half-to-even; scores are non-negative so floor(x + .5) is enough
    return int(math.floor(value + 0.5))


def combine(assessment: PropagandaAssessment,
            authenticity: Optional[AuthenticityAssessment] = None) -> FusionReport:
    """
    Pure part of the fusion: scores, integrity warning and escalation.
    No rebuttal is requested here.
    """
    if not isinstance(assessment, PropagandaAssessment):
        raise TypeError(f"assessment must be a validated PropagandaAssessment, got {type(assessment).__name__}")
    if authenticity is not None and not isinstance(authenticity, AuthenticityAssessment):
        raise TypeError(f"authenticity must be an AuthenticityAssessment, got {type(authenticity).__name__}")

    contextual = assessment.contextual_risk_score
    fusion_score = round_half_up(contextual)
    risk_level = assessment.risk_level
    integrity_score = None
    warning = None

    if authenticity is not None:
        integrity_score = authenticity.integrity_score
        manipulation_risk = 100 - integrity_score
        fusion_score = round_half_up((contextual + manipulation_risk) / 2)

        low_integrity = integrity_score < INTEGRITY_WARNING_THRESHOLD
        if low_integrity:
            warning = AI_ARTIFACTS_WARNING
        # both signals together, never either alone
        if low_integrity and contextual > ESCALATION_CONTEXT_THRESHOLD:
            if risk_level != RiskLevel.CRITICAL:
                logger.info("escalating %s -> CRITICAL (contextual=%s, integrity=%s)",
                            risk_level.value, contextual, integrity_score)
            risk_level = RiskLevel.CRITICAL

    return FusionReport(
        contextual_risk_score=contextual,
        fusion_score=fusion_score,
        risk_level=risk_level,
        summary=assessment.summary,
        narrative_strategy=assessment.narrative_strategy,
        emotional_triggers=tuple(assessment.emotional_triggers),
        flags=tuple(assessment.flags),
        visual_integrity_score=integrity_score,
        visual_integrity_warning=warning,
    )


def rebuttal_context(assessment: PropagandaAssessment, caption: Optional[str] = None) -> str:
    if assessment.summary and assessment.summary.strip():
        return assessment.summary
    if caption and caption.strip():
        return caption
    return FALLBACK_REBUTTAL_CONTEXT


class FusionEngine:
    def __init__(self, rebuttal_generator: RebuttalGenerator):
        self.rebuttal_generator = rebuttal_generator

    async def fuse(self,
                   assessment: PropagandaAssessment,
                   authenticity: Optional[AuthenticityAssessment] = None,
                   caption: Optional[str] = None) -> FusionReport:
        report = combine(assessment, authenticity)
        if report.risk_level != RiskLevel.CRITICAL:
            return report

        rebuttal = await self.rebuttal_generator.generate(rebuttal_context(assessment, caption))
        return report.model_copy(update={"rebuttal": rebuttal})


# ---- display bands (same cut points as the dashboard gauges) ----

def risk_band(score: float) -> str:
    if score < 20:
        return RiskLevel.SAFE.value
    if score < 50:
        return RiskLevel.CAUTION.value
    if score < 80:
        return RiskLevel.SUSPICIOUS.value
    return RiskLevel.DANGEROUS.value


def integrity_band(score: float) -> str:
    # higher is better here
    if score >= 90:
        return RiskLevel.SAFE.value
    if score >= 70:
        return RiskLevel.CAUTION.value
    return RiskLevel.DANGEROUS.value
