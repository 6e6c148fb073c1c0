# backend/app/services/content_analyzer.py
"""
Content analyzer: sends the caption and/or inline media to the generative
model with a fixed instruction and output schema, and validates the reply
into a PropagandaAssessment.

Anything that does not come back as schema-conforming JSON is an
UpstreamFailure; partially-populated assessments never leave this module.
"""

from typing import Any, Dict, List
import base64
import json
import logging

from pydantic import ValidationError

from app.exceptions import ConfigurationError, UpstreamFailure
from app.models.schema import AnalysisRequest, MediaBlob, PropagandaAssessment
from app.services.llm_agent import LLMAgent

logger = logging.getLogger("content_analyzer")

SYSTEM_INSTRUCTION = """
You are a specialized intelligence system designed to analyze media content (images, videos, and text captions) for propaganda techniques, misinformation, and psychological manipulation.

Your goal is to be objective, analytical, and precise. You do not have political bias; you simply flag techniques used to manipulate opinion.

Analyze the provided inputs for these specific Red Flags:
1. Extreme Emotional Language (e.g., fear-mongering, appeal to outrage, loaded words).
2. Urgency & Call to Action (e.g., "Share immediately", "Before it's deleted").
3. Source Credibility Issues (e.g., unsourced claims, "They don't want you to know").
4. Artificial Amplification (e.g., all-caps, excessive punctuation, spam-like patterns).
5. Logical Fallacies (e.g., ad hominem, straw man, false dilemma).

Also analyze:
- Visual Manipulation (if image/video provided).
- Narrative Strategy (what is the underlying message trying to achieve?).

Score the content from 0 (Completely benign/factual) to 100 (High-intensity propaganda).
Return a single JSON object matching the provided schema.
""".strip()

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "contextualRiskScore": {
            "type": "number",
            "description": "A score from 0 to 100 indicating the likelihood and intensity of propaganda.",
        },
        "riskLevel": {
            "type": "string",
            "enum": ["SAFE", "CAUTION", "SUSPICIOUS", "DANGEROUS", "CRITICAL"],
        },
        "summary": {
            "type": "string",
            "description": "A concise executive summary of the findings.",
        },
        "narrativeStrategy": {
            "type": "string",
            "description": "The strategic goal of the content (e.g., 'To demoralize the opposition').",
        },
        "emotionalTriggers": {
            "type": "array",
            "items": {"type": "string"},
            "description": "List of emotions the content attempts to evoke.",
        },
        "flags": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "technique": {"type": "string", "description": "Name of the propaganda technique."},
                    "description": {"type": "string",
                                    "description": "Specific example of where/how it appears in the content."},
                    "severity": {"type": "string", "enum": ["LOW", "MEDIUM", "HIGH", "CRITICAL"]},
                    "location": {"type": "string",
                                 "description": "Timestamp (if video) or description of visual area (if image)."},
                },
                "required": ["technique", "description", "severity"],
            },
        },
    },
    "required": ["contextualRiskScore", "riskLevel", "summary", "flags"],
}


def _media_part(media: MediaBlob) -> Dict[str, Any]:
    data_url = f"data:{media.mime_type};base64,{base64.b64encode(media.data).decode('ascii')}"
    if media.mime_type.startswith("image/"):
        return {"type": "image_url", "image_url": {"url": data_url}}
    # video goes as a generic file part; providers without video support reject it upstream
    return {"type": "file", "file": {"file_data": data_url, "filename": media.filename or "upload"}}


def build_parts(request: AnalysisRequest) -> List[Dict[str, Any]]:
    parts: List[Dict[str, Any]] = []
    if request.caption:
        parts.append({"type": "text", "text": f'Analyze this social media caption: "{request.caption}"'})
    if request.media is not None:
        parts.append(_media_part(request.media))
    return parts


def parse_assessment(raw: str) -> PropagandaAssessment:
    """Validate raw model output against the schema contract."""
    if not raw:
        raise UpstreamFailure(ValueError("No response text received from model."))
    try:
        return PropagandaAssessment.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("model output failed schema validation: %s", str(e)[:300])
        raise UpstreamFailure(e) from e


class ContentAnalyzer:
    def __init__(self, llm: LLMAgent):
        self.llm = llm

    async def analyze(self, request: AnalysisRequest) -> PropagandaAssessment:
        if not self.llm.available:
            raise ConfigurationError("API Key is missing.")

        parts = build_parts(request)
        try:
            raw = await self.llm.complete_json(
                SYSTEM_INSTRUCTION, parts,
                schema_name="propaganda_assessment",
                schema=RESPONSE_SCHEMA,
            )
        except Exception as e:
            logger.warning("content analysis call failed: %s", str(e)[:300])
            raise UpstreamFailure(e) from e

        return parse_assessment(raw)
