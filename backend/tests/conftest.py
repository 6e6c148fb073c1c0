"""
Pytest fixtures and deterministic stand-ins for the outbound collaborators.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from app.config import Config
from app.models.schema import AuthenticityAssessment, MediaBlob
from app.services.authenticity import AuthenticityChecker
from app.services.content_analyzer import ContentAnalyzer
from app.services.fusion import FusionEngine
from app.services.pipeline import AnalysisPipeline
from app.services.rebuttal import RebuttalGenerator


def assessment_json(score=40, level="CAUTION", summary="Caption leans on outrage.", **extra) -> str:
    payload = {
        "contextualRiskScore": score,
        "riskLevel": level,
        "summary": summary,
        "narrativeStrategy": "To stir distrust",
        "emotionalTriggers": ["fear", "anger"],
        "flags": [
            {"technique": "Fear-mongering", "description": "Warns of collapse", "severity": "HIGH"},
        ],
    }
    payload.update(extra)
    return json.dumps(payload)


class StubLLM:
    """Records every call; returns canned replies."""

    def __init__(self, json_reply: str = "", text_reply: str = "Facts say otherwise.",
                 json_error: Exception | None = None, text_error: Exception | None = None,
                 delay: float = 0.0, available: bool = True):
        self.model = "stub-model"
        self.available = available
        self.json_reply = json_reply
        self.text_reply = text_reply
        self.json_error = json_error
        self.text_error = text_error
        self.delay = delay
        self.json_calls: list = []
        self.text_calls: list = []
        self.finished_json = False

    async def complete_json(self, system, content, schema_name, schema, max_tokens=2000):
        self.json_calls.append({"system": system, "content": content, "schema_name": schema_name})
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished_json = True
        if self.json_error is not None:
            raise self.json_error
        return self.json_reply

    async def complete_text(self, prompt, max_tokens=300, temperature=0.4):
        self.text_calls.append(prompt)
        if self.text_error is not None:
            raise self.text_error
        return self.text_reply


class FixedChecker(AuthenticityChecker):
    def __init__(self, score: float, error: Exception | None = None, delay: float = 0.0):
        self.score = score
        self.error = error
        self.delay = delay
        self.calls: list[MediaBlob] = []
        self.finished = False

    async def check(self, media: MediaBlob) -> AuthenticityAssessment:
        self.calls.append(media)
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished = True
        if self.error is not None:
            raise self.error
        return AuthenticityAssessment(integrity_score=self.score)


class RecordingRebuttal(RebuttalGenerator):
    def __init__(self, reply: str = "Counter-facts."):
        super().__init__(None)
        self.reply = reply
        self.contexts: list[str] = []

    async def generate(self, context: str) -> str:
        self.contexts.append(context)
        return self.reply


def make_pipeline(llm: StubLLM, checker: AuthenticityChecker, config: Config | None = None) -> AnalysisPipeline:
    config = config or Config(openai_api_key="test-key")
    return AnalysisPipeline(
        config=config,
        analyzer=ContentAnalyzer(llm),
        checker=checker,
        engine=FusionEngine(RebuttalGenerator(llm)),
    )


@pytest.fixture
def config():
    return Config(openai_api_key="test-key")


@pytest.fixture
def png_media():
    return MediaBlob(data=b"\x89PNG\r\n\x1a\nfake", mime_type="image/png", filename="post.png")
