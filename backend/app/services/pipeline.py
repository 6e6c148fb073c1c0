# backend/app/services/pipeline.py
"""
Analysis pipeline: validate -> (content analysis || authenticity check) -> fuse.

The two primary calls run concurrently and are always both awaited before
anything is decided. If either fails the whole request fails; there is no
partial report. The rebuttal call happens afterwards, inside the fusion step.
"""

from typing import Optional
import asyncio
import logging

from app.config import Config
from app.exceptions import (
    FILE_TOO_LARGE,
    NO_INPUT,
    UNSUPPORTED_MEDIA,
    AnalysisError,
    InvalidRequest,
    UpstreamFailure,
)
from app.models.schema import AnalysisRequest, FusionReport
from app.services.authenticity import AuthenticityChecker, SimulatedAuthenticityChecker
from app.services.content_analyzer import ContentAnalyzer
from app.services.fusion import FusionEngine
from app.services.llm_agent import LLMAgent
from app.services.rebuttal import RebuttalGenerator

logger = logging.getLogger("pipeline")

SUPPORTED_MEDIA_PREFIXES = ("image/", "video/")


def validate_request(request: AnalysisRequest, max_upload_bytes: int) -> None:
    """Synchronous boundary checks; raises InvalidRequest."""
    if request.media is None and not request.caption:
        raise InvalidRequest(NO_INPUT)
    media = request.media
    if media is None:
        return
    if media.size > max_upload_bytes:
        raise InvalidRequest(FILE_TOO_LARGE)
    if not (media.mime_type or "").lower().startswith(SUPPORTED_MEDIA_PREFIXES):
        raise InvalidRequest(UNSUPPORTED_MEDIA)


class AnalysisPipeline:
    def __init__(self,
                 config: Config,
                 analyzer: ContentAnalyzer,
                 checker: AuthenticityChecker,
                 engine: FusionEngine):
        self.config = config
        self.analyzer = analyzer
        self.checker = checker
        self.engine = engine

    @classmethod
    def from_config(cls, config: Config) -> "AnalysisPipeline":
        llm = LLMAgent(config)
        return cls(
            config=config,
            analyzer=ContentAnalyzer(llm),
            checker=SimulatedAuthenticityChecker(delay=config.authenticity_delay),
            engine=FusionEngine(RebuttalGenerator(llm)),
        )

    async def analyze(self, request: AnalysisRequest) -> FusionReport:
        validate_request(request, self.config.max_upload_bytes)

        tasks = [self.analyzer.analyze(request)]
        if request.media is not None:
            tasks.append(self.checker.check(request.media))

        # join point: wait for every call, then look at the outcomes
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for outcome in results:
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
        for outcome in results:
            if isinstance(outcome, BaseException):
                raise self._as_analysis_error(outcome)

        assessment = results[0]
        authenticity = results[1] if len(results) > 1 else None
        return await self.engine.fuse(assessment, authenticity, caption=request.caption)

    @staticmethod
    def _as_analysis_error(exc: BaseException) -> AnalysisError:
        if isinstance(exc, AnalysisError):
            logger.error("Analysis failed: %s (cause: %s)", exc.message, str(exc.cause)[:300])
            return exc
        logger.error("Analysis failed: %s", str(exc)[:300])
        return UpstreamFailure(exc)


_default_pipeline: Optional[AnalysisPipeline] = None


def configure_pipeline(config: Config) -> AnalysisPipeline:
    """Build the process-wide pipeline; called once at startup."""
    global _default_pipeline
    _default_pipeline = AnalysisPipeline.from_config(config)
    return _default_pipeline


def get_pipeline() -> AnalysisPipeline:
    """FastAPI dependency; falls back to building from the environment."""
    if _default_pipeline is None:
        return configure_pipeline(Config.from_env())
    return _default_pipeline
