# backend/app/routers/analyze.py

"""
Propaganda analysis router.
Accepts an optional media upload and/or caption and returns the fused report:
 - content analysis (generative model, fixed schema)
 - visual integrity check (when a file is attached)
 - fusion score + escalation
 - rebuttal for CRITICAL findings
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from app.exceptions import (
    FILE_TOO_LARGE,
    UNSUPPORTED_MEDIA,
    AnalysisError,
    ConfigurationError,
    InvalidRequest,
    UpstreamFailure,
)
from app.models.schema import AnalysisRequest, AnalyzeResponse, FusionReport, MediaBlob, ScoreBands
from app.services.fusion import integrity_band, risk_band
from app.services.pipeline import AnalysisPipeline, get_pipeline

logger = logging.getLogger("routers.analyze")

router = APIRouter()

INVALID_STATUS = {
    FILE_TOO_LARGE: 413,
    UNSUPPORTED_MEDIA: 415,
}


def _status_for(err: AnalysisError) -> int:
    if isinstance(err, InvalidRequest):
        return INVALID_STATUS.get(err.message, 400)
    if isinstance(err, ConfigurationError):
        return 503
    if isinstance(err, UpstreamFailure):
        return 502
    return 500


def _bands(report: FusionReport) -> ScoreBands:
    return ScoreBands(
        fusion=risk_band(report.fusion_score),
        contextual=risk_band(report.contextual_risk_score),
        visual_integrity=(integrity_band(report.visual_integrity_score)
                          if report.visual_integrity_score is not None else None),
    )


async def _read_media(file: Optional[UploadFile], max_upload_bytes: int) -> Optional[MediaBlob]:
    if file is None or not file.filename:
        return None
    # reject on the declared size before pulling the body into memory
    if file.size is not None and file.size > max_upload_bytes:
        raise InvalidRequest(FILE_TOO_LARGE)
    data = await file.read()
    return MediaBlob(
        data=data,
        mime_type=file.content_type or "application/octet-stream",
        filename=file.filename,
        size=file.size if file.size is not None else len(data),
    )


@router.post("/analyze", response_model=AnalyzeResponse, response_model_by_alias=True,
             response_model_exclude_none=True)
async def analyze(file: Optional[UploadFile] = File(default=None, description="Image or video to analyze"),
                  caption: Optional[str] = Form(default=None, description="Social media caption / context"),
                  pipeline: AnalysisPipeline = Depends(get_pipeline)):
    """
    Pipeline:
    validate → content analysis ‖ integrity check → fusion → (rebuttal) → report JSON
    """
    try:
        media = await _read_media(file, pipeline.config.max_upload_bytes)
        report = await pipeline.analyze(AnalysisRequest(media=media, caption=caption))
    except AnalysisError as e:
        raise HTTPException(status_code=_status_for(e), detail=e.message)

    return AnalyzeResponse(report=report, bands=_bands(report))
