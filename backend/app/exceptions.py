"""
Errors raised by the analysis pipeline.

The router maps each class onto an HTTP status; the message is what the
caller sees, the underlying cause is only logged.
"""

from typing import Optional

NO_INPUT = "no input provided"
FILE_TOO_LARGE = "file too large"
UNSUPPORTED_MEDIA = "unsupported media type"

ANALYSIS_FAILED = (
    "Failed to analyze content. The model may have been blocked or the input format is invalid."
)


class AnalysisError(Exception):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class InvalidRequest(AnalysisError):
    """Request rejected before any outbound call."""


class ConfigurationError(AnalysisError):
    """Credentials missing or client could not be built."""


class UpstreamFailure(AnalysisError):
    """Content analyzer or authenticity checker failed; no partial report."""

    def __init__(self, cause: Optional[BaseException] = None, message: str = ANALYSIS_FAILED):
        super().__init__(message, cause)
