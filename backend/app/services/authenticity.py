# backend/app/services/authenticity.py
"""
Media authenticity checking.

`AuthenticityChecker` is the seam a real forensic service plugs into. The
default implementation is a stand-in: it waits a little to mimic network
latency and returns a pseudo-random integrity score in [50, 99].
"""

from typing import Optional
import asyncio
import logging
import random

from app.models.schema import AuthenticityAssessment, MediaBlob

logger = logging.getLogger("authenticity")

SIMULATED_MIN_SCORE = 50
SIMULATED_MAX_SCORE = 99


class AuthenticityChecker:
    """Interface that authenticity checkers implement."""

    async def check(self, media: MediaBlob) -> AuthenticityAssessment:
        """Return an integrity score in [0,100]; 100 means fully authentic."""
        raise NotImplementedError


class SimulatedAuthenticityChecker(AuthenticityChecker):
    def __init__(self, delay: float = 1.5, rng: Optional[random.Random] = None):
        self.delay = delay
        self.rng = rng or random.Random()

    async def check(self, media: MediaBlob) -> AuthenticityAssessment:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        score = self.rng.randint(SIMULATED_MIN_SCORE, SIMULATED_MAX_SCORE)
        logger.info("simulated integrity check for %s (%s bytes): %s",
                    media.filename or media.mime_type, media.size, score)
        return AuthenticityAssessment(integrity_score=score)
