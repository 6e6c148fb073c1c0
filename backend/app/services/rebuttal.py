# backend/app/services/rebuttal.py
from typing import Optional
import logging

from app.services.llm_agent import LLMAgent, _safe_truncate

logger = logging.getLogger("rebuttal")

EMPTY_REBUTTAL = "Rebuttal generation unavailable."
FAILED_REBUTTAL = "Could not generate rebuttal at this time."

REBUTTAL_PROMPT = (
    "Generate a sharp, three-sentence rebuttal based on general knowledge and verified facts "
    "refuting the following propaganda narrative: \"{context}\".\n"
    "Focus on objective reality and logic. Do not preach, just state the facts that counter the claim."
)


class RebuttalGenerator:
    """Counter-argument for critical findings. Never raises; degrades to a placeholder."""

    def __init__(self, llm: Optional[LLMAgent]):
        self.llm = llm

    async def generate(self, context: str) -> str:
        if self.llm is None or not self.llm.available:
            logger.warning("rebuttal skipped: LLM client not available")
            return FAILED_REBUTTAL
        prompt = REBUTTAL_PROMPT.format(context=_safe_truncate(context, 4000))
        try:
            text = await self.llm.complete_text(prompt, max_tokens=250)
        except Exception as e:
            logger.error("Failed to generate rebuttal: %s", str(e)[:300])
            return FAILED_REBUTTAL
        return text or EMPTY_REBUTTAL
