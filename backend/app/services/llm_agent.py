# backend/app/services/llm_agent.py
"""
Async LLM wrapper shared by the content analyzer and the rebuttal generator.

Features:
 - Uses the official OpenAI Python SDK (AsyncOpenAI); any OpenAI-compatible endpoint works via base_url.
 - Built from an explicit Config, never from ambient environment state.
 - Structured output through response_format=json_schema.
 - `available` is False when no key is configured so callers can fail early.
"""

from typing import Optional, List, Dict, Any
import logging

from openai import AsyncOpenAI

from app.config import Config

logger = logging.getLogger("llm_agent")


def _safe_truncate(text: str, max_chars: int) -> str:
    if not text:
        return ""
    return text if len(text) <= max_chars else text[:max_chars].rsplit(" ", 1)[0] + "..."


def _parse_model_response(resp: Any) -> str:
    """
    Extract the reply text from a chat completion.
    Works with: resp.choices[0].message.content  OR  a plain dict of the same shape.
    """
    try:
        choices = getattr(resp, "choices", None)
        if choices is None and isinstance(resp, dict):
            choices = resp.get("choices")
        if not choices:
            return ""
        first = choices[0]
        if isinstance(first, dict):
            msg = first.get("message") or {}
            return msg.get("content") or ""
        message = getattr(first, "message", None)
        return getattr(message, "content", None) or ""
    except Exception as e:
        logger.debug("parse_model_response failed: %s", str(e))
        return ""


class LLMAgent:
    def __init__(self, config: Config, client: Optional[AsyncOpenAI] = None):
        self.model = config.openai_model
        self.client = client
        if self.client is None and config.openai_api_key:
            try:
                self.client = AsyncOpenAI(
                    api_key=config.openai_api_key,
                    base_url=config.openai_base_url,
                    timeout=config.request_timeout,
                )
            except Exception as e:
                logger.warning("OpenAI client init failed: %s", str(e)[:200])
                self.client = None
        self.available = self.client is not None

    async def _call_model(self,
                          messages: List[Dict[str, Any]],
                          max_tokens: int = 300,
                          temperature: float = 0.2,
                          response_format: Optional[Dict[str, Any]] = None) -> str:
        """
        Single chat.completions call. Returns the textual response (or raises on hard failure).
        """
        if not self.available or not self.client:
            raise RuntimeError("LLM client not available")

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if response_format is not None:
            kwargs["response_format"] = response_format

        resp = await self.client.chat.completions.create(**kwargs)
        return _parse_model_response(resp).strip()

    async def complete_json(self,
                            system: str,
                            content: List[Dict[str, Any]],
                            schema_name: str,
                            schema: Dict[str, Any],
                            max_tokens: int = 2000) -> str:
        """
        Ask for a JSON object conforming to `schema`. Returns the raw JSON text;
        parsing and validation belong to the caller.
        """
        messages = [{"role": "system", "content": system}, {"role": "user", "content": content}]
        response_format = {
            "type": "json_schema",
            "json_schema": {"name": schema_name, "schema": schema, "strict": False},
        }
        return await self._call_model(messages, max_tokens=max_tokens, temperature=0.0,
                                      response_format=response_format)

    async def complete_text(self, prompt: str, max_tokens: int = 300, temperature: float = 0.4) -> str:
        messages = [{"role": "user", "content": prompt}]
        return await self._call_model(messages, max_tokens=max_tokens, temperature=temperature)
