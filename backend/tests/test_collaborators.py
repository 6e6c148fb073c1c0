"""
Tests for the rebuttal generator, the simulated authenticity checker,
the LLM wrapper and configuration loading.
"""

from __future__ import annotations

import random
from types import SimpleNamespace

import pytest

from app.config import DEFAULT_MAX_UPLOAD_BYTES, Config
from app.exceptions import ConfigurationError
from app.models.schema import MediaBlob
from app.services.authenticity import AuthenticityChecker, SimulatedAuthenticityChecker
from app.services.llm_agent import LLMAgent, _parse_model_response, _safe_truncate
from app.services.rebuttal import EMPTY_REBUTTAL, FAILED_REBUTTAL, RebuttalGenerator

from conftest import StubLLM


@pytest.mark.asyncio
async def test_rebuttal_returns_model_text():
    llm = StubLLM(text_reply="Fact one. Fact two. Fact three.")
    out = await RebuttalGenerator(llm).generate("Vaccines contain trackers")
    assert out == "Fact one. Fact two. Fact three."
    assert '"Vaccines contain trackers"' in llm.text_calls[0]
    assert "three-sentence rebuttal" in llm.text_calls[0]


@pytest.mark.asyncio
async def test_rebuttal_empty_reply_uses_placeholder():
    out = await RebuttalGenerator(StubLLM(text_reply="")).generate("x")
    assert out == EMPTY_REBUTTAL


@pytest.mark.asyncio
async def test_rebuttal_error_is_absorbed():
    out = await RebuttalGenerator(StubLLM(text_error=TimeoutError())).generate("x")
    assert out == FAILED_REBUTTAL


@pytest.mark.asyncio
async def test_rebuttal_without_client():
    assert await RebuttalGenerator(StubLLM(available=False)).generate("x") == FAILED_REBUTTAL
    assert await RebuttalGenerator(None).generate("x") == FAILED_REBUTTAL


@pytest.mark.asyncio
async def test_simulated_checker_range_and_seed():
    media = MediaBlob(data=b"x", mime_type="image/png")
    a = SimulatedAuthenticityChecker(delay=0, rng=random.Random(7))
    b = SimulatedAuthenticityChecker(delay=0, rng=random.Random(7))
    scores = [(await a.check(media)).integrity_score for _ in range(50)]
    assert all(50 <= s <= 99 for s in scores)
    assert scores[:5] == [(await b.check(media)).integrity_score for _ in range(5)]


@pytest.mark.asyncio
async def test_checker_interface_is_abstract():
    with pytest.raises(NotImplementedError):
        await AuthenticityChecker().check(MediaBlob(data=b"x", mime_type="image/png"))


def test_llm_agent_unavailable_without_key():
    agent = LLMAgent(Config(openai_api_key=None))
    assert agent.available is False
    assert agent.client is None


@pytest.mark.asyncio
async def test_llm_agent_requests_json_schema():
    captured = {}

    class FakeCompletions:
        async def create(self, **kwargs):
            captured.update(kwargs)
            return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=' {"a": 1} '))])

    client = SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions()))
    agent = LLMAgent(Config(openai_model="gpt-test"), client=client)
    raw = await agent.complete_json("sys", [{"type": "text", "text": "hi"}], "s", {"type": "object"})
    assert raw == '{"a": 1}'
    assert captured["model"] == "gpt-test"
    assert captured["response_format"]["type"] == "json_schema"
    assert captured["response_format"]["json_schema"]["name"] == "s"
    assert captured["messages"][0] == {"role": "system", "content": "sys"}


@pytest.mark.asyncio
async def test_llm_agent_raises_when_unavailable():
    with pytest.raises(RuntimeError):
        await LLMAgent(Config()).complete_text("hello")


def test_parse_model_response_shapes():
    assert _parse_model_response({"choices": [{"message": {"content": "dict"}}]}) == "dict"
    assert _parse_model_response(SimpleNamespace(choices=[])) == ""
    assert _parse_model_response(object()) == ""


def test_safe_truncate():
    assert _safe_truncate("", 5) == ""
    assert _safe_truncate("short", 10) == "short"
    assert _safe_truncate("one two three four", 9) == "one two..."


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1")
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "1024")
    monkeypatch.setenv("AUTHENTICITY_DELAY", "0")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    cfg = Config.from_env()
    assert cfg.openai_api_key == "sk-test"
    assert cfg.openai_model == "gpt-4.1"
    assert cfg.max_upload_bytes == 1024
    assert cfg.authenticity_delay == 0.0
    assert cfg.openai_base_url is None
    assert "sk-test" not in repr(cfg)


def test_config_defaults():
    cfg = Config()
    assert cfg.max_upload_bytes == DEFAULT_MAX_UPLOAD_BYTES == 20 * 1024 * 1024
    assert cfg.openai_model == "gpt-4o-mini"


@pytest.mark.parametrize("name,value", [
    ("MAX_UPLOAD_BYTES", "20MB"),
    ("REQUEST_TIMEOUT", "soon"),
    ("AUTHENTICITY_DELAY", "-1"),
])
def test_config_rejects_bad_numbers(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError) as exc:
        Config.from_env()
    assert name in exc.value.message


def test_config_blank_number_uses_default(monkeypatch):
    monkeypatch.setenv("REQUEST_TIMEOUT", " ")
    assert Config.from_env().request_timeout == 60.0
