"""Shared fixtures: a scripted stand-in for the LLM client and an in-memory store."""

import pytest

from dream_planner import model_props, settings
from dream_planner.generation_boundary import GenerationBoundary
from dream_planner.storage import RoadmapStore, create_session_factory


class FakeLlm:
    """
    Mimics LlmClient.invoke. Each call pops the next scripted response;
    an Exception instance is raised instead of returned.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def invoke(self, prompt, *, retries=3, max_tokens=None, temperature=None):
        self.calls.append({
            "prompt": prompt,
            "retries": retries,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if not self.responses:
            raise RuntimeError("FakeLlm: no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_llm():
    return FakeLlm()


@pytest.fixture
def failing_llm():
    return FakeLlm([RuntimeError("503 Service Unavailable")] * 5)


@pytest.fixture
def make_boundary():
    def _make(*responses):
        return GenerationBoundary(llm=FakeLlm(responses))
    return _make


@pytest.fixture
def full_context():
    return {
        "budget": {"amount": 30000, "confidence": 0.9},
        "timeline": {"text": "12 months", "unit": "months", "confidence": 0.8},
        "location": {"text": "Dublin, Ireland", "confidence": 0.9},
        "preferences": [{"category": "style", "value": "rustic", "confidence": 0.7}],
        "constraints": [],
    }


@pytest.fixture
def store():
    return RoadmapStore(create_session_factory("sqlite://"))


@pytest.fixture
def missing_planner_config(tmp_path, monkeypatch):
    """Points the preset loader at a config file that does not exist."""
    monkeypatch.setattr(settings, "PLANNER_CONFIG_PATH", str(tmp_path / "missing.jsonc"))
    monkeypatch.setattr(model_props, "_GENERATION_PRESETS", None)
