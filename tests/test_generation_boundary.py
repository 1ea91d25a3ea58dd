"""Tests for the generator request/response contract."""

import asyncio
import json

import pytest

from conftest import FakeLlm
from dream_planner.catalog import lookup
from dream_planner.exceptions import GenerationLayerError, GenerationShapeError, GenerationTransportError
from dream_planner.generation_boundary import DEFAULT_INSIGHTS, GenerationBoundary
from dream_planner.models import UserContext

SEQUENCE = ["venue_booking", "vendor_selection", "invitations", "ceremony", "reception", "honeymoon"]


def _validate(boundary, template=None, context=None):
    return asyncio.run(boundary.validate_and_customize(
        template or lookup("wedding"),
        "wedding",
        "A small rustic wedding in Tuscany",
        context or UserContext(),
    ))


def _generate(boundary):
    return asyncio.run(boundary.generate_sequence("Open a bakery", UserContext()))


class TestValidateAndCustomize:
    def test_fenced_response_with_defaults(self, make_boundary):
        raw = "```json\n" + json.dumps({"customizedSequence": SEQUENCE}) + "\n```"
        result = _validate(make_boundary(raw))

        assert result.approved is True
        assert result.customized_sequence == SEQUENCE
        assert result.insights == DEFAULT_INSIGHTS

    def test_rejected_template(self, make_boundary):
        raw = json.dumps({"approved": False, "customizedSequence": SEQUENCE, "insights": "Tuscany needs travel"})
        result = _validate(make_boundary(raw))

        assert result.approved is False
        assert result.insights == "Tuscany needs travel"

    def test_text_around_fenced_block(self, make_boundary):
        raw = "Here you go:\n```json\n" + json.dumps({"approved": True, "customizedSequence": SEQUENCE}) + "\n```\nEnjoy!"

        assert _validate(make_boundary(raw)).customized_sequence == SEQUENCE

    @pytest.mark.parametrize("sequence", [["a", "b"], [f"s{i}" for i in range(21)], ["a", "b", 3], "a,b,c"])
    def test_invalid_sequence_shape(self, make_boundary, sequence):
        raw = json.dumps({"approved": True, "customizedSequence": sequence})

        with pytest.raises(GenerationShapeError):
            _validate(make_boundary(raw))

    def test_array_instead_of_object(self, make_boundary):
        with pytest.raises(GenerationShapeError):
            _validate(make_boundary(json.dumps(SEQUENCE)))

    def test_unparseable_response(self, make_boundary):
        with pytest.raises(GenerationShapeError):
            _validate(make_boundary("I'm sorry, I can't help with that."))

    def test_empty_response(self, make_boundary):
        with pytest.raises(GenerationShapeError):
            _validate(make_boundary(""))

    def test_transport_failure(self, make_boundary):
        with pytest.raises(GenerationTransportError):
            _validate(make_boundary(ConnectionError("connection reset")))

    def test_single_attempt_with_preset(self):
        llm = FakeLlm([json.dumps({"customizedSequence": SEQUENCE})])
        _validate(GenerationBoundary(llm=llm))

        assert len(llm.calls) == 1
        call = llm.calls[0]
        assert call["retries"] == 1
        assert call["max_tokens"] == 2048
        assert call["temperature"] == 0.7

    def test_prompt_carries_template_and_context(self, full_context):
        llm = FakeLlm([json.dumps({"customizedSequence": SEQUENCE})])
        _validate(GenerationBoundary(llm=llm), context=UserContext.model_validate(full_context))

        prompt = llm.calls[0]["prompt"]
        assert "1. engagement_celebration" in prompt
        assert "A small rustic wedding in Tuscany" in prompt
        assert "- Budget: $30000" in prompt
        assert "- Location: Dublin, Ireland" in prompt
        assert "- Preferences: rustic" in prompt
        assert '"customizedSequence"' in prompt


class TestGenerateSequence:
    def test_valid_array(self, make_boundary):
        assert _generate(make_boundary(json.dumps(SEQUENCE))) == SEQUENCE

    def test_fenced_array(self, make_boundary):
        raw = "```\n" + json.dumps(SEQUENCE) + "\n```"

        assert _generate(make_boundary(raw)) == SEQUENCE

    @pytest.mark.parametrize("payload", [["a"], [f"s{i}" for i in range(16)], {"milestones": SEQUENCE}])
    def test_invalid_shapes(self, make_boundary, payload):
        with pytest.raises(GenerationShapeError):
            _generate(make_boundary(json.dumps(payload)))

    def test_errors_share_a_base_class(self, make_boundary):
        with pytest.raises(GenerationLayerError):
            _generate(make_boundary(TimeoutError("timed out")))


class TestRefineSequence:
    def _refine(self, boundary, template):
        return asyncio.run(boundary.refine_sequence(template, "home", "A flat in Lisbon", UserContext()))

    def test_too_short_answer_keeps_template(self, make_boundary):
        template = lookup("home")

        assert self._refine(make_boundary(json.dumps(["a"])), template) == template

    def test_valid_answer_is_used(self, make_boundary):
        assert self._refine(make_boundary(json.dumps(SEQUENCE)), lookup("home")) == SEQUENCE

    def test_transport_errors_still_raise(self, make_boundary):
        with pytest.raises(GenerationTransportError):
            self._refine(make_boundary(RuntimeError("boom")), lookup("home"))


class TestMissingClient:
    def test_no_llm_available_is_a_transport_error(self, monkeypatch):
        boundary = GenerationBoundary(model_name="gemini-2.5-flash-lite")
        monkeypatch.setattr(boundary, "_build_llm_for_model", lambda model_name, timeout=None: None)

        with pytest.raises(GenerationTransportError):
            _generate(boundary)


class TestPresetLoading:
    def test_missing_config_is_a_transport_error(self, missing_planner_config):
        llm = FakeLlm([json.dumps(SEQUENCE)])

        with pytest.raises(GenerationTransportError):
            _generate(GenerationBoundary(llm=llm))
        assert llm.calls == []

    def test_broken_config_is_logged_on_construction(self, missing_planner_config, caplog):
        with caplog.at_level("ERROR", logger="dream_planner"):
            GenerationBoundary(llm=FakeLlm())

        assert "Generation presets could not be loaded" in caplog.text
