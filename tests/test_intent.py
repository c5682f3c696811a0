import json

import pytest

from conftest import EIFFEL_KML, FakeLLM
from voice_rig_agent.cluster.geometry import calculate_range
from voice_rig_agent.errors import ClassificationFormatError, EmptyResponseError, ProviderError
from voice_rig_agent.intent import CommandProcessor, Intent, IntentClassifier
from voice_rig_agent.markup import MarkupGenerator


def make_processor(*responses):
    llm = FakeLLM(*responses)
    return CommandProcessor(IntentClassifier(llm), MarkupGenerator(llm)), llm


async def test_classify_fenced_json():
    result = await IntentClassifier(FakeLLM('```json\n{"intent":"CLEAR_KML"}\n```')).classify("clear it")
    assert result.intent is Intent.CLEAR_MARKUP
    assert result.raw == {"intent": "CLEAR_KML"}
    assert result.error is None


async def test_classify_parameters():
    payload = {
        "intent": "FLY_TO",
        "location_name": "Mount Everest",
        "lookAt": "<LookAt><range>1</range></LookAt>",
    }
    result = await IntentClassifier(FakeLLM(json.dumps(payload))).classify("fly to everest")
    assert result.intent is Intent.FLY_TO
    assert result.location_name == "Mount Everest"
    assert result.camera_view == "<LookAt><range>1</range></LookAt>"
    assert result.query is None


async def test_classify_missing_intent_is_soft_unknown():
    result = await IntentClassifier(FakeLLM('{"query": "Rome"}')).classify("rome")
    assert result.intent is Intent.UNKNOWN
    assert result.error
    assert result.raw == {"query": "Rome"}


async def test_classify_non_string_intent_is_soft_unknown():
    result = await IntentClassifier(FakeLLM('{"intent": 3}')).classify("x")
    assert result.intent is Intent.UNKNOWN
    assert result.error


async def test_classify_unrecognized_intent():
    result = await IntentClassifier(FakeLLM('{"intent": "MAKE_COFFEE"}')).classify("coffee")
    assert result.intent is Intent.UNKNOWN
    assert "MAKE_COFFEE" in result.error


async def test_classify_invalid_json_carries_texts():
    raw = "```json\n{intent: CLEAR_KML\n```"
    with pytest.raises(ClassificationFormatError) as exc_info:
        await IntentClassifier(FakeLLM(raw)).classify("clear")
    assert exc_info.value.raw_text == raw
    assert exc_info.value.cleaned_text == "{intent: CLEAR_KML"


async def test_classify_empty_response():
    with pytest.raises(EmptyResponseError):
        await IntentClassifier(FakeLLM("```\n```")).classify("hello")


async def test_process_direct_command():
    processor, _ = make_processor('```json\n{"intent":"CLEAR_KML"}\n```')
    result = await processor.process("Clear the screen")

    assert result.to_dict() == {"success": True, "action": "CLEAR_KML", "params": {"intent": "CLEAR_KML"}}


async def test_process_generate_markup_end_to_end():
    processor, llm = make_processor('{"intent": "GENERATE_KML", "query": "Eiffel Tower"}', EIFFEL_KML)
    result = await processor.process("Show me the Eiffel Tower")

    assert result.success
    assert result.action == "GENERATE_KML"
    assert llm.calls[1][-1].text == "Eiffel Tower"
    assert len(result.markup.coordinates) == 1
    assert calculate_range(result.markup.coordinates) == 500000
    data = result.to_dict()
    assert data["kml"] == EIFFEL_KML
    assert data["original_intent"]["query"] == "Eiffel Tower"


async def test_process_generate_falls_back_to_transcript():
    processor, llm = make_processor('{"intent": "GENERATE_KML"}', EIFFEL_KML)
    await processor.process("Show me the Eiffel Tower")
    assert llm.calls[1][-1].text == "Show me the Eiffel Tower"


async def test_process_generation_failure_is_reported():
    processor, _ = make_processor('{"intent": "GENERATE_KML", "query": "x"}', ProviderError("boom", status_code=500))
    result = await processor.process("show x")

    assert not result.success
    assert result.action == "ERROR_KML_GENERATION"
    assert "boom" in result.error
    assert result.to_dict()["original_intent"]["intent"] == "GENERATE_KML"


async def test_process_classification_failure_does_not_raise():
    processor, _ = make_processor("not json at all")
    result = await processor.process("???")

    assert not result.success
    assert result.action == "ERROR_CLASSIFICATION"
    assert result.error


async def test_process_unknown():
    processor, _ = make_processor('{"intent": "UNKNOWN", "original_query": "Tell me a joke"}')
    data = (await processor.process("Tell me a joke")).to_dict()

    assert data["success"] is False
    assert data["action"] == "UNKNOWN"
    assert data["original_query"] == "Tell me a joke"
    assert data["details"]["intent"] == "UNKNOWN"
