import pytest

from skillpack.skills import translator_deepl_google as translator
from tests.helpers import StubClient, ctx, upstream


async def test_translate():
    client = StubClient(default={"translated_text": "Hallo Welt", "detected_language": "en", "character_count": 11})
    res = await translator.execute(
        {"action": "translate", "text": " Hello world ", "target_lang": "DE", "formality": "more"}, ctx(client),
    )
    assert client.last["path"] == "/translate"
    assert client.last["body"] == {"text": "Hello world", "target_lang": "de", "formality": "more"}
    assert res["result"].endswith("Hallo Welt")
    assert "Formality: more" in res["result"]
    meta = res["metadata"]
    assert meta["source_lang"] == "en"
    assert meta["character_count"] == 11


@pytest.mark.parametrize("params", [
    {"action": "translate", "text": "hi"},
    {"action": "translate", "text": "hi", "target_lang": "german!"},
    {"action": "translate", "text": "x" * 10_001, "target_lang": "de"},
    {"action": "translate", "text": "hi", "target_lang": "de", "formality": "casual"},
    {"action": "detect_language", "text": "x" * 5_001},
    {"action": "translate_batch", "texts": [], "target_lang": "de"},
    {"action": "translate_batch", "texts": ["a"] * 51, "target_lang": "de"},
])
def test_invalid_inputs(params):
    assert translator.validate(params)["valid"] is False


async def test_detect_language():
    client = StubClient(default={
        "language": "fr", "confidence": 0.98, "alternatives": [{"language": "it", "confidence": 0.01}],
    })
    res = await translator.execute({"action": "detect_language", "text": "Bonjour"}, ctx(client))
    assert "Detected language: fr" in res["result"]
    assert "Alternatives: it (0.01)" in res["result"]


async def test_translate_batch():
    client = StubClient(default={"translations": [{"translated_text": "Eins"}, "Zwei"]})
    res = await translator.execute(
        {"action": "translate_batch", "texts": ["One", "Two"], "target_lang": "de"}, ctx(client),
    )
    assert "1. Eins" in res["result"]
    assert "2. Zwei" in res["result"]
    assert "Source language: auto-detect" in res["result"]
    assert res["metadata"]["total_characters"] == 6


async def test_get_usage():
    client = StubClient(default={"character_count": 400, "character_limit": 500000})
    res = await translator.execute({"action": "get_usage"}, ctx(client))
    assert res["metadata"]["remaining"] == 499600


async def test_list_languages_is_local():
    res = await translator.execute({"action": "list_languages"}, {})
    assert res["metadata"]["success"] is True
    assert res["metadata"]["language_count"] == len(translator.SUPPORTED_LANGUAGES)
    assert "de - German" in res["result"]


async def test_rate_limited_is_retriable():
    client = StubClient(error=upstream(429, "Too many requests"))
    res = await translator.execute({"action": "get_glossaries"}, ctx(client))
    assert res["metadata"]["error"] == {
        "code": "UPSTREAM_ERROR", "message": "HTTP 429: Too many requests", "retriable": True,
    }
