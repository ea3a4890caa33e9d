import asyncio

import pytest
from aiohttp import web

from conftest import FakeAIService, serve
from memora.errors import AIServiceError
from memora.models import DefinitionResult
from memora.services.dictionary import (
    DefinitionSource,
    fallback_definition,
    parse_ai_definition,
    parse_dictionary_entry,
)


DICTIONARY_PAYLOAD = [{
    "word": "house",
    "phonetics": [{"audio": ""}, {"text": "/haʊs/"}],
    "meanings": [
        {
            "partOfSpeech": "noun",
            "definitions": [
                {"definition": "A building for people to live in.", "example": "They bought a house."},
                {"definition": "A family line."},
            ],
        },
        {"partOfSpeech": "verb", "definitions": [{"definition": "To keep within a structure."}]},
    ],
}]


def test_parse_dictionary_entry_takes_first_meaning():
    result = parse_dictionary_entry("house", DICTIONARY_PAYLOAD)
    assert result == DefinitionResult(
        definition="A building for people to live in.",
        pronunciation="/haʊs/",
        part_of_speech="noun",
        example="They bought a house.",
    )


def test_parse_dictionary_entry_prefers_top_level_phonetic():
    payload = [dict(DICTIONARY_PAYLOAD[0], phonetic="/hAUs/")]
    assert parse_dictionary_entry("house", payload).pronunciation == "/hAUs/"


def test_parse_dictionary_entry_without_meanings_falls_back():
    result = parse_dictionary_entry("zzz", [{"word": "zzz"}])
    assert result.definition == fallback_definition("zzz")
    assert result.pronunciation is None


@pytest.mark.parametrize("payload", [{}, [], "nope", [1]])
def test_parse_dictionary_entry_rejects_bad_payloads(payload):
    with pytest.raises(ValueError):
        parse_dictionary_entry("word", payload)


def test_parse_ai_definition_json_in_code_fence():
    text = '```json\n{"definition": "house", "pronunciation": "ˈkasa", "partOfSpeech": "noun", "example": "Mi casa."}\n```'
    result = parse_ai_definition("casa", text)
    assert result.definition == "house"
    assert result.pronunciation == "ˈkasa"
    assert result.part_of_speech == "noun"
    assert result.example == "Mi casa."


def test_parse_ai_definition_plain_text_becomes_definition():
    result = parse_ai_definition("casa", "  A house or home.  ")
    assert result.definition == "A house or home."
    assert result.pronunciation is None


def test_parse_ai_definition_empty_answer_falls_back():
    assert parse_ai_definition("casa", "").definition == 'Definition for "casa"'
    assert parse_ai_definition("casa", '{"definition": ""}').definition == 'Definition for "casa"'


def test_lookup_uses_dictionary_for_default_language(monkeypatch):
    ai = FakeAIService(text='{"definition": "from ai"}')
    source = DefinitionSource(ai, default_language="en")

    async def fake_dictionary(word):
        return DefinitionResult(definition="from dictionary")

    monkeypatch.setattr(source, "lookup_dictionary", fake_dictionary)

    assert asyncio.run(source.lookup("house", "en", "en")).definition == "from dictionary"
    assert ai.prompts == []


def test_lookup_falls_back_to_ai_when_dictionary_misses(monkeypatch):
    ai = FakeAIService(text='{"definition": "from ai", "partOfSpeech": "noun"}')
    source = DefinitionSource(ai, default_language="en")

    async def no_entry(word):
        return None

    monkeypatch.setattr(source, "lookup_dictionary", no_entry)

    result = asyncio.run(source.lookup("casa", "es", "en"))
    assert result.definition == "from ai"
    assert result.part_of_speech == "noun"
    assert '"casa"' in ai.prompts[0]


def test_lookup_skips_dictionary_for_other_languages(monkeypatch):
    ai = FakeAIService(text="une maison")
    source = DefinitionSource(ai, default_language="en")
    called = []

    async def tracking(word):
        called.append(word)
        return DefinitionResult(definition="unused")

    monkeypatch.setattr(source, "lookup_dictionary", tracking)

    assert asyncio.run(source.lookup("casa", "es", "fr")).definition == "une maison"
    assert called == []


def test_lookup_absorbs_ai_failures(monkeypatch):
    source = DefinitionSource(FakeAIService(error=AIServiceError("rate limited")), default_language="en")

    async def no_entry(word):
        return None

    monkeypatch.setattr(source, "lookup_dictionary", no_entry)

    result = asyncio.run(source.lookup("casa", "es", "en"))
    assert result == DefinitionResult(definition='Definition for "casa"')


def dictionary_routes(status=200, body=None, text=None):
    seen = []

    async def handler(request):
        seen.append(request.match_info["word"])
        if text is not None:
            return web.Response(text=text, status=status, content_type="application/json")
        return web.json_response(body, status=status)

    return [web.get("/entries/en/{word}", handler)], seen


def run_lookup(routes, ai, word="house", definition_language="en"):
    async def run():
        async with serve(routes) as url:
            async with DefinitionSource(ai, default_language="en", api_url=url + "/entries") as source:
                return await source.lookup(word, "en", definition_language)
    return asyncio.run(run())


def test_lookup_dictionary_success_over_http():
    routes, seen = dictionary_routes(body=DICTIONARY_PAYLOAD)
    ai = FakeAIService(text="unused")

    result = run_lookup(routes, ai, word="ice cream")

    assert result.definition == "A building for people to live in."
    assert seen == ["ice cream"]
    assert ai.prompts == []


@pytest.mark.parametrize("status, body, text", [
    (404, {"title": "No Definitions Found"}, None),
    (200, {"title": "not a list"}, None),
    (200, None, "{broken"),
])
def test_dictionary_miss_falls_back_to_ai(status, body, text):
    routes, seen = dictionary_routes(status=status, body=body, text=text)
    ai = FakeAIService(text='{"definition": "from ai"}')

    result = run_lookup(routes, ai)

    assert seen == ["house"]
    assert result.definition == "from ai"
    assert len(ai.prompts) == 1


def test_unreachable_dictionary_falls_back_to_ai():
    async def run():
        async with serve([]) as url:
            pass
        ai = FakeAIService(text="a dwelling")
        async with DefinitionSource(ai, default_language="en", api_url=url + "/entries") as source:
            return await source.lookup("house", "en", "en")

    assert asyncio.run(run()).definition == "a dwelling"
