import asyncio

import pytest
from aiohttp import web

from conftest import serve
from memora.errors import AIServiceError
from memora.services.ai_service import AIConfig, AIProvider, AIService, ImageInput


def make_service(provider, base_url, api_key="test-key"):
    return AIService(AIConfig(provider=provider, model="test-model", api_key=api_key, base_url=base_url))


def json_handler(answer, seen, status=200):
    async def handler(request):
        seen.append({"headers": dict(request.headers), "body": await request.json()})
        return web.json_response(answer, status=status)
    return handler


def test_openai_vision_request_shape():
    seen = []
    answer = {"choices": [{"message": {"content": "gato\nperro"}}]}

    async def run():
        async with serve([web.post("/v1/chat/completions", json_handler(answer, seen))]) as url:
            async with make_service(AIProvider.OPENAI, url + "/v1") as ai:
                return await ai.extract_text_from_image(ImageInput("aGVsbG8=", "image/png"), "read it")

    assert asyncio.run(run()) == "gato\nperro"
    body = seen[0]["body"]
    assert seen[0]["headers"]["Authorization"] == "Bearer test-key"
    assert body["model"] == "test-model"
    text_part, image_part = body["messages"][0]["content"]
    assert text_part == {"type": "text", "text": "read it"}
    assert image_part["image_url"]["url"] == "data:image/png;base64,aGVsbG8="


def test_openai_text_request_uses_max_tokens():
    seen = []
    answer = {"choices": [{"message": {"content": "house"}}]}

    async def run():
        async with serve([web.post("/v1/chat/completions", json_handler(answer, seen))]) as url:
            async with make_service(AIProvider.OPENAI, url + "/v1") as ai:
                return await ai.generate_text("define casa", max_tokens=200)

    assert asyncio.run(run()) == "house"
    assert seen[0]["body"]["max_tokens"] == 200
    assert seen[0]["body"]["messages"] == [{"role": "user", "content": "define casa"}]


def test_anthropic_request_shape():
    seen = []
    answer = {"content": [{"type": "text", "text": "uno"}, {"type": "text", "text": "\ndos"}]}

    async def run():
        async with serve([web.post("/messages", json_handler(answer, seen))]) as url:
            async with make_service(AIProvider.ANTHROPIC, url) as ai:
                return await ai.extract_text_from_image(ImageInput("Zm9v", "image/jpeg"), "read it")

    assert asyncio.run(run()) == "uno\ndos"
    assert seen[0]["headers"]["x-api-key"] == "test-key"
    image_block = seen[0]["body"]["messages"][0]["content"][0]
    assert image_block["source"] == {"type": "base64", "media_type": "image/jpeg", "data": "Zm9v"}


def test_ollama_request_shape_without_api_key():
    seen = []

    async def run():
        async with serve([web.post("/api/generate", json_handler({"response": "hola"}, seen))]) as url:
            async with make_service(AIProvider.OLLAMA, url, api_key=None) as ai:
                return await ai.extract_text_from_image(ImageInput("Zm9v"), "read it")

    assert asyncio.run(run()) == "hola"
    assert seen[0]["body"]["images"] == ["Zm9v"]
    assert seen[0]["body"]["stream"] is False


def test_non_200_raises_service_error():
    async def run():
        async with serve([web.post("/v1/chat/completions", json_handler({"error": "quota"}, [], status=429))]) as url:
            async with make_service(AIProvider.OPENAI, url + "/v1") as ai:
                await ai.generate_text("hi")

    with pytest.raises(AIServiceError, match="429"):
        asyncio.run(run())


def test_invalid_json_body_raises_service_error():
    async def handler(request):
        return web.Response(text="{not json", content_type="application/json")

    async def run():
        async with serve([web.post("/v1/chat/completions", handler)]) as url:
            async with make_service(AIProvider.OPENAI, url + "/v1") as ai:
                await ai.generate_text("hi")

    with pytest.raises(AIServiceError, match="invalid JSON"):
        asyncio.run(run())


@pytest.mark.parametrize("provider, path, base_suffix", [
    (AIProvider.OLLAMA, "/api/generate", ""),
    (AIProvider.ANTHROPIC, "/messages", ""),
    (AIProvider.OPENAI, "/v1/chat/completions", "/v1"),
])
def test_non_object_json_raises_service_error(provider, path, base_suffix):
    async def run():
        async with serve([web.post(path, json_handler(["not", "an", "object"], []))]) as url:
            async with make_service(provider, url + base_suffix) as ai:
                await ai.generate_text("hi")

    with pytest.raises(AIServiceError):
        asyncio.run(run())


def test_unreachable_ollama():
    async def run():
        async with serve([]) as url:
            pass
        async with make_service(AIProvider.OLLAMA, url, api_key=None) as ai:
            await ai.generate_text("hi")

    with pytest.raises(AIServiceError, match="Cannot connect to Ollama"):
        asyncio.run(run())


def test_missing_api_key_fails_without_request():
    ai = make_service(AIProvider.OPENAI, "http://127.0.0.1:9", api_key=None)
    assert not ai.is_configured
    with pytest.raises(AIServiceError, match="No API key"):
        asyncio.run(ai.generate_text("hi"))


def test_groq_rejects_images():
    ai = make_service(AIProvider.GROQ, "http://127.0.0.1:9")
    with pytest.raises(AIServiceError, match="does not accept images"):
        asyncio.run(ai.extract_text_from_image(ImageInput("Zm9v"), "read it"))
