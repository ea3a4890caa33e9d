import os
import sys
from contextlib import asynccontextmanager

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from memora.errors import AIServiceError
from memora.models import DefinitionResult
from memora.services import MemoryStore, RecordStore, User


@asynccontextmanager
async def serve(routes):
    """Run a local aiohttp app for the duration of the block; yields its base URL."""
    app = web.Application()
    app.add_routes(routes)
    server = TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("/")).rstrip("/")
    finally:
        await server.close()


class FakeAIService:
    """Stands in for AIService; records prompts and replays canned answers."""

    def __init__(self, text="", image_text="", error=None):
        self.text = text
        self.image_text = image_text
        self.error = error
        self.prompts = []
        self.images = []

    async def generate_text(self, prompt, max_tokens=None):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.text

    async def extract_text_from_image(self, image, instruction):
        self.images.append(image)
        if self.error:
            raise self.error
        return self.image_text


class FakeDefinitions:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    async def lookup(self, word, target_language, definition_language):
        self.calls.append((word, target_language, definition_language))
        if word in self.failing:
            raise AIServiceError("boom")
        return DefinitionResult(
            definition=f"meaning of {word}",
            pronunciation=f"/{word}/",
            part_of_speech="noun",
            example=f"An example with {word}.",
        )


class FakeMedia:
    def __init__(self, fail_all=False):
        self.fail_all = fail_all
        self.audio_calls = []
        self.image_calls = []

    async def generate_pronunciation_audio(self, word, language):
        self.audio_calls.append((word, language))
        if self.fail_all:
            raise RuntimeError("tts down")
        return f"media/audio_{word}.mp3"

    async def generate_word_image(self, word, definition):
        self.image_calls.append((word, definition))
        if self.fail_all:
            raise RuntimeError("images down")
        return f"media/img_{word}.jpg"


@pytest.fixture
def backend():
    return MemoryStore()


@pytest.fixture
def store(backend):
    return RecordStore(backend)


@pytest.fixture
def user():
    return User(id="user-1", email="learner@example.com", display_name="Learner")


@pytest.fixture
def other_user():
    return User(id="user-2", email="someone@example.com")


@pytest.fixture
def fake_ai():
    return FakeAIService()


@pytest.fixture
def fake_definitions():
    return FakeDefinitions()


@pytest.fixture
def fake_media():
    return FakeMedia()
