import asyncio

from conftest import FakeDefinitions, FakeMedia
from memora.models import UploadedWord
from memora.services import WordEnricher


def test_enhance_words_preserves_order_and_length(fake_definitions, fake_media):
    words = [UploadedWord("uno"), UploadedWord("dos", context="count"), UploadedWord("tres")]
    enricher = WordEnricher(fake_definitions, fake_media)

    enhanced = asyncio.run(enricher.enhance_words(words, "es", "en"))

    assert [e.word for e in enhanced] == ["uno", "dos", "tres"]
    assert enhanced[0].definition == "meaning of uno"
    assert enhanced[0].pronunciation == "/uno/"
    assert enhanced[0].audio_url == "media/audio_uno.mp3"
    assert enhanced[0].image_url == "media/img_uno.jpg"
    assert enhanced[1].context == "count"
    assert fake_media.image_calls[0] == ("uno", "meaning of uno")
    assert fake_definitions.calls[0] == ("uno", "es", "en")


def test_progress_is_reported_once_per_word_and_ends_at_100(fake_definitions, fake_media):
    seen = []
    enricher = WordEnricher(fake_definitions, fake_media)
    words = [UploadedWord(w) for w in ("a", "b", "c", "d")]

    asyncio.run(enricher.enhance_words(words, "es", "en", on_progress=seen.append))

    assert seen == [25.0, 50.0, 75.0, 100.0]


def test_failures_degrade_single_words():
    enricher = WordEnricher(FakeDefinitions(failing={"dos"}), FakeMedia())
    words = [UploadedWord("uno"), UploadedWord("dos", definition="two"), UploadedWord("tres")]

    enhanced = asyncio.run(enricher.enhance_words(words, "es", "en"))

    assert len(enhanced) == 3
    assert enhanced[1].definition == "two"
    assert enhanced[1].pronunciation == ""
    assert enhanced[1].audio_url is None
    assert enhanced[2].definition == "meaning of tres"


def test_all_services_down_still_yields_every_word():
    seen = []
    enricher = WordEnricher(FakeDefinitions(), FakeMedia(fail_all=True))
    words = [UploadedWord("uno"), UploadedWord("dos")]

    enhanced = asyncio.run(enricher.enhance_words(words, "es", "en", on_progress=seen.append))

    assert [e.definition for e in enhanced] == ['Definition for "uno"', 'Definition for "dos"']
    assert all(e.pronunciation == "" for e in enhanced)
    assert all(e.image_url is None for e in enhanced)
    assert seen == [50.0, 100.0]


def test_empty_input(fake_definitions, fake_media):
    seen = []
    enricher = WordEnricher(fake_definitions, fake_media)
    assert asyncio.run(enricher.enhance_words([], "es", "en", on_progress=seen.append)) == []
    assert seen == []
