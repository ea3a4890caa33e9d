import pytest

from memora.errors import RecordDecodeError
from memora.models import (
    Difficulty,
    FlashcardSet,
    Word,
    decode_set,
    decode_word,
    encode_set,
    encode_word,
    now_iso,
)


SET_DATA = {
    "id": "s1",
    "userId": "user-1",
    "name": "French",
    "targetLanguage": "fr",
    "definitionLanguage": "en",
    "createdAt": "2024-01-01T00:00:00.000Z",
    "updatedAt": "2024-01-01T00:00:00.000Z",
    "wordCount": 3,
}


def test_now_iso_is_utc_with_milliseconds():
    value = now_iso()
    assert value.endswith("Z")
    assert len(value.split(".")[1]) == 4  # "123Z"


def test_record_without_schema_version_is_read_as_current():
    flashcard_set = decode_set(dict(SET_DATA))
    assert flashcard_set == FlashcardSet(
        id="s1",
        user_id="user-1",
        name="French",
        target_language="fr",
        definition_language="en",
        created_at="2024-01-01T00:00:00.000Z",
        updated_at="2024-01-01T00:00:00.000Z",
        word_count=3,
    )


def test_encode_set_adds_schema_version():
    encoded = encode_set(decode_set(dict(SET_DATA)))
    assert encoded == dict(SET_DATA, schemaVersion=1)


def test_newer_schema_version_is_rejected():
    with pytest.raises(RecordDecodeError) as excinfo:
        decode_set(dict(SET_DATA, schemaVersion=2))
    assert excinfo.value.field == "schemaVersion"


@pytest.mark.parametrize("key, value", [
    ("wordCount", "3"),
    ("wordCount", True),
    ("name", 42),
])
def test_wrong_types_are_rejected(key, value):
    with pytest.raises(RecordDecodeError) as excinfo:
        decode_set(dict(SET_DATA, **{key: value}))
    assert excinfo.value.collection == "sets"
    assert excinfo.value.field == key


def test_missing_required_field_is_rejected():
    data = dict(SET_DATA)
    del data["userId"]
    with pytest.raises(RecordDecodeError, match="userId"):
        decode_set(data)


def test_non_object_record_is_rejected():
    with pytest.raises(RecordDecodeError):
        decode_word(["w1"])


def test_word_defaults_and_unknown_difficulty():
    data = {
        "id": "w1",
        "setId": "s1",
        "word": "chat",
        "definition": "cat",
        "createdAt": "2024-01-01T00:00:00.000Z",
    }
    word = decode_word(data)
    assert word.difficulty is Difficulty.MEDIUM
    assert word.correct_count == 0
    assert word.pronunciation is None

    with pytest.raises(RecordDecodeError, match="difficulty"):
        decode_word(dict(data, difficulty="impossible"))


def test_encode_word_omits_empty_optionals():
    word = Word(id="w1", set_id="s1", word="chat", definition="cat", created_at="t")
    encoded = encode_word(word)
    assert "imageUrl" not in encoded
    assert "lastStudied" not in encoded
    assert encoded["difficulty"] == "medium"
    assert encoded["correctCount"] == 0
