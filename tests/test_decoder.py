import pytest

from rpsbrain.decoder import DecodeError, decode_prediction, parse_json, sanitize
from rpsbrain.models import Move

from fakes import model_reply


def test_parse_plain_json():
    assert parse_json('{"predicted_player_move": "rock"}') == {"predicted_player_move": "rock"}


def test_strip_markdown_fences():
    text = '```json\n{"predicted_player_move": "paper"}\n```'
    assert parse_json(text)["predicted_player_move"] == "paper"
    assert parse_json('```\n{"a": 1}\n```') == {"a": 1}


def test_extract_object_from_prose():
    text = 'Sure! Here is my answer: {"a": {"b": 2}} Good luck.'
    assert sanitize(text) == '{"a": {"b": 2}}'


@pytest.mark.parametrize("text", ["", "   ", "invalid json", "{not json}", "[1, 2]", "```json\n```"])
def test_malformed_text_rejected(text):
    with pytest.raises(DecodeError):
        parse_json(text)


def test_decode_full_reply():
    p = decode_prediction(model_reply())
    assert p.predicted_move == Move.SCISSORS
    assert p.confidence == 82
    assert p.emotional_state == "excited"
    assert p.mind_game_event == "confidence_trap"
    assert p.source == "model"


def test_optional_tags_default():
    text = (
        '{"predicted_player_move": "rock", "prediction_confidence": 40.0, '
        '"player_style": "tilted", "explanation": "x", "coach_tip": "y"}'
    )
    p = decode_prediction(text)
    assert p.confidence == 40
    assert p.emotional_state == "neutral"
    assert p.mind_game_event == "none"


@pytest.mark.parametrize(
    "overrides",
    [
        {"predicted_player_move": "lizard"},
        {"predicted_player_move": ["rock"]},
        {"prediction_confidence": 101},
        {"prediction_confidence": -1},
        {"prediction_confidence": "high"},
        {"prediction_confidence": True},
        {"prediction_confidence": 55.5},
        {"emotional_state": "furious"},
        {"mind_game_event": "gaslight"},
        {"player_style": "chaotic"},
        {"player_style": ""},
        {"explanation": ""},
        {"coach_tip": None},
    ],
)
def test_invalid_fields_rejected(overrides):
    with pytest.raises(DecodeError):
        decode_prediction(model_reply(**overrides))


def test_missing_required_field():
    text = '{"predicted_player_move": "rock", "prediction_confidence": 50}'
    with pytest.raises(DecodeError, match="player_style"):
        decode_prediction(text)
