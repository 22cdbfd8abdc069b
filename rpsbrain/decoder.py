"""
Sanitize-then-validate decoding of model output into a Prediction.

The model is asked for schema-constrained JSON, but the text that comes back is
still treated as untrusted: fences are stripped, the outermost object is
extracted, and every field is checked against its closed domain.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict

from .models import EMOTIONAL_STATES, MIND_GAME_EVENTS, PLAYER_STYLES, Move, Prediction

REQUIRED_FIELDS = (
    "predicted_player_move",
    "prediction_confidence",
    "player_style",
    "explanation",
    "coach_tip",
)

_FENCE = re.compile(r"```[a-zA-Z]*")


class DecodeError(ValueError):
    pass


def sanitize(text: str) -> str:
    """Strip markdown code fences and any prose around the outermost JSON object."""
    if not text or not text.strip():
        raise DecodeError("Empty response text")
    cleaned = _FENCE.sub("", text).strip()
    if cleaned.startswith("{") and cleaned.endswith("}"):
        return cleaned
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        return cleaned[start:end + 1]
    raise DecodeError("No JSON object found")


def parse_json(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(sanitize(text))
    except json.JSONDecodeError as e:
        raise DecodeError(f"Malformed JSON: {e}") from e
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _text(data: Dict[str, Any], key: str) -> str:
    v = data[key]
    if not isinstance(v, str) or not v.strip():
        raise DecodeError(f"{key} must be a non-empty string")
    return v.strip()


def _confidence(v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise DecodeError("prediction_confidence must be an integer")
    if isinstance(v, float) and not v.is_integer():
        raise DecodeError("prediction_confidence must be an integer")
    v = int(v)
    if not 0 <= v <= 100:
        raise DecodeError(f"prediction_confidence out of range: {v}")
    return v


def _style(v: Any) -> str:
    if v not in PLAYER_STYLES:
        raise DecodeError(f"player_style not in {PLAYER_STYLES}: {v!r}")
    return v


def _tag(data: Dict[str, Any], key: str, domain: tuple, default: str) -> str:
    v = data.get(key)
    if v is None:
        return default
    if v not in domain:
        raise DecodeError(f"{key} not in {domain}: {v!r}")
    return v


def validate_prediction(data: Dict[str, Any]) -> Prediction:
    missing = [k for k in REQUIRED_FIELDS if k not in data]
    if missing:
        raise DecodeError(f"Missing required fields: {', '.join(missing)}")
    move = data["predicted_player_move"]
    if move not in tuple(m.value for m in Move):
        raise DecodeError(f"Invalid move predicted by model: {move!r}")
    return Prediction(
        predicted_move=Move(move),
        confidence=_confidence(data["prediction_confidence"]),
        player_style=_style(data["player_style"]),
        explanation=_text(data, "explanation"),
        coach_tip=_text(data, "coach_tip"),
        emotional_state=_tag(data, "emotional_state", EMOTIONAL_STATES, "neutral"),
        mind_game_event=_tag(data, "mind_game_event", MIND_GAME_EVENTS, "none"),
        source="model",
    )


def decode_prediction(text: str) -> Prediction:
    return validate_prediction(parse_json(text))
